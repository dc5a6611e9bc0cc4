"""
Fetch-level failures. These are the only errors a run surfaces to its caller.
"""
from __future__ import annotations

from typing import Optional


class FetchError(Exception):
    """Base class for failures that abort a whole analysis run."""
    kind = "fetch_error"

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class InvalidTargetError(FetchError, ValueError):
    kind = "invalid_target"


class NetworkFailureError(FetchError):
    kind = "network_failure"


class FetchTimeoutError(FetchError):
    kind = "timeout"


class UnexpectedStatusError(FetchError):
    kind = "unexpected_status"

    def __init__(self, code: int, url: Optional[str] = None, reason: str = "") -> None:
        message = f"HTTP {code}: {reason}" if reason else f"HTTP {code}"
        super().__init__(message, url)
        self.code = code
