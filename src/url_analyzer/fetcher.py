"""
Single-page HTTP fetch with exact status checking.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse

import requests
from urllib3.exceptions import LocationParseError

from url_analyzer.config import AnalyzerConfig, build_session
from url_analyzer.errors import (
    FetchTimeoutError,
    InvalidTargetError,
    NetworkFailureError,
    UnexpectedStatusError,
)
from url_analyzer.models import RawDocument

# RFC 1035 limit on a single DNS label
MAX_LABEL_LENGTH = 63


def has_valid_labels(hostname: str) -> bool:
    """False when a dotted hostname has an empty or over-long label."""
    if ":" in hostname:
        return True  # IPv6 literal
    labels = hostname[:-1].split(".") if hostname.endswith(".") else hostname.split(".")
    return all(0 < len(label) <= MAX_LABEL_LENGTH for label in labels)


def validate_target(target: str) -> None:
    """Raise InvalidTargetError unless target is an absolute http(s) URL with a host."""
    try:
        parsed = urlparse(target)
    except ValueError as e:
        raise InvalidTargetError(f"Invalid target URL: {target!r} ({e})", target) from e

    if parsed.scheme not in ("http", "https"):
        raise InvalidTargetError(f"Unsupported scheme in target URL: {target!r}", target)
    if not parsed.hostname:
        raise InvalidTargetError(f"Target URL has no host: {target!r}", target)
    if not has_valid_labels(parsed.hostname):
        raise InvalidTargetError(f"Malformed host in target URL: {target!r}", target)


class PageFetcher:
    """Fetches the target page once, with no retries."""

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or AnalyzerConfig()
        self.session = session if session is not None else build_session(self.config)

    def fetch(self, target: str) -> RawDocument:
        """
        GET the target and return its body.

        Raises:
            InvalidTargetError: target is not an absolute http(s) URL.
            FetchTimeoutError: no complete response within the page timeout.
            NetworkFailureError: connection, DNS or protocol failure.
            UnexpectedStatusError: final status was anything but 200.
        """
        validate_target(target)

        try:
            resp = self.session.get(target, timeout=self.config.page_timeout_s, allow_redirects=True)
        except requests.Timeout as e:
            raise FetchTimeoutError(f"Timed out fetching {target}: {e}", target) from e
        except (requests.RequestException, LocationParseError) as e:
            raise NetworkFailureError(f"Failed to fetch {target}: {e}", target) from e

        if resp.status_code != 200:
            raise UnexpectedStatusError(resp.status_code, target, resp.reason or "")

        return RawDocument(
            url=target,
            html=resp.text,
            status_code=resp.status_code,
            content_type=(resp.headers.get("content-type") or "").lower(),
        )
