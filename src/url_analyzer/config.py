"""
Runtime settings shared by the fetcher and the link verifier.
"""
from __future__ import annotations

from dataclasses import dataclass

import requests

PAGE_TIMEOUT_S: float = 30.0
LINK_TIMEOUT_S: float = 10.0
# Links longer than this are reported as inaccessible without a request
MAX_LINK_LENGTH: int = 2000
DEFAULT_MAX_WORKERS: int = 8
DEFAULT_USER_AGENT: str = "URLAnalyzer/1.0"


@dataclass(frozen=True, slots=True)
class AnalyzerConfig:
    """Timeouts and limits for one analysis run."""
    page_timeout_s: float = PAGE_TIMEOUT_S
    link_timeout_s: float = LINK_TIMEOUT_S
    max_link_length: int = MAX_LINK_LENGTH
    max_workers: int = DEFAULT_MAX_WORKERS
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.page_timeout_s <= 0 or self.link_timeout_s <= 0:
            raise ValueError("Timeouts must be positive")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")


def build_session(config: AnalyzerConfig) -> requests.Session:
    """Create an HTTP session carrying the configured User-Agent."""
    session = requests.Session()
    session.headers["User-Agent"] = config.user_agent
    return session
