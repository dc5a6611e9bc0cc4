"""
Link accessibility checks: one HEAD request per link on a bounded worker pool.
"""
from __future__ import annotations

import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Iterable, List, Optional
from urllib.parse import urlparse

import requests
from urllib3.exceptions import LocationParseError

from url_analyzer.config import AnalyzerConfig, build_session
from url_analyzer.models import LinkRecord


def print_link_line(link: LinkRecord) -> None:
    """Print a single check result line."""
    status_str = str(link.status_code) if link.status_code else "ERR"
    mark = "✓" if link.is_accessible else "✗"
    sys.stderr.write(f"  {mark} {status_str} {link.url}\n")
    sys.stderr.flush()


def count_inaccessible(links: Iterable[LinkRecord]) -> int:
    return sum(1 for link in links if not link.is_accessible)


class LinkVerifier:
    """
    Checks whether each discovered link answers a HEAD request.

    Redirects are not followed; a 3xx answer counts as accessible. Every link is
    checked at most once and failures are recorded as status 0.

    Without an explicit session each worker thread gets its own
    requests.Session, closed when verify() returns. A session passed in is used
    by all workers as-is.
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        session: Optional[requests.Session] = None,
        verbose: bool = False,
    ) -> None:
        self.config = config or AnalyzerConfig()
        self.session = session
        self.verbose = verbose
        self._local = threading.local()
        self._lock = threading.Lock()
        self._owned: List[requests.Session] = []

    def _session(self) -> requests.Session:
        if self.session is not None:
            return self.session
        session = getattr(self._local, "session", None)
        if session is None:
            session = build_session(self.config)
            self._local.session = session
            with self._lock:
                self._owned.append(session)
        return session

    def close(self) -> None:
        """Close the per-thread sessions this verifier created."""
        with self._lock:
            owned, self._owned = self._owned, []
            self._local = threading.local()
        for session in owned:
            session.close()

    def is_checkable(self, url: str) -> bool:
        """Whether a link is eligible for a network check at all."""
        if len(url) > self.config.max_link_length:
            return False
        try:
            scheme = urlparse(url).scheme
        except ValueError:
            return False
        return scheme in ("http", "https")

    def check(self, link: LinkRecord) -> LinkRecord:
        """Return a copy of link with status_code and is_accessible filled in."""
        if not self.is_checkable(link.url):
            checked = replace(link, status_code=0, is_accessible=False)
        else:
            try:
                resp = self._session().head(
                    link.url,
                    timeout=self.config.link_timeout_s,
                    allow_redirects=False,
                )
                checked = replace(
                    link,
                    status_code=resp.status_code,
                    is_accessible=100 <= resp.status_code < 400,
                )
            # urllib3 rejects hosts like "a..example.com" before any request is made
            except (requests.RequestException, LocationParseError):
                checked = replace(link, status_code=0, is_accessible=False)

        if self.verbose:
            print_link_line(checked)
        return checked

    def verify(self, links: Iterable[LinkRecord]) -> List[LinkRecord]:
        """
        Check all links and return them in their original order.

        Each check produces its own record; nothing is mutated across workers.
        """
        pending = list(links)
        if not pending:
            return []

        workers = min(self.config.max_workers, len(pending))
        try:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                return list(pool.map(self.check, pending))
        finally:
            self.close()
