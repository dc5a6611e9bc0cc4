"""
Analysis pipeline: fetch the target page, extract its metadata, verify its links.
"""
from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

import requests

from url_analyzer.analyzer import analyze
from url_analyzer.config import AnalyzerConfig, build_session
from url_analyzer.errors import InvalidTargetError
from url_analyzer.fetcher import PageFetcher, has_valid_labels
from url_analyzer.models import AnalysisResult
from url_analyzer.verifier import LinkVerifier, count_inaccessible


def utc_now_iso() -> str:
    """Return current UTC time in ISO format."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def normalize_target(raw_url: str) -> str:
    """
    Turn user input into an absolute http(s) URL.

    - Trims surrounding whitespace
    - Adds "http://" when no http/https scheme is given (bare domains)
    - Requires a host whose dot-separated labels are 1-63 characters long

    Raises:
        InvalidTargetError: empty input, unparsable URL or missing host.
    """
    url = (raw_url or "").strip()
    if not url:
        raise InvalidTargetError("URL cannot be empty", raw_url)

    if not url.lower().startswith(("http://", "https://")):
        url = "http://" + url

    try:
        parsed = urlparse(url)
        parsed.port  # raises ValueError on a malformed port
    except ValueError as e:
        raise InvalidTargetError(f"Invalid URL format: {e}", raw_url) from e

    if not parsed.hostname:
        raise InvalidTargetError("URL must include a valid host", raw_url)
    if not has_valid_labels(parsed.hostname):
        raise InvalidTargetError("URL host has an empty or over-long label", raw_url)

    return parsed._replace(scheme=parsed.scheme.lower()).geturl()


def run_analysis(
    target: str,
    *,
    config: Optional[AnalyzerConfig] = None,
    session: Optional[requests.Session] = None,
    verbose: bool = False,
) -> AnalysisResult:
    """
    Analyze a single page.

    Args:
        target: Absolute http(s) URL, as produced by normalize_target.
        config: Timeouts and limits; defaults to AnalyzerConfig().
        session: HTTP session used for the page fetch and shared by all link
                 checks. When omitted the fetch gets a fresh session and
                 each link-check worker gets its own.
        verbose: Whether to print progress to stderr.

    Returns:
        The completed, immutable AnalysisResult.

    Raises:
        FetchError: the page could not be fetched (invalid target, network
                    failure, timeout or a non-200 status). Link check failures
                    never raise; they show up as inaccessible links.
    """
    config = config or AnalyzerConfig()
    page_session = session if session is not None else build_session(config)

    try:
        if verbose:
            sys.stderr.write(f"Fetching: {target}\n")
        doc = PageFetcher(config, page_session).fetch(target)

        result = analyze(doc, target)
        if verbose:
            sys.stderr.write(
                f"Parsed: title={result.title!r} version={result.html_version} "
                f"links={len(result.links)} (internal {result.internal_link_count}, "
                f"external {result.external_link_count})\n"
            )

        links = LinkVerifier(config, session, verbose=verbose).verify(result.links)
    finally:
        if session is None:
            page_session.close()

    return replace(
        result,
        links=tuple(links),
        inaccessible_link_count=count_inaccessible(links),
        analyzed_at=utc_now_iso(),
    )
