"""
Command-line interface for the analyzer.
"""
from __future__ import annotations

import argparse
import json
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import urlparse

from url_analyzer.config import (
    DEFAULT_MAX_WORKERS,
    DEFAULT_USER_AGENT,
    LINK_TIMEOUT_S,
    PAGE_TIMEOUT_S,
    AnalyzerConfig,
)
from url_analyzer.core import normalize_target
from url_analyzer.jobs import DEFAULT_MAX_JOBS, AnalysisJob, JobRunner, JobStatus


def print_summary(jobs: List[AnalysisJob]) -> None:
    """Print analysis summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("ANALYSIS SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    for job in jobs:
        sys.stderr.write(f"{job.url}  [{job.status.value}]\n")
        if job.status is JobStatus.ERROR:
            sys.stderr.write(f"  Error:               {job.error}\n\n")
            continue

        result = job.result
        if result is None:
            sys.stderr.write("\n")
            continue

        headings = " ".join(f"{name}={count}" for name, count in result.heading_counts().items())
        sys.stderr.write(f"  Title:               {result.title or '(none)'}\n")
        sys.stderr.write(f"  HTML version:        {result.html_version}\n")
        sys.stderr.write(f"  Headings:            {headings}\n")
        sys.stderr.write(f"  Internal links:      {result.internal_link_count}\n")
        sys.stderr.write(f"  External links:      {result.external_link_count}\n")
        sys.stderr.write(f"  Inaccessible links:  {result.inaccessible_link_count}\n")
        sys.stderr.write(f"  Login form:          {'yes' if result.has_login_form else 'no'}\n\n")


def default_output_path(targets: Sequence[str], now: Optional[datetime] = None) -> Path:
    """
    analyses/<host>[+N]_<UTC stamp>.json, named after the first target.

    N is the number of further targets in the same run.
    """
    host = urlparse(targets[0]).hostname or "unknown"
    stem = re.sub(r"[^A-Za-z0-9-]+", "_", host)
    if len(targets) > 1:
        stem += f"+{len(targets) - 1}"
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")
    return Path("analyses") / f"{stem}_{stamp}.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="url-analyzer",
        description="Analyze web pages (title, HTML version, headings, links, login forms) and output JSON results.",
    )
    parser.add_argument("urls", nargs="+", metavar="URL", help="Page to analyze (e.g. https://example.com or example.com)")
    parser.add_argument("--timeout", type=float, default=PAGE_TIMEOUT_S, help=f"Page fetch timeout in seconds (default: {PAGE_TIMEOUT_S:g})")
    parser.add_argument("--link-timeout", type=float, default=LINK_TIMEOUT_S, help=f"Per-link check timeout in seconds (default: {LINK_TIMEOUT_S:g})")
    parser.add_argument("--max-workers", type=int, default=DEFAULT_MAX_WORKERS, help=f"Concurrent link checks per page (default: {DEFAULT_MAX_WORKERS})")
    parser.add_argument("--max-jobs", type=int, default=DEFAULT_MAX_JOBS, help=f"Pages analyzed concurrently (default: {DEFAULT_MAX_JOBS})")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--out", help="Output file path, or '-' for stdout (default: auto-generated in analyses/)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    return parser


def main(argv: List[str] | None = None) -> int:
    """Main entry point for the analyzer CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        targets = [normalize_target(url) for url in args.urls]
        config = AnalyzerConfig(
            page_timeout_s=args.timeout,
            link_timeout_s=args.link_timeout,
            max_workers=args.max_workers,
            user_agent=args.user_agent,
        )
    except ValueError as e:
        parser.error(str(e))
    if args.max_jobs < 1:
        parser.error("--max-jobs must be at least 1")

    with JobRunner(config, max_jobs=args.max_jobs, verbose=args.verbose) as runner:
        submitted = [runner.submit(target) for target in targets]
        runner.wait()
        jobs = [runner.get(job.id) for job in submitted]

    if args.verbose:
        print_summary(jobs)

    # Output JSON
    payload = [job.to_dict() for job in jobs]
    json_text = json.dumps(payload, ensure_ascii=False, indent=2 if args.pretty else None)

    if args.out == "-":
        print(json_text)
    else:
        # Auto-generate path if not specified
        output_path = Path(args.out) if args.out else default_output_path(targets)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_text, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Results written to: {output_path}\n")

    return 1 if any(job.status is JobStatus.ERROR for job in jobs) else 0


if __name__ == "__main__":
    raise SystemExit(main())
