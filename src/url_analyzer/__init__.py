"""
Single-page web analyzer: fetches a URL and reports its title, HTML version,
heading counts, internal/external links with accessibility status, and whether
it contains a login form.
"""
from url_analyzer.core import normalize_target, run_analysis
from url_analyzer.errors import (
    FetchError,
    FetchTimeoutError,
    InvalidTargetError,
    NetworkFailureError,
    UnexpectedStatusError,
)
from url_analyzer.models import AnalysisResult, LinkRecord, LinkType, RawDocument

__version__ = "1.0.0"
__all__ = [
    "run_analysis",
    "normalize_target",
    "AnalysisResult",
    "LinkRecord",
    "LinkType",
    "RawDocument",
    "FetchError",
    "FetchTimeoutError",
    "InvalidTargetError",
    "NetworkFailureError",
    "UnexpectedStatusError",
]
