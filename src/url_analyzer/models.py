"""
Data structures produced by a single page analysis.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class LinkType(str, Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"


@dataclass(frozen=True, slots=True)
class RawDocument:
    """The fetched body of the target page."""
    url: str
    html: str
    status_code: int
    content_type: str = ""


@dataclass(frozen=True, slots=True)
class LinkRecord:
    """One anchor found on the page, resolved to an absolute URL."""
    url: str
    link_type: LinkType
    status_code: int = 0
    is_accessible: bool = False


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Metadata extracted from one page, plus the verified links."""
    url: str
    title: str = ""
    html_version: str = "Unknown"
    h1_count: int = 0
    h2_count: int = 0
    h3_count: int = 0
    h4_count: int = 0
    h5_count: int = 0
    h6_count: int = 0
    internal_link_count: int = 0
    external_link_count: int = 0
    inaccessible_link_count: int = 0
    has_login_form: bool = False
    links: Tuple[LinkRecord, ...] = ()
    analyzed_at: Optional[str] = None

    def heading_counts(self) -> Dict[str, int]:
        return {
            "h1": self.h1_count,
            "h2": self.h2_count,
            "h3": self.h3_count,
            "h4": self.h4_count,
            "h5": self.h5_count,
            "h6": self.h6_count,
        }

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation (enums flattened to their values)."""
        data = asdict(self)
        data["links"] = [
            {**link, "link_type": link["link_type"].value} for link in data["links"]
        ]
        return data
