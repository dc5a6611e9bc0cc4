"""
HTML extraction: title, doctype version label, heading counts, links, login forms.

Every function here is pure. Missing data yields empty or zero values, never an
exception.
"""
from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Doctype, NavigableString, Tag
from bs4.element import PreformattedString

from url_analyzer.models import AnalysisResult, LinkRecord, LinkType, RawDocument

HEADING_TAGS: tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")

# <input type=...> values that mark a form as a login form
LOGIN_INPUT_TYPES: frozenset[str] = frozenset(("password", "email"))

HTML5 = "HTML5"
UNKNOWN_VERSION = "Unknown"


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def extract_title(soup: BeautifulSoup) -> str:
    """Return the first non-blank <title> text in document order, or ''."""
    for title in soup.find_all("title"):
        first = title.contents[0] if title.contents else None
        # Comments, CDATA and the like are not text nodes
        if isinstance(first, NavigableString) and not isinstance(first, PreformattedString):
            text = first.strip()
            if text:
                return text
    return ""


def find_doctype(soup: BeautifulSoup) -> Optional[Doctype]:
    for node in soup.descendants:
        if isinstance(node, Doctype):
            return node
    return None


def detect_html_version(soup: BeautifulSoup) -> str:
    """
    Label the document "HTML5" when its doctype mentions "html", else "Unknown".

    This is intentionally coarse: HTML 4.01 and XHTML doctypes also contain
    "html" and are reported as "HTML5".
    """
    doctype = find_doctype(soup)
    if doctype is not None and "html" in str(doctype).lower():
        return HTML5
    return UNKNOWN_VERSION


def count_headings(soup: BeautifulSoup) -> Dict[str, int]:
    """Count h1..h6 elements anywhere in the document."""
    counts = Counter(tag.name for tag in soup.find_all(list(HEADING_TAGS)))
    return {name: counts.get(name, 0) for name in HEADING_TAGS}


def host_of(url: str) -> str:
    """Host (with port, without userinfo) of a URL, lowercased."""
    netloc = urlparse(url).netloc
    return netloc.rpartition("@")[2].lower()


def classify_link(url: str, target_host: str) -> LinkType:
    host = host_of(url)
    if not host or host == target_host:
        return LinkType.INTERNAL
    return LinkType.EXTERNAL


def extract_links(soup: BeautifulSoup, target: str) -> List[LinkRecord]:
    """
    Resolve and classify every <a href> on the page.

    Fragment-only hrefs ("#...") and empty hrefs are dropped. An href that
    cannot be resolved is skipped without affecting the others. One record is
    produced per anchor, so repeated URLs appear more than once.
    """
    target_host = host_of(target)
    links: List[LinkRecord] = []

    for anchor in soup.find_all("a", href=True):
        href = anchor.get("href")
        if not isinstance(href, str):
            continue
        href = href.strip()
        if not href or href.startswith("#"):
            continue

        try:
            absolute = urljoin(target, href)
            link_type = classify_link(absolute, target_host)
        except ValueError:
            continue

        links.append(LinkRecord(url=absolute, link_type=link_type))

    return links


def _is_login_input(tag: Tag) -> bool:
    if tag.name != "input":
        return False
    input_type = tag.get("type")
    return isinstance(input_type, str) and input_type.strip().lower() in LOGIN_INPUT_TYPES


def has_login_form(soup: BeautifulSoup) -> bool:
    """True if any <form> holds a password or email <input> at any depth."""
    for form in soup.find_all("form"):
        if form.find(_is_login_input) is not None:
            return True
    return False


def analyze(doc: RawDocument, target: str) -> AnalysisResult:
    """
    Extract page metadata from a fetched document.

    Links come back unverified (status 0, not accessible); the verifier fills
    those in. analyzed_at is left unset so repeated calls compare equal.
    """
    soup = parse_html(doc.html)

    headings = count_headings(soup)
    links = extract_links(soup, target)
    internal = sum(1 for link in links if link.link_type is LinkType.INTERNAL)

    return AnalysisResult(
        url=target,
        title=extract_title(soup),
        html_version=detect_html_version(soup),
        h1_count=headings["h1"],
        h2_count=headings["h2"],
        h3_count=headings["h3"],
        h4_count=headings["h4"],
        h5_count=headings["h5"],
        h6_count=headings["h6"],
        internal_link_count=internal,
        external_link_count=len(links) - internal,
        has_login_form=has_login_form(soup),
        links=tuple(links),
    )
