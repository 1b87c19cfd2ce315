# site_archiver/crawler/link_extractor.py
"""
Link extraction for SiteArchiver.

Two interchangeable extractors share one candidate filter:

* :class:`RegexLinkExtractor` – pattern based, best effort. Malformed markup
  gives partial or empty results, never an error.
* :class:`SoupLinkExtractor` – the same contract on top of BeautifulSoup.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional, Protocol

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_archiver.utils import normalize_url

__all__ = (
    "LinkExtractor",
    "RegexLinkExtractor",
    "SoupLinkExtractor",
    "filter_links",
    "extract_links",
    "get_extractor",
)

_BODY_RE = re.compile(r"<body[^>]*>(.*?)</body>", re.IGNORECASE | re.DOTALL)
_HREF_RE = re.compile(r"href=['\"]([^'\"]+)['\"]", re.IGNORECASE)


class LinkExtractor(Protocol):
    def extract(self, content: str, base_url: str, current_url: str) -> List[str]:
        ...


def filter_links(hrefs: Iterable[str], base_url: str, current_url: str) -> List[str]:
    """
    Turn raw href values into normalized same-site URLs.

    Anything with a fragment is skipped, absolute links must fall under
    *base_url* and differ from *current_url*, root-relative links are glued
    onto *base_url*. Order is preserved and duplicates are kept.
    """
    base = normalize_url(base_url)
    current = normalize_url(current_url)
    links: List[str] = []
    for href in hrefs:
        href = href.strip()
        if not href or "#" in href:
            continue
        normalized = normalize_url(href)
        if normalized.startswith(base):
            if normalized != current:
                links.append(normalized)
        elif href.startswith("/") and not href.startswith("//"):
            links.append(normalize_url(base + href))
    return links


class RegexLinkExtractor:
    """Scans the first ``<body>`` region for quoted ``href`` values."""

    def extract(self, content: str, base_url: str, current_url: str) -> List[str]:
        body = _BODY_RE.search(content)
        if body is None:
            return []
        hrefs = (m.group(1) for m in _HREF_RE.finditer(body.group(1)))
        return filter_links(hrefs, base_url, current_url)


class SoupLinkExtractor:
    """Reads ``<a href>`` tags inside ``<body>`` with BeautifulSoup."""

    def __init__(self, features: str = "html.parser") -> None:
        self.features = features

    def extract(self, content: str, base_url: str, current_url: str) -> List[str]:
        soup = BeautifulSoup(content, self.features)
        body = soup.body
        if body is None:
            return []
        hrefs: List[str] = []
        for tag in body.find_all("a", href=True):
            if not isinstance(tag, Tag):
                continue
            href_val = tag.get("href")
            if isinstance(href_val, str) and href_val:
                hrefs.append(href_val)
        return filter_links(hrefs, base_url, current_url)


_DEFAULT = RegexLinkExtractor()


def extract_links(content: str, base_url: str, current_url: str) -> List[str]:
    """Extract candidate links with the default (regex) extractor."""
    return _DEFAULT.extract(content, base_url, current_url)


def get_extractor(name: Optional[str] = "regex") -> LinkExtractor:
    """Return an extractor by its config name: ``regex`` or ``soup``."""
    if name in (None, "regex"):
        return RegexLinkExtractor()
    if name == "soup":
        return SoupLinkExtractor()
    raise ValueError(f"unknown link parser: {name!r}")
