# site_archiver/crawler/models.py
"""
Data models for the SiteArchiver crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from site_archiver.utils import normalize_url


@dataclass(frozen=True, slots=True)
class CrawlTarget:
    """Scope of a crawl run: normalized base URL and the archive root."""

    base_url: str
    output_dir: Path

    @classmethod
    def create(cls, base_url: str, output_dir: Path | str) -> CrawlTarget:
        return cls(normalize_url(str(base_url)), Path(output_dir))


@dataclass(slots=True)
class PageRecord:
    """Holds normalized URL and rendered markup of a fetched page."""

    url: str
    content: str


@dataclass(slots=True)
class PageResult:
    """Outcome of processing one visited URL."""

    url: str
    depth: int
    fetched: bool = False
    saved: Dict[str, bool] = field(default_factory=dict)
    links_found: int = 0

    @property
    def archived(self) -> bool:
        return self.fetched and bool(self.saved) and all(self.saved.values())
