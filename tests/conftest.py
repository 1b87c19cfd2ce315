# File: tests/conftest.py
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from site_archiver.crawler.models import CrawlTarget

BASE = "https://site.test"


def page(*hrefs: str, title: str = "page") -> str:
    """Build a small HTML document whose body links to *hrefs*."""
    anchors = "\n".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html><head><title>{title}</title></head>\n<body class=\"main\">\n{anchors}\n</body></html>"


class FakeFetcher:
    """Returns canned markup; ``None`` (or a missing key) means the fetch failed."""

    def __init__(self, pages: Dict[str, Optional[str]]) -> None:
        self.pages = pages
        self.calls: List[str] = []
        self.entered = self.exited = False

    async def __aenter__(self) -> "FakeFetcher":
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.exited = True

    async def fetch(self, url: str) -> Optional[str]:
        self.calls.append(url)
        return self.pages.get(url)


class RecordingWriter:
    """Remembers every (url, content) it is asked to persist."""

    def __init__(self, outcome: Optional[Dict[str, bool]] = None) -> None:
        self.outcome = outcome or {"webarchive": True, "html": True}
        self.calls: List[tuple] = []

    def write(self, content: str, url: str) -> Dict[str, bool]:
        self.calls.append((url, content))
        return dict(self.outcome)

    @property
    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]


@pytest.fixture()
def target(tmp_path: Path) -> CrawlTarget:
    return CrawlTarget.create(BASE, tmp_path / "out")


@pytest.fixture()
def writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture()
def storage_state(tmp_path: Path) -> Path:
    """Playwright-style storage state with one cookie for localhost."""
    path = tmp_path / "state.json"
    path.write_text(
        '{"cookies": [{"name": "sid", "value": "s3cret", "domain": "localhost",'
        ' "path": "/", "secure": false}], "origins": []}',
        encoding="utf-8",
    )
    return path
