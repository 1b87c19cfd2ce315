# File: site_archiver/archive.py
"""site_archiver.archive: persisting fetched pages as ``.webarchive`` and ``.html``.

Output paths mirror the URL below the crawl's base URL::

    https://site.test/docs/intro  ->  <output>/docs/intro/intro.webarchive
                                      <output>/docs/intro/intro.html
    https://site.test/            ->  <output>/index.webarchive, <output>/index.html

Each format is written independently; one failing never stops the other.
"""

from __future__ import annotations

import plistlib
from pathlib import Path
from typing import Dict, Protocol, Tuple, Union
from urllib.parse import urlsplit

from site_archiver.logger import logger
from site_archiver.utils import normalize_url, path_segments

__all__ = (
    "ArchiveWriter",
    "PageWriter",
    "WEBARCHIVE",
    "HTML",
    "build_webarchive",
    "save_webarchive",
    "save_html",
)

WEBARCHIVE = "webarchive"
HTML = "html"
DEFAULT_NAME = "index"


class PageWriter(Protocol):
    def write(self, content: str, url: str) -> Dict[str, bool]:
        ...


def build_webarchive(content: str, url: str) -> bytes:
    """Serialise *content* as a Safari web archive (XML property list)."""
    archive = {
        "WebMainResource": {
            "WebResourceData": content.encode("utf-8"),
            "WebResourceFrameName": "",
            "WebResourceMIMEType": "text/html",
            "WebResourceTextEncodingName": "UTF-8",
            "WebResourceURL": url,
        }
    }
    return plistlib.dumps(archive, fmt=plistlib.FMT_XML)


def save_webarchive(content: str, url: str, path: Union[str, Path]) -> bool:
    try:
        Path(path).write_bytes(build_webarchive(content, url))
    except (OSError, UnicodeError) as exc:
        logger.error("Failed to save WebArchive %s: %s", path, exc)
        return False
    return True


def save_html(content: str, path: Union[str, Path]) -> bool:
    try:
        # encode before opening so a bad string leaves no empty file behind
        Path(path).write_bytes(content.encode("utf-8"))
    except (OSError, UnicodeError) as exc:
        logger.error("Failed to save HTML %s: %s", path, exc)
        return False
    return True


class ArchiveWriter:
    """Writes both representations of a page beneath *output_dir*."""

    def __init__(self, output_dir: Union[str, Path], base_url: str) -> None:
        self.output_dir = Path(output_dir)
        self.base_url = normalize_url(base_url)

    def archive_paths(self, url: str, *, create: bool = True) -> Tuple[Path, Path]:
        """Return ``(webarchive_path, html_path)`` for *url*, creating the directory."""
        directory = self.output_dir.joinpath(*self._relative_segments(url))
        name = (path_segments(urlsplit(url).path) or [DEFAULT_NAME])[-1]
        if create:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                logger.error("Failed to create directory %s: %s", directory, exc)
        return directory / f"{name}.webarchive", directory / f"{name}.html"

    def write(self, content: str, url: str) -> Dict[str, bool]:
        webarchive_path, html_path = self.archive_paths(url)
        results = {
            WEBARCHIVE: save_webarchive(content, url, webarchive_path),
            HTML: save_html(content, html_path),
        }
        if results[WEBARCHIVE]:
            logger.info("Saved WebArchive: %s", webarchive_path)
        if results[HTML]:
            logger.info("Saved HTML: %s", html_path)
        return results

    def _relative_segments(self, url: str) -> list[str]:
        if url.startswith(self.base_url):
            rest = url[len(self.base_url):]
        else:
            rest = urlsplit(url).path
        rest = rest.split("?", 1)[0].split("#", 1)[0]
        # "." and ".." would escape the output root
        return [s for s in path_segments(rest) if s not in (".", "..")]
