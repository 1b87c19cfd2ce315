# File: site_archiver/engine.py
"""site_archiver.engine: orchestration layer – builds the crawl pieces from a config and runs them."""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from site_archiver.archive import ArchiveWriter
from site_archiver.config import ArchiverConfig, FetcherConfig
from site_archiver.crawler.crawler import CrawlEngine
from site_archiver.crawler.fetcher import BrowserFetcher, ContentFetcher, HttpFetcher
from site_archiver.crawler.link_extractor import get_extractor
from site_archiver.crawler.models import CrawlTarget, PageResult
from site_archiver.logger import logger

__all__ = ["create_fetcher", "prepare_output_dir", "start_crawl"]


def create_fetcher(config: FetcherConfig) -> ContentFetcher:
    """Return the fetcher named by ``config.kind`` (not yet started)."""
    if config.kind == "http":
        return HttpFetcher(config)
    return BrowserFetcher(config)


def prepare_output_dir(path: Union[str, Path]) -> Path:
    """Create the archive root. ``OSError`` here is fatal for the run."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


async def start_crawl(config: ArchiverConfig) -> List[PageResult]:
    """
    Run one crawl described by *config* and return per-page results.

    The output directory must already exist (see :func:`prepare_output_dir`).
    """
    target = CrawlTarget.create(str(config.base_url), config.output_dir)
    writer = ArchiveWriter(target.output_dir, target.base_url)
    extractor = get_extractor(config.link_parser)

    async with create_fetcher(config.fetcher) as fetcher:
        engine = CrawlEngine(
            target,
            fetcher,
            writer,
            extractor,
            delay=config.delay,
            max_pages=config.max_pages,
            max_depth=config.max_depth,
        )
        await engine.run()

    if engine.frontier:
        logger.debug("%d URLs left unvisited", len(engine.frontier))
    return engine.results
