# === FILE: site_archiver/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Deque, List, Optional, Set, Tuple

from site_archiver.archive import PageWriter
from site_archiver.crawler.fetcher import ContentFetcher
from site_archiver.crawler.link_extractor import LinkExtractor, RegexLinkExtractor
from site_archiver.crawler.models import CrawlTarget, PageRecord, PageResult
from site_archiver.logger import logger
from site_archiver.utils import is_same_origin, normalize_url

__all__ = ("CrawlEngine",)


class CrawlEngine:
    """
    Breadth-first crawler over one authenticated site.

    Owns the frontier (FIFO of ``(url, depth)``) and the visited set. One URL
    is in flight at a time: fetch → archive → extract → enqueue → pause.
    A URL is marked visited before it is fetched, so it is processed at most
    once even when the fetch fails.
    """

    def __init__(
        self,
        target: CrawlTarget,
        fetcher: ContentFetcher,
        writer: PageWriter,
        extractor: Optional[LinkExtractor] = None,
        *,
        delay: float = 5.0,
        max_pages: Optional[int] = None,
        max_depth: Optional[int] = None,
    ) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.target = target
        self.fetcher = fetcher
        self.writer = writer
        self.extractor: LinkExtractor = extractor or RegexLinkExtractor()
        self.delay = delay
        self.max_pages = max_pages
        self.max_depth = max_depth
        self.frontier: Deque[Tuple[str, int]] = deque([(target.base_url, 0)])
        self.visited: Set[str] = set()
        self.results: List[PageResult] = []

    def in_scope(self, url: str) -> bool:
        return is_same_origin(url, self.target.base_url)

    async def run(self) -> None:
        """Crawl until the frontier is empty (or ``max_pages`` is reached)."""
        logger.info("Crawl started: %s -> %s", self.target.base_url, self.target.output_dir)
        start = time.monotonic()
        while self.frontier:
            if self.max_pages is not None and len(self.visited) >= self.max_pages:
                logger.info("Page limit %d reached, %d URLs left in queue", self.max_pages, len(self.frontier))
                break
            raw_url, depth = self.frontier.popleft()
            url = normalize_url(raw_url)
            if url in self.visited or not self.in_scope(url):
                logger.debug("Skipping %s", raw_url)
                continue
            self.visited.add(url)
            await self._process(url, depth)
            await self._pause()
        duration = time.monotonic() - start
        archived = sum(1 for r in self.results if r.archived)
        logger.info("Finished: %d pages visited, %d archived in %.2f s", len(self.results), archived, duration)

    async def _process(self, url: str, depth: int) -> PageResult:
        result = PageResult(url=url, depth=depth)
        self.results.append(result)
        logger.info("Crawling: %s", url)

        content = await self.fetcher.fetch(url)
        if content is None:
            logger.warning("Failed to retrieve content for: %s", url)
            return result
        result.fetched = True
        page = PageRecord(url, content)

        result.saved = self.writer.write(page.content, page.url)
        for fmt, ok in result.saved.items():
            if not ok:
                logger.error("Failed to save %s: %s", fmt, url)

        links = self.extractor.extract(page.content, self.target.base_url, page.url)
        result.links_found = len(links)
        if self.max_depth is not None and depth >= self.max_depth:
            logger.debug("Depth limit reached at %s, %d links not queued", url, len(links))
            return result
        new_links = [link for link in links if link not in self.visited]
        self.frontier.extend((link, depth + 1) for link in new_links)
        logger.info("Added %d new URLs to visit", len(new_links))
        return result

    async def _pause(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
