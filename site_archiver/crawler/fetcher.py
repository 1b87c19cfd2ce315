# site_archiver/crawler/fetcher.py
"""
Fetcher module: returns rendered markup for a URL from an authenticated session.

Every fetcher retries a fixed number of times with a fixed pause between
attempts and returns ``None`` once the attempts are used up. The crawl
engine only ever sees ``str`` or ``None``.
"""
from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence
from urllib.parse import urlsplit

from aiohttp import ClientError, ClientSession, ClientTimeout
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from site_archiver.config import FetcherConfig
from site_archiver.logger import logger

__all__ = (
    "FetchError",
    "ContentFetcher",
    "RetryingFetcher",
    "BrowserFetcher",
    "HttpFetcher",
    "load_storage_cookies",
    "cookie_header",
)

_OUTER_HTML_JS = "document.documentElement.outerHTML"


class FetchError(Exception):
    """One fetch attempt failed. ``retryable=False`` ends the retry loop early."""

    def __init__(self, message: str, *, retryable: bool = True) -> None:
        super().__init__(message)
        self.retryable = retryable


class ContentFetcher(Protocol):
    async def __aenter__(self) -> ContentFetcher:
        ...

    async def __aexit__(self, exc_type, exc, tb) -> None:
        ...

    async def fetch(self, url: str) -> Optional[str]:
        ...


class RetryingFetcher:
    """Base class: retry loop around :meth:`_fetch_once`."""

    def __init__(self, retries: int = 3, retry_wait: float = 2.0) -> None:
        if retries < 1:
            raise ValueError("retries must be >= 1")
        self.retries = retries
        self.retry_wait = retry_wait

    async def __aenter__(self) -> RetryingFetcher:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def fetch(self, url: str) -> Optional[str]:
        """
        Fetch *url*, retrying on failure.

        Returns the page markup, or ``None`` when every attempt failed.
        """
        for attempt in range(1, self.retries + 1):
            try:
                return await self._fetch_once(url)
            except FetchError as exc:
                if not exc.retryable:
                    logger.warning("Failed %s: %s", url, exc)
                    return None
                logger.warning("Attempt %d/%d failed for %s: %s", attempt, self.retries, url, exc)
                if attempt < self.retries:
                    await asyncio.sleep(self.retry_wait)
        logger.warning("Failed to retrieve content after %d attempts: %s", self.retries, url)
        return None

    async def _fetch_once(self, url: str) -> str:
        raise NotImplementedError


def load_storage_cookies(path: Path | str) -> List[Dict[str, Any]]:
    """Read the ``cookies`` list of a Playwright storage-state file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"storage state must be a JSON object: {path}")
    cookies = data.get("cookies", [])
    if not isinstance(cookies, list):
        raise ValueError(f"'cookies' must be a list: {path}")
    return cookies


def cookie_header(cookies: Sequence[Dict[str, Any]], url: str) -> str:
    """Build a ``Cookie`` header value with the cookies that apply to *url*."""
    parts = urlsplit(url)
    host = (parts.hostname or "").lower()
    path = parts.path or "/"
    pairs = []
    for cookie in cookies:
        domain = str(cookie.get("domain", "")).lstrip(".").lower()
        if domain and host != domain and not host.endswith("." + domain):
            continue
        if not path.startswith(cookie.get("path") or "/"):
            continue
        if cookie.get("secure") and parts.scheme != "https":
            continue
        pairs.append(f"{cookie['name']}={cookie['value']}")
    return "; ".join(pairs)


class BrowserFetcher(RetryingFetcher):
    """
    Drives a Playwright browser that carries a logged-in session.

    The session comes from, in order of preference: a running Chrome reached
    over CDP (its current tab is reused), a persistent profile directory, a
    storage-state file, or nothing (fresh context). After reading a page the
    tab is sent back to wherever it was before.
    """

    def __init__(self, config: FetcherConfig) -> None:
        super().__init__(retries=config.retries, retry_wait=config.retry_wait)
        self.config = config
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    async def __aenter__(self) -> BrowserFetcher:
        cfg = self.config
        logger.info("Starting %s browser...", cfg.browser)
        self._playwright = await async_playwright().start()
        try:
            if cfg.cdp_url:
                self._browser = await self._playwright.chromium.connect_over_cdp(cfg.cdp_url)
                contexts = self._browser.contexts
                self._context = contexts[0] if contexts else await self._browser.new_context()
            elif cfg.user_data_dir:
                browser_type = getattr(self._playwright, cfg.browser)
                self._context = await browser_type.launch_persistent_context(
                    str(cfg.user_data_dir),
                    headless=cfg.headless,
                    **self._context_options(),
                )
            else:
                browser_type = getattr(self._playwright, cfg.browser)
                self._browser = await browser_type.launch(headless=cfg.headless)
                storage = str(cfg.storage_state) if cfg.storage_state else None
                self._context = await self._browser.new_context(
                    storage_state=storage,
                    **self._context_options(),
                )
            pages = self._context.pages
            self._page = pages[0] if pages else await self._context.new_page()
            self._page.set_default_timeout(cfg.timeout * 1000)
        except PlaywrightError:
            await self._shutdown()
            raise
        logger.info("Browser started successfully")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self._shutdown()
        logger.info("Browser stopped")

    def _context_options(self) -> Dict[str, Any]:
        if self.config.user_agent:
            return {"user_agent": self.config.user_agent}
        return {}

    async def _shutdown(self) -> None:
        if self._browser is not None:
            await self._browser.close()
        elif self._context is not None:
            await self._context.close()
        self._browser = self._context = self._page = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def _fetch_once(self, url: str) -> str:
        page = self._page
        if page is None:
            raise RuntimeError("Browser not started")
        previous = page.url
        try:
            response = await page.goto(url, wait_until="load")
            if response is not None and response.status >= 400:
                raise FetchError(f"HTTP {response.status}")
            await asyncio.sleep(self.config.page_load_wait)
            return await page.evaluate(_OUTER_HTML_JS)
        except PlaywrightError as exc:
            raise FetchError(str(exc)) from exc
        finally:
            await self._restore(page, previous)

    async def _restore(self, page, previous: str) -> None:
        if not previous or previous == "about:blank" or page.url == previous:
            return
        try:
            await page.goto(previous, wait_until="load")
        except PlaywrightError as exc:
            logger.warning("Could not return tab to %s: %s", previous, exc)


class HttpFetcher(RetryingFetcher):
    """Plain HTTP GET with the cookies of a storage-state file."""

    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(self, config: FetcherConfig) -> None:
        super().__init__(retries=config.retries, retry_wait=config.retry_wait)
        self.config = config
        self.session: Optional[ClientSession] = None
        self._cookies: List[Dict[str, Any]] = []

    async def __aenter__(self) -> HttpFetcher:
        if self.config.storage_state:
            self._cookies = load_storage_cookies(self.config.storage_state)
        headers = {"User-Agent": self.config.user_agent} if self.config.user_agent else None
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.timeout),
            headers=headers,
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def _fetch_once(self, url: str) -> str:
        if not self.session:
            raise RuntimeError("Session not initialized")
        headers = {}
        cookies = cookie_header(self._cookies, url)
        if cookies:
            headers["Cookie"] = cookies
        try:
            async with self.session.get(url, headers=headers) as resp:
                if resp.status in self._RETRY_STATUS:
                    raise FetchError(f"retryable status {resp.status}")
                if resp.status != 200:
                    raise FetchError(f"HTTP {resp.status}", retryable=False)
                mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                if mime and "html" not in mime:
                    raise FetchError(f"not an HTML page: {mime}", retryable=False)
                try:
                    return await resp.text()
                except (UnicodeDecodeError, LookupError) as exc:
                    raise FetchError(f"undecodable body: {exc}", retryable=False) from exc
        except (ClientError, asyncio.TimeoutError) as exc:
            raise FetchError(str(exc) or type(exc).__name__) from exc
