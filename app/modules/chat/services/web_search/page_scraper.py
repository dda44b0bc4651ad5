"""
Headless page fetching and main-content extraction for web search results.

PageScraper owns one Chromium instance per batch and gives every page its own
browser context, so cookies/storage never leak between pages. Extraction is
done on the rendered HTML with BeautifulSoup.
"""

import asyncio
import logging
from typing import Optional

from bs4 import BeautifulSoup
from playwright.async_api import Browser, Playwright, async_playwright

from app.modules.chat.services.timeutil import to_local_display

logger = logging.getLogger(__name__)

# Elements that never carry article text
NOISE_SELECTORS = [
    "script",
    "style",
    "nav",
    "header",
    "footer",
    "aside",
    ".advertisement",
    ".social-share",
]

# Tried in order; the first element with text wins
CONTENT_SELECTORS = [
    "main",
    "article",
    '[role="main"]',
    "#main-content",
    ".main-content",
    ".content",
    ".post-content",
    "body",
]

DATE_SELECTORS = [
    'meta[property="article:published_time"]',
    'meta[name="publication_date"]',
    "time[datetime]",
    ".published-date",
    ".post-date",
    ".article-date",
]

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def extract_main_text(html: str, max_chars: int = 2000) -> str:
    """
    Strip page chrome and return the main textual content.

    Args:
        html: Rendered page HTML
        max_chars: Truncation limit for the returned text

    Returns:
        Main text (possibly empty), at most max_chars characters
    """
    soup = BeautifulSoup(html, "html.parser")
    for selector in NOISE_SELECTORS:
        for element in soup.select(selector):
            element.decompose()

    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = element.get_text(" ", strip=True)
        if text:
            return text[:max_chars]

    return soup.get_text(" ", strip=True)[:max_chars]


def extract_publish_date(html: str, tz_name: str) -> Optional[str]:
    """Find a publish timestamp in common metadata locations, rendered in tz_name."""
    soup = BeautifulSoup(html, "html.parser")
    for selector in DATE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        raw = element.get("content") or element.get("datetime") or element.get_text(strip=True)
        if raw:
            return to_local_display(raw, tz_name)
    return None


class PageScraper:
    """
    Async context manager around a headless Chromium browser.

    Usage:
        async with PageScraper(timeout_ms=30000, concurrency=3) as scraper:
            html = await scraper.fetch_html(url)
    """

    def __init__(self, timeout_ms: int = 30000, concurrency: int = 3):
        self.timeout_ms = timeout_ms
        self._semaphore = asyncio.Semaphore(max(1, concurrency))
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def __aenter__(self) -> "PageScraper":
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=True,
                args=["--no-sandbox", "--disable-setuid-sandbox"],
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None

    async def fetch_html(self, url: str) -> str:
        """Navigate to url in a fresh browser context and return the rendered HTML."""
        if self._browser is None:
            raise RuntimeError("PageScraper used outside of its context manager")

        async with self._semaphore:
            context = await self._browser.new_context(user_agent=USER_AGENT)
            try:
                page = await context.new_page()
                await page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
                return await page.content()
            finally:
                await context.close()
