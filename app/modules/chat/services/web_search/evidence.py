"""Web evidence collection: one search call, then concurrent page scraping.

A page that cannot be fetched or parsed never fails the batch; it is replaced
by a record built from the search snippet alone (content is None).
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from app.modules.chat.services.timeutil import to_local_display
from app.modules.chat.services.web_search.page_scraper import (
    extract_main_text,
    extract_publish_date,
)
from core.utils.perf import profile_stage

logger = logging.getLogger(__name__)


@dataclass
class WebPage:
    url: str
    title: str
    snippet: str
    content: Optional[str]
    publish_date: Optional[str]


class EvidenceCollector:
    def __init__(
        self,
        search_client,
        scraper_factory: Callable,
        *,
        tz_name: str = "Asia/Tokyo",
        count: int = 5,
        max_chars: int = 2000,
    ):
        self.search_client = search_client
        self.scraper_factory = scraper_factory
        self.tz_name = tz_name
        self.count = count
        self.max_chars = max_chars

    @profile_stage("web_evidence")
    async def collect(self, query: str, freshness: str) -> List[WebPage]:
        """
        Search the web and scrape every result.

        Args:
            query: Enriched search query
            freshness: "Day" or "Week"

        Returns:
            One WebPage per search result, in search order; empty when nothing was found
        """
        result = await self.search_client.search_web(query, freshness=freshness, count=self.count)
        items = ((result or {}).get("webPages") or {}).get("value") or []
        if not items:
            logger.warning("No web search results found")
            return []

        try:
            async with self.scraper_factory() as scraper:
                pages = await asyncio.gather(*(self._scrape(scraper, item) for item in items))
        except Exception as e:
            logger.error(f"Browser unavailable, using search snippets only: {e}", exc_info=True)
            return [self._snippet_only(item) for item in items]

        logger.info(f"Collected {len(pages)} web pages ({sum(p.content is None for p in pages)} degraded)")
        return list(pages)

    async def _scrape(self, scraper, item: Dict[str, Any]) -> WebPage:
        url = item.get("url", "")
        try:
            html = await scraper.fetch_html(url)
            content = extract_main_text(html, self.max_chars)
            publish_date = extract_publish_date(html, self.tz_name) or self._search_date(item)
        except Exception as e:
            logger.error(f"Error scraping {url}: {e}")
            return self._snippet_only(item)

        return WebPage(
            url=url,
            title=item.get("name") or "Untitled",
            snippet=item.get("snippet") or "",
            content=content,
            publish_date=publish_date,
        )

    def _search_date(self, item: Dict[str, Any]) -> Optional[str]:
        return to_local_display(item.get("datePublished"), self.tz_name)

    def _snippet_only(self, item: Dict[str, Any]) -> WebPage:
        return WebPage(
            url=item.get("url", ""),
            title=item.get("name") or "Untitled",
            snippet=item.get("snippet") or "",
            content=None,
            publish_date=self._search_date(item),
        )
