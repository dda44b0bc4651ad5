"""Bing Web Search client.

search_web() returns the raw API payload ({"webPages": {"value": [...]}}), or
None when the API answered without web results.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from app.modules.chat.exceptions import WebSearchError

logger = logging.getLogger(__name__)


class BingSearchClient:
    def __init__(self, api_key: str | None, endpoint: str, market: str = "ja-JP", timeout: int = 20):
        self.api_key = api_key
        self.endpoint = endpoint
        self.market = market
        self.timeout = timeout

    async def _fetch_json(self, session: aiohttp.ClientSession, params: dict) -> dict:
        headers = {"Ocp-Apim-Subscription-Key": self.api_key}
        async with session.get(self.endpoint, params=params, headers=headers,
                               timeout=aiohttp.ClientTimeout(total=self.timeout)) as resp:
            resp.raise_for_status()
            return await resp.json()

    async def search_web(self, query: str, *, freshness: str, count: int = 5) -> Optional[Dict[str, Any]]:
        if not self.api_key:
            raise WebSearchError("Bing search is not configured (BING_SEARCH_API_KEY missing)")

        params = {
            "q": query,
            "count": count,
            "freshness": freshness,
            "mkt": self.market,
            "responseFilter": "Webpages",
        }
        logger.info(f"Bing search: freshness={freshness} count={count} query={query!r}")
        try:
            async with aiohttp.ClientSession() as session:
                data = await self._fetch_json(session, params)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise WebSearchError(f"Bing search failed: {e}") from e

        if not data.get("webPages"):
            return None
        return data
