from unittest.mock import AsyncMock, MagicMock

import pytest

from app.modules.chat.services.web_search.evidence import EvidenceCollector
from conftest import BrokenBrowser, FakeScraper, search_result

PAGE_HTML = """
<html><head><meta property="article:published_time" content="2024-05-03T00:00:00Z"></head>
<body><main>Body of {name}</main></body></html>
"""


def _item(n: int, date: str = "2024-05-01T03:00:00.0000000Z") -> dict:
    return {
        "name": f"Result {n}",
        "url": f"https://example.com/{n}",
        "snippet": f"Snippet {n}",
        "datePublished": date,
    }


def _collector(search_payload, scraper_factory) -> EvidenceCollector:
    search_client = MagicMock(search_web=AsyncMock(return_value=search_payload))
    return EvidenceCollector(search_client, scraper_factory, tz_name="Asia/Tokyo", count=5, max_chars=2000)


@pytest.mark.asyncio
async def test_failing_pages_degrade_to_snippets_in_order():
    items = [_item(n) for n in range(5)]
    scraper = FakeScraper(
        {it["url"]: PAGE_HTML.format(name=it["name"]) for it in items},
        failing={items[1]["url"], items[3]["url"]},
    )
    collector = _collector(search_result(*items), lambda: scraper)

    pages = await collector.collect("query", "Week")

    assert [p.url for p in pages] == [it["url"] for it in items]
    assert [p.content is None for p in pages] == [False, True, False, True, False]
    assert pages[0].content == "Body of Result 0"
    assert pages[0].publish_date == "2024/5/3 9:00:00"
    # Degraded records keep the search metadata
    assert pages[1].title == "Result 1"
    assert pages[1].snippet == "Snippet 1"
    assert pages[1].publish_date == "2024/5/1 12:00:00"
    assert sorted(scraper.fetched) == sorted(it["url"] for it in items)
    assert scraper.closed


@pytest.mark.asyncio
async def test_search_date_is_used_when_page_has_none():
    item = _item(0)
    scraper = FakeScraper({item["url"]: "<html><body><p>text</p></body></html>"})
    pages = await _collector(search_result(item), lambda: scraper).collect("q", "Day")
    assert pages[0].content == "text"
    assert pages[0].publish_date == "2024/5/1 12:00:00"


@pytest.mark.asyncio
async def test_browser_launch_failure_degrades_every_page():
    items = [_item(n) for n in range(3)]
    pages = await _collector(search_result(*items), BrokenBrowser).collect("q", "Week")
    assert len(pages) == 3
    assert all(p.content is None for p in pages)
    assert [p.snippet for p in pages] == ["Snippet 0", "Snippet 1", "Snippet 2"]


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [None, {"webPages": {"value": []}}, {}])
async def test_no_results_skips_the_browser(payload):
    factory = MagicMock()
    pages = await _collector(payload, factory).collect("q", "Week")
    assert pages == []
    factory.assert_not_called()


@pytest.mark.asyncio
async def test_missing_title_defaults_to_untitled():
    item = {"url": "https://example.com/x", "snippet": "s"}
    scraper = FakeScraper({}, failing={item["url"]})
    pages = await _collector(search_result(item), lambda: scraper).collect("q", "Week")
    assert pages[0].title == "Untitled"
    assert pages[0].publish_date is None
