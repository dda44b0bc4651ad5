import asyncio
from unittest.mock import MagicMock

import pytest

from app.modules.chat.services.web_search.page_scraper import (
    PageScraper,
    extract_main_text,
    extract_publish_date,
)

ARTICLE_HTML = """
<html>
  <head>
    <meta property="article:published_time" content="2024-05-03T00:05:07Z">
    <style>body { color: red; }</style>
  </head>
  <body>
    <header>Site header</header>
    <nav>Home | News</nav>
    <main>
      <h1>Headline</h1>
      <p>First paragraph.</p>
      <script>track();</script>
      <div class="advertisement">Buy now</div>
    </main>
    <aside>Related</aside>
    <footer>Copyright</footer>
  </body>
</html>
"""


def test_main_text_strips_page_chrome():
    text = extract_main_text(ARTICLE_HTML)
    assert text == "Headline First paragraph."


def test_main_text_falls_back_to_article_then_body():
    assert extract_main_text("<html><body><article>Story</article></body></html>") == "Story"
    assert extract_main_text("<html><body><div>Loose text</div></body></html>") == "Loose text"


def test_main_text_is_truncated():
    html = "<html><body><main>" + "x" * 50 + "</main></body></html>"
    assert extract_main_text(html, max_chars=10) == "x" * 10


def test_main_text_of_empty_page():
    assert extract_main_text("<html><body><nav>only nav</nav></body></html>") == ""


def test_publish_date_from_meta_tag():
    assert extract_publish_date(ARTICLE_HTML, "Asia/Tokyo") == "2024/5/3 9:05:07"


def test_publish_date_from_time_element():
    html = '<html><body><time datetime="2024-01-31T23:00:00Z">Jan 31</time></body></html>'
    assert extract_publish_date(html, "Asia/Tokyo") == "2024/2/1 8:00:00"


def test_publish_date_missing():
    assert extract_publish_date("<html><body><p>no date</p></body></html>", "Asia/Tokyo") is None


@pytest.mark.asyncio
async def test_fetch_outside_context_manager_fails():
    with pytest.raises(RuntimeError):
        await PageScraper().fetch_html("https://example.com")


class _FakePage:
    def __init__(self, tracker):
        self.tracker = tracker

    async def goto(self, url, wait_until=None, timeout=None):
        self.tracker["active"] += 1
        self.tracker["peak"] = max(self.tracker["peak"], self.tracker["active"])
        try:
            await asyncio.sleep(0.01)
            if "fail" in url:
                raise TimeoutError(f"Timeout {timeout}ms exceeded")
        finally:
            self.tracker["active"] -= 1
        self.url = url

    async def content(self):
        return f"<html><body>{self.url}</body></html>"


class _FakeContext:
    def __init__(self, tracker):
        self.tracker = tracker
        self.closed = False

    async def new_page(self):
        return _FakePage(self.tracker)

    async def close(self):
        self.closed = True


@pytest.mark.asyncio
async def test_fetch_releases_every_context_and_bounds_concurrency():
    tracker = {"active": 0, "peak": 0}
    contexts = []

    async def new_context(**kwargs):
        context = _FakeContext(tracker)
        contexts.append(context)
        return context

    scraper = PageScraper(timeout_ms=1000, concurrency=2)
    scraper._browser = MagicMock(new_context=new_context)
    urls = [f"https://example.com/{'fail' if n % 2 else 'ok'}/{n}" for n in range(6)]

    results = await asyncio.gather(*(scraper.fetch_html(u) for u in urls), return_exceptions=True)

    assert [isinstance(r, TimeoutError) for r in results] == [False, True] * 3
    assert results[0] == "<html><body>https://example.com/ok/0</body></html>"
    assert len(contexts) == 6
    assert all(c.closed for c in contexts)
    assert tracker["peak"] == 2
