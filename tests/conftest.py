"""
Shared test fixtures.

Provides: in-memory chat history database, fake completion/embedding client,
fake search client and page scraper, a Services container built from them.
"""

import os

# Settings are read at import time; keep the suite away from real endpoints and files
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.pop("AZURE_OPENAI_ENDPOINT", None)

from types import SimpleNamespace
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.services.memory.models import Base
from app.services.memory.repo import create_thread
from core.config import Services, Settings

TEST_USER = "user-hash-1"


def completion_chunk(text: Optional[str]):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


async def aiter_chunks(texts: List[str]):
    for text in texts:
        yield completion_chunk(text)


def fake_llm_client(texts: List[str], embedding: Optional[List[float]] = None):
    """AsyncOpenAI stand-in: streams the given text deltas and returns a fixed embedding."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=lambda **kwargs: aiter_chunks(texts))
    client.embeddings.create = AsyncMock(
        return_value=SimpleNamespace(data=[SimpleNamespace(embedding=embedding or [0.1, 0.2, 0.3])])
    )
    return client


class FakeScraper:
    """PageScraper stand-in; urls listed in failing raise instead of returning HTML."""

    def __init__(self, pages: Dict[str, str], failing=()):
        self.pages = pages
        self.failing = set(failing)
        self.fetched: List[str] = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def fetch_html(self, url: str) -> str:
        self.fetched.append(url)
        if url in self.failing:
            raise TimeoutError(f"Navigation timeout: {url}")
        return self.pages[url]


class BrokenBrowser:
    async def __aenter__(self):
        raise RuntimeError("Executable doesn't exist")

    async def __aexit__(self, exc_type, exc, tb):
        return None


def search_result(*items: dict) -> dict:
    return {"webPages": {"value": list(items)}}


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        AI_NAME="TestBot",
        OPENAI_API_KEY="test-key",
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture
async def session_factory():
    """In-memory SQLite database; every session of the factory sees the same data."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def thread(session_factory):
    async with session_factory() as db:
        row = await create_thread(db, TEST_USER)
        await db.commit()
    return row


@pytest.fixture
def make_services(session_factory, test_settings):
    def _make(llm_client=None, qdrant_client=None, search_client=None, scraper_factory=None) -> Services:
        return Services(
            llm_client=llm_client or fake_llm_client(["ok"]),
            qdrant_client=qdrant_client or MagicMock(),
            session_factory=session_factory,
            search_client=search_client or MagicMock(search_web=AsyncMock(return_value=None)),
            scraper_factory=scraper_factory or MagicMock(),
            config=test_settings,
        )
    return _make


async def read_body(response) -> str:
    """Drain a StreamingResponse the way the ASGI server would."""
    parts = []
    async for chunk in response.body_iterator:
        parts.append(chunk if isinstance(chunk, str) else chunk.decode("utf-8"))
    return "".join(parts)
