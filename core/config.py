"""
Core Configuration and Services
Consolidated configuration settings and service wiring for the chat service
"""

import logging
from typing import Callable, Optional

import httpx
from fastapi import FastAPI, Request
from openai import AsyncAzureOpenAI, AsyncOpenAI
from pydantic_settings import BaseSettings, SettingsConfigDict
from qdrant_client import QdrantClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PROJECT_NAME: str = "Chat Service"

    # Assistant persona shown in the system prompts
    AI_NAME: str = "AI Assistant"
    TIMEZONE: str = "Asia/Tokyo"
    HISTORY_WINDOW: int = 30

    # LLM
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str | None = None
    AZURE_OPENAI_API_KEY: str | None = None
    AZURE_OPENAI_ENDPOINT: str | None = None
    AZURE_OPENAI_API_VERSION: str = "2024-06-01"
    OPENAI_TIMEOUT_SECS: int = 120

    # Model selection. The request flag only matters once the override is cleared.
    CHAT_MODEL_OVERRIDE: str | None = "gpt-4o-mini"
    GPT3_MODEL: str = "gpt-35-turbo-16k"
    GPT4_MODEL: str = "gpt-4o"

    CHAT_TEMPERATURE: float = 0.7
    WEB_MAX_TOKENS: int = 2000
    DOC_MAX_TOKENS: int = 4000

    # Embeddings
    EMBEDDING_MODEL: str = "text-embedding-3-small"

    # Qdrant
    QDRANT_MODE: str = "cloud"
    QDRANT_URL: str = "http://localhost:6333"
    QDRANT_API_KEY: str | None = None
    QDRANT_COLLECTION: str = "chat_documents"
    QDRANT_SEARCH_TIMEOUT_SECS: int = 10
    DOC_SEARCH_LIMIT: int = 15

    # Web Search (Bing)
    BING_SEARCH_API_KEY: str | None = None
    BING_SEARCH_ENDPOINT: str = "https://api.bing.microsoft.com/v7.0/search"
    BING_SEARCH_MARKET: str = "ja-JP"
    BING_SEARCH_TIMEOUT_SECS: int = 20
    WEB_SEARCH_COUNT: int = 5

    # Page scraping
    PAGE_FETCH_TIMEOUT_MS: int = 30000
    PAGE_FETCH_CONCURRENCY: int = 3
    PAGE_CONTENT_MAX_CHARS: int = 2000

    # Chat history
    DATABASE_URL: str = "sqlite+aiosqlite:///./chat_history.sqlite"

    # CORS Configuration
    CORS_ALLOWED_ORIGINS: list[str] = [
        "http://127.0.0.1:8000",
        "http://localhost:5173",
        "http://localhost:3000",
    ]


settings = Settings()


def get_qdrant_client() -> QdrantClient:
    """Create Qdrant client based on settings configuration."""
    if settings.QDRANT_MODE == "embedded":
        return QdrantClient(path="./qdrant_data")
    return QdrantClient(
        url=settings.QDRANT_URL,
        api_key=settings.QDRANT_API_KEY or None,
        timeout=settings.QDRANT_SEARCH_TIMEOUT_SECS,
    )


def get_llm_client() -> AsyncOpenAI:
    """Create the chat/embedding client. Azure is used when an endpoint is configured."""
    http_client = httpx.AsyncClient(
        limits=httpx.Limits(max_keepalive_connections=20, max_connections=40)
    )
    if settings.AZURE_OPENAI_ENDPOINT:
        return AsyncAzureOpenAI(
            api_key=settings.AZURE_OPENAI_API_KEY,
            azure_endpoint=settings.AZURE_OPENAI_ENDPOINT,
            api_version=settings.AZURE_OPENAI_API_VERSION,
            timeout=settings.OPENAI_TIMEOUT_SECS,
            max_retries=0,
            http_client=http_client,
        )
    return AsyncOpenAI(
        api_key=settings.OPENAI_API_KEY,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.OPENAI_TIMEOUT_SECS,
        max_retries=0,
        http_client=http_client,
    )


class Services:
    """Container for the collaborators a chat request needs."""

    def __init__(
        self,
        llm_client: AsyncOpenAI,
        qdrant_client: QdrantClient,
        session_factory: async_sessionmaker[AsyncSession],
        search_client,
        scraper_factory: Callable,
        config: Optional[Settings] = None,
    ):
        self.llm_client = llm_client
        self.qdrant_client = qdrant_client
        self.session_factory = session_factory
        self.search_client = search_client
        self.scraper_factory = scraper_factory
        self.settings = config or settings


def wire_services(app: FastAPI) -> None:
    """Wire all singleton services into app.state on startup."""
    from app.modules.chat.services.web_search.bing_client import BingSearchClient
    from app.modules.chat.services.web_search.page_scraper import PageScraper
    from app.services.memory.db import SessionLocal

    logger.info("Wiring global services...")

    app.state.settings = settings
    app.state.llm_client = get_llm_client()
    app.state.qdrant = get_qdrant_client()
    app.state.session_factory = SessionLocal
    app.state.search_client = BingSearchClient(
        api_key=settings.BING_SEARCH_API_KEY,
        endpoint=settings.BING_SEARCH_ENDPOINT,
        market=settings.BING_SEARCH_MARKET,
        timeout=settings.BING_SEARCH_TIMEOUT_SECS,
    )
    app.state.scraper_factory = lambda: PageScraper(
        timeout_ms=settings.PAGE_FETCH_TIMEOUT_MS,
        concurrency=settings.PAGE_FETCH_CONCURRENCY,
    )

    logger.info("Service container wiring completed successfully")


def get_services(request: Request) -> Services:
    """
    Get the service container for the current request.

    Args:
        request: FastAPI request object containing app.state

    Returns:
        Services: container built from app.state singletons
    """
    state = request.app.state
    return Services(
        llm_client=state.llm_client,
        qdrant_client=state.qdrant,
        session_factory=state.session_factory,
        search_client=state.search_client,
        scraper_factory=state.scraper_factory,
        config=state.settings,
    )
