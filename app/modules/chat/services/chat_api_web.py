"""Web-augmented chat: time-aware search, page scraping, then a streamed answer."""

import logging

from fastapi.responses import StreamingResponse

from app.modules.chat.services.chat_api_simple import TEXT_STREAM_MEDIA_TYPE
from app.modules.chat.services.chat_session import ChatSession
from app.modules.chat.services.history_recorder import assistant_recorder, record_user_message
from app.modules.chat.services.prompts import build_web_messages
from app.modules.chat.services.query_enricher import enrich_query
from app.modules.chat.services.timeutil import current_time, format_local
from app.modules.chat.services.web_search.evidence import EvidenceCollector
from app.services.llm import completion_text_stream, resolve_chat_model, stream_chat_completion
from app.services.memory.history import ChatHistoryStore
from core.config import Services

logger = logging.getLogger(__name__)


async def chat_api_web(session: ChatSession, services: Services) -> StreamingResponse:
    cfg = services.settings
    history = ChatHistoryStore(services.session_factory, session.thread.id, session.user_id)
    question = session.last_human_message.content

    top_history = await history.get_messages(limit=cfg.HISTORY_WINDOW)

    now = current_time(cfg.TIMEZONE)
    current_time_str = format_local(now)
    enriched = enrich_query(question, now)
    logger.info(f"Web chat query={enriched.query!r} freshness={enriched.freshness}")

    collector = EvidenceCollector(
        services.search_client,
        services.scraper_factory,
        tz_name=cfg.TIMEZONE,
        count=cfg.WEB_SEARCH_COUNT,
        max_chars=cfg.PAGE_CONTENT_MAX_CHARS,
    )
    pages = await collector.collect(enriched.query, enriched.freshness)

    messages = build_web_messages(cfg.AI_NAME, current_time_str, top_history, question, pages)

    await record_user_message(history, question)
    stream = await stream_chat_completion(
        services.llm_client,
        messages,
        resolve_chat_model(session.chat_api_model, cfg),
        temperature=cfg.CHAT_TEMPERATURE,
        max_tokens=cfg.WEB_MAX_TOKENS,
    )
    return StreamingResponse(
        completion_text_stream(stream, assistant_recorder(history)),
        media_type=TEXT_STREAM_MEDIA_TYPE,
    )
