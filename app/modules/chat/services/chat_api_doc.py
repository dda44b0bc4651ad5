"""Document chat: department-scoped retrieval, streamed answer with rewritten citations."""

import functools
import logging

from fastapi.responses import StreamingResponse

from app.modules.chat.services.chat_api_simple import TEXT_STREAM_MEDIA_TYPE
from app.modules.chat.services.chat_session import ChatSession
from app.modules.chat.services.citations import CitationStreamRewriter, build_citation_items
from app.modules.chat.services.history_recorder import (
    assistant_recorder,
    on_stream_end,
    record_user_message,
)
from app.modules.chat.services.prompts import build_document_context, build_document_messages
from app.modules.chat.services.retrieval.document_search import DocumentSearch
from app.services.embeddings import embed_text
from app.services.llm import completion_text_stream, resolve_chat_model, stream_chat_completion
from app.services.memory.history import ChatHistoryStore
from core.config import Services

logger = logging.getLogger(__name__)


async def chat_api_doc(session: ChatSession, services: Services) -> StreamingResponse:
    cfg = services.settings
    history = ChatHistoryStore(services.session_factory, session.thread.id, session.user_id)
    question = session.last_human_message.content

    top_history = await history.get_messages(limit=cfg.HISTORY_WINDOW)

    search = DocumentSearch(
        services.qdrant_client,
        functools.partial(embed_text, services.llm_client),
        cfg.QDRANT_COLLECTION,
        limit=cfg.DOC_SEARCH_LIMIT,
    )
    documents = await search.find_relevant_documents(question, session.chat_doc)

    context = build_document_context(documents)
    citation_items = build_citation_items(documents)
    messages = build_document_messages(cfg.AI_NAME, top_history, question, context, citation_items)

    await record_user_message(history, question)
    stream = await stream_chat_completion(
        services.llm_client,
        messages,
        resolve_chat_model(session.chat_api_model, cfg),
        temperature=cfg.CHAT_TEMPERATURE,
        max_tokens=cfg.DOC_MAX_TOKENS,
    )

    # The stored answer is the rewritten text the user actually received
    rewriter = CitationStreamRewriter(citation_items)
    body = on_stream_end(
        rewriter.rewrite_stream(completion_text_stream(stream)),
        assistant_recorder(history, context),
    )
    return StreamingResponse(body, media_type=TEXT_STREAM_MEDIA_TYPE)
