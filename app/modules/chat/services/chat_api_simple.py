import logging

from fastapi.responses import StreamingResponse

from app.modules.chat.services.chat_session import ChatSession
from app.modules.chat.services.history_recorder import assistant_recorder, record_user_message
from app.modules.chat.services.prompts import build_simple_messages
from app.services.llm import completion_text_stream, resolve_chat_model, stream_chat_completion
from app.services.memory.history import ChatHistoryStore
from core.config import Services

logger = logging.getLogger(__name__)

TEXT_STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"


async def chat_api_simple(session: ChatSession, services: Services) -> StreamingResponse:
    """Plain chat: system prompt plus the recent history, no augmentation."""
    cfg = services.settings
    history = ChatHistoryStore(services.session_factory, session.thread.id, session.user_id)
    question = session.last_human_message.content

    top_history = await history.get_messages(limit=cfg.HISTORY_WINDOW)
    messages = build_simple_messages(cfg.AI_NAME, top_history, question)

    await record_user_message(history, question)
    stream = await stream_chat_completion(
        services.llm_client,
        messages,
        resolve_chat_model(session.chat_api_model, cfg),
    )
    return StreamingResponse(
        completion_text_stream(stream, assistant_recorder(history)),
        media_type=TEXT_STREAM_MEDIA_TYPE,
    )
