"""Request identity and chat-thread guarding."""

from dataclasses import dataclass
from typing import Optional
import hashlib
import logging

from fastapi import Header
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.modules.chat.exceptions import ChatThreadNotFound, EmptyUserMessage
from app.modules.chat.schema.chat import ChatMessageIn, PromptGPTRequest
from app.services.memory.models import ChatThread
from app.services.memory.repo import get_thread

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"
THREAD_TITLE_CHARS = 30


def user_hashed_id(email: Optional[str]) -> str:
    """Stable per-user id: SHA-256 of the normalized e-mail address."""
    identity = (email or "").strip().lower() or ANONYMOUS_USER
    return hashlib.sha256(identity.encode("utf-8")).hexdigest()


async def get_user_id(x_user_email: Optional[str] = Header(default=None)) -> str:
    """FastAPI dependency; the e-mail header is set by the authenticating proxy."""
    return user_hashed_id(x_user_email)


@dataclass
class ChatSession:
    thread: ChatThread
    last_human_message: ChatMessageIn
    user_id: str
    chat_api_model: str
    chat_doc: str


def last_user_message(request: PromptGPTRequest) -> ChatMessageIn:
    for message in reversed(request.messages):
        if message.role == "user" and message.content.strip():
            return message
    raise EmptyUserMessage()


async def init_and_guard_chat_session(
    session_factory: async_sessionmaker[AsyncSession],
    request: PromptGPTRequest,
    user_id: str,
) -> ChatSession:
    """
    Resolve the thread for a chat request and keep its metadata current.

    Raises:
        EmptyUserMessage: the request carries no user message
        ChatThreadNotFound: the thread is unknown, deleted or owned by someone else
    """
    last_message = last_user_message(request)

    async with session_factory() as db:
        thread = await get_thread(db, request.id, user_id)
        if thread is None:
            raise ChatThreadNotFound(request.id)

        user_turns = [m for m in request.messages if m.role == "user"]
        if len(user_turns) == 1:
            thread.name = last_message.content[:THREAD_TITLE_CHARS]
        thread.chat_type = request.chat_type
        thread.chat_api_model = request.chat_api_model
        thread.chat_doc = request.chat_doc
        await db.commit()

    logger.info(f"Chat session thread={thread.id} type={request.chat_type} doc={request.chat_doc}")
    return ChatSession(
        thread=thread,
        last_human_message=last_message,
        user_id=user_id,
        chat_api_model=request.chat_api_model,
        chat_doc=request.chat_doc,
    )
