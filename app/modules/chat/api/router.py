from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from typing import Any, Dict, List
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.chat.schema.chat import (
    MessageResponse,
    NewThreadRequest,
    PromptGPTRequest,
    ThreadResponse,
)
from app.modules.chat.services.chat_api_doc import chat_api_doc
from app.modules.chat.services.chat_api_simple import chat_api_simple
from app.modules.chat.services.chat_api_web import chat_api_web
from app.modules.chat.services.chat_session import get_user_id, init_and_guard_chat_session
from app.services.memory.db import get_db
from app.services.memory.repo import create_thread, get_thread, list_threads, soft_delete_thread, thread_messages
from core.config import Services, get_services

logger = logging.getLogger(__name__)

v1 = APIRouter(prefix="/api/v1/chat", tags=["Chat"])
router = v1

CHAT_HANDLERS = {
    "simple": chat_api_simple,
    "web": chat_api_web,
    "doc": chat_api_doc,
}

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."
UNKNOWN_ERROR_STATUS_TEXT = "Unknown Error"


def _header_safe(value: str) -> str:
    return value.encode("ascii", "backslashreplace").decode("ascii").replace("\r", " ").replace("\n", " ")


def error_response(exc: Exception) -> Response:
    """Non-streaming 500: body is the error message, X-Status-Text its string form."""
    message = str(exc)
    if not message:
        return Response(
            UNKNOWN_ERROR_MESSAGE,
            status_code=500,
            media_type="text/plain",
            headers={"X-Status-Text": UNKNOWN_ERROR_STATUS_TEXT},
        )
    return Response(
        message,
        status_code=500,
        media_type="text/plain",
        headers={"X-Status-Text": _header_safe(f"{type(exc).__name__}: {message}")},
    )


@v1.post("")
async def chat(
    req: PromptGPTRequest,
    user_id: str = Depends(get_user_id),
    services: Services = Depends(get_services),
) -> Response:
    """Stream an answer for the last user message of the thread."""
    try:
        session = await init_and_guard_chat_session(services.session_factory, req, user_id)
        return await CHAT_HANDLERS[req.chat_type](session, services)
    except Exception as e:
        logger.error(f"Chat API ({req.chat_type}) error: {e}", exc_info=True)
        return error_response(e)


def _thread_response(thread) -> ThreadResponse:
    return ThreadResponse(
        id=thread.id,
        name=thread.name,
        chat_type=thread.chat_type,
        chat_api_model=thread.chat_api_model,
        chat_doc=thread.chat_doc,
        created_at=thread.created_at.isoformat(),
    )


@v1.post("/threads", response_model=ThreadResponse)
async def new_thread(
    req: NewThreadRequest = NewThreadRequest(),
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
) -> ThreadResponse:
    """Create a new chat thread."""
    thread = await create_thread(db, user_id, req.name, req.chat_type, req.chat_api_model, req.chat_doc)
    await db.commit()
    return _thread_response(thread)


@v1.get("/threads", response_model=List[ThreadResponse])
async def get_threads(
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
) -> List[ThreadResponse]:
    """List the caller's chat threads, newest first."""
    rows = await list_threads(db, user_id)
    return [_thread_response(r) for r in rows]


@v1.get("/threads/{thread_id}/messages", response_model=List[MessageResponse])
async def get_thread_messages(
    thread_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
) -> List[MessageResponse]:
    if await get_thread(db, thread_id, user_id) is None:
        raise HTTPException(status_code=404, detail="Chat thread not found")
    rows = await thread_messages(db, thread_id, user_id)
    return [
        MessageResponse(
            id=r.id,
            role=r.role,
            content=r.content,
            context=r.context,
            created_at=r.created_at.isoformat(),
        ) for r in rows
    ]


@v1.delete("/threads/{thread_id}")
async def delete_thread(
    thread_id: str,
    user_id: str = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """Soft-delete a thread and all its messages."""
    if await get_thread(db, thread_id, user_id) is None:
        raise HTTPException(status_code=404, detail="Chat thread not found")
    await soft_delete_thread(db, thread_id)
    await db.commit()
    return {"success": True, "deleted_id": thread_id}
