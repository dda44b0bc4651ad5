from typing import List, Optional
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from .models import ChatThread, ChatMessage


async def create_thread(db: AsyncSession, user_id: str, name: str = "New chat", chat_type: str = "simple",
                        chat_api_model: str = "GPT-4", chat_doc: str = "all") -> ChatThread:
    thread = ChatThread(user_id=user_id, name=name, chat_type=chat_type,
                        chat_api_model=chat_api_model, chat_doc=chat_doc)
    db.add(thread)
    await db.flush()
    return thread


async def get_thread(db: AsyncSession, thread_id: str, user_id: str) -> Optional[ChatThread]:
    """Return the thread only when it belongs to the user and is not deleted."""
    row = await db.get(ChatThread, thread_id)
    if row is None or row.user_id != user_id or row.is_deleted:
        return None
    return row


async def list_threads(db: AsyncSession, user_id: str, limit: int = 50) -> List[ChatThread]:
    q = (select(ChatThread)
         .where(ChatThread.user_id == user_id, ChatThread.is_deleted.is_(False))
         .order_by(ChatThread.created_at.desc())
         .limit(limit))
    res = await db.execute(q)
    return list(res.scalars().all())


async def soft_delete_thread(db: AsyncSession, thread_id: str) -> None:
    await db.execute(update(ChatMessage).where(ChatMessage.thread_id == thread_id).values(is_deleted=True))
    await db.execute(update(ChatThread).where(ChatThread.id == thread_id).values(is_deleted=True))


async def add_message(db: AsyncSession, thread_id: str, user_id: str, role: str, content: str,
                      context: Optional[str] = None) -> ChatMessage:
    msg = ChatMessage(thread_id=thread_id, user_id=user_id, role=role, content=content, context=context)
    db.add(msg)
    await db.flush()
    return msg


async def thread_messages(db: AsyncSession, thread_id: str, user_id: str, limit: Optional[int] = None) -> List[ChatMessage]:
    """Messages of a thread in chronological order; with a limit, the most recent ones."""
    q = (select(ChatMessage)
         .where(ChatMessage.thread_id == thread_id,
                ChatMessage.user_id == user_id,
                ChatMessage.is_deleted.is_(False))
         .order_by(ChatMessage.seq.desc()))
    if limit is not None:
        q = q.limit(limit)
    res = await db.execute(q)
    return list(reversed(res.scalars().all()))
