from typing import Dict, List, Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .repo import add_message, thread_messages

logger = logging.getLogger(__name__)


class ChatHistoryStore:
    """
    Persistent message history of one chat thread.

    Every call opens its own short-lived session so the store stays usable from
    stream completion callbacks, after the request handler has already returned.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], thread_id: str, user_id: str):
        self.session_factory = session_factory
        self.thread_id = thread_id
        self.user_id = user_id

    async def get_messages(self, limit: Optional[int] = None) -> List[Dict[str, str]]:
        """Ordered history as completion-API message dicts."""
        async with self.session_factory() as db:
            rows = await thread_messages(db, self.thread_id, self.user_id, limit=limit)
        return [{"role": r.role, "content": r.content} for r in rows]

    async def add_message(self, message: Dict[str, str], context: Optional[str] = None) -> None:
        async with self.session_factory() as db:
            await add_message(db, self.thread_id, self.user_id, message["role"], message["content"], context)
            await db.commit()
        logger.debug(f"[history] Stored {message['role']} message for thread {self.thread_id}")
