from typing import AsyncIterable, AsyncIterator, List, Optional
import logging

from app.services.llm import CompletionCallback
from app.services.memory.history import ChatHistoryStore

logger = logging.getLogger(__name__)


async def record_user_message(history: ChatHistoryStore, content: str) -> None:
    await history.add_message({"role": "user", "content": content})


def assistant_recorder(history: ChatHistoryStore, context: Optional[str] = None) -> CompletionCallback:
    """Completion callback storing the answer (and, for document chat, the retrieval context)."""
    async def on_completion(completion: str) -> None:
        try:
            await history.add_message({"role": "assistant", "content": completion}, context)
        except Exception as e:
            # Runs after the last chunk was sent; nothing left to report the failure to
            logger.error(f"Failed to store assistant message for thread {history.thread_id}: {e}", exc_info=True)
    return on_completion


async def on_stream_end(source: AsyncIterable[str], callback: CompletionCallback) -> AsyncIterator[str]:
    """Pass text through and hand the full forwarded text to callback once the source is exhausted."""
    parts: List[str] = []
    async for text in source:
        parts.append(text)
        yield text
    await callback("".join(parts))
