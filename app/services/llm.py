from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional
import logging

from openai import AsyncOpenAI

from core.config import Settings, settings

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[str], Awaitable[None]]


def resolve_chat_model(chat_api_model: Optional[str], config: Settings = settings) -> str:
    """
    Map the client's model flag to a deployment name.

    CHAT_MODEL_OVERRIDE pins every request to one model (gpt-4o-mini by default);
    the flag is only honoured once the override is cleared.
    """
    if config.CHAT_MODEL_OVERRIDE:
        return config.CHAT_MODEL_OVERRIDE
    return config.GPT3_MODEL if chat_api_model == "GPT-3" else config.GPT4_MODEL


async def stream_chat_completion(
    client: AsyncOpenAI,
    messages: List[Dict[str, str]],
    model: str,
    *,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
):
    """Open a streaming chat completion. API errors are raised here, before any output is sent."""
    params: Dict[str, Any] = {"model": model, "messages": messages, "stream": True}
    if temperature is not None:
        params["temperature"] = temperature
    if max_tokens is not None:
        params["max_tokens"] = max_tokens
    logger.info(f"Chat completion: model={model} messages={len(messages)} max_tokens={max_tokens}")
    return await client.chat.completions.create(**params)


async def completion_text_stream(stream, on_completion: Optional[CompletionCallback] = None) -> AsyncIterator[str]:
    """
    Yield the text deltas of a streaming completion.

    on_completion receives the concatenated text once, after the last chunk.
    A failure mid-stream is logged and ends the stream; on_completion then gets
    the text forwarded so far. It is not called when the consumer stops early.
    """
    parts: List[str] = []
    try:
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                parts.append(delta)
                yield delta
    except Exception as e:
        # Headers are already sent; the client sees a truncated answer
        logger.error(f"Completion stream aborted after {len(parts)} chunks: {e}", exc_info=True)

    if on_completion is not None:
        await on_completion("".join(parts))
