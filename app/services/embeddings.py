from typing import List
from openai import AsyncOpenAI
from core.config import settings


async def embed_text(client: AsyncOpenAI, text: str, model: str | None = None) -> List[float]:
    response = await client.embeddings.create(input=text, model=model or settings.EMBEDDING_MODEL)
    return response.data[0].embedding
