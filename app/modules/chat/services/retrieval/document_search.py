"""Department-scoped similarity search over indexed documents (Qdrant)."""

from typing import Awaitable, Callable, List
import logging

from qdrant_client import QdrantClient
from qdrant_client.models import FieldCondition, Filter, MatchValue
from starlette.concurrency import run_in_threadpool

from app.modules.chat.schema.documents import RelevantDocument
from core.utils.perf import profile_stage

logger = logging.getLogger(__name__)

ALL_DEPARTMENTS = "all"
DOCUMENT_CHAT_TYPE = "doc"

EmbedFn = Callable[[str], Awaitable[List[float]]]


def build_document_filter(chat_doc: str) -> Filter:
    """Only document-typed points; narrowed to one department unless the scope is 'all'."""
    must = [FieldCondition(key="chatType", match=MatchValue(value=DOCUMENT_CHAT_TYPE))]
    if chat_doc != ALL_DEPARTMENTS:
        must.append(FieldCondition(key="deptName", match=MatchValue(value=chat_doc)))
    return Filter(must=must)


def _to_document(point) -> RelevantDocument:
    payload = point.payload or {}
    return RelevantDocument(
        page_content=payload.get("pageContent") or "",
        source=payload.get("source") or None,
        dept_name=payload.get("deptName") or None,
        id=str(payload.get("id") or point.id),
        score=getattr(point, "score", None),
    )


class DocumentSearch:
    def __init__(self, client: QdrantClient, embed: EmbedFn, collection: str, limit: int = 15):
        self.client = client
        self.embed = embed
        self.collection = collection
        self.limit = limit

    @profile_stage("document_search")
    async def find_relevant_documents(self, query: str, chat_doc: str) -> List[RelevantDocument]:
        """Return the raw similarity hits; callers validate source/deptName themselves."""
        vector = await self.embed(query)
        response = await run_in_threadpool(
            self.client.query_points,
            collection_name=self.collection,
            query=vector,
            query_filter=build_document_filter(chat_doc),
            limit=self.limit,
            with_payload=True,
        )
        documents = [_to_document(p) for p in response.points]
        logger.info(f"Retrieved {len(documents)} documents for scope={chat_doc!r}")
        return documents
