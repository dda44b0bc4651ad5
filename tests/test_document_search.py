from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from qdrant_client.models import FieldCondition, MatchValue

from app.modules.chat.services.retrieval.document_search import DocumentSearch, build_document_filter


def _conditions(flt):
    return {c.key: c.match.value for c in flt.must if isinstance(c, FieldCondition)}


def test_all_scope_filters_on_chat_type_only():
    flt = build_document_filter("all")
    assert _conditions(flt) == {"chatType": "doc"}


def test_department_scope_adds_dept_clause():
    flt = build_document_filter("finance")
    assert _conditions(flt) == {"chatType": "doc", "deptName": "finance"}
    assert all(isinstance(c.match, MatchValue) for c in flt.must)


@pytest.mark.asyncio
async def test_find_relevant_documents_maps_payloads():
    points = [
        SimpleNamespace(id=1, score=0.9, payload={
            "pageContent": "Budget 2024", "source": "budget.pdf", "deptName": "finance", "id": "doc-1",
        }),
        SimpleNamespace(id=2, score=0.5, payload={"pageContent": "orphan chunk"}),
    ]
    client = MagicMock()
    client.query_points.return_value = SimpleNamespace(points=points)
    embed = AsyncMock(return_value=[0.1, 0.2])

    search = DocumentSearch(client, embed, "chat_documents", limit=15)
    docs = await search.find_relevant_documents("予算は？", "finance")

    embed.assert_awaited_once_with("予算は？")
    kwargs = client.query_points.call_args.kwargs
    assert kwargs["collection_name"] == "chat_documents"
    assert kwargs["query"] == [0.1, 0.2]
    assert kwargs["limit"] == 15
    assert _conditions(kwargs["query_filter"]) == {"chatType": "doc", "deptName": "finance"}

    assert docs[0].source == "budget.pdf"
    assert docs[0].dept_name == "finance"
    assert docs[0].id == "doc-1"
    assert docs[1].source is None
    assert docs[1].dept_name is None
    assert docs[1].id == "2"
