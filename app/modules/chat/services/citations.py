"""
Citation candidates and the streaming citation-marker rewriter.

The model is asked to close its answer with a marker such as

    {% citation items=[{name:"report.pdf",id:"42"}] /%}

but it cannot be trusted to reproduce the item list exactly, so the rewriter
replaces every marker's payload with the list built from the retrieval hits.
Text outside markers is forwarded as soon as it is known not to start one.
"""

import codecs
import enum
import json
import logging
import re
from typing import AsyncIterable, AsyncIterator, Iterable, List, Optional, Union

from app.modules.chat.schema.documents import CitationItem, RelevantDocument

logger = logging.getLogger(__name__)

OPEN_TOKEN = re.compile(r"\{%\s*citation")
CLOSE_TOKEN = "/%}"
# A "{%..." buffer tail that may still grow into OPEN_TOKEN with the next chunk.
# A lone "{" is never held.
_PARTIAL_OPEN = re.compile(r"\{%\s*(?:c(?:i(?:t(?:a(?:t(?:i(?:o(?:n)?)?)?)?)?)?)?)?")

UNKNOWN_DOCUMENT_NAME = "Unknown Document"
PLACEHOLDER_ITEM = {"name": "Document Not Found", "id": "unknown"}


def is_citable(doc: RelevantDocument) -> bool:
    return bool(doc.source) and bool(doc.dept_name)


def build_citation_items(documents: Iterable[RelevantDocument]) -> List[CitationItem]:
    """Citation candidates from retrieval hits; hits without source or deptName are dropped."""
    items: List[CitationItem] = []
    for doc in documents:
        if not is_citable(doc):
            logger.error(f"Missing required fields: source={doc.source!r} deptName={doc.dept_name!r} id={doc.id}")
            continue
        items.append(CitationItem(name=doc.dept_name, id=doc.id, source=doc.source))
    if not items:
        logger.error("No valid documents with both source and deptName found")
    logger.debug(f"Citation data prepared: {[i.model_dump() for i in items]}")
    return items


def citation_payload(items: Iterable[CitationItem]) -> List[dict]:
    payload = [{"name": item.name or UNKNOWN_DOCUMENT_NAME, "id": item.id} for item in items]
    if not payload:
        logger.error("No valid citation data available")
        payload.append(dict(PLACEHOLDER_ITEM))
    return payload


def to_json(value) -> str:
    """Compact JSON with non-ASCII kept as-is."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def render_citation_marker(items: Iterable[CitationItem]) -> str:
    return "{% citation items=" + to_json(citation_payload(items)) + " /%}"


class RewriterState(enum.Enum):
    PASSTHROUGH = "passthrough"
    AWAITING_CLOSE = "awaiting_close"


class CitationStreamRewriter:
    """
    Two-state transform over the completion text stream.

    PASSTHROUGH: the buffer is forwarded unless it contains an opening token
    (or ends in something that may become one).
    AWAITING_CLOSE: a marker is open; nothing is forwarded, not even the text
    before the marker, until the closing token arrives.
    """

    def __init__(self, items: Iterable[CitationItem]):
        self.marker = render_citation_marker(items)
        self.state = RewriterState.PASSTHROUGH
        self._buffer = ""
        self._marker_start = 0
        self._close_from = 0
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def _decode(self, chunk: Union[str, bytes]) -> str:
        if isinstance(chunk, (bytes, bytearray)):
            return self._decoder.decode(bytes(chunk))
        return chunk

    def feed(self, chunk: Union[str, bytes]) -> str:
        """Consume one chunk and return the text that can be forwarded now (may be empty)."""
        self._buffer += self._decode(chunk)
        out: List[str] = []

        while True:
            if self.state is RewriterState.PASSTHROUGH:
                match = OPEN_TOKEN.search(self._buffer)
                if match is None:
                    hold = self._partial_open_start()
                    if hold is None:
                        out.append(self._buffer)
                        self._buffer = ""
                    else:
                        out.append(self._buffer[:hold])
                        self._buffer = self._buffer[hold:]
                    break
                self.state = RewriterState.AWAITING_CLOSE
                self._marker_start = match.start()
                self._close_from = match.end()

            end = self._buffer.find(CLOSE_TOKEN, self._close_from)
            if end == -1:
                break
            out.append(self._buffer[:self._marker_start])
            out.append(self.marker)
            self._buffer = self._buffer[end + len(CLOSE_TOKEN):]
            self.state = RewriterState.PASSTHROUGH

        return "".join(out)

    def flush(self) -> str:
        """End of stream: release whatever is still withheld, unchanged."""
        rest = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        self.state = RewriterState.PASSTHROUGH
        return rest

    def _partial_open_start(self) -> Optional[int]:
        idx = self._buffer.rfind("{%")
        if idx == -1:
            return None
        if _PARTIAL_OPEN.fullmatch(self._buffer, idx) is None:
            return None
        return idx

    async def rewrite_stream(self, source: AsyncIterable[Union[str, bytes]]) -> AsyncIterator[str]:
        async for chunk in source:
            text = self.feed(chunk)
            if text:
                yield text
        rest = self.flush()
        if rest:
            yield rest
