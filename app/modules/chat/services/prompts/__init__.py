# Prompt builders for the three chat variants.

from .simple import build_simple_messages, SIMPLE_SYSTEM_PROMPT_TMPL
from .web import build_web_messages, build_web_user_prompt, NO_SEARCH_RESULTS_NOTICE, SEARCH_SUMMARY_HEADING
from .document import build_document_context, build_document_messages, build_citation_hint

__all__ = [
    "build_simple_messages",
    "SIMPLE_SYSTEM_PROMPT_TMPL",
    "build_web_messages",
    "build_web_user_prompt",
    "NO_SEARCH_RESULTS_NOTICE",
    "SEARCH_SUMMARY_HEADING",
    "build_document_context",
    "build_document_messages",
    "build_citation_hint",
]
