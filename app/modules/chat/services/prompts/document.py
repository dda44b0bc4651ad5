"""Prompts for document (retrieval-augmented) chat."""

import re
from textwrap import dedent
from typing import Dict, List, Sequence

from app.modules.chat.schema.documents import CitationItem, RelevantDocument
from app.modules.chat.services.citations import is_citable, to_json

CONTEXT_SEPARATOR = "\n------\n"
_NEWLINES = re.compile(r"\r\n|\n|\r")

DOC_SYSTEM_PROMPT_TMPL = dedent("""
あなたは {ai_name}です。

回答の際は以下のガイドラインに従ってください：

1. 回答は常に詳細かつ構造化された形式で提供してください：
   - 重要なポイントは箇条書きで説明
   - 比較や対照が必要な場合は表形式を使用
   - 手順や過程は番号付きリストで説明
   - 専門用語は適切に解説

2. 回答の構成：
   - 概要説明（結論から先に述べる）
   - 詳細な説明（複数の観点から）
   - 具体例や参考情報
   - 注意点やリスク（該当する場合）

3. 文体と形式：
   - 丁寧な日本語で説明
   - 簡潔だが必要十分な情報を含める
   - 専門的な内容は可能な限り分かりやすく説明
   - 重要な点は太字や斜体を使用して強調

4. すべての情報源を必ず引用してください：
   - 参照したすべての文書をcitationに含める
   - 情報の出典を明確に示す
   - 不確かな情報は明示する
""").strip()

# Literal braces of the citation syntax are doubled for str.format
CONTEXT_PROMPT_TMPL = dedent("""
以下の文書から、質問に対する包括的な回答を作成してください。

回答の要件：
- 検索結果の関連情報をすべて含めて回答を作成してください
- 不明な点がある場合は、その旨を明確に伝えてください
- すべての参照文書を必ずcitationに含めてください
- 回答の最後にcitationを必ず含めてください
- citation形式: {{% citation items=[{{name:"filename",id:"file id"}}] /%}}
- citationの後に余分なテキストや句読点を追加しないでください

回答の構造：
1. 概要 / 結論
2. 詳細説明
   - 主要ポイント
   - 関連する重要情報
   - 具体例や事例
3. 追加の参考情報（該当する場合）
4. 注意点やリスク（該当する場合）

----------------
コンテキスト情報：
{context}
----------------
質問: {question}
""").strip()

CITATION_HINT_PREFIX = "参照すべき文書情報: "


def build_document_context(documents: Sequence[RelevantDocument]) -> str:
    """Context block for the model; documents without source or deptName are left out."""
    entries = []
    for doc in documents:
        if not is_citable(doc):
            continue
        content = _NEWLINES.sub("", doc.page_content)
        entries.append(f"{doc.source}\nfile name: {doc.dept_name}\nfile id: {doc.id}\n{content}")
    return CONTEXT_SEPARATOR.join(entries)


def build_citation_hint(items: Sequence[CitationItem]) -> str:
    return CITATION_HINT_PREFIX + to_json([item.model_dump() for item in items])


def build_document_messages(
    ai_name: str,
    history: List[Dict[str, str]],
    question: str,
    context: str,
    items: Sequence[CitationItem],
) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": DOC_SYSTEM_PROMPT_TMPL.format(ai_name=ai_name)},
        *history,
        {"role": "user", "content": CONTEXT_PROMPT_TMPL.format(context=context, question=question)},
        {"role": "assistant", "content": build_citation_hint(items)},
    ]
