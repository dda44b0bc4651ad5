"""Prompts for web-augmented chat."""

from textwrap import dedent
from typing import Dict, List, Sequence

from app.modules.chat.services.web_search.evidence import WebPage

SEARCH_SUMMARY_HEADING = "Web検索結果の概要:"
NO_SEARCH_RESULTS_NOTICE = "Web検索結果はありませんでした。"
EXCERPT_CHARS = 500

WEB_SYSTEM_PROMPT_TMPL = dedent("""
あなたは {ai_name} です。ユーザーからの質問に対して日本語で丁寧に回答します。以下の指示に従ってください：

1. 質問には会話の文脈を考慮しながら、正直かつ正確に答えてください。

2. Web検索結果がある場合：
   - 情報の鮮度を重視し、最新の情報を優先して提供してください。
   - 情報源の公開日時を確認し、古い情報は参考程度に扱ってください。
   - 時事的な内容の場合、必ず情報の日付を明記してください。

3. 「今日」「最近」などの相対的な時間表現がある場合：
   - システムから提供された現在の日本時間を基準として具体的な日時に置き換えて情報を提供してください。
   - 情報の時点を明確にしてください。

4. Web検索結果がある場合、回答の最後には必ず「### 参考文献」という見出しを付け、その後に参照元を以下のMarkdown形式で列挙してください：
   - [タイトルテキスト](URL) (公開日時: YYYY-MM-DD HH:MM JST)

5. 以下の点に注意してください：
   - 以前の会話内容と矛盾する情報を提供しない
   - HTMLタグは使用せず、必ずMarkdown記法を使用する
   - 情報の不確かさや制限事項がある場合は、その旨を明記する
   - 日時の表現は必ず日本時間（JST）で行う
""").strip()

REFERENCES_FORMAT = dedent("""
回答の最後には、以下の形式でMarkdown形式の参考文献リストを必ず含めてください:

### 参考文献
- [タイトル1](URL1) (公開日時: YYYY-MM-DD HH:MM JST)
- [タイトル2](URL2) (公開日時: YYYY-MM-DD HH:MM JST)
""").strip()


def format_history(history: Sequence[Dict[str, str]]) -> str:
    return "\n".join(f"{m['role']}: {m['content']}" for m in history)


def format_web_page(page: WebPage) -> str:
    lines = [
        f"タイトル: {page.title}",
        f"URL: [{page.url}]({page.url})",
    ]
    if page.publish_date:
        lines.append(f"公開日時: {page.publish_date}")
    lines.append(f"スニペット: {page.snippet}")
    if page.content:
        lines.extend(["", "詳細コンテンツ抜粋:", f"{page.content[:EXCERPT_CHARS]}..."])
    return "\n".join(lines)


def build_web_user_prompt(
    current_time: str,
    history: Sequence[Dict[str, str]],
    question: str,
    pages: Sequence[WebPage],
) -> str:
    if pages:
        evidence = SEARCH_SUMMARY_HEADING + "\n" + "\n\n".join(format_web_page(p) for p in pages)
    else:
        evidence = NO_SEARCH_RESULTS_NOTICE

    instructions = [
        f"1. 上記の会話の文脈{'と検索結果' if pages else ''}を踏まえて、最新の質問に対して包括的かつ情報豊富な回答を生成してください。",
        "2. 情報の鮮度が重要な質問の場合、各情報源の公開日時を考慮して、最新の情報を優先してください。",
        "3. 情報の時点を明確にするため、可能な限り日付情報を含めてください。",
        f"4. 「本日」「現在」などの表現を使用する場合は、具体的な日本時間（{current_time}）に基づいて回答してください。",
    ]

    sections = [
        f"現在の日本時間: {current_time}",
        f"以前の会話の文脈:\n{format_history(history)}",
        f"最新の問い合わせ: {question}",
        evidence,
        "指示:\n" + "\n".join(instructions),
    ]
    if pages:
        sections.append(REFERENCES_FORMAT)
    return "\n\n".join(sections)


def build_web_messages(
    ai_name: str,
    current_time: str,
    history: List[Dict[str, str]],
    question: str,
    pages: Sequence[WebPage],
) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": WEB_SYSTEM_PROMPT_TMPL.format(ai_name=ai_name)},
        *history,
        {"role": "user", "content": build_web_user_prompt(current_time, history, question, pages)},
    ]
