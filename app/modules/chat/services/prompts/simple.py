from textwrap import dedent
from typing import Dict, List

SIMPLE_SYSTEM_PROMPT_TMPL = dedent("""
あなたは {ai_name} です。ユーザーからの質問に対して日本語で丁寧に回答します。
- 明確かつ簡潔な質問をし、丁寧かつ専門的な回答を返します。
- 質問には正直かつ正確に答えます。
""").strip()


def build_simple_messages(ai_name: str, history: List[Dict[str, str]], question: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SIMPLE_SYSTEM_PROMPT_TMPL.format(ai_name=ai_name)},
        *history,
        {"role": "user", "content": question},
    ]
