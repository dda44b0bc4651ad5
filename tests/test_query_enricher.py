from datetime import datetime
from zoneinfo import ZoneInfo

from app.modules.chat.services.query_enricher import (
    enrich_query,
    has_temporal_reference,
    is_immediate,
)

NOW = datetime(2024, 5, 3, 9, 0, 0, tzinfo=ZoneInfo("Asia/Tokyo"))


def test_plain_question_is_unchanged_with_week_freshness():
    enriched = enrich_query("Pythonのデコレータとは", NOW)
    assert enriched.query == "Pythonのデコレータとは"
    assert enriched.freshness == "Week"


def test_past_reference_gets_month_suffix_only():
    enriched = enrich_query("昨日のニュース", NOW)
    assert enriched.query == "昨日のニュース 2024年5月"
    assert enriched.freshness == "Week"


def test_immediate_question_gets_month_and_after_date():
    enriched = enrich_query("今日の天気", NOW)
    assert enriched.query == "今日の天気 2024年5月 after:2024-05-03"
    assert enriched.freshness == "Day"


def test_explicit_date_counts_as_temporal():
    assert has_temporal_reference("5月3日の株価")
    assert has_temporal_reference("2024年12月1日の予定")
    assert not is_immediate("5月3日の株価")


def test_recent_is_temporal_but_not_immediate():
    assert has_temporal_reference("最近のAI動向")
    assert not is_immediate("最近のAI動向")
    assert enrich_query("最近のAI動向", NOW).freshness == "Week"


def test_latest_is_both():
    enriched = enrich_query("最新のiPhone", NOW)
    assert enriched.query.endswith(" 2024年5月 after:2024-05-03")
    assert enriched.freshness == "Day"
