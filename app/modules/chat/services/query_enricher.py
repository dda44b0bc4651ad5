"""Time-aware rewriting of web search queries."""

from dataclasses import dataclass
from datetime import datetime
import re

# Messages that refer to a point in time: today/now/latest, explicit dates,
# yesterday, this week/month/year, recently.
DATE_PATTERNS = [
    re.compile(r"今日|本日|現在|最新"),
    re.compile(r"(\d{4}年)?(\d{1,2})月(\d{1,2})日"),
    re.compile(r"昨日|一昨日"),
    re.compile(r"今週|今月|今年"),
    re.compile(r"最近|直近"),
]

# Narrower subset asking for the newest information
IMMEDIACY_PATTERN = re.compile(r"最新|現在|今|本日")

FRESHNESS_DAY = "Day"
FRESHNESS_WEEK = "Week"


@dataclass(frozen=True)
class EnrichedQuery:
    query: str
    freshness: str


def has_temporal_reference(message: str) -> bool:
    return any(pattern.search(message) for pattern in DATE_PATTERNS)


def is_immediate(message: str) -> bool:
    return IMMEDIACY_PATTERN.search(message) is not None


def enrich_query(message: str, now: datetime) -> EnrichedQuery:
    """
    Bias a search query toward current information.

    Args:
        message: Raw user message
        now: Current time, already in the civil time zone of the users

    Returns:
        EnrichedQuery with the rewritten query and the freshness window
    """
    query = message
    if has_temporal_reference(message):
        query = f"{query} {now.year}年{now.month}月"

    immediate = is_immediate(message)
    if immediate:
        query = f"{query} after:{now.date().isoformat()}"

    return EnrichedQuery(query=query, freshness=FRESHNESS_DAY if immediate else FRESHNESS_WEEK)
