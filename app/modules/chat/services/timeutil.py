from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional
from zoneinfo import ZoneInfo
import re

_FRACTION_RE = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def _six_digit_fraction(match: "re.Match[str]") -> str:
    return f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}"


def current_time(tz_name: str) -> datetime:
    return datetime.now(ZoneInfo(tz_name))


def format_local(dt: datetime) -> str:
    """Render like the browser's ja-JP locale string, e.g. 2024/5/3 9:05:07."""
    return f"{dt.year}/{dt.month}/{dt.day} {dt.hour}:{dt.minute:02d}:{dt.second:02d}"


def parse_datetime(value: str) -> Optional[datetime]:
    """Parse ISO-8601 (any fraction length, trailing 'Z') or RFC 2822 strings."""
    text = (value or "").strip()
    if not text:
        return None
    iso = _FRACTION_RE.sub(_six_digit_fraction, text, count=1)
    if iso.endswith("Z"):
        iso = iso[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError):
        return None


def to_local_display(value: Optional[str], tz_name: str) -> Optional[str]:
    """
    Convert a timestamp string to the local display format of tz_name.

    Naive timestamps are taken as UTC. Returns None for empty input and the
    original string when it cannot be parsed.
    """
    if not value:
        return None
    dt = parse_datetime(value)
    if dt is None:
        return value.strip() or None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return format_local(dt.astimezone(ZoneInfo(tz_name)))
