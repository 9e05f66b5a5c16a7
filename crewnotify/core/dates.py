"""Calendar-day helpers for notification copy. Dates travel as YYYY-MM-DD strings."""
from datetime import date, datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo


def parse_day(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def ordinal(n: int) -> str:
    """1 -> 1st, 2 -> 2nd, 11 -> 11th, 23 -> 23rd."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def formatted_date(day_str: str, today: date, short: bool = False) -> str:
    """
    'today' / 'tomorrow' relative to `today`, otherwise 'Friday, March 7th'
    (short: 'Mar 7th'). Unparseable input is returned as-is.
    """
    day = parse_day(day_str)
    if day is None:
        return day_str or ""
    if day == today:
        return "today"
    if day == today + timedelta(days=1):
        return "tomorrow"
    if short:
        return f"{day.strftime('%b')} {ordinal(day.day)}"
    return f"{day.strftime('%A, %B')} {ordinal(day.day)}"


def date_description(day_str: str, today: date) -> str:
    """Phrase used after an activity: 'today', 'tomorrow', 'on Friday' (within a week), else 'on 2025-03-07'."""
    day = parse_day(day_str)
    if day is None:
        return f"on {day_str}"
    diff = (day - today).days
    if diff == 0:
        return "today"
    if diff == 1:
        return "tomorrow"
    if 2 <= diff <= 6:
        return f"on {day.strftime('%A')}"
    return f"on {day_str}"


def event_date_range(start: str | None, end: str | None, today: date) -> str:
    """Single date when the event is one day long, else 'start – end'. Empty when either bound is missing."""
    if not start or not end:
        return ""
    start_str = formatted_date(start, today)
    if start == end:
        return start_str
    return f"{start_str} – {formatted_date(end, today)}"


def local_today(now: datetime, tz_name: str) -> date:
    return now.astimezone(ZoneInfo(tz_name)).date()


def to_epoch_millis(value: Any) -> int | None:
    """
    Timestamps arrive as datetimes (store clients), epoch milliseconds (JSON payloads)
    or ISO-8601 strings. Naive datetimes are taken as UTC. None when unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return int(dt.timestamp() * 1000)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return to_epoch_millis(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    if isinstance(value, dict) and "seconds" in value:
        # {"seconds": ..., "nanoseconds": ...} as serialized by the mobile SDK
        return int(value["seconds"]) * 1000 + int(value.get("nanoseconds") or 0) // 1_000_000
    return None
