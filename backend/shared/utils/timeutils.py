"""UTC helpers for kickoff and submission timestamps."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware_utc(value: datetime) -> datetime:
    """
    Ensure datetime is timezone-aware in UTC.

    - If naive, assume it is UTC and attach tzinfo.
    - If aware, convert to UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_kickoff(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 kickoff value into an aware UTC datetime.

    Accepts datetime/date objects and strings with a trailing "Z".
    Returns None for missing or unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_aware_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    s = str(value).strip()
    if not s:
        return None
    try:
        parsed = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_aware_utc(parsed)


def to_iso(value: Any) -> Optional[str]:
    """Render datetime/date values as ISO strings; strings pass through unchanged."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_aware_utc(value).isoformat().replace("+00:00", "Z")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
