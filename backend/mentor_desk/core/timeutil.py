"""Timestamp helpers.

All timestamps are stored as naive-UTC ISO-8601 strings, matching the
String(50) timestamp columns used by the models.
"""

from datetime import datetime, timezone
from typing import Optional, Union

Timestamp = Union[str, datetime, None]


def utc_now() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_now_iso() -> str:
    """Current time as a naive UTC ISO-8601 string."""
    return utc_now().isoformat()


def parse_timestamp(value: Timestamp) -> Optional[datetime]:
    """Parse a stored timestamp into a naive UTC datetime.

    Accepts ISO strings (with or without offset or trailing ``Z``) and
    datetimes. Returns None for empty or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def days_since(value: Timestamp, now: Optional[datetime] = None) -> Optional[int]:
    """Whole days elapsed since ``value`` (floored), or None if unknown."""
    start = parse_timestamp(value)
    if start is None:
        return None
    current = now or utc_now()
    return int((current - start).total_seconds() // 86400)
