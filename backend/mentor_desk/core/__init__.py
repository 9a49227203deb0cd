"""Core configuration and helpers for the Mentor Desk backend."""

from .config import Settings, get_settings
from .timeutil import days_since, parse_timestamp, utc_now, utc_now_iso

__all__ = [
    "Settings",
    "get_settings",
    "days_since",
    "parse_timestamp",
    "utc_now",
    "utc_now_iso",
]
