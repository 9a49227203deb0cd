"""Database package for Mentor Desk."""

from .base import (
    Base,
    close_all,
    drop_databases,
    get_engine,
    get_session,
    get_session_maker,
    init_databases,
)

__all__ = [
    "Base",
    "close_all",
    "drop_databases",
    "get_engine",
    "get_session",
    "get_session_maker",
    "init_databases",
]
