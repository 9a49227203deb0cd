"""Message threading and draft review."""

from .drafts import (
    DRAFT_ACTIONS,
    DraftNotFound,
    InvalidDraftAction,
    apply_draft_action,
    preserve_subject_line,
    serialize_message,
    to_thread_message,
)
from .threads import (
    Thread,
    ThreadMessage,
    build_threads,
    extract_body,
    extract_subject,
    normalize_subject,
)

__all__ = [
    "DRAFT_ACTIONS",
    "DraftNotFound",
    "InvalidDraftAction",
    "apply_draft_action",
    "preserve_subject_line",
    "serialize_message",
    "to_thread_message",
    "Thread",
    "ThreadMessage",
    "build_threads",
    "extract_body",
    "extract_subject",
    "normalize_subject",
]
