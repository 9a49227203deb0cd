"""Subject-keyed thread reconstruction.

Messages are stored as one flat, per-student list. The mentor dashboard
shows them as email-style threads, rebuilt here in a single pass:

1. Sort messages by timestamp (stable, so ties keep input order).
2. A student message opens a new thread when no thread is open or when its
   normalized subject differs from the open thread's subject.
3. An agent message joins the open thread, or opens an orphan thread.
4. Threads holding a draft come first, then most recent activity first.
"""

import re
from datetime import datetime
from typing import Iterable, List, Optional

from pydantic import BaseModel

SUBJECT_PREFIX = "Subject:"
MAX_SUBJECT_LENGTH = 60
TRUNCATED_SUBJECT_LENGTH = 57
NO_SUBJECT = "No Subject"
ORPHAN_SUBJECT = "Response"

_REPLY_PREFIX_RE = re.compile(r"^(re:\s*)+", re.IGNORECASE)


class ThreadMessage(BaseModel):
    """A message as seen by the thread builder."""

    id: int
    role: str  # "student" | "agent"
    content: str
    timestamp: datetime
    status: str = "sent"  # "sent" | "draft" | "approved"
    subject: Optional[str] = None


class Thread(BaseModel):
    """A subject-grouped run of messages."""

    id: int
    subject: str
    messages: List[ThreadMessage]
    last_message_at: datetime
    has_draft: bool = False
    draft_id: Optional[int] = None


def extract_subject(content: str) -> str:
    """Subject line of a message, or its (possibly truncated) first line."""
    first_line = content.split("\n", 1)[0].strip()
    if content.startswith(SUBJECT_PREFIX):
        return first_line[len(SUBJECT_PREFIX):].strip()
    if len(first_line) > MAX_SUBJECT_LENGTH:
        return first_line[:TRUNCATED_SUBJECT_LENGTH] + "..."
    return first_line


def extract_body(content: str) -> str:
    """Message text without a leading ``Subject:`` header block."""
    if content.startswith(SUBJECT_PREFIX):
        _, separator, body = content.partition("\n\n")
        if separator:
            return body
    return content


def normalize_subject(subject: str) -> str:
    """Strip any number of ``Re:`` prefixes, trim and lowercase."""
    return _REPLY_PREFIX_RE.sub("", subject.strip()).strip().lower()


def _subject_of(message: ThreadMessage) -> str:
    if message.subject is not None:
        return message.subject
    return extract_subject(message.content)


def _finish(thread: Thread) -> Thread:
    thread.last_message_at = thread.messages[-1].timestamp
    for message in thread.messages:
        if message.status == "draft":
            thread.has_draft = True
            thread.draft_id = message.id
            break
    return thread


def build_threads(messages: Iterable[ThreadMessage]) -> List[Thread]:
    """
    Group a flat message list into subject threads.

    Every input message lands in exactly one thread, and the result is
    deterministic for a given input.

    Args:
        messages: Messages in any order

    Returns:
        Threads, draft-bearing first, then by last activity descending
    """
    ordered = sorted(messages, key=lambda m: m.timestamp)

    threads: List[Thread] = []
    current: Optional[Thread] = None
    current_key: Optional[str] = None

    for message in ordered:
        subject = _subject_of(message)

        if message.role == "student":
            key = normalize_subject(subject)
            if current is None or key != current_key:
                current = Thread(
                    id=message.id,
                    subject=subject or NO_SUBJECT,
                    messages=[],
                    last_message_at=message.timestamp,
                )
                threads.append(current)
            # The thread is labelled with its latest student subject
            current.subject = subject or NO_SUBJECT
            current_key = key
            current.messages.append(message)
            continue

        if current is None:
            orphan_subject = subject or ORPHAN_SUBJECT
            current = Thread(
                id=message.id,
                subject=orphan_subject,
                messages=[],
                last_message_at=message.timestamp,
            )
            current_key = normalize_subject(orphan_subject)
            threads.append(current)
        current.messages.append(message)

    finished = [_finish(thread) for thread in threads]
    finished.sort(key=lambda t: t.last_message_at, reverse=True)
    finished.sort(key=lambda t: not t.has_draft)
    return finished
