"""Mentor review actions on agent drafts."""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import Message
from ..db.queries import get_message
from .threads import SUBJECT_PREFIX, ThreadMessage

logger = logging.getLogger(__name__)

DRAFT_ACTIONS = ("approve", "reject", "edit", "update")


class DraftNotFound(Exception):
    """No draft exists with the given id."""


class InvalidDraftAction(Exception):
    """The requested review action is not supported."""


def serialize_message(message: Message) -> Dict[str, Any]:
    """Plain-dict view of a stored message."""
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "role": message.role,
        "content": message.content,
        "status": message.status,
        "tool_calls": message.tool_calls,
        "created_at": message.created_at,
    }


def to_thread_message(message: Message) -> ThreadMessage:
    """Adapt a stored message for the thread builder (mentor counts as agent)."""
    return ThreadMessage(
        id=message.id,
        role="student" if message.role == "student" else "agent",
        content=message.content,
        timestamp=message.created_at,
        status=message.status,
    )


def preserve_subject_line(original: str, edited: str) -> str:
    """Keep the original ``Subject:`` header when an edit dropped it."""
    if not original.startswith(SUBJECT_PREFIX) or edited.startswith(SUBJECT_PREFIX):
        return edited
    subject_line = original.split("\n", 1)[0]
    return f"{subject_line}\n\n{edited}"


async def apply_draft_action(
    session: AsyncSession,
    action: str,
    draft_id: int,
    content: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Apply a mentor review action to a draft.

    Args:
        session: Open database session
        action: "approve" | "reject" | "edit" | "update"
        draft_id: ID of the draft message
        content: Replacement text for "edit" and "update"

    Returns:
        Result payload describing the change

    Raises:
        InvalidDraftAction: Unknown action, or missing content for edit/update
        DraftNotFound: No draft with that id
    """
    if action not in DRAFT_ACTIONS:
        raise InvalidDraftAction("Invalid action")
    if action in ("edit", "update") and not content:
        raise InvalidDraftAction(f"Content is required for action: {action}")

    draft = await get_message(session, draft_id)
    if draft is None or draft.status != "draft":
        raise DraftNotFound(f"Draft {draft_id} not found")

    if action == "reject":
        await session.delete(draft)
        await session.commit()
        logger.info(f"Rejected draft {draft_id}")
        return {"success": True, "action": action, "draft_id": draft_id, "message": "Draft rejected"}

    if action == "approve":
        draft.status = "approved"
    elif action == "edit":
        draft.content = preserve_subject_line(draft.content, content)
        draft.status = "approved"
    else:
        draft.content = content

    await session.commit()
    await session.refresh(draft)
    logger.info(f"Applied '{action}' to draft {draft_id}")

    return {
        "success": True,
        "action": action,
        "draft_id": draft_id,
        "draft": serialize_message(draft),
    }
