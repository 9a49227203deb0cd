"""Short-term memory: recent conversation history and statistics."""

from typing import Any, Dict, List, Optional

from ..core.config import get_settings
from ..db.base import get_session
from ..db.queries import get_conversation, get_messages

# Stored message role -> chat role
ROLE_MAP = {
    "student": "user",
    "agent": "assistant",
    "mentor": "assistant",
}


async def get_conversation_history(student_id: int, limit: Optional[int] = None) -> List[Dict[str, str]]:
    """
    Recent messages as chat turns, oldest first.

    Drafts and system messages never reach the model as history.

    Args:
        student_id: The student's ID
        limit: Maximum number of turns (defaults to SHORT_TERM_MESSAGE_LIMIT)

    Returns:
        List of {"role": "user" | "assistant", "content": str}
    """
    limit = limit or get_settings().SHORT_TERM_MESSAGE_LIMIT

    async with get_session() as session:
        conversation = await get_conversation(session, student_id)
        if conversation is None:
            return []
        messages = await get_messages(
            session,
            conversation.id,
            statuses=["sent", "approved"],
            roles=list(ROLE_MAP.keys()),
            descending=True,
            limit=limit,
        )

    return [
        {"role": ROLE_MAP[message.role], "content": message.content}
        for message in reversed(messages)
    ]


async def get_conversation_stats(student_id: int) -> Dict[str, Any]:
    """Message counts and the latest message timestamp for a student."""
    stats: Dict[str, Any] = {
        "total_messages": 0,
        "student_messages": 0,
        "agent_messages": 0,
        "pending_drafts": 0,
        "last_message_at": None,
    }

    async with get_session() as session:
        conversation = await get_conversation(session, student_id)
        if conversation is None:
            return stats
        messages = await get_messages(session, conversation.id)

    stats["total_messages"] = len(messages)
    stats["student_messages"] = sum(1 for m in messages if m.role == "student")
    stats["agent_messages"] = sum(1 for m in messages if m.role in ("agent", "mentor") and m.status != "draft")
    stats["pending_drafts"] = sum(1 for m in messages if m.status == "draft")
    if messages:
        stats["last_message_at"] = messages[-1].created_at
    return stats
