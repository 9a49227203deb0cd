"""Student-facing message history."""

from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Query, status

from mentor_desk.db.base import get_session
from mentor_desk.db.queries import get_conversation, get_messages, get_student_with_user
from mentor_desk.messaging import serialize_message

router = APIRouter(prefix="/messages", tags=["Messages"])

# Drafts stay hidden until a mentor approves them
VISIBLE_STATUSES = ("sent", "approved")


@router.get("")
async def list_messages(student_id: int = Query(...)) -> Dict[str, Any]:
    """Messages the student can see, newest first."""
    async with get_session() as session:
        student = await get_student_with_user(session, student_id)
        if student is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

        conversation = await get_conversation(session, student_id)
        if conversation is None:
            return {"success": True, "data": {"conversation_id": None, "count": 0, "messages": []}}

        messages = await get_messages(session, conversation.id, statuses=VISIBLE_STATUSES, descending=True)

    return {
        "success": True,
        "data": {
            "conversation_id": conversation.id,
            "count": len(messages),
            "messages": [serialize_message(message) for message in messages],
        },
    }
