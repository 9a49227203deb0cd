"""Draft review API endpoints for the mentor dashboard."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mentor_desk.db.base import get_session
from mentor_desk.db.models import Conversation, Message, Student
from mentor_desk.db.queries import get_conversation, get_messages, get_student_with_user
from mentor_desk.messaging import DraftNotFound, InvalidDraftAction, apply_draft_action, serialize_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/drafts", tags=["Drafts"])


class DraftActionRequest(BaseModel):
    """A mentor review action on one draft."""
    action: Optional[str] = None
    draft_id: Optional[int] = None
    content: Optional[str] = None


async def _preceding_student_message(session: AsyncSession, draft: Message) -> Optional[Message]:
    """The student message that triggered a draft."""
    result = await session.execute(
        select(Message)
        .where(
            Message.conversation_id == draft.conversation_id,
            Message.role == "student",
            Message.id < draft.id,
        )
        .order_by(Message.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


@router.get("")
async def list_drafts(student_id: int = Query(...)) -> Dict[str, Any]:
    """Pending drafts for one student, newest first."""
    async with get_session() as session:
        student = await get_student_with_user(session, student_id)
        if student is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

        conversation = await get_conversation(session, student_id)
        drafts: List[Message] = []
        if conversation is not None:
            drafts = await get_messages(
                session, conversation.id, statuses=["draft"], roles=["agent"], descending=True
            )

    return {
        "success": True,
        "data": {
            "count": len(drafts),
            "drafts": [serialize_message(draft) for draft in drafts],
        },
    }


@router.post("")
async def review_draft(request: DraftActionRequest) -> Dict[str, Any]:
    """Approve, reject, edit or update a draft."""
    if not request.action or request.draft_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: action, draft_id",
        )

    async with get_session() as session:
        try:
            return await apply_draft_action(session, request.action, request.draft_id, request.content)
        except InvalidDraftAction as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except DraftNotFound as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/all")
async def list_all_drafts() -> Dict[str, Any]:
    """Every pending draft across students, with the message that prompted it."""
    async with get_session() as session:
        result = await session.execute(
            select(Message, Student)
            .options(selectinload(Student.user))
            .join(Conversation, Message.conversation_id == Conversation.id)
            .join(Student, Conversation.student_id == Student.id)
            .where(Message.role == "agent", Message.status == "draft")
            .order_by(Message.created_at.desc(), Message.id.desc())
        )
        rows = result.all()

        drafts = []
        for draft, student in rows:
            original = await _preceding_student_message(session, draft)
            drafts.append({
                "id": draft.id,
                "student_id": student.id,
                "student_name": student.user.name if student.user else "Unknown Student",
                "student_email": student.user.email if student.user else "",
                "original_message": original.content if original else "No message",
                "original_message_at": original.created_at if original else draft.created_at,
                "ai_response": draft.content,
                "tool_calls": draft.tool_calls,
                "created_at": draft.created_at,
            })

    return {
        "success": True,
        "data": {
            "count": len(drafts),
            "drafts": drafts,
        },
    }
