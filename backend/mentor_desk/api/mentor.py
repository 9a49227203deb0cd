"""Mentor API endpoints: direct messages, threads and research roadmaps."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from mentor_desk.agents.mentor.tools import generate_roadmap_for_student
from mentor_desk.agents.mentor.tools.roadmap import DEFAULT_DURATION_WEEKS
from mentor_desk.core.timeutil import utc_now_iso
from mentor_desk.db.base import get_session
from mentor_desk.db.queries import (
    create_message,
    get_conversation,
    get_latest_roadmap,
    get_messages,
    get_or_create_conversation,
    get_student_with_user,
)
from mentor_desk.messaging import build_threads, to_thread_message

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mentor", tags=["Mentor"])


# ==============================================================================
# Pydantic Models
# ==============================================================================

class SendMessageRequest(BaseModel):
    """A message written directly by the mentor."""
    student_id: Optional[int] = None
    content: Optional[str] = None


class AcceptRoadmapRequest(BaseModel):
    """Mark the student's latest roadmap as accepted."""
    student_id: Optional[int] = None


class GenerateRoadmapRequest(BaseModel):
    """Generate a research roadmap for a student."""
    student_id: Optional[int] = None
    topic: Optional[str] = None
    duration_weeks: int = DEFAULT_DURATION_WEEKS
    custom_requirements: Optional[str] = None


# ==============================================================================
# Messages and Threads
# ==============================================================================

@router.post("/send-message")
async def send_message(request: SendMessageRequest) -> Dict[str, Any]:
    """Deliver a mentor-written message without the draft step."""
    if request.student_id is None or not (request.content or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: student_id, content",
        )

    async with get_session() as session:
        student = await get_student_with_user(session, request.student_id)
        if student is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

        conversation = await get_or_create_conversation(session, request.student_id)
        # Mentor messages appear to the student as agent replies
        message = await create_message(session, conversation.id, "agent", request.content, status="approved")

    logger.info(f"Mentor sent message {message.id} to student {request.student_id}")
    return {
        "success": True,
        "message": "Message sent successfully",
        "message_id": message.id,
    }


@router.get("/threads")
async def get_threads(student_id: int = Query(...)) -> Dict[str, Any]:
    """The student's conversation grouped into subject threads."""
    async with get_session() as session:
        student = await get_student_with_user(session, student_id)
        if student is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

        conversation = await get_conversation(session, student_id)
        messages = []
        if conversation is not None:
            messages = await get_messages(session, conversation.id, roles=["student", "agent", "mentor"])

    threads = build_threads(to_thread_message(message) for message in messages)
    return {
        "success": True,
        "data": {
            "count": len(threads),
            "threads": [thread.model_dump(mode="json") for thread in threads],
        },
    }


# ==============================================================================
# Roadmaps
# ==============================================================================

@router.post("/accept-roadmap")
async def accept_roadmap(request: AcceptRoadmapRequest) -> Dict[str, Any]:
    """Mark the latest roadmap as accepted so it enters the agent's context."""
    if request.student_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required field: student_id",
        )

    async with get_session() as session:
        roadmap = await get_latest_roadmap(session, request.student_id)
        if roadmap is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No roadmap found for this student. Generate a roadmap first.",
            )

        roadmap.accepted = True
        roadmap.updated_at = utc_now_iso()
        await session.commit()

        roadmap_id = roadmap.id
        topic = roadmap.topic

    logger.info(f"Roadmap {roadmap_id} accepted for student {request.student_id}")
    return {
        "success": True,
        "message": f'Roadmap for "{topic}" has been marked as accepted. It will now be included in the AI context.',
        "roadmap_id": roadmap_id,
        "topic": topic,
    }


@router.post("/generate-roadmap")
async def generate_roadmap(request: GenerateRoadmapRequest) -> Dict[str, Any]:
    """Generate and store a research roadmap on the mentor's behalf."""
    if request.student_id is None or not (request.topic or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: student_id, topic",
        )

    async with get_session() as session:
        student = await get_student_with_user(session, request.student_id)
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

    result = await generate_roadmap_for_student(
        request.student_id,
        request.topic,
        duration_weeks=request.duration_weeks,
        custom_requirements=request.custom_requirements,
    )
    if not result["success"]:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=result.get("error") or "Failed to generate roadmap",
        )

    return {"success": True, "data": result["data"]}
