"""Engagement API endpoints: inactivity tracking and follow-up messages."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, HTTPException, Query, status
from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel

from mentor_desk.agents.base import get_llm, message_text, truncate_text
from mentor_desk.core.config import get_settings
from mentor_desk.core.timeutil import days_since, parse_timestamp
from mentor_desk.db.base import get_session
from mentor_desk.db.queries import (
    create_message,
    get_conversation,
    get_last_student_message_at,
    get_messages,
    get_or_create_conversation,
    get_student_with_user,
    list_students_with_users,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/engagement", tags=["Engagement"])

FOLLOWUP_CONTEXT_MESSAGES = 5
FOLLOWUP_SNIPPET_LENGTH = 200

FOLLOWUP_PROMPT = """You are the lead mentor of a Scientific Machine Learning research mentorship program.

A student has been inactive for a while and you need to send them a warm, encouraging follow-up message.

IMPORTANT GUIDELINES:
1. Be warm and personal - use their first name
2. Don't make them feel guilty about the inactivity
3. Express genuine interest in their progress
4. Offer specific help based on their phase
5. Keep it concise (2-3 short paragraphs max)
6. Sound like a mentor, not a chatbot
7. End with an open question to encourage a response

DO NOT:
- Use excessive enthusiasm ("Amazing!", "Fantastic!")
- Sound like a corporate email
- Be preachy or lecture them
- Use emojis

TONE: Warm, supportive, direct, mentor-like"""

# (minimum days inactive, urgency, suggested action), most urgent first
URGENCY_LEVELS: List[Tuple[int, str, str]] = [
    (14, "critical", "Urgent re-engagement needed. Consider a personalized message and a direct check-in."),
    (7, "high", "Send an encouraging follow-up."),
    (3, "medium", "Gentle check-in on progress."),
]


# ==============================================================================
# Pydantic Models
# ==============================================================================

class GenerateFollowupRequest(BaseModel):
    """Draft a follow-up for an inactive student."""
    student_id: Optional[int] = None
    days_since_last_message: int = 0


class SendFollowupRequest(BaseModel):
    """Send a (possibly edited) follow-up."""
    student_id: Optional[int] = None
    message: Optional[str] = None


# ==============================================================================
# Helpers
# ==============================================================================

def classify_urgency(days_inactive: int) -> Tuple[str, str]:
    """Urgency level and suggested mentor action for a period of inactivity."""
    for threshold, urgency, action in URGENCY_LEVELS:
        if days_inactive >= threshold:
            return urgency, action
    return "low", "Student is active. No action needed."


def _format_date(value: Optional[str]) -> str:
    parsed = parse_timestamp(value)
    if parsed is None:
        return "Never"
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


async def get_students_with_last_activity() -> List[Dict[str, Any]]:
    """
    Every student with their last own message, most inactive first.

    Students who never wrote are measured from their enrollment date.
    """
    async with get_session() as session:
        students = await list_students_with_users(session)
        activity = []
        for student in students:
            last_message_at = await get_last_student_message_at(session, student.id)
            days = days_since(last_message_at or student.enrollment_date) or 0
            activity.append({
                "student_id": student.id,
                "student_name": student.user.name if student.user else "Unknown",
                "student_email": student.user.email if student.user else "",
                "current_phase": student.current_phase,
                "last_student_message_at": last_message_at,
                "days_since_last_message": days,
            })

    activity.sort(key=lambda s: s["days_since_last_message"], reverse=True)
    return activity


def _phase_description(phase: str, research_topic: Optional[str]) -> str:
    if phase == "phase1":
        return (
            "In Phase I, students watch the video curriculum on scientific machine learning "
            "foundations, neural ODEs, physics-informed networks and neural operators."
        )
    topic = f" Their topic is: {research_topic}" if research_topic else " They have not selected a topic yet."
    return f"In Phase II, students work on a research project.{topic}"


# ==============================================================================
# Endpoints
# ==============================================================================

@router.get("/inactive-students")
async def inactive_students(
    min_days: int = Query(3, ge=0),
    show_all: bool = Query(False),
) -> Dict[str, Any]:
    """Students ranked by inactivity, with urgency and a suggested action."""
    students = await get_students_with_last_activity()
    if not show_all:
        students = [s for s in students if s["days_since_last_message"] >= min_days]

    for student in students:
        urgency, action = classify_urgency(student["days_since_last_message"])
        student["urgency"] = urgency
        student["suggested_action"] = action
        student["last_message_at_formatted"] = _format_date(student["last_student_message_at"])

    summary = {"total": len(students)}
    for level in ("critical", "high", "medium", "low"):
        summary[level] = sum(1 for s in students if s["urgency"] == level)

    return {
        "success": True,
        "data": {
            "students": students,
            "summary": summary,
        },
    }


@router.post("/generate-followup")
async def generate_followup(request: GenerateFollowupRequest) -> Dict[str, Any]:
    """Write a personalized follow-up from the last few messages."""
    if request.student_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Student ID is required",
        )

    async with get_session() as session:
        student = await get_student_with_user(session, request.student_id)
        if student is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

        conversation = await get_conversation(session, request.student_id)
        recent = []
        if conversation is not None:
            recent = await get_messages(
                session, conversation.id, descending=True, limit=FOLLOWUP_CONTEXT_MESSAGES
            )

    full_name = student.user.name if student.user else "Student"
    first_name = full_name.split(" ")[0]
    phase = student.current_phase

    conversation_context = ""
    if recent:
        lines = [
            f"{first_name if m.role == 'student' else 'Mentor'}: {truncate_text(m.content, FOLLOWUP_SNIPPET_LENGTH)}"
            for m in reversed(recent)
        ]
        conversation_context = "\n\nRecent conversation history:\n" + "\n".join(lines)

    phase_name = "Phase I (watching video lectures)" if phase == "phase1" else "Phase II (research project)"
    user_prompt = (
        f"Write a follow-up message to {first_name} who is in {phase_name}.\n\n"
        f"They have been inactive for {request.days_since_last_message} days.\n\n"
        f"{_phase_description(phase, student.research_topic)}"
        f"{conversation_context}\n\n"
        "Write the follow-up message now:"
    )

    llm = get_llm(temperature=0.7, max_tokens=get_settings().FOLLOWUP_LLM_MAX_TOKENS)
    try:
        response = await llm.ainvoke([
            SystemMessage(content=FOLLOWUP_PROMPT),
            HumanMessage(content=user_prompt),
        ])
    except Exception as e:
        logger.error(f"Follow-up generation failed for student {request.student_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate follow-up message",
        )

    return {
        "success": True,
        "data": {
            "student_id": request.student_id,
            "student_name": full_name,
            "student_email": student.user.email if student.user else "",
            "phase": phase,
            "days_since_last_message": request.days_since_last_message,
            "generated_message": message_text(response).strip(),
        },
    }


@router.post("/send-followup")
async def send_followup(request: SendFollowupRequest) -> Dict[str, Any]:
    """Deliver a follow-up to the student immediately."""
    if request.student_id is None or not (request.message or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Student ID and message are required",
        )

    async with get_session() as session:
        student = await get_student_with_user(session, request.student_id)
        if student is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

        conversation = await get_or_create_conversation(session, request.student_id)
        message = await create_message(session, conversation.id, "agent", request.message, status="sent")

    name = student.user.name if student.user else "Student"
    logger.info(f"Follow-up message {message.id} sent to student {request.student_id}")
    return {
        "success": True,
        "data": {
            "student_id": request.student_id,
            "student_name": name,
            "message_id": message.id,
            "message": f"Follow-up message sent to {name}",
        },
    }
