"""Draft generation pipeline.

Turns a student's chat message into a pending agent draft:
load the student, skip conversation endings, assemble prompt and memory
context, run the tool loop, store both messages and fold the exchange
into long-term memory.
"""

import logging
from typing import Any, Dict, Optional

from mentor_desk.core.timeutil import utc_now_iso
from mentor_desk.db.base import get_session
from mentor_desk.db.queries import (
    create_message,
    get_last_student_message_at,
    get_latest_roadmap,
    get_or_create_conversation,
    get_student_with_user,
    roadmap_is_accepted,
)
from mentor_desk.memory import (
    StudentProfile,
    format_profile_for_context,
    get_conversation_history,
    get_recent_daily_notes,
    get_student_profile,
    update_memory_from_conversation,
)

from .conversation import is_conversation_ending
from .graph import run_tool_loop
from .phase1 import build_phase1_prompt
from .phase2 import build_phase2_prompt
from .prompts import StudentContext, build_system_prompt
from .tools import create_registry_for_phase

logger = logging.getLogger(__name__)

RECENT_NOTES_DAYS = 7
RECENT_NOTES_SHOWN = 5


class StudentNotFound(Exception):
    """No student exists with the given id."""


def build_phase_prompt(profile: StudentProfile, last_message_at: Optional[str] = None) -> str:
    """Phase-specific guidance for the student's current phase."""
    if profile.current_phase == "phase2":
        return build_phase2_prompt(profile)
    return build_phase1_prompt(profile, last_message_at)


async def build_memory_context(student_id: int, profile: Optional[StudentProfile] = None) -> str:
    """
    Profile text plus the most recent daily notes.

    Failures are logged and yield whatever was built so far.
    """
    memory_context = ""
    try:
        profile = profile or await get_student_profile(student_id)
        if profile is not None:
            memory_context = format_profile_for_context(profile)

        notes = await get_recent_daily_notes(student_id, RECENT_NOTES_DAYS)
        if notes:
            lines = [f"- {note.get('date')}: {note.get('note')}" for note in notes[-RECENT_NOTES_SHOWN:]]
            memory_context += "\n\nRecent conversation notes:\n" + "\n".join(lines)
    except Exception as e:
        logger.warning(f"Failed to load memory context for student {student_id}: {e}")
    return memory_context


async def generate_draft(
    student_id: int,
    message: str,
    llm: Optional[Any] = None,
    max_iterations: Optional[int] = None,
    document_context: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Generate a draft reply for a student message.

    Args:
        student_id: The student's ID
        message: The student's message
        llm: Chat model override (used by tests)
        max_iterations: Tool loop budget override
        document_context: Already-extracted text of attached documents

    Returns:
        {"success", "draft": {...}, "tokens_used": {...}} or, for
        conversation endings, {"success", "no_response_needed", "message"}

    Raises:
        StudentNotFound: If the student does not exist
    """
    async with get_session() as session:
        student = await get_student_with_user(session, student_id)
        if student is None:
            raise StudentNotFound(f"Student {student_id} not found")

        conversation = await get_or_create_conversation(session, student_id)
        last_message_at = await get_last_student_message_at(session, student_id)

        if is_conversation_ending(message):
            await create_message(session, conversation.id, "student", message, status="sent")
            logger.info(f"Conversation-ending message from student {student_id}; no draft generated")
            return {
                "success": True,
                "no_response_needed": True,
                "message": "Conversation ending acknowledged, no response generated",
            }

        phase = student.current_phase
        student_name = student.user.name if student.user else "Student"

        roadmap_content = None
        if phase == "phase2":
            roadmap = await get_latest_roadmap(session, student_id)
            if roadmap_is_accepted(roadmap):
                roadmap_content = roadmap.content

        context = StudentContext(
            research_topic=student.research_topic,
            enrollment_date=student.enrollment_date,
            phase1_start=student.phase1_start,
            phase2_start=student.phase2_start,
            last_message_at=last_message_at,
            roadmap_content=roadmap_content,
            document_context=document_context,
        )
        conversation_id = conversation.id

    profile = await get_student_profile(student_id)
    context.memory_context = await build_memory_context(student_id, profile)

    system_prompt = build_system_prompt(student_name, phase, context)
    if profile is not None:
        system_prompt += "\n" + build_phase_prompt(profile, last_message_at)

    registry = create_registry_for_phase(phase)
    history = await get_conversation_history(student_id)

    logger.info(
        f"Generating draft for student {student_id} ({phase}) with tools: {', '.join(registry.get_tool_names())}"
    )

    result = await run_tool_loop(
        system_prompt,
        history,
        message,
        registry,
        {"student_id": student_id, "current_phase": phase},
        max_iterations=max_iterations,
        llm=llm,
    )

    async with get_session() as session:
        await create_message(session, conversation_id, "student", message, status="sent")
        draft = await create_message(
            session,
            conversation_id,
            "agent",
            result.content,
            status="draft",
            tool_calls=result.tool_calls or None,
        )

    try:
        await update_memory_from_conversation(student_id, message, result.content)
    except Exception as e:
        logger.error(f"Failed to update memory for student {student_id}: {e}")

    return {
        "success": True,
        "draft": {
            "id": draft.id,
            "content": draft.content,
            "tool_calls": result.tool_calls,
            "created_at": draft.created_at or utc_now_iso(),
        },
        "tokens_used": result.tokens_used,
    }
