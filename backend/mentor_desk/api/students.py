"""Student management API endpoints."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from mentor_desk.agents.mentor.tools.progress import TOTAL_TOPICS
from mentor_desk.core.config import get_settings
from mentor_desk.core.timeutil import days_since, utc_now_iso
from mentor_desk.db.base import get_session
from mentor_desk.db.models import Roadmap, Student
from mentor_desk.db.queries import (
    get_latest_roadmap,
    get_student_with_user,
    list_students_with_users,
    roadmap_is_accepted,
    update_student,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students", tags=["Students"])

PHASES = ("phase1", "phase2")


# ==============================================================================
# Pydantic Models
# ==============================================================================

class PhaseUpdateRequest(BaseModel):
    """Move a student to a phase."""
    phase: Optional[str] = None


class TransitionRequest(BaseModel):
    """Advance a student from Phase I to Phase II."""
    student_id: Optional[int] = None


# ==============================================================================
# Serialization
# ==============================================================================

def _student_summary(student: Student) -> Dict[str, Any]:
    return {
        "id": student.id,
        "user_id": student.user_id,
        "name": student.user.name if student.user else "Unknown",
        "email": student.user.email if student.user else "",
        "current_phase": student.current_phase,
        "current_topic_index": student.current_topic_index,
        "current_milestone": student.current_milestone,
        "research_topic": student.research_topic,
        "enrollment_date": student.enrollment_date,
    }


def _roadmap_summary(roadmap: Roadmap) -> Dict[str, Any]:
    content = roadmap.content if isinstance(roadmap.content, dict) else {}
    return {
        "id": roadmap.id,
        "topic": roadmap.topic,
        "accepted": roadmap_is_accepted(roadmap),
        "created_at": roadmap.created_at,
        "milestone_count": len(content.get("milestones") or []) or 5,
    }


def calculate_student_timeline(student: Student) -> Dict[str, Any]:
    """
    Days spent in the current phase against its target.

    Returns:
        days_in_phase, days_remaining (absolute), is_overdue and
        total_days_remaining in the program (never negative)
    """
    settings = get_settings()

    days_in_phase = 0
    days_remaining = 0
    if student.current_phase == "phase1" and student.phase1_start:
        days_in_phase = days_since(student.phase1_start) or 0
        days_remaining = settings.PHASE1_TARGET_DAYS - days_in_phase
    elif student.current_phase == "phase2" and student.phase2_start:
        days_in_phase = days_since(student.phase2_start) or 0
        days_remaining = settings.PHASE2_TARGET_DAYS - days_in_phase

    total_days_remaining = 0
    since_enrollment = days_since(student.enrollment_date)
    if since_enrollment is not None:
        total_days_remaining = settings.PROGRAM_TOTAL_DAYS - since_enrollment

    return {
        "days_in_phase": days_in_phase,
        "days_remaining": abs(days_remaining),
        "is_overdue": days_remaining < 0,
        "total_days_remaining": max(0, total_days_remaining),
    }


# ==============================================================================
# Endpoints
# ==============================================================================

@router.get("")
async def list_students() -> Dict[str, Any]:
    """All enrolled students."""
    async with get_session() as session:
        students = await list_students_with_users(session)

    return {
        "success": True,
        "data": {
            "count": len(students),
            "students": [_student_summary(student) for student in students],
        },
    }


@router.post("/transition")
async def transition_student(request: TransitionRequest) -> Dict[str, Any]:
    """Move a Phase I student into Phase II."""
    if request.student_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required field: student_id",
        )

    async with get_session() as session:
        student = await get_student_with_user(session, request.student_id)
        if student is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
        if student.current_phase == "phase2":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Student is already in Phase II",
            )

        student = await update_student(
            session,
            student,
            current_phase="phase2",
            phase2_start=utc_now_iso(),
            current_milestone=0,
        )

    logger.info(f"Student {request.student_id} transitioned to Phase II")
    return {
        "success": True,
        "message": "Student transitioned to Phase II",
        "data": _student_summary(student),
    }


@router.get("/{student_id}")
async def get_student(student_id: int) -> Dict[str, Any]:
    """One student with timeline and, in Phase II, the latest roadmap."""
    async with get_session() as session:
        student = await get_student_with_user(session, student_id)
        if student is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

        roadmap = None
        if student.current_phase == "phase2":
            latest = await get_latest_roadmap(session, student_id)
            if latest is not None:
                roadmap = _roadmap_summary(latest)

    data = _student_summary(student)
    data.update({
        "phase1_start": student.phase1_start,
        "phase2_start": student.phase2_start,
        **calculate_student_timeline(student),
        "roadmap": roadmap,
    })
    return {"success": True, "data": data}


@router.patch("/{student_id}/phase")
async def update_phase(student_id: int, request: PhaseUpdateRequest) -> Dict[str, Any]:
    """
    Set a student's phase.

    Moving to Phase II marks every video topic as reached and resets the
    milestone. Moving back to Phase I clears all Phase II state.
    """
    if request.phase not in PHASES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid phase. Must be phase1 or phase2",
        )

    async with get_session() as session:
        student = await get_student_with_user(session, student_id)
        if student is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

        updates: Dict[str, Any] = {"current_phase": request.phase}
        if request.phase == "phase2" and student.current_phase == "phase1":
            updates.update({
                "phase2_start": utc_now_iso(),
                "current_topic_index": TOTAL_TOPICS,
                "current_milestone": 0,
            })
        elif request.phase == "phase1" and student.current_phase == "phase2":
            updates.update({
                "phase2_start": None,
                "current_milestone": 0,
                "research_topic": None,
            })
        student = await update_student(session, student, **updates)

    logger.info(f"Student {student_id} moved to {request.phase}")
    return {
        "success": True,
        "message": f"Student moved to {'Phase II' if request.phase == 'phase2' else 'Phase I'}",
        "data": _student_summary(student),
    }
