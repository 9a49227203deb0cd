"""Progress tools: read and advance a student's position in the program."""

import logging
from typing import Any, Dict, List

from mentor_desk.core.timeutil import utc_now_iso
from mentor_desk.db.base import get_session
from mentor_desk.db.queries import (
    create_progress,
    get_progress_records,
    get_student_with_user,
    serialize_progress,
    update_student,
)

from .registry import ToolContext, ToolDefinition, ToolRegistry, ToolResult, missing_parameter

logger = logging.getLogger(__name__)

TOTAL_TOPICS = 8
TOTAL_MILESTONES = 4
PROGRESS_STATUSES = ("not_started", "in_progress", "completed")


# =============================================================================
# Definitions
# =============================================================================

PROGRESS_TOOL_DEFINITIONS: Dict[str, ToolDefinition] = {
    "get_student_progress": {
        "name": "get_student_progress",
        "description": (
            "Get the current progress of the student including phase, topic/milestone, and status."
        ),
        "input_schema": {"type": "object", "properties": {}, "required": []},
    },
    "update_student_progress": {
        "name": "update_student_progress",
        "description": "Update student progress. Use when student completes a topic or milestone.",
        "input_schema": {
            "type": "object",
            "properties": {
                "topic_index": {"type": "number", "description": "Current topic index (Phase I)"},
                "milestone": {"type": "number", "description": "Current milestone (Phase II)"},
                "status": {
                    "type": "string",
                    "enum": list(PROGRESS_STATUSES),
                    "description": "Progress status",
                },
                "notes": {"type": "string", "description": "Progress notes"},
            },
            "required": [],
        },
    },
    "transition_to_phase2": {
        "name": "transition_to_phase2",
        "description": (
            "Transition student from Phase I to Phase II. Use after student completes "
            "video curriculum."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "research_topic": {"type": "string", "description": "Chosen research topic"},
            },
            "required": ["research_topic"],
        },
    },
}


def _student_not_found(student_id: int) -> ToolResult:
    return {"success": False, "error": f"Student {student_id} not found"}


# =============================================================================
# Handlers
# =============================================================================

async def get_student_progress_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    student_id = context["student_id"]
    try:
        async with get_session() as session:
            student = await get_student_with_user(session, student_id)
            if student is None:
                return _student_not_found(student_id)
            records = await get_progress_records(session, student_id)

        completed_topics = sum(1 for r in records if r.phase == "phase1" and r.status == "completed")
        completed_milestones = sum(1 for r in records if r.phase == "phase2" and r.status == "completed")

        return {
            "success": True,
            "data": {
                "student_id": student_id,
                "current_phase": student.current_phase,
                "current_topic_index": student.current_topic_index,
                "current_milestone": student.current_milestone,
                "research_topic": student.research_topic,
                "completed_topics": completed_topics,
                "completed_milestones": completed_milestones,
                "total_topics": TOTAL_TOPICS,
                "total_milestones": TOTAL_MILESTONES,
                "progress_records": [serialize_progress(r) for r in records],
            },
        }
    except Exception as e:
        logger.error(f"Error getting student progress: {e}")
        return {"success": False, "error": str(e)}


async def update_student_progress_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    student_id = context["student_id"]
    topic_index = params.get("topic_index")
    milestone = params.get("milestone")
    status = params.get("status")
    notes = params.get("notes")

    if status is not None and status not in PROGRESS_STATUSES:
        return {"success": False, "error": f"Invalid status: {status}"}

    try:
        async with get_session() as session:
            student = await get_student_with_user(session, student_id)
            if student is None:
                return _student_not_found(student_id)

            updates: Dict[str, Any] = {}
            if topic_index is not None:
                updates["current_topic_index"] = int(topic_index)
            if milestone is not None:
                updates["current_milestone"] = int(milestone)
            if updates:
                await update_student(session, student, **updates)

            if student.current_phase == "phase1" and topic_index is not None:
                await create_progress(
                    session,
                    student_id,
                    "phase1",
                    status=status or "in_progress",
                    topic_index=int(topic_index),
                    notes=notes,
                )
            elif student.current_phase == "phase2" and milestone is not None:
                await create_progress(
                    session,
                    student_id,
                    "phase2",
                    status=status or "in_progress",
                    milestone=int(milestone),
                    notes=notes,
                )

        return {
            "success": True,
            "data": {
                "message": "Progress updated successfully",
                "updates": {
                    "topic_index": topic_index,
                    "milestone": milestone,
                    "status": status,
                    "notes": notes,
                },
            },
        }
    except Exception as e:
        logger.error(f"Error updating student progress: {e}")
        return {"success": False, "error": str(e)}


async def transition_to_phase2_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    student_id = context["student_id"]
    research_topic = params.get("research_topic")
    if not research_topic or not isinstance(research_topic, str):
        return missing_parameter("research_topic")

    try:
        async with get_session() as session:
            student = await get_student_with_user(session, student_id)
            if student is None:
                return _student_not_found(student_id)

            await update_student(
                session,
                student,
                current_phase="phase2",
                phase2_start=utc_now_iso(),
                research_topic=research_topic,
                current_milestone=1,
            )
            await create_progress(
                session,
                student_id,
                "phase2",
                status="not_started",
                milestone=1,
                notes=f"Starting research on: {research_topic}",
            )

        logger.info(f"Student {student_id} transitioned to Phase II ({research_topic})")
        return {
            "success": True,
            "data": {
                "message": "Successfully transitioned to Phase II",
                "research_topic": research_topic,
                "current_milestone": 1,
            },
        }
    except Exception as e:
        logger.error(f"Error transitioning to Phase II: {e}")
        return {"success": False, "error": str(e)}


# =============================================================================
# Registration
# =============================================================================

def register_progress_tools(registry: ToolRegistry) -> None:
    registry.register(PROGRESS_TOOL_DEFINITIONS["get_student_progress"], get_student_progress_tool)
    registry.register(PROGRESS_TOOL_DEFINITIONS["update_student_progress"], update_student_progress_tool)
    registry.register(PROGRESS_TOOL_DEFINITIONS["transition_to_phase2"], transition_to_phase2_tool)


def get_progress_tools() -> List[ToolDefinition]:
    return list(PROGRESS_TOOL_DEFINITIONS.values())
