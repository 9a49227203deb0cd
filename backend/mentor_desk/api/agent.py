"""Agent API endpoints: draft generation, context inspection and tool listing."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from mentor_desk.agents.mentor import StudentNotFound, generate_draft
from mentor_desk.agents.mentor.tools import create_registry_for_phase
from mentor_desk.core.config import Settings, get_settings
from mentor_desk.memory import (
    format_context_for_agent,
    get_all_student_memory,
    get_conversation_history,
    get_conversation_stats,
    get_student_profile,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/agent", tags=["Agent"])

CONTEXT_HISTORY_LIMIT = 10


def _is_llm_quota_error(exc: Exception) -> bool:
    """Detect provider quota/rate-limit errors from OpenAI-compatible backends."""
    text = str(exc).lower()
    return (
        "error code: 429" in text
        or "insufficient_quota" in text
        or "insufficient balance" in text
        or "please recharge" in text
        or "rate limit reached" in text
        or "rate_limit_exceeded" in text
    )


def _is_llm_connection_error(exc: Exception) -> bool:
    """Detect upstream LLM connectivity issues."""
    text = str(exc).lower()
    return (
        "connection error" in text
        or "connecterror" in text
        or "connection refused" in text
        or "failed to establish a new connection" in text
    )


def _llm_unavailable_message() -> str:
    """User-facing message for provider limit exhaustion."""
    return (
        "A draft can't be generated right now because the LLM provider "
        "rejected the request due to rate or quota limits (HTTP 429). "
        "Please wait and retry, or adjust the plan, endpoint or key."
    )


def _llm_connection_message(settings: Settings) -> str:
    """User-facing message when the LLM endpoint is unreachable."""
    return (
        "The configured LLM endpoint can't be reached right now. "
        f"Expected: {settings.LLM_BASE_URL}. "
        "Make sure the server is running and a model is loaded."
    )


# ==============================================================================
# Pydantic Models
# ==============================================================================

class ChatRequest(BaseModel):
    """A student message to draft a reply for."""
    student_id: Optional[int] = None
    message: Optional[str] = None


# ==============================================================================
# Endpoints
# ==============================================================================

@router.post("/chat")
async def chat(request: ChatRequest) -> Dict[str, Any]:
    """
    Generate a draft reply to a student message.

    The draft is stored with status "draft" and waits for mentor review.
    Conversation-ending messages are stored without generating a draft.
    """
    if request.student_id is None or not (request.message or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: student_id, message",
        )

    try:
        return await generate_draft(request.student_id, request.message)
    except StudentNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        if _is_llm_quota_error(e):
            logger.warning(f"LLM quota error while drafting for student {request.student_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=_llm_unavailable_message(),
            )
        if _is_llm_connection_error(e):
            logger.warning(f"LLM connection error while drafting for student {request.student_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=_llm_connection_message(get_settings()),
            )
        logger.error(f"Draft generation failed for student {request.student_id}: {e}")
        raise


@router.get("/context")
async def get_context(student_id: int = Query(...)) -> Dict[str, Any]:
    """Profile, formatted prompt context, stats and recent history for a student."""
    profile = await get_student_profile(student_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

    return {
        "success": True,
        "data": {
            "profile": profile.model_dump(),
            "formatted_context": await format_context_for_agent(student_id),
            "stats": await get_conversation_stats(student_id),
            "recent_history": await get_conversation_history(student_id, CONTEXT_HISTORY_LIMIT),
        },
    }


@router.get("/memory")
async def get_memory(student_id: int = Query(...)) -> Dict[str, Any]:
    """Profile and every long-term memory key for a student."""
    profile = await get_student_profile(student_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

    return {
        "success": True,
        "data": {
            "profile": profile.model_dump(),
            "memory": await get_all_student_memory(student_id),
        },
    }


@router.get("/tools")
async def list_tools(phase: str = Query("phase1")) -> Dict[str, Any]:
    """Tool names and definitions offered to the model in a phase."""
    if phase not in ("phase1", "phase2"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid phase. Must be phase1 or phase2",
        )

    registry = create_registry_for_phase(phase)
    return {
        "success": True,
        "data": {
            "phase": phase,
            "count": len(registry),
            "tool_names": registry.get_tool_names(),
            "tools": registry.get_tools(),
        },
    }
