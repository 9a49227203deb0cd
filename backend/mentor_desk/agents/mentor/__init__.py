"""Mentor agent.

Generates draft replies to student messages with a bounded tool-calling
loop. Drafts wait for mentor review before they reach the student.
"""

from .conversation import is_conversation_ending
from .graph import FALLBACK_RESPONSE, ToolLoopGraph, run_tool_loop
from .prompts import StudentContext, build_system_prompt, calculate_timeline
from .service import StudentNotFound, build_phase_prompt, generate_draft
from .state import ToolLoopResult, ToolLoopState

__all__ = [
    "FALLBACK_RESPONSE",
    "StudentContext",
    "StudentNotFound",
    "ToolLoopGraph",
    "ToolLoopResult",
    "ToolLoopState",
    "build_phase_prompt",
    "build_system_prompt",
    "calculate_timeline",
    "generate_draft",
    "is_conversation_ending",
    "run_tool_loop",
]
