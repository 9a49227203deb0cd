"""Student memory: long-term profile facts and short-term conversation history."""

from .long_term import (
    MemoryKeys,
    StudentProfile,
    add_daily_note,
    append_student_memory,
    extract_interests,
    extract_topics,
    format_profile_for_context,
    get_all_student_memory,
    get_recent_daily_notes,
    get_student_memory,
    get_student_profile,
    set_student_memory,
    update_memory_from_conversation,
)
from .short_term import get_conversation_history, get_conversation_stats


async def format_context_for_agent(student_id: int) -> str:
    """Profile text plus conversation statistics, or "" for unknown students."""
    profile = await get_student_profile(student_id)
    if profile is None:
        return ""

    stats = await get_conversation_stats(student_id)
    lines = [
        format_profile_for_context(profile),
        "",
        "Conversation stats:",
        f"- Total messages: {stats['total_messages']}",
        f"- Student messages: {stats['student_messages']}",
        f"- Questions asked: {profile.questions_asked}",
        f"- Last message: {stats['last_message_at'] or 'Never'}",
    ]
    return "\n".join(lines)


__all__ = [
    "MemoryKeys",
    "StudentProfile",
    "add_daily_note",
    "append_student_memory",
    "extract_interests",
    "extract_topics",
    "format_context_for_agent",
    "format_profile_for_context",
    "get_all_student_memory",
    "get_conversation_history",
    "get_conversation_stats",
    "get_recent_daily_notes",
    "get_student_memory",
    "get_student_profile",
    "set_student_memory",
    "update_memory_from_conversation",
]
