"""Long-term student memory.

Memory is stored as key/value rows in the ``memory`` table. Keys are
namespaced (``profile.*``, ``history.*``, ``research.*``) and values are
arbitrary JSON. This module also builds the merged ``StudentProfile`` the
prompt assembler and tools read from, and mines each exchange for topics
and interests.
"""

import logging
import re
from datetime import timedelta
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.timeutil import days_since, parse_timestamp, utc_now, utc_now_iso
from ..db.base import get_session
from ..db.models import Memory
from ..db.queries import get_progress_records, get_student_with_user

logger = logging.getLogger(__name__)

LONG_TERM = "long_term"
SHORT_TERM = "short_term"

TOTAL_VIDEO_TOPICS = 8
TOTAL_RESEARCH_MILESTONES = 5
MAX_DAILY_NOTES = 30
RECENT_TOPICS_SHOWN = 5


class MemoryKeys:
    """Namespaced memory keys."""

    LEARNING_STYLE = "profile.learning_style"
    INTERESTS = "profile.interests"
    STRENGTHS = "profile.strengths"
    CHALLENGES = "profile.challenges"
    BACKGROUND = "profile.background"

    TOPICS_DISCUSSED = "history.topics_discussed"
    QUESTIONS_ASKED = "history.questions_asked"
    LAST_INTERACTION = "history.last_interaction"
    PAPERS_RECOMMENDED = "history.papers_recommended"
    DAILY_NOTES = "history.daily_notes"

    RESEARCH_TOPIC = "research.topic"
    RESEARCH_MILESTONE = "research.milestone"
    CURRENT_BLOCKERS = "research.current_blockers"
    PAPERS_READ = "research.papers_read"


# Canonical names for AI topics spotted in student messages
TOPIC_KEYWORDS = [
    "RAG",
    "embeddings",
    "chunking",
    "semantic search",
    "vector",
    "retrieval",
    "LLM",
    "prompt engineering",
    "chain-of-thought",
    "agents",
    "LangChain",
    "fine-tuning",
    "CLIP",
    "BLIP",
    "multimodal",
    "transformers",
    "evaluation",
    "RAGAS",
    "metrics",
    "benchmark",
]

# Domain keyword -> interest stored under profile.interests
INTEREST_KEYWORDS = {
    "healthcare": "healthcare AI",
    "medical": "healthcare AI",
    "clinical": "healthcare AI",
    "legal": "legal AI",
    "contract": "legal AI",
    "finance": "finance AI",
    "education": "education AI",
    "code": "coding assistance",
    "creative": "creative AI",
    "game": "gaming AI",
}


class StudentProfile(BaseModel):
    """Student row, user row and profile memory merged into one view."""

    student_id: int
    name: str
    email: str
    enrollment_date: Optional[str] = None
    current_phase: str = "phase1"
    days_in_current_phase: int = 0
    current_topic_index: int = 1
    topics_completed: int = 0
    research_topic: Optional[str] = None
    current_milestone: int = 0
    learning_style: Optional[str] = None
    interests: List[str] = []
    strengths: List[str] = []
    challenges: List[str] = []
    topics_discussed: List[str] = []
    questions_asked: int = 0
    last_interaction: Optional[str] = None


# =============================================================================
# Raw key/value access
# =============================================================================

async def _get_record(
    session: AsyncSession,
    student_id: int,
    key: str,
    memory_type: str = LONG_TERM,
) -> Optional[Memory]:
    result = await session.execute(
        select(Memory)
        .where(
            Memory.student_id == student_id,
            Memory.memory_type == memory_type,
            Memory.key == key,
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_memory_value(
    session: AsyncSession,
    student_id: int,
    key: str,
    memory_type: str = LONG_TERM,
) -> Any:
    """Stored value for ``key`` or None."""
    record = await _get_record(session, student_id, key, memory_type)
    return record.value if record is not None else None


async def set_memory_value(
    session: AsyncSession,
    student_id: int,
    key: str,
    value: Any,
    memory_type: str = LONG_TERM,
) -> Memory:
    """Insert or replace the value stored under ``key``."""
    record = await _get_record(session, student_id, key, memory_type)
    if record is None:
        record = Memory(student_id=student_id, memory_type=memory_type, key=key, value=value)
        session.add(record)
    else:
        record.value = value
        record.updated_at = utc_now_iso()
    await session.commit()
    await session.refresh(record)
    return record


async def append_memory_value(
    session: AsyncSession,
    student_id: int,
    key: str,
    value: Any,
    memory_type: str = LONG_TERM,
) -> Memory:
    """Append to the list stored under ``key``; non-list values are replaced."""
    existing = await get_memory_value(session, student_id, key, memory_type)
    items = list(existing) if isinstance(existing, list) else []
    items.append(value)
    return await set_memory_value(session, student_id, key, items, memory_type)


async def get_all_memory(
    session: AsyncSession,
    student_id: int,
    memory_type: str = LONG_TERM,
) -> Dict[str, Any]:
    """Every key/value pair of one memory type."""
    result = await session.execute(
        select(Memory)
        .where(Memory.student_id == student_id, Memory.memory_type == memory_type)
        .order_by(Memory.key)
    )
    return {record.key: record.value for record in result.scalars().all()}


# =============================================================================
# Session-owning wrappers (used by tools and routes)
# =============================================================================

async def get_student_memory(student_id: int, key: str) -> Any:
    async with get_session() as session:
        return await get_memory_value(session, student_id, key)


async def set_student_memory(student_id: int, key: str, value: Any) -> None:
    async with get_session() as session:
        await set_memory_value(session, student_id, key, value)


async def append_student_memory(student_id: int, key: str, value: Any) -> None:
    async with get_session() as session:
        await append_memory_value(session, student_id, key, value)


async def get_all_student_memory(student_id: int) -> Dict[str, Any]:
    async with get_session() as session:
        return await get_all_memory(session, student_id)


# =============================================================================
# Student profile
# =============================================================================

def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item) for item in value]
    return [str(value)]


async def get_student_profile(student_id: int) -> Optional[StudentProfile]:
    """
    Build the merged profile for a student.

    Args:
        student_id: The student's ID

    Returns:
        StudentProfile, or None when the student does not exist
    """
    async with get_session() as session:
        student = await get_student_with_user(session, student_id)
        if student is None:
            return None

        memory = await get_all_memory(session, student_id)
        progress = await get_progress_records(session, student_id)

    phase_start = student.phase2_start if student.current_phase == "phase2" else student.phase1_start
    days_in_phase = days_since(phase_start or student.enrollment_date) or 0
    topics_completed = len(
        {p.topic_index for p in progress if p.phase == "phase1" and p.status == "completed"}
    )

    learning_style = memory.get(MemoryKeys.LEARNING_STYLE)
    questions_asked = memory.get(MemoryKeys.QUESTIONS_ASKED)

    return StudentProfile(
        student_id=student.id,
        name=student.user.name if student.user else "Student",
        email=student.user.email if student.user else "",
        enrollment_date=student.enrollment_date,
        current_phase=student.current_phase,
        days_in_current_phase=max(days_in_phase, 0),
        current_topic_index=student.current_topic_index or 1,
        topics_completed=topics_completed,
        research_topic=student.research_topic,
        current_milestone=student.current_milestone or 0,
        learning_style=str(learning_style) if learning_style else None,
        interests=_as_list(memory.get(MemoryKeys.INTERESTS)),
        strengths=_as_list(memory.get(MemoryKeys.STRENGTHS)),
        challenges=_as_list(memory.get(MemoryKeys.CHALLENGES)),
        topics_discussed=_as_list(memory.get(MemoryKeys.TOPICS_DISCUSSED)),
        questions_asked=int(questions_asked) if isinstance(questions_asked, (int, float)) else 0,
        last_interaction=memory.get(MemoryKeys.LAST_INTERACTION),
    )


def format_profile_for_context(profile: StudentProfile) -> str:
    """Render a profile as prompt text."""
    lines = [f"Student: {profile.name}"]

    if profile.current_phase == "phase1":
        lines.append("Phase: Phase I (Learning)")
        lines.append(f"Days in phase: {profile.days_in_current_phase}")
        lines.append(f"Current topic: {profile.current_topic_index} of {TOTAL_VIDEO_TOPICS}")
        lines.append(f"Topics completed: {profile.topics_completed}")
    else:
        lines.append("Phase: Phase II (Research)")
        lines.append(f"Days in phase: {profile.days_in_current_phase}")
        lines.append(f"Research topic: {profile.research_topic or 'Not yet selected'}")
        lines.append(f"Current milestone: {profile.current_milestone} of {TOTAL_RESEARCH_MILESTONES}")

    if profile.learning_style:
        lines.append(f"Learning style: {profile.learning_style}")
    if profile.interests:
        lines.append(f"Interests: {', '.join(profile.interests)}")
    if profile.strengths:
        lines.append(f"Strengths: {', '.join(profile.strengths)}")
    if profile.challenges:
        lines.append(f"Challenges: {', '.join(profile.challenges)}")
    if profile.topics_discussed:
        recent = profile.topics_discussed[-RECENT_TOPICS_SHOWN:]
        lines.append(f"Previously discussed topics: {', '.join(recent)}")

    return "\n".join(lines)


# =============================================================================
# Conversation mining
# =============================================================================

def _contains_keyword(text: str, keyword: str) -> bool:
    return re.search(rf"\b{re.escape(keyword.lower())}s?\b", text) is not None


def extract_topics(text: str) -> List[str]:
    """AI topics mentioned in ``text``, in keyword-list order."""
    lowered = text.lower()
    return [keyword for keyword in TOPIC_KEYWORDS if _contains_keyword(lowered, keyword)]


def extract_interests(text: str) -> List[str]:
    """Domain interests implied by ``text``, without duplicates."""
    lowered = text.lower()
    interests: List[str] = []
    for keyword, interest in INTEREST_KEYWORDS.items():
        if _contains_keyword(lowered, keyword) and interest not in interests:
            interests.append(interest)
    return interests


async def add_daily_note(student_id: int, note: str) -> None:
    """Record a dated note, keeping only the most recent entries."""
    async with get_session() as session:
        existing = await get_memory_value(session, student_id, MemoryKeys.DAILY_NOTES)
        notes = list(existing) if isinstance(existing, list) else []
        notes.append({"date": utc_now().date().isoformat(), "note": note, "created_at": utc_now_iso()})
        await set_memory_value(session, student_id, MemoryKeys.DAILY_NOTES, notes[-MAX_DAILY_NOTES:])


async def get_recent_daily_notes(student_id: int, days: int = 7) -> List[Dict[str, Any]]:
    """Daily notes from the last ``days`` days, oldest first."""
    cutoff = utc_now() - timedelta(days=days)
    async with get_session() as session:
        existing = await get_memory_value(session, student_id, MemoryKeys.DAILY_NOTES)

    recent = []
    for note in existing if isinstance(existing, list) else []:
        stamp = parse_timestamp(note.get("created_at") or note.get("date"))
        if stamp is not None and stamp >= cutoff:
            recent.append(note)
    return recent


async def update_memory_from_conversation(student_id: int, message: str, response: str) -> Dict[str, Any]:
    """
    Fold one student/agent exchange into long-term memory.

    Args:
        student_id: The student's ID
        message: The student's message
        response: The generated reply

    Returns:
        Summary of what was recorded
    """
    topics = extract_topics(f"{message} {response}")
    interests = extract_interests(message)
    asked_question = "?" in message

    async with get_session() as session:
        await set_memory_value(session, student_id, MemoryKeys.LAST_INTERACTION, utc_now_iso())

        if asked_question:
            count = await get_memory_value(session, student_id, MemoryKeys.QUESTIONS_ASKED)
            count = count if isinstance(count, int) else 0
            await set_memory_value(session, student_id, MemoryKeys.QUESTIONS_ASKED, count + 1)

        if topics:
            existing = _as_list(await get_memory_value(session, student_id, MemoryKeys.TOPICS_DISCUSSED))
            merged = existing + [topic for topic in topics if topic not in existing]
            await set_memory_value(session, student_id, MemoryKeys.TOPICS_DISCUSSED, merged)

        if interests:
            existing = _as_list(await get_memory_value(session, student_id, MemoryKeys.INTERESTS))
            merged = existing + [interest for interest in interests if interest not in existing]
            await set_memory_value(session, student_id, MemoryKeys.INTERESTS, merged)

    if topics:
        note = f"Discussed: {', '.join(topics)}"
    else:
        note = message.strip().replace("\n", " ")[:100]
    await add_daily_note(student_id, note)

    logger.info(f"Updated memory for student {student_id} (topics={topics}, interests={interests})")

    return {
        "topics": topics,
        "interests": interests,
        "question_asked": asked_question,
        "response_length": len(response),
    }
