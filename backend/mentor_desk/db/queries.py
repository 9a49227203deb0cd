"""Shared query helpers over the mentor models.

Every helper takes an open ``AsyncSession`` so callers decide the
transaction boundaries. Helpers that write call ``commit()`` themselves.
"""

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.timeutil import utc_now_iso
from .models import Conversation, Message, Progress, Roadmap, Student, User


# =============================================================================
# Students
# =============================================================================

async def get_student_with_user(session: AsyncSession, student_id: int) -> Optional[Student]:
    """Load a student together with its user row."""
    result = await session.execute(
        select(Student).options(selectinload(Student.user)).where(Student.id == student_id)
    )
    return result.scalar_one_or_none()


async def list_students_with_users(session: AsyncSession) -> List[Student]:
    """All students with their user rows, oldest enrollment first."""
    result = await session.execute(
        select(Student).options(selectinload(Student.user)).order_by(Student.enrollment_date, Student.id)
    )
    return list(result.scalars().all())


async def update_student(session: AsyncSession, student: Student, **fields: Any) -> Student:
    """Apply field updates to a student and commit."""
    for name, value in fields.items():
        setattr(student, name, value)
    student.updated_at = utc_now_iso()
    await session.commit()
    return student


# =============================================================================
# Conversations and Messages
# =============================================================================

async def get_conversation(session: AsyncSession, student_id: int) -> Optional[Conversation]:
    """The student's conversation, if one exists."""
    result = await session.execute(select(Conversation).where(Conversation.student_id == student_id))
    return result.scalar_one_or_none()


async def get_or_create_conversation(session: AsyncSession, student_id: int) -> Conversation:
    """Fetch the student's conversation, creating it on first use."""
    conversation = await get_conversation(session, student_id)
    if conversation is None:
        conversation = Conversation(student_id=student_id)
        session.add(conversation)
        await session.commit()
        await session.refresh(conversation)
    return conversation


async def create_message(
    session: AsyncSession,
    conversation_id: int,
    role: str,
    content: str,
    status: str = "sent",
    tool_calls: Optional[List[Dict[str, Any]]] = None,
    tool_results: Optional[List[Any]] = None,
) -> Message:
    """Insert a message and commit."""
    message = Message(
        conversation_id=conversation_id,
        role=role,
        content=content,
        status=status,
        tool_calls=tool_calls,
        tool_results=tool_results,
        created_at=utc_now_iso(),
    )
    session.add(message)
    await session.commit()
    await session.refresh(message)
    return message


async def get_message(session: AsyncSession, message_id: int) -> Optional[Message]:
    """Load a single message by id."""
    return await session.get(Message, message_id)


async def get_messages(
    session: AsyncSession,
    conversation_id: int,
    statuses: Optional[Iterable[str]] = None,
    roles: Optional[Iterable[str]] = None,
    descending: bool = False,
    limit: Optional[int] = None,
) -> List[Message]:
    """Messages in a conversation, filtered and ordered by creation time."""
    query = select(Message).where(Message.conversation_id == conversation_id)
    if statuses is not None:
        query = query.where(Message.status.in_(list(statuses)))
    if roles is not None:
        query = query.where(Message.role.in_(list(roles)))
    if descending:
        query = query.order_by(Message.created_at.desc(), Message.id.desc())
    else:
        query = query.order_by(Message.created_at, Message.id)
    if limit is not None:
        query = query.limit(limit)
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_last_student_message_at(session: AsyncSession, student_id: int) -> Optional[str]:
    """Timestamp of the student's most recent own message."""
    conversation = await get_conversation(session, student_id)
    if conversation is None:
        return None
    messages = await get_messages(
        session, conversation.id, roles=["student"], descending=True, limit=1
    )
    return messages[0].created_at if messages else None


# =============================================================================
# Progress
# =============================================================================

async def get_progress_records(session: AsyncSession, student_id: int) -> List[Progress]:
    """All progress records for a student, oldest first."""
    result = await session.execute(
        select(Progress).where(Progress.student_id == student_id).order_by(Progress.created_at, Progress.id)
    )
    return list(result.scalars().all())


async def create_progress(
    session: AsyncSession,
    student_id: int,
    phase: str,
    status: str = "not_started",
    topic_index: Optional[int] = None,
    milestone: Optional[int] = None,
    notes: Optional[str] = None,
) -> Progress:
    """Insert a progress record and commit."""
    record = Progress(
        student_id=student_id,
        phase=phase,
        topic_index=topic_index,
        milestone=milestone,
        status=status,
        notes=notes,
    )
    session.add(record)
    await session.commit()
    await session.refresh(record)
    return record


def serialize_progress(record: Progress) -> Dict[str, Any]:
    """Plain-dict view of a progress record."""
    return {
        "id": record.id,
        "phase": record.phase,
        "topic_index": record.topic_index,
        "milestone": record.milestone,
        "status": record.status,
        "notes": record.notes,
        "created_at": record.created_at,
    }


# =============================================================================
# Roadmaps
# =============================================================================

async def get_latest_roadmap(session: AsyncSession, student_id: int) -> Optional[Roadmap]:
    """The student's most recently created roadmap."""
    result = await session.execute(
        select(Roadmap)
        .where(Roadmap.student_id == student_id)
        .order_by(Roadmap.created_at.desc(), Roadmap.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


def roadmap_is_accepted(roadmap: Optional[Roadmap]) -> bool:
    """Accepted via the column or the legacy ``_accepted`` content flag."""
    if roadmap is None:
        return False
    content = roadmap.content if isinstance(roadmap.content, dict) else {}
    return bool(roadmap.accepted or content.get("_accepted"))


# =============================================================================
# Users
# =============================================================================

async def create_user(session: AsyncSession, name: str, email: str, role: str = "student") -> User:
    """Insert a user and commit."""
    user = User(name=name, email=email, role=role)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user
