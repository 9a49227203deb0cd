"""Database models for the mentor workflow.

This module defines SQLAlchemy ORM models for:
- Users (mentors and students)
- Students (phase and progress pointers)
- Conversations and Messages (including drafts)
- Memory (long-term and short-term key/value records)
- Progress records
- Research roadmaps
"""

from sqlalchemy import (
    Boolean,
    Column,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    JSON,
    Index,
)
from sqlalchemy.orm import relationship

from ..core.timeutil import utc_now_iso
from .base import Base


class User(Base):
    """Mentor or student account."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(Enum("mentor", "student", name="user_role"), nullable=False, default="student")
    created_at = Column(String(50), default=utc_now_iso)

    # Relationships
    student = relationship(
        "Student",
        back_populates="user",
        uselist=False,
        foreign_keys="Student.user_id",
    )


class Student(Base):
    """Student enrolled in the program."""
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    mentor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    enrollment_date = Column(String(50), default=utc_now_iso, nullable=False)
    current_phase = Column(Enum("phase1", "phase2", name="phase"), default="phase1", nullable=False)
    phase1_start = Column(String(50), default=utc_now_iso, nullable=True)
    phase2_start = Column(String(50), nullable=True)
    current_topic_index = Column(Integer, default=1, nullable=False)  # Phase I video topic (1-8)
    current_milestone = Column(Integer, default=0, nullable=False)  # Phase II milestone (0-5)
    research_topic = Column(Text, nullable=True)
    created_at = Column(String(50), default=utc_now_iso)
    updated_at = Column(String(50), default=utc_now_iso, onupdate=utc_now_iso)

    # Relationships
    user = relationship("User", back_populates="student", foreign_keys=[user_id])
    conversation = relationship("Conversation", back_populates="student", uselist=False, cascade="all, delete-orphan")
    memories = relationship("Memory", back_populates="student", cascade="all, delete-orphan")
    progress_records = relationship("Progress", back_populates="student", cascade="all, delete-orphan")
    roadmaps = relationship("Roadmap", back_populates="student", cascade="all, delete-orphan")


class Conversation(Base):
    """One conversation per student."""
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, unique=True)
    created_at = Column(String(50), default=utc_now_iso)
    updated_at = Column(String(50), default=utc_now_iso, onupdate=utc_now_iso)

    # Relationships
    student = relationship("Student", back_populates="conversation")
    messages = relationship("Message", back_populates="conversation", cascade="all, delete-orphan")


class Message(Base):
    """A chat message. Agent replies start life as drafts."""
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum("student", "agent", "mentor", "system", name="message_role"), nullable=False)
    content = Column(Text, nullable=False)
    tool_calls = Column(JSON, nullable=True)
    tool_results = Column(JSON, nullable=True)
    status = Column(Enum("draft", "approved", "sent", name="message_status"), default="sent", nullable=False)
    attachments = Column(JSON, nullable=True)
    created_at = Column(String(50), default=utc_now_iso, index=True)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")

    __table_args__ = (
        Index("idx_message_conversation_status", "conversation_id", "status"),
    )


class Memory(Base):
    """Key/value memory record for a student."""
    __tablename__ = "memory"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    memory_type = Column(Enum("short_term", "long_term", name="memory_type"), nullable=False)
    key = Column(String(255), nullable=False)
    value = Column(JSON, nullable=True)
    expires_at = Column(String(50), nullable=True)
    created_at = Column(String(50), default=utc_now_iso)
    updated_at = Column(String(50), default=utc_now_iso, onupdate=utc_now_iso)

    # Relationships
    student = relationship("Student", back_populates="memories")

    __table_args__ = (
        Index("idx_memory_lookup", "student_id", "memory_type", "key"),
    )


class Progress(Base):
    """Topic (Phase I) or milestone (Phase II) progress record."""
    __tablename__ = "progress"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    phase = Column(Enum("phase1", "phase2", name="progress_phase"), nullable=False)
    topic_index = Column(Integer, nullable=True)
    milestone = Column(Integer, nullable=True)
    status = Column(
        Enum("not_started", "in_progress", "completed", name="progress_status"),
        default="not_started",
        nullable=False,
    )
    notes = Column(Text, nullable=True)
    created_at = Column(String(50), default=utc_now_iso)
    updated_at = Column(String(50), default=utc_now_iso, onupdate=utc_now_iso)

    # Relationships
    student = relationship("Student", back_populates="progress_records")


class Roadmap(Base):
    """Generated research roadmap for a Phase II student."""
    __tablename__ = "roadmaps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    topic = Column(Text, nullable=False)
    content = Column(JSON, nullable=False)
    accepted = Column(Boolean, default=False, nullable=False)
    created_at = Column(String(50), default=utc_now_iso, index=True)
    updated_at = Column(String(50), default=utc_now_iso, onupdate=utc_now_iso)

    # Relationships
    student = relationship("Student", back_populates="roadmaps")
