"""
Test long-term memory, conversation mining and short-term history.
"""

from mentor_desk.db.base import get_session
from mentor_desk.db.queries import create_message, create_progress, get_or_create_conversation
from mentor_desk.memory import (
    MemoryKeys,
    extract_interests,
    extract_topics,
    format_context_for_agent,
    get_all_student_memory,
    get_conversation_history,
    get_conversation_stats,
    get_recent_daily_notes,
    get_student_profile,
    set_student_memory,
    update_memory_from_conversation,
)


async def _add_messages(student_id, *messages):
    async with get_session() as session:
        conversation = await get_or_create_conversation(session, student_id)
        for role, content, status in messages:
            await create_message(session, conversation.id, role, content, status=status)


class TestExtraction:
    """Test keyword mining."""

    def test_topics_use_word_boundaries(self):
        assert extract_topics("How do LLMs and agents use RAG?") == ["RAG", "LLM", "agents"]
        assert extract_topics("The fragment was dragged along") == []

    def test_interests_are_deduplicated(self):
        assert extract_interests("Medical and clinical data for healthcare") == ["healthcare AI"]
        assert extract_interests("nothing relevant") == []


class TestLongTermMemory:
    """Test profile building and conversation updates."""

    async def test_unknown_student_has_no_profile(self, db):
        assert await get_student_profile(123) is None
        assert await format_context_for_agent(123) == ""

    async def test_profile_merges_student_and_memory(self, create_student):
        student_id = await create_student(name="Ada Lovelace", email="ada@example.com", current_topic_index=4)
        await set_student_memory(student_id, MemoryKeys.LEARNING_STYLE, "visual")
        await set_student_memory(student_id, MemoryKeys.STRENGTHS, "math")
        async with get_session() as session:
            await create_progress(session, student_id, "phase1", status="completed", topic_index=1)
            await create_progress(session, student_id, "phase1", status="completed", topic_index=1)
            await create_progress(session, student_id, "phase1", status="completed", topic_index=2)
            await create_progress(session, student_id, "phase1", status="in_progress", topic_index=3)

        profile = await get_student_profile(student_id)

        assert profile.name == "Ada Lovelace"
        assert profile.email == "ada@example.com"
        assert profile.current_topic_index == 4
        assert profile.topics_completed == 2
        assert profile.learning_style == "visual"
        assert profile.strengths == ["math"]
        assert profile.days_in_current_phase == 0

    async def test_update_from_conversation(self, create_student):
        student_id = await create_student()

        summary = await update_memory_from_conversation(
            student_id,
            "Could agents help with clinical forecasting?",
            "Yes, here is how.",
        )

        assert summary == {
            "topics": ["agents"],
            "interests": ["healthcare AI"],
            "question_asked": True,
            "response_length": len("Yes, here is how."),
        }
        memory = await get_all_student_memory(student_id)
        assert memory[MemoryKeys.TOPICS_DISCUSSED] == ["agents"]
        assert memory[MemoryKeys.INTERESTS] == ["healthcare AI"]
        assert memory[MemoryKeys.QUESTIONS_ASKED] == 1
        assert memory[MemoryKeys.LAST_INTERACTION]

        notes = await get_recent_daily_notes(student_id)
        assert [n["note"] for n in notes] == ["Discussed: agents"]

    async def test_topics_from_the_reply_are_recorded(self, create_student):
        student_id = await create_student()

        summary = await update_memory_from_conversation(
            student_id, "I'm stuck on my healthcare project", "Try RAG with embeddings, as legal search tools do."
        )

        assert summary["topics"] == ["RAG", "embeddings"]
        assert summary["interests"] == ["healthcare AI"]
        memory = await get_all_student_memory(student_id)
        assert memory[MemoryKeys.TOPICS_DISCUSSED] == ["RAG", "embeddings"]

    async def test_repeated_updates_merge_without_duplicates(self, create_student):
        student_id = await create_student()
        await update_memory_from_conversation(student_id, "Tell me about RAG?", "ok")
        await update_memory_from_conversation(student_id, "More RAG and LLM please?", "ok")
        await update_memory_from_conversation(student_id, "Just checking in", "ok")

        profile = await get_student_profile(student_id)
        assert profile.topics_discussed == ["RAG", "LLM"]
        assert profile.questions_asked == 2

        notes = await get_recent_daily_notes(student_id)
        assert notes[-1]["note"] == "Just checking in"

    async def test_context_for_agent(self, create_student):
        student_id = await create_student(name="Grace Hopper")
        await set_student_memory(student_id, MemoryKeys.INTERESTS, ["fluid dynamics"])
        await _add_messages(student_id, ("student", "Hello", "sent"), ("agent", "Hi", "sent"))

        context = await format_context_for_agent(student_id)

        assert context.startswith("Student: Grace Hopper")
        assert "Phase: Phase I (Learning)" in context
        assert "Interests: fluid dynamics" in context
        assert "- Total messages: 2" in context
        assert "- Student messages: 1" in context


class TestShortTermMemory:
    """Test history retrieval and statistics."""

    async def test_history_excludes_drafts_and_system(self, create_student):
        student_id = await create_student()
        await _add_messages(
            student_id,
            ("student", "Question one", "sent"),
            ("agent", "Unreviewed draft", "draft"),
            ("agent", "Approved answer", "approved"),
            ("system", "internal", "sent"),
            ("mentor", "Mentor note", "sent"),
        )

        history = await get_conversation_history(student_id)

        assert history == [
            {"role": "user", "content": "Question one"},
            {"role": "assistant", "content": "Approved answer"},
            {"role": "assistant", "content": "Mentor note"},
        ]

    async def test_history_limit_keeps_latest(self, create_student):
        student_id = await create_student()
        await _add_messages(student_id, *[("student", f"m{i}", "sent") for i in range(5)])

        history = await get_conversation_history(student_id, limit=2)

        assert [h["content"] for h in history] == ["m3", "m4"]

    async def test_history_without_conversation(self, create_student):
        student_id = await create_student()
        assert await get_conversation_history(student_id) == []

    async def test_stats(self, create_student):
        student_id = await create_student()
        await _add_messages(
            student_id,
            ("student", "Hi", "sent"),
            ("agent", "Draft", "draft"),
            ("agent", "Answer", "approved"),
        )

        stats = await get_conversation_stats(student_id)

        assert stats["total_messages"] == 3
        assert stats["student_messages"] == 1
        assert stats["agent_messages"] == 1
        assert stats["pending_drafts"] == 1
        assert stats["last_message_at"] is not None
