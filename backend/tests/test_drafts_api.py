"""
Test mentor draft review: the action helper and the drafts endpoints.
"""

import pytest
from httpx import AsyncClient

from mentor_desk.db.base import get_session
from mentor_desk.db.queries import create_message, get_message, get_or_create_conversation
from mentor_desk.messaging import DraftNotFound, InvalidDraftAction, apply_draft_action
from mentor_desk.messaging.drafts import preserve_subject_line


async def add_messages(student_id, *messages):
    """Insert (role, content, status) tuples; returns the new ids."""
    ids = []
    async with get_session() as session:
        conversation = await get_or_create_conversation(session, student_id)
        for role, content, status in messages:
            message = await create_message(session, conversation.id, role, content, status=status)
            ids.append(message.id)
    return ids


class TestPreserveSubjectLine:
    """Test subject carry-over on edits."""

    def test_subject_is_restored(self):
        assert preserve_subject_line("Subject: Week 2\n\nOld body", "New body") == "Subject: Week 2\n\nNew body"

    def test_edit_with_subject_is_kept(self):
        assert preserve_subject_line("Subject: A\n\nx", "Subject: B\n\ny") == "Subject: B\n\ny"

    def test_original_without_subject(self):
        assert preserve_subject_line("Plain draft", "Edited") == "Edited"


class TestApplyDraftAction:
    """Test each review action against the database."""

    async def test_approve(self, create_student):
        student_id = await create_student()
        [draft_id] = await add_messages(student_id, ("agent", "Draft reply", "draft"))

        async with get_session() as session:
            result = await apply_draft_action(session, "approve", draft_id)

        assert result["draft"]["status"] == "approved"
        assert result["draft"]["content"] == "Draft reply"

    async def test_edit_keeps_subject_and_approves(self, create_student):
        student_id = await create_student()
        [draft_id] = await add_messages(student_id, ("agent", "Subject: Re: PINNs\n\nOld", "draft"))

        async with get_session() as session:
            result = await apply_draft_action(session, "edit", draft_id, "Better answer")

        assert result["draft"]["content"] == "Subject: Re: PINNs\n\nBetter answer"
        assert result["draft"]["status"] == "approved"

    async def test_update_keeps_draft_status(self, create_student):
        student_id = await create_student()
        [draft_id] = await add_messages(student_id, ("agent", "Old", "draft"))

        async with get_session() as session:
            result = await apply_draft_action(session, "update", draft_id, "Work in progress")

        assert result["draft"]["content"] == "Work in progress"
        assert result["draft"]["status"] == "draft"

    async def test_reject_deletes(self, create_student):
        student_id = await create_student()
        [draft_id] = await add_messages(student_id, ("agent", "Bad draft", "draft"))

        async with get_session() as session:
            result = await apply_draft_action(session, "reject", draft_id)
        async with get_session() as session:
            assert await get_message(session, draft_id) is None
        assert result["message"] == "Draft rejected"

    async def test_invalid_action_and_missing_content(self, create_student):
        student_id = await create_student()
        [draft_id] = await add_messages(student_id, ("agent", "Draft", "draft"))

        async with get_session() as session:
            with pytest.raises(InvalidDraftAction, match="Invalid action"):
                await apply_draft_action(session, "publish", draft_id)
            with pytest.raises(InvalidDraftAction, match="Content is required"):
                await apply_draft_action(session, "edit", draft_id, "")

    async def test_sent_message_is_not_a_draft(self, create_student):
        student_id = await create_student()
        [message_id] = await add_messages(student_id, ("agent", "Already sent", "sent"))

        async with get_session() as session:
            with pytest.raises(DraftNotFound):
                await apply_draft_action(session, "approve", message_id)


@pytest.mark.asyncio
class TestDraftEndpoints:
    """Test the /drafts routes."""

    async def test_list_drafts_newest_first(self, async_client: AsyncClient, create_student):
        """Only agent drafts are listed, newest first."""
        student_id = await create_student()
        ids = await add_messages(
            student_id,
            ("student", "Question", "sent"),
            ("agent", "First draft", "draft"),
            ("agent", "Approved", "approved"),
            ("agent", "Second draft", "draft"),
        )

        response = await async_client.get("/api/v1/drafts", params={"student_id": student_id})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["count"] == 2
        assert [d["id"] for d in data["drafts"]] == [ids[3], ids[1]]

    async def test_list_drafts_unknown_student(self, async_client: AsyncClient):
        """Unknown students are a 404."""
        response = await async_client.get("/api/v1/drafts", params={"student_id": 999})
        assert response.status_code == 404

    async def test_review_requires_fields(self, async_client: AsyncClient):
        """Missing action or draft id is a 400."""
        response = await async_client.post("/api/v1/drafts", json={"action": "approve"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required fields: action, draft_id"

    async def test_review_invalid_action(self, async_client: AsyncClient, create_student):
        """Unsupported actions are a 400."""
        student_id = await create_student()
        [draft_id] = await add_messages(student_id, ("agent", "Draft", "draft"))

        response = await async_client.post("/api/v1/drafts", json={"action": "send", "draft_id": draft_id})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid action"

    async def test_review_missing_draft(self, async_client: AsyncClient):
        """Unknown drafts are a 404."""
        response = await async_client.post("/api/v1/drafts", json={"action": "approve", "draft_id": 12345})
        assert response.status_code == 404

    async def test_approved_draft_becomes_visible(self, async_client: AsyncClient, create_student):
        """Approving moves the draft into the student's message list."""
        student_id = await create_student()
        [draft_id] = await add_messages(student_id, ("agent", "Hidden until approved", "draft"))

        before = await async_client.get("/api/v1/messages", params={"student_id": student_id})
        assert before.json()["data"]["count"] == 0

        response = await async_client.post("/api/v1/drafts", json={"action": "approve", "draft_id": draft_id})
        assert response.status_code == 200
        assert response.json()["success"] is True

        after = await async_client.get("/api/v1/messages", params={"student_id": student_id})
        assert [m["id"] for m in after.json()["data"]["messages"]] == [draft_id]

    async def test_all_drafts_include_original_message(self, async_client: AsyncClient, create_student):
        """The dashboard feed pairs each draft with the student message before it."""
        ada = await create_student(name="Ada Lovelace", email="ada@example.com")
        grace = await create_student(name="Grace Hopper", email="grace@example.com")
        await add_messages(
            ada,
            ("student", "Old question", "sent"),
            ("student", "How do UDEs work?", "sent"),
            ("agent", "UDEs combine...", "draft"),
        )
        await add_messages(grace, ("agent", "Welcome aboard", "draft"))

        response = await async_client.get("/api/v1/drafts/all")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["count"] == 2
        by_student = {d["student_name"]: d for d in data["drafts"]}
        assert by_student["Ada Lovelace"]["original_message"] == "How do UDEs work?"
        assert by_student["Ada Lovelace"]["ai_response"] == "UDEs combine..."
        assert by_student["Ada Lovelace"]["student_email"] == "ada@example.com"
        assert by_student["Grace Hopper"]["original_message"] == "No message"
