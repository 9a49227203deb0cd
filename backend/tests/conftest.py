"""
Pytest configuration and fixtures for Mentor Desk tests.
"""

import os
from pathlib import Path
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from langchain_core.messages import AIMessage

# Configure the environment before the application reads its settings
os.environ.setdefault("LLM_API_KEY", "test-key")
os.environ["LANGSMITH_TRACING"] = "false"

from mentor_desk.core.timeutil import utc_now_iso
from mentor_desk.db.base import close_all, drop_databases, get_session, init_databases
from mentor_desk.db.models import Student
from mentor_desk.db.queries import create_user
from mentor_desk.main import app


@pytest.fixture
async def db(tmp_path: Path, monkeypatch) -> AsyncGenerator[None, None]:
    """Fresh SQLite database per test."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await close_all()
    await init_databases()
    yield
    await drop_databases()
    await close_all()


@pytest.fixture
async def async_client(db) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def create_student(db) -> Callable[..., Any]:
    """Factory inserting a user and student; returns the student id."""
    counter = {"n": 0}

    async def _create(
        name: str = "Ada Lovelace",
        email: Optional[str] = None,
        **fields: Any,
    ) -> int:
        counter["n"] += 1
        email = email or f"student{counter['n']}@example.com"
        async with get_session() as session:
            user = await create_user(session, name, email)
            values: Dict[str, Any] = {
                "user_id": user.id,
                "enrollment_date": utc_now_iso(),
                "phase1_start": utc_now_iso(),
            }
            values.update(fields)
            student = Student(**values)
            session.add(student)
            await session.commit()
            return student.id

    return _create


class FakeChatModel:
    """
    Scripted stand-in for a chat model.

    Each ``ainvoke`` returns a copy of the next scripted ``AIMessage``; the
    last one repeats once the script runs out. Calls record whether tools
    were bound so tests can tell loop calls from the final answer call.
    """

    def __init__(self, responses: List[AIMessage]):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []
        self.bound_tools: Optional[List[Dict[str, Any]]] = None
        self.bind_kwargs: Dict[str, Any] = {}

    def bind_tools(self, tools, **kwargs):
        self.bound_tools = list(tools)
        self.bind_kwargs = kwargs
        return _BoundFakeChatModel(self)

    async def _respond(self, messages, with_tools: bool) -> AIMessage:
        self.calls.append({"messages": list(messages), "with_tools": with_tools})
        index = min(len(self.calls) - 1, len(self.responses) - 1)
        return self.responses[index].model_copy(deep=True)

    async def ainvoke(self, messages, config=None, **kwargs) -> AIMessage:
        return await self._respond(messages, with_tools=False)


class _BoundFakeChatModel:
    def __init__(self, parent: FakeChatModel):
        self.parent = parent

    async def ainvoke(self, messages, config=None, **kwargs) -> AIMessage:
        return await self.parent._respond(messages, with_tools=True)


def _usage_metadata(usage: Optional[Dict[str, int]]) -> Optional[Dict[str, int]]:
    if not usage:
        return None
    return {
        "input_tokens": usage.get("input", 0),
        "output_tokens": usage.get("output", 0),
        "total_tokens": usage.get("input", 0) + usage.get("output", 0),
    }


def tool_call_message(*calls: Dict[str, Any], content: str = "", usage: Optional[Dict[str, int]] = None) -> AIMessage:
    """AIMessage requesting tools; each call is {"name", "args"[, "id"]}."""
    tool_calls = [
        {"name": call["name"], "args": call.get("args", {}), "id": call.get("id", f"call_{i}")}
        for i, call in enumerate(calls)
    ]
    return AIMessage(content=content, tool_calls=tool_calls, usage_metadata=_usage_metadata(usage))


def text_message(content: str, usage: Optional[Dict[str, int]] = None) -> AIMessage:
    """Plain AIMessage with optional usage metadata."""
    return AIMessage(content=content, usage_metadata=_usage_metadata(usage))


@pytest.fixture
def fake_llm() -> Callable[..., FakeChatModel]:
    """Factory for scripted chat models."""
    return FakeChatModel


@pytest.fixture
def ai_tool_call() -> Callable[..., AIMessage]:
    return tool_call_message


@pytest.fixture
def ai_text() -> Callable[..., AIMessage]:
    return text_message
