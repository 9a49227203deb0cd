"""State definitions for the mentor tool loop."""

from typing import Annotated, Any, Dict, List

from langchain_core.messages import BaseMessage
from langgraph.graph import add_messages
from pydantic import BaseModel
from typing_extensions import TypedDict


class ToolCallRecord(TypedDict):
    """One executed tool call, as stored on the draft."""

    id: str
    name: str
    input: Dict[str, Any]
    result: Any


class ToolLoopState(TypedDict):
    """State carried between the agent and tools nodes."""

    # System prompt, history, user message, then assistant/tool turns
    messages: Annotated[List[BaseMessage], add_messages]

    # LLM calls made so far
    iterations: int

    # Text accumulated across every LLM response
    content: str

    tool_calls: List[ToolCallRecord]

    input_tokens: int
    output_tokens: int


class ToolLoopResult(BaseModel):
    """Final output of a tool loop run."""

    content: str
    tool_calls: List[Dict[str, Any]] = []
    iterations: int = 0
    tokens_used: Dict[str, int] = {"input": 0, "output": 0}


def create_initial_loop_state(messages: List[BaseMessage]) -> ToolLoopState:
    """Initial state for a run over the given prompt messages."""
    return ToolLoopState(
        messages=messages,
        iterations=0,
        content="",
        tool_calls=[],
        input_tokens=0,
        output_tokens=0,
    )
