"""Tool registry for the mentor agent.

A tool is a JSON-schema described function the LLM may call. The registry
maps tool names to async handlers and executes them with a per-request
context. Handlers return a ``ToolResult``; the registry guarantees that a
failing or missing handler still yields one instead of raising.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from typing_extensions import NotRequired, TypedDict

logger = logging.getLogger(__name__)


class ToolDefinition(TypedDict):
    """Name, description and JSON-schema input of a tool."""

    name: str
    description: str
    input_schema: Dict[str, Any]


class ToolContext(TypedDict):
    """Per-request context passed to every handler."""

    student_id: int
    current_phase: str  # "phase1" | "phase2"
    conversation_id: NotRequired[Optional[int]]


class ToolResult(TypedDict):
    """Uniform handler result."""

    success: bool
    data: NotRequired[Any]
    error: NotRequired[str]


ToolHandler = Callable[[Dict[str, Any], ToolContext], Awaitable[ToolResult]]


def missing_parameter(name: str) -> ToolResult:
    """Standard result for a missing required parameter."""
    return {"success": False, "error": f"Missing required parameter: {name}"}


class ToolRegistry:
    """Maps tool names to definitions and handlers."""

    def __init__(self):
        self._tools: Dict[str, ToolDefinition] = {}
        self._handlers: Dict[str, ToolHandler] = {}

    def register(self, definition: ToolDefinition, handler: ToolHandler) -> None:
        """
        Register a tool.

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        name = definition["name"]
        if name in self._tools:
            raise ValueError(f"Tool {name} is already registered")
        self._tools[name] = definition
        self._handlers[name] = handler

    def has_tool(self, name: str) -> bool:
        return name in self._handlers

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def get_tools(self) -> List[ToolDefinition]:
        return list(self._tools.values())

    def get_tool_names(self) -> List[str]:
        return list(self._tools.keys())

    def get_openai_tools(self) -> List[Dict[str, Any]]:
        """Definitions in OpenAI function-calling format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": tool["name"],
                    "description": tool["description"],
                    "parameters": tool["input_schema"],
                },
            }
            for tool in self._tools.values()
        ]

    async def execute(self, name: str, params: Dict[str, Any], context: ToolContext) -> ToolResult:
        """
        Run a tool by name.

        Args:
            name: Tool name
            params: Arguments produced by the LLM
            context: Student and phase for this request

        Returns:
            The handler's ToolResult, or a failure result if the tool is
            unknown or the handler raised
        """
        handler = self._handlers.get(name)
        if handler is None:
            return {"success": False, "error": f"Tool {name} not found"}

        try:
            return await handler(params or {}, context)
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}")
            return {"success": False, "error": str(e)}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return self.has_tool(name)
