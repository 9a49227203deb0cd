"""Memory tools: let the agent read and record long-term facts about a student."""

import logging
from typing import Any, Dict, List

from mentor_desk.memory import (
    append_student_memory,
    get_student_memory,
    get_student_profile,
    set_student_memory,
)

from .registry import ToolContext, ToolDefinition, ToolRegistry, ToolResult, missing_parameter

logger = logging.getLogger(__name__)


MEMORY_TOOL_DEFINITIONS: Dict[str, ToolDefinition] = {
    "get_student_memory": {
        "name": "get_student_memory",
        "description": "Retrieve information from long-term memory about the student.",
        "input_schema": {
            "type": "object",
            "properties": {
                "key": {
                    "type": "string",
                    "description": (
                        "Memory key (e.g., 'profile.interests', 'profile.learning_style'). "
                        "If not specified, returns full student profile."
                    ),
                },
            },
            "required": [],
        },
    },
    "save_student_memory": {
        "name": "save_student_memory",
        "description": (
            "Save important information about the student to long-term memory for future reference."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "key": {"type": "string", "description": "Memory key"},
                "value": {"type": "string", "description": "Value to store"},
                "append": {"type": "boolean", "description": "If true, append to existing array"},
            },
            "required": ["key", "value"],
        },
    },
}


async def get_student_memory_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    student_id = context["student_id"]
    key = params.get("key")

    try:
        if not key:
            profile = await get_student_profile(student_id)
            if profile is None:
                return {"success": False, "error": f"Student {student_id} not found"}
            return {"success": True, "data": {"profile": profile.model_dump()}}

        value = await get_student_memory(student_id, key)
        return {"success": True, "data": {"key": key, "value": value}}
    except Exception as e:
        logger.error(f"Error reading student memory: {e}")
        return {"success": False, "error": str(e)}


async def save_student_memory_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    student_id = context["student_id"]
    key = params.get("key")
    value = params.get("value")
    append = bool(params.get("append"))

    if not key or not isinstance(key, str):
        return missing_parameter("key")
    if value is None:
        return missing_parameter("value")

    try:
        if append:
            await append_student_memory(student_id, key, value)
        else:
            await set_student_memory(student_id, key, value)

        return {
            "success": True,
            "data": {
                "message": f"Memory {'appended to' if append else 'saved for'} key: {key}",
                "key": key,
                "value": value,
            },
        }
    except Exception as e:
        logger.error(f"Error saving student memory: {e}")
        return {"success": False, "error": str(e)}


def register_memory_tools(registry: ToolRegistry) -> None:
    registry.register(MEMORY_TOOL_DEFINITIONS["get_student_memory"], get_student_memory_tool)
    registry.register(MEMORY_TOOL_DEFINITIONS["save_student_memory"], save_student_memory_tool)


def get_memory_tools() -> List[ToolDefinition]:
    return list(MEMORY_TOOL_DEFINITIONS.values())
