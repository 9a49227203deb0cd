"""Video curriculum tools.

These tools let the agent:
- Search the Phase I curriculum for lessons on a concept
- Pull accurate details for a specific lesson
"""

import logging
from typing import Any, Dict, List

from mentor_desk.resources import get_lesson, get_video_topic, search_video_catalog

from .registry import ToolContext, ToolDefinition, ToolRegistry, ToolResult, missing_parameter

logger = logging.getLogger(__name__)


# =============================================================================
# Definitions
# =============================================================================

VIDEO_TOOL_DEFINITIONS: Dict[str, ToolDefinition] = {
    "search_video_catalog": {
        "name": "search_video_catalog",
        "description": (
            "Search the video curriculum for lessons matching a query. Use this when a "
            "student asks about a specific topic to find relevant lessons."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query (topic, keyword, or concept)",
                },
            },
            "required": ["query"],
        },
    },
    "get_lesson_details": {
        "name": "get_lesson_details",
        "description": (
            "Get full details of a specific lesson by ID. Use this to provide accurate "
            "information about lesson content."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "lesson_id": {
                    "type": "string",
                    "description": "Lesson ID (e.g., '3.2' for Topic 3, Lesson 2)",
                },
            },
            "required": ["lesson_id"],
        },
    },
}


# =============================================================================
# Handlers
# =============================================================================

async def search_video_catalog_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    query = params.get("query")
    if not query or not isinstance(query, str):
        return missing_parameter("query")

    try:
        results = [result.model_dump() for result in search_video_catalog(query)]
        return {
            "success": True,
            "data": {"query": query, "results": results, "count": len(results)},
        }
    except Exception as e:
        logger.error(f"Error searching video catalog: {e}")
        return {"success": False, "error": str(e)}


async def get_lesson_details_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    lesson_id = params.get("lesson_id")
    if not lesson_id:
        return missing_parameter("lesson_id")
    lesson_id = str(lesson_id)

    try:
        lesson = get_lesson(lesson_id)
        if lesson is None:
            return {"success": False, "error": f"Lesson {lesson_id} not found"}

        topic = get_video_topic(lesson.topic_id)
        return {
            "success": True,
            "data": {
                "lesson": lesson.model_dump(),
                "topic": {
                    "id": topic.id,
                    "title": topic.title,
                    "lesson_count": topic.lesson_count,
                } if topic else None,
            },
        }
    except Exception as e:
        logger.error(f"Error getting lesson details: {e}")
        return {"success": False, "error": str(e)}


# =============================================================================
# Registration
# =============================================================================

def register_video_catalog_tools(registry: ToolRegistry) -> None:
    registry.register(VIDEO_TOOL_DEFINITIONS["search_video_catalog"], search_video_catalog_tool)
    registry.register(VIDEO_TOOL_DEFINITIONS["get_lesson_details"], get_lesson_details_tool)


def get_video_catalog_tools() -> List[ToolDefinition]:
    return list(VIDEO_TOOL_DEFINITIONS.values())
