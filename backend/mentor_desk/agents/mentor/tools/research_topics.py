"""Research topic tools used while a student chooses a Phase II project."""

import logging
from typing import Any, Dict, List

from mentor_desk.resources import get_research_topic, search_research_topics, suggest_topics

from .registry import ToolContext, ToolDefinition, ToolRegistry, ToolResult, missing_parameter

logger = logging.getLogger(__name__)


# =============================================================================
# Definitions
# =============================================================================

RESEARCH_TOOL_DEFINITIONS: Dict[str, ToolDefinition] = {
    "search_research_topics": {
        "name": "search_research_topics",
        "description": (
            "Search available research topics by keyword or category. Use when helping "
            "a student choose their research project."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query or interest area",
                },
                "category": {
                    "type": "string",
                    "description": "Optional category filter (e.g., 'Neural ODEs', 'PINNs')",
                },
            },
            "required": ["query"],
        },
    },
    "get_topic_details": {
        "name": "get_topic_details",
        "description": "Get full details of a specific research topic including its description.",
        "input_schema": {
            "type": "object",
            "properties": {
                "topic_id": {
                    "type": "string",
                    "description": "Topic ID (e.g., '1.2' for Category 1, Topic 2)",
                },
            },
            "required": ["topic_id"],
        },
    },
    "suggest_topics": {
        "name": "suggest_topics",
        "description": "Get topic suggestions based on student interests and background.",
        "input_schema": {
            "type": "object",
            "properties": {
                "interests": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "List of student interests (e.g., ['healthcare', 'epidemics'])",
                },
            },
            "required": ["interests"],
        },
    },
}


# =============================================================================
# Handlers
# =============================================================================

async def search_research_topics_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    query = params.get("query")
    category = params.get("category")
    if not query or not isinstance(query, str):
        return missing_parameter("query")

    try:
        results = [result.model_dump() for result in search_research_topics(query, category)]
        return {
            "success": True,
            "data": {
                "query": query,
                "category": category or None,
                "results": results,
                "count": len(results),
            },
        }
    except Exception as e:
        logger.error(f"Error searching research topics: {e}")
        return {"success": False, "error": str(e)}


async def get_topic_details_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    topic_id = params.get("topic_id")
    if not topic_id:
        return missing_parameter("topic_id")
    topic_id = str(topic_id)

    try:
        topic = get_research_topic(topic_id)
        if topic is None:
            return {"success": False, "error": f"Research topic {topic_id} not found"}
        return {"success": True, "data": {"topic": topic.model_dump()}}
    except Exception as e:
        logger.error(f"Error getting topic details: {e}")
        return {"success": False, "error": str(e)}


async def suggest_topics_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    interests = params.get("interests")
    if not interests or not isinstance(interests, list):
        return missing_parameter("interests (must be an array)")

    try:
        suggestions = [suggestion.model_dump() for suggestion in suggest_topics(interests)]
        return {
            "success": True,
            "data": {
                "interests": interests,
                "suggestions": suggestions,
                "count": len(suggestions),
            },
        }
    except Exception as e:
        logger.error(f"Error suggesting topics: {e}")
        return {"success": False, "error": str(e)}


# =============================================================================
# Registration
# =============================================================================

def register_research_topics_tools(registry: ToolRegistry) -> None:
    registry.register(RESEARCH_TOOL_DEFINITIONS["search_research_topics"], search_research_topics_tool)
    registry.register(RESEARCH_TOOL_DEFINITIONS["get_topic_details"], get_topic_details_tool)
    registry.register(RESEARCH_TOOL_DEFINITIONS["suggest_topics"], suggest_topics_tool)


def get_research_topics_tools() -> List[ToolDefinition]:
    return list(RESEARCH_TOOL_DEFINITIONS.values())
