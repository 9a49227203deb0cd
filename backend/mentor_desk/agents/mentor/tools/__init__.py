"""Mentor agent tools.

Tools are grouped by concern and registered into a ``ToolRegistry``:
- Video catalog: Phase I curriculum lookups
- Research topics: Phase II topic exploration
- Progress: reading and advancing the student's position
- Memory: long-term facts about the student
- Roadmap: research plan generation and milestone lookups

Phase I sees video, progress and memory tools. Phase II sees research,
progress, memory and roadmap tools.
"""

from .memory import get_memory_tools, register_memory_tools
from .progress import get_progress_tools, register_progress_tools
from .registry import ToolContext, ToolDefinition, ToolHandler, ToolRegistry, ToolResult
from .research_topics import get_research_topics_tools, register_research_topics_tools
from .roadmap import (
    RoadmapDocument,
    generate_roadmap_for_student,
    get_roadmap_tools,
    register_roadmap_tools,
)
from .video_catalog import get_video_catalog_tools, register_video_catalog_tools


def create_tool_registry() -> ToolRegistry:
    """Registry with every tool."""
    registry = ToolRegistry()
    register_video_catalog_tools(registry)
    register_research_topics_tools(registry)
    register_progress_tools(registry)
    register_memory_tools(registry)
    register_roadmap_tools(registry)
    return registry


def create_phase1_tool_registry() -> ToolRegistry:
    """Registry for Phase I: curriculum, progress and memory tools."""
    registry = ToolRegistry()
    register_video_catalog_tools(registry)
    register_progress_tools(registry)
    register_memory_tools(registry)
    return registry


def create_phase2_tool_registry() -> ToolRegistry:
    """Registry for Phase II: research, progress, memory and roadmap tools."""
    registry = ToolRegistry()
    register_research_topics_tools(registry)
    register_progress_tools(registry)
    register_memory_tools(registry)
    register_roadmap_tools(registry)
    return registry


def create_registry_for_phase(phase: str) -> ToolRegistry:
    """Pick the registry matching a student's phase."""
    if phase == "phase2":
        return create_phase2_tool_registry()
    return create_phase1_tool_registry()


__all__ = [
    "ToolContext",
    "ToolDefinition",
    "ToolHandler",
    "ToolRegistry",
    "ToolResult",
    "RoadmapDocument",
    "create_tool_registry",
    "create_phase1_tool_registry",
    "create_phase2_tool_registry",
    "create_registry_for_phase",
    "generate_roadmap_for_student",
    "get_memory_tools",
    "get_progress_tools",
    "get_research_topics_tools",
    "get_roadmap_tools",
    "get_video_catalog_tools",
]
