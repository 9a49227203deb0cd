"""Curriculum and research catalogs used by the mentor tools."""

from .research_topics import (
    ResearchCategory,
    ResearchTopic,
    get_all_research_topics,
    get_research_categories,
    get_research_topic,
    search_research_topics,
    suggest_topics,
)
from .video_catalog import (
    Lesson,
    VideoTopic,
    get_lesson,
    get_video_catalog,
    get_video_topic,
    search_video_catalog,
)


def get_resource_summary() -> str:
    """Short text overview of the available catalogs and tools."""
    lines = ["## Available Resources", "", "### Video Curriculum (Phase I)"]
    for topic in get_video_catalog():
        lines.append(f"{topic.id}. {topic.title} ({topic.lesson_count} lessons)")

    lines.extend(["", "### Research Topic Categories (Phase II)"])
    for category in get_research_categories():
        lines.append(f"{category.id}. {category.title} ({len(category.topics)} topics)")

    lines.extend([
        "",
        "### Tools",
        "- search_video_catalog / get_lesson_details for curriculum questions",
        "- search_research_topics / get_topic_details / suggest_topics for topic selection",
    ])
    return "\n".join(lines)


__all__ = [
    "Lesson",
    "VideoTopic",
    "ResearchCategory",
    "ResearchTopic",
    "get_lesson",
    "get_video_catalog",
    "get_video_topic",
    "search_video_catalog",
    "get_all_research_topics",
    "get_research_categories",
    "get_research_topic",
    "search_research_topics",
    "suggest_topics",
    "get_resource_summary",
]
