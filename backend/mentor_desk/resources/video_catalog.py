"""Phase I video curriculum catalog.

Parses the curriculum markdown file into topics and lessons:

    ## 3. Ordinary Differential Equations (ODEs) in Julia
    *3 lessons*

    - What are ordinary differential equations

Lesson ids are ``"<topic>.<lesson>"`` (e.g. ``"3.2"``).
"""

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel

from ..core.config import get_settings

logger = logging.getLogger(__name__)

VIDEO_CATALOG_FILE = "video_catalog.md"

TOPIC_TITLE_SCORE = 1.0
LESSON_TITLE_SCORE = 0.8

_TOPIC_RE = re.compile(r"^##\s+(\d+)\.\s+(.+?)\s*$")
_LESSON_COUNT_RE = re.compile(r"^\*(\d+)\s+lessons?\*\s*$", re.IGNORECASE)
_LESSON_RE = re.compile(r"^[-*]\s+(.+?)\s*$")


class Lesson(BaseModel):
    """A single video lesson."""

    id: str
    topic_id: int
    index: int
    title: str


class VideoTopic(BaseModel):
    """A curriculum topic and its lessons."""

    id: int
    title: str
    lesson_count: int
    lessons: List[Lesson] = []


class VideoSearchResult(BaseModel):
    """A scored match from the curriculum."""

    type: str  # "topic" | "lesson"
    topic_id: int
    topic_title: str
    lesson_id: Optional[str] = None
    lesson_title: Optional[str] = None
    score: float


def resources_dir() -> Path:
    """Directory holding the catalog markdown files."""
    configured = get_settings().RESOURCES_DIR
    if configured:
        return Path(configured)
    return Path(__file__).parent / "data"


def parse_video_catalog(markdown: str) -> List[VideoTopic]:
    """Parse curriculum markdown into topics with numbered lessons."""
    topics: List[VideoTopic] = []
    current: Optional[VideoTopic] = None

    for raw_line in markdown.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        topic_match = _TOPIC_RE.match(line)
        if topic_match:
            current = VideoTopic(
                id=int(topic_match.group(1)),
                title=topic_match.group(2),
                lesson_count=0,
                lessons=[],
            )
            topics.append(current)
            continue

        if current is None:
            continue

        count_match = _LESSON_COUNT_RE.match(line)
        if count_match:
            current.lesson_count = int(count_match.group(1))
            continue

        lesson_match = _LESSON_RE.match(line)
        if lesson_match:
            index = len(current.lessons) + 1
            current.lessons.append(
                Lesson(
                    id=f"{current.id}.{index}",
                    topic_id=current.id,
                    index=index,
                    title=lesson_match.group(1),
                )
            )

    # Fall back to the parsed lessons when the count line is missing
    for topic in topics:
        if topic.lesson_count == 0:
            topic.lesson_count = len(topic.lessons)

    return topics


@lru_cache()
def _load_catalog(path: str) -> tuple:
    text = Path(path).read_text(encoding="utf-8")
    topics = parse_video_catalog(text)
    logger.info(f"Loaded video catalog with {len(topics)} topics from {path}")
    return tuple(topics)


def get_video_catalog() -> List[VideoTopic]:
    """All curriculum topics, in order."""
    return list(_load_catalog(str(resources_dir() / VIDEO_CATALOG_FILE)))


def get_video_topic(topic_id: int) -> Optional[VideoTopic]:
    """Look up a topic by its number."""
    for topic in get_video_catalog():
        if topic.id == topic_id:
            return topic
    return None


def get_lesson(lesson_id: str) -> Optional[Lesson]:
    """Look up a lesson by its ``"topic.lesson"`` id."""
    for topic in get_video_catalog():
        for lesson in topic.lessons:
            if lesson.id == lesson_id:
                return lesson
    return None


def search_video_catalog(query: str) -> List[VideoSearchResult]:
    """
    Case-insensitive substring search over topic and lesson titles.

    Args:
        query: Topic, keyword, or concept

    Returns:
        Matches sorted by score (topic title 1.0, lesson title 0.8)
    """
    needle = query.strip().lower()
    if not needle:
        return []

    results: List[VideoSearchResult] = []
    for topic in get_video_catalog():
        if needle in topic.title.lower():
            results.append(
                VideoSearchResult(
                    type="topic",
                    topic_id=topic.id,
                    topic_title=topic.title,
                    score=TOPIC_TITLE_SCORE,
                )
            )
        for lesson in topic.lessons:
            if needle in lesson.title.lower():
                results.append(
                    VideoSearchResult(
                        type="lesson",
                        topic_id=topic.id,
                        topic_title=topic.title,
                        lesson_id=lesson.id,
                        lesson_title=lesson.title,
                        score=LESSON_TITLE_SCORE,
                    )
                )

    results.sort(key=lambda r: r.score, reverse=True)
    return results
