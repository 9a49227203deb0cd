"""Phase II research topic catalog.

Parses the research topics markdown file:

    ## 1. Physics-Informed Neural Networks (PINNs)

    ### 1.1 Adaptive Loss Weighting for PINNs
    Description lines...
"""

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel

from .video_catalog import resources_dir

logger = logging.getLogger(__name__)

RESEARCH_TOPICS_FILE = "research_topics.md"

TITLE_SCORE = 1.0
CATEGORY_SCORE = 0.9
DESCRIPTION_SCORE = 0.7
DESCRIPTION_PREVIEW_LENGTH = 200
MAX_SUGGESTIONS = 10

_CATEGORY_RE = re.compile(r"^##\s+(\d+)\.\s+(.+?)\s*$")
_TOPIC_RE = re.compile(r"^###\s+(\d+\.\d+)\.?\s+(.+?)\s*$")


class ResearchTopic(BaseModel):
    """A research project topic."""

    id: str
    title: str
    description: str
    category: str
    category_id: int


class ResearchCategory(BaseModel):
    """A group of related research topics."""

    id: int
    title: str
    topics: List[ResearchTopic] = []


class ResearchSearchResult(BaseModel):
    """A scored match from the research catalog."""

    id: str
    title: str
    category: str
    description: str
    score: float


class TopicSuggestion(BaseModel):
    """A research topic ranked against student interests."""

    id: str
    title: str
    category: str
    description: str
    score: int
    matched_interests: List[str] = []


def parse_research_topics(markdown: str) -> List[ResearchCategory]:
    """Parse research markdown into categories with topics."""
    categories: List[ResearchCategory] = []
    category: Optional[ResearchCategory] = None
    topic: Optional[ResearchTopic] = None
    description_lines: List[str] = []

    def flush_topic():
        if topic is not None:
            topic.description = " ".join(description_lines).strip()

    for raw_line in markdown.splitlines():
        line = raw_line.strip()

        topic_match = _TOPIC_RE.match(line)
        if topic_match and category is not None:
            flush_topic()
            topic = ResearchTopic(
                id=topic_match.group(1),
                title=topic_match.group(2),
                description="",
                category=category.title,
                category_id=category.id,
            )
            description_lines = []
            category.topics.append(topic)
            continue

        category_match = _CATEGORY_RE.match(line)
        if category_match:
            flush_topic()
            topic = None
            description_lines = []
            category = ResearchCategory(
                id=int(category_match.group(1)),
                title=category_match.group(2),
                topics=[],
            )
            categories.append(category)
            continue

        if topic is not None and line and not line.startswith("#"):
            description_lines.append(line)

    flush_topic()
    return categories


@lru_cache()
def _load_categories(path: str) -> tuple:
    text = Path(path).read_text(encoding="utf-8")
    categories = parse_research_topics(text)
    logger.info(f"Loaded {len(categories)} research categories from {path}")
    return tuple(categories)


def get_research_categories() -> List[ResearchCategory]:
    """All research categories, in order."""
    return list(_load_categories(str(resources_dir() / RESEARCH_TOPICS_FILE)))


def get_all_research_topics() -> List[ResearchTopic]:
    """Flat list of every research topic."""
    return [topic for category in get_research_categories() for topic in category.topics]


def get_research_topic(topic_id: str) -> Optional[ResearchTopic]:
    """Look up a topic by its ``"category.topic"`` id."""
    for topic in get_all_research_topics():
        if topic.id == topic_id:
            return topic
    return None


def _preview(description: str) -> str:
    if len(description) <= DESCRIPTION_PREVIEW_LENGTH:
        return description
    return description[:DESCRIPTION_PREVIEW_LENGTH] + "..."


def search_research_topics(query: str, category: Optional[str] = None) -> List[ResearchSearchResult]:
    """
    Search research topics by keyword, optionally within a category.

    Args:
        query: Search query or interest area
        category: Optional case-insensitive category filter (substring)

    Returns:
        Matches sorted by score (title 1.0, category 0.9, description 0.7)
    """
    needle = query.strip().lower()
    category_filter = (category or "").strip().lower()
    results: List[ResearchSearchResult] = []

    for topic in get_all_research_topics():
        if category_filter and category_filter not in topic.category.lower():
            continue

        if needle in topic.title.lower():
            score = TITLE_SCORE
        elif needle in topic.category.lower():
            score = CATEGORY_SCORE
        elif needle in topic.description.lower():
            score = DESCRIPTION_SCORE
        else:
            continue

        results.append(
            ResearchSearchResult(
                id=topic.id,
                title=topic.title,
                category=topic.category,
                description=_preview(topic.description),
                score=score,
            )
        )

    results.sort(key=lambda r: r.score, reverse=True)
    return results


def suggest_topics(interests: Iterable[str]) -> List[TopicSuggestion]:
    """Rank topics by how many interests appear in their title, description or category."""
    cleaned = [str(interest).strip().lower() for interest in interests if str(interest).strip()]
    suggestions: List[TopicSuggestion] = []

    for topic in get_all_research_topics():
        haystack = f"{topic.title} {topic.description} {topic.category}".lower()
        matched = [interest for interest in cleaned if interest in haystack]
        if not matched:
            continue
        suggestions.append(
            TopicSuggestion(
                id=topic.id,
                title=topic.title,
                category=topic.category,
                description=_preview(topic.description),
                score=len(matched),
                matched_interests=matched,
            )
        )

    suggestions.sort(key=lambda s: s.score, reverse=True)
    return suggestions[:MAX_SUGGESTIONS]
