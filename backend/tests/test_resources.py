"""
Test the video curriculum and research topic catalogs.
"""

from mentor_desk.resources import (
    get_lesson,
    get_research_categories,
    get_research_topic,
    get_resource_summary,
    get_video_catalog,
    get_video_topic,
    search_research_topics,
    search_video_catalog,
    suggest_topics,
)
from mentor_desk.resources.research_topics import parse_research_topics
from mentor_desk.resources.video_catalog import parse_video_catalog


class TestVideoCatalog:
    """Test curriculum parsing and search."""

    def test_bundled_catalog_has_eight_topics(self):
        topics = get_video_catalog()
        assert [t.id for t in topics] == list(range(1, 9))
        assert all(t.lesson_count == len(t.lessons) for t in topics)

    def test_lookup(self):
        assert get_video_topic(6).title == "Physics-Informed Neural Networks (PINNs)"
        assert get_video_topic(99) is None
        lesson = get_lesson("3.2")
        assert lesson.topic_id == 3
        assert lesson.title == "Solving ODEs with DifferentialEquations.jl"
        assert get_lesson("3.99") is None

    def test_search_ranks_topics_before_lessons(self):
        results = search_video_catalog("PINN")
        assert results[0].type == "topic"
        assert results[0].topic_id == 6
        assert results[0].score == 1.0
        lesson_ids = [r.lesson_id for r in results if r.type == "lesson"]
        assert lesson_ids == ["6.1", "6.3", "6.4"]
        assert all(r.score == 0.8 for r in results[1:])

    def test_blank_query(self):
        assert search_video_catalog("   ") == []

    def test_parser_counts_lessons_without_count_line(self):
        topics = parse_video_catalog(
            "# Title\n\n- stray bullet\n\n## 1. Intro\n- One\n- Two\n\n## 2. Next\n*5 lessons*\n- Only\n"
        )
        assert [(t.id, t.lesson_count) for t in topics] == [(1, 2), (2, 5)]
        assert [l.id for l in topics[0].lessons] == ["1.1", "1.2"]


class TestResearchTopics:
    """Test research catalog parsing, search and suggestions."""

    def test_bundled_categories(self):
        categories = get_research_categories()
        assert [c.id for c in categories] == [1, 2, 3, 4, 5]
        assert categories[0].title == "Physics-Informed Neural Networks (PINNs)"
        assert all(c.topics for c in categories)

    def test_topic_lookup(self):
        topic = get_research_topic("2.1")
        assert topic.title == "Discovering Missing Physics in Epidemic Models"
        assert topic.category_id == 2
        assert "SIR model" in topic.description
        assert get_research_topic("9.9") is None

    def test_search_with_category_filter(self):
        results = search_research_topics("neural", category="bayesian")
        assert [r.id for r in results] == ["4.1", "4.2"]
        assert [r.score for r in results] == [1.0, 0.9]

    def test_search_matches_description(self):
        results = search_research_topics("sir model")
        assert [(r.id, r.score) for r in results] == [("2.1", 0.7)]

    def test_suggestions_rank_by_matched_interests(self):
        suggestions = suggest_topics(["healthcare", "clinical", "  "])
        assert suggestions[0].id == "3.1"
        assert suggestions[0].score == 2
        assert suggestions[0].matched_interests == ["healthcare", "clinical"]

    def test_suggestions_are_capped(self):
        assert len(suggest_topics(["a", "e"])) <= 10

    def test_parser_joins_description_lines(self):
        categories = parse_research_topics(
            "## 1. Cat\n\n### 1.1 First\nLine one\nline two\n\n### 1.2. Second\nText\n## 2. Other\n"
        )
        assert [t.id for t in categories[0].topics] == ["1.1", "1.2"]
        assert categories[0].topics[0].description == "Line one line two"
        assert categories[1].topics == []


def test_resource_summary_lists_both_catalogs():
    summary = get_resource_summary()
    assert "6. Physics-Informed Neural Networks (PINNs) (4 lessons)" in summary
    assert "### Research Topic Categories (Phase II)" in summary
    assert "5. SciML + LLMs (3 topics)" in summary
