"""
Test Phase I and Phase II guidance helpers.
"""

from datetime import datetime

import pytest

from mentor_desk.agents.mentor import phase1, phase2
from mentor_desk.memory import StudentProfile

NOW = datetime(2026, 5, 1, 12, 0, 0)


def make_profile(**fields) -> StudentProfile:
    return StudentProfile(student_id=1, name="Ada", email="ada@example.com", **fields)


class TestPhase1:
    """Test Phase I context, reminders and transition."""

    def test_context_reports_progress(self):
        context = phase1.build_phase1_context(make_profile(current_topic_index=4, topics_completed=3))
        assert "Current topic: 4 of 8" in context
        assert "Overall progress: 38%" in context
        assert "Warning" not in context
        assert "## Video Curriculum Topics" in context

    def test_context_warns_after_six_weeks(self):
        assert "Warning" not in phase1.build_phase1_context(make_profile(days_in_current_phase=42))
        context = phase1.build_phase1_context(make_profile(days_in_current_phase=43))
        assert "Warning: Student has been in Phase I for over 6 weeks" in context

    @pytest.mark.parametrize(
        "days,header",
        [(2, None), (3, "## Engagement Note"), (6, "## Engagement Note"), (7, "## Re-engagement Note")],
    )
    def test_reminder_thresholds(self, days, header):
        reminder = phase1.get_phase1_reminder_context(days)
        if header is None:
            assert reminder == ""
        else:
            assert header in reminder
            assert f"It's been {days} days" in reminder

    def test_topic_context(self):
        assert "PINN" in phase1.get_topic_context(6)
        assert phase1.get_topic_context(0) == ""
        assert phase1.get_topic_context(9) == ""

    def test_transition_rules(self):
        assert not phase1.should_transition_to_phase2(make_profile(topics_completed=5, days_in_current_phase=41))
        assert phase1.should_transition_to_phase2(make_profile(topics_completed=6))
        assert phase1.should_transition_to_phase2(make_profile(days_in_current_phase=42))
        assert not phase1.should_transition_to_phase2(
            make_profile(current_phase="phase2", topics_completed=8, days_in_current_phase=90)
        )

    def test_prompt_for_quiet_student_near_transition(self):
        profile = make_profile(current_topic_index=7, topics_completed=6, days_in_current_phase=20)
        prompt = phase1.build_phase1_prompt(profile, "2026-04-22T12:00:00", NOW)

        assert "## Current Topic Focus" in prompt
        assert "Neural ODE" in prompt
        assert "## Phase I to Phase II Transition" in prompt
        assert "(6/8 topics)" in prompt
        assert "## Re-engagement Note" in prompt

    def test_prompt_for_active_student(self):
        prompt = phase1.build_phase1_prompt(make_profile(), "2026-04-30T12:00:00", NOW)
        assert "Transition" not in prompt
        assert "Engagement Note" not in prompt

    def test_prompt_without_last_message(self):
        prompt = phase1.build_phase1_prompt(make_profile(), None, NOW)
        assert "Engagement Note" not in prompt


class TestPhase2:
    """Test Phase II context, check-ins and topic suggestions."""

    def test_milestone_status(self):
        assert phase2.get_milestone_status(0) == "Not started"
        assert phase2.get_milestone_status(5) == "Manuscript Complete"
        assert phase2.get_milestone_status(6) == "Unknown"

    def test_context_without_topic(self):
        context = phase2.build_phase2_context(make_profile(current_phase="phase2"))
        assert "Research topic: Not yet selected" in context
        assert "Warning: Student has not selected a research topic yet." in context
        assert "### Topic Selection Mode" in context

    def test_context_picks_behaviour_by_milestone(self):
        early = phase2.build_phase2_context(
            make_profile(current_phase="phase2", research_topic="PINNs", current_milestone=2)
        )
        late = phase2.build_phase2_context(
            make_profile(current_phase="phase2", research_topic="PINNs", current_milestone=3)
        )
        assert "### Milestones 1-2 Guidance" in early
        assert "Current milestone: 2 of 5" in early
        assert "### Milestones 3-4 Guidance" in late
        assert "May need manuscript guidance soon" in late

    def test_check_in_on_track_boundary(self):
        assert "Status: On track" in phase2.get_milestone_check_in_prompt(2, 16)
        behind = phase2.get_milestone_check_in_prompt(2, 17)
        assert "Status: May need acceleration" in behind
        assert "taking longer than expected" in behind
        assert "Expected duration: 14 days" in behind

    def test_topic_selection_state(self):
        assert phase2.handle_topic_selection(make_profile()) == "no_topic"
        assert phase2.handle_topic_selection(make_profile(research_topic="UDEs")) == "selected"
        assert phase2.handle_topic_selection(
            make_profile(research_topic="UDEs", current_milestone=1)
        ) == "roadmap_generated"

    def test_topic_suggestions(self):
        suggestions = phase2.get_phase2_topic_suggestions(
            ["Physics simulation", "Bayesian methods"], ["heat equation"]
        )
        assert suggestions == ["Physics-Informed Neural Networks (PINNs)", "Bayesian Neural ODEs"]
        assert phase2.get_phase2_topic_suggestions(["poetry"]) == []

    def test_ready_for_manuscript(self):
        assert not phase2.is_ready_for_manuscript(make_profile(current_milestone=4))
        assert not phase2.is_ready_for_manuscript(make_profile(research_topic="PINNs", current_milestone=3))
        assert phase2.is_ready_for_manuscript(make_profile(research_topic="PINNs", current_milestone=4))

    def test_roadmap_generation_and_conference_notes(self):
        prompt = phase2.get_roadmap_generation_prompt("Ada", "Neural ODEs for ICU data")
        assert "for Ada on the topic: Neural ODEs for ICU data" in prompt
        assert "5 milestones" in prompt
        assert "JuliaCon" in phase2.get_conference_guidance()

    def test_prompt_sections(self):
        no_topic = phase2.build_phase2_prompt(make_profile(current_phase="phase2"))
        assert "Check-In" not in no_topic
        assert "## Manuscript Writing Phase" not in no_topic

        writing = phase2.build_phase2_prompt(
            make_profile(current_phase="phase2", research_topic="PINNs", current_milestone=4, days_in_current_phase=10)
        )
        assert "## Milestone 4 Check-In" in writing
        assert "Days in current milestone: 10" in writing
        assert "## Manuscript Writing Phase" in writing
