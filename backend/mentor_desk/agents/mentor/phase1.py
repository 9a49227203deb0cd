"""Phase I guidance: video curriculum progress, reminders and the move to Phase II."""

from datetime import datetime
from typing import Optional

from mentor_desk.core.timeutil import days_since
from mentor_desk.memory import StudentProfile

TOTAL_TOPICS = 8
TRANSITION_TOPICS_COMPLETED = 6
TRANSITION_DAYS_IN_PHASE = 42

VIDEO_CURRICULUM_OVERVIEW = """## Video Curriculum Topics
1. Introduction to Scientific Machine Learning (SciML) - Course overview, traditional ML vs SciML, problems solved by SciML
2. Julia Programming Language - Installation, basics, why Julia for scientific computing
3. Ordinary Differential Equations (ODEs) in Julia - What are ODEs, building ODEs hands-on
4. Partial Differential Equations (PDEs) in Julia - What are PDEs, building PDEs hands-on
5. Neural Networks, Gradient Descent & Backpropagation - Weights, biases, activation functions, optimization
6. Physics-Informed Neural Networks (PINNs) - Theory and practical implementation in Julia
7. Neural ODEs - Theory, the 3 pillars of SciML, practical implementation
8. Universal Differential Equations (UDEs) - Theory and practical implementation in Julia

When answering questions, reference the specific topic when possible (e.g., "This is covered in Topic 6 on Physics-Informed Neural Networks")."""

TOPIC_CONTEXTS = {
    1: "Student is learning SciML fundamentals. Focus on building intuition about Scientific ML, traditional ML vs SciML, and the problems SciML can solve.",
    2: "Student is on Julia Programming. Help with installation, basics of Julia, and why Julia is powerful for scientific computing.",
    3: "Student is learning ODEs in Julia. Focus on understanding differential equations and hands-on ODE implementation.",
    4: "Student is on PDEs in Julia. Help with partial differential equations and practical PDE implementation.",
    5: "Student is learning Neural Networks basics. Emphasize weights, biases, activation functions, gradient descent, and backpropagation.",
    6: "Student is on Physics-Informed Neural Networks (PINNs). Focus on PINN theory and practical implementation in Julia.",
    7: "Student is learning Neural ODEs. Help with the 3 pillars of SciML and Neural ODE implementation.",
    8: "Student is on Universal Differential Equations (UDEs). Focus on UDE theory, implementation, and applications. Prepare for Phase II transition.",
}


def build_phase1_context(profile: StudentProfile) -> str:
    """Progress summary, expected behaviours and the curriculum outline."""
    progress_percent = round(profile.topics_completed / TOTAL_TOPICS * 100)

    warning = ""
    if profile.days_in_current_phase > TRANSITION_DAYS_IN_PHASE:
        warning = (
            "\nWarning: Student has been in Phase I for over 6 weeks. "
            "Consider discussing Phase II transition.\n"
        )

    return f"""## Phase I Context
This student is in Phase I, learning from the video curriculum.

Current progress:
- Current topic: {profile.current_topic_index} of {TOTAL_TOPICS}
- Topics completed: {profile.topics_completed}
- Overall progress: {progress_percent}%
- Days in Phase I: {profile.days_in_current_phase}
{warning}
## Phase I Behaviors
1. Answer video content questions: reference specific lessons when answering questions about course topics.
2. Encourage regular progress: ask how videos are going, celebrate completions.
3. Track what they're learning: note topics discussed for future context.
4. Help when stuck: if they mention being stuck, offer targeted help.
5. Phase II preparation: after ~6 weeks or 70%+ progress, start discussing Phase II and research interests.

{VIDEO_CURRICULUM_OVERVIEW}
"""


def get_phase1_transition_prompt(profile: StudentProfile) -> str:
    return f"""## Phase I to Phase II Transition

{profile.name} has completed most of Phase I content ({profile.topics_completed}/{TOTAL_TOPICS} topics). It's time to start discussing Phase II.

Guide them through:
1. Celebrate their progress. They've learned a lot, acknowledge this.
2. Explain Phase II: a research project, a 10-week roadmap, the goal of publishing a paper.
3. Ask about interests: which topics excited them most? Any domain they want to apply SciML to?
4. Present topic options: use the suggest_topics tool with their interests.
5. Don't rush. Let them explore and decide. This is a big commitment.
"""


def get_phase1_reminder_context(days_since_last_interaction: int) -> str:
    """Engagement nudge for quiet students; empty under 3 days."""
    if days_since_last_interaction < 3:
        return ""

    if days_since_last_interaction < 7:
        return f"""
## Engagement Note
It's been {days_since_last_interaction} days since this student's last message. Consider:
- Asking how their video progress is going
- Checking if they're stuck on anything
- Sending an encouraging message
"""

    return f"""
## Re-engagement Note
It's been {days_since_last_interaction} days since this student's last message. They may need extra encouragement:
- Reach out warmly, don't make them feel guilty
- Ask if everything is okay
- Offer specific help with where they left off
"""


def get_topic_context(current_topic_index: int) -> str:
    return TOPIC_CONTEXTS.get(current_topic_index, "")


def should_transition_to_phase2(profile: StudentProfile) -> bool:
    """Suggest Phase II after 6 of 8 topics or 6 weeks in Phase I."""
    if profile.current_phase == "phase2":
        return False
    return (
        profile.topics_completed >= TRANSITION_TOPICS_COMPLETED
        or profile.days_in_current_phase >= TRANSITION_DAYS_IN_PHASE
    )


def build_phase1_prompt(
    profile: StudentProfile,
    last_message_at: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Assemble the Phase I guidance appended to the system prompt.

    Args:
        profile: The student's merged profile
        last_message_at: Timestamp of the latest message, for reminders
        now: Reference time for day counts

    Returns:
        Phase context, topic focus, and transition/reminder notes when relevant
    """
    prompt = build_phase1_context(profile)

    topic_context = get_topic_context(profile.current_topic_index)
    if topic_context:
        prompt += f"\n\n## Current Topic Focus\n{topic_context}"

    if should_transition_to_phase2(profile):
        prompt += "\n\n" + get_phase1_transition_prompt(profile)

    quiet_days = days_since(last_message_at, now)
    if quiet_days is not None:
        reminder = get_phase1_reminder_context(quiet_days)
        if reminder:
            prompt += "\n" + reminder

    return prompt
