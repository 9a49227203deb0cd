"""Phase II guidance: topic selection, milestone check-ins and manuscript support."""

from typing import Iterable, List

from mentor_desk.memory import StudentProfile

EXPECTED_MILESTONE_DAYS = 14
ON_TRACK_DAYS = 16
MANUSCRIPT_MILESTONE = 4

MILESTONE_STATUS = {
    0: "Not started",
    1: "Literature Review",
    2: "Implementation Setup",
    3: "Core Experiments",
    4: "Analysis & Writing",
    5: "Manuscript Complete",
}

TOPIC_SELECTION_BEHAVIOR = """
### Topic Selection Mode
The student needs to choose a research topic. Guide them through:

1. Explore interests: ask what aspects of Scientific ML excite them most.
2. Consider background: what domain expertise do they bring? Physics, engineering, biology?
3. Present options: use the suggest_topics tool with their interests.
4. Discuss scope: help them understand what's achievable in 10 weeks.
5. Confirm choice: only proceed to a roadmap after clear confirmation.

Available research categories:
1. Physics-Informed Neural Networks (PINNs) - Solving PDEs with neural networks, inverse problems
2. Universal Differential Equations (UDEs) - Hybrid models combining neural networks with differential equations
3. Neural ODEs - Continuous-depth neural networks, time-series modeling
4. Bayesian Neural ODEs - Uncertainty quantification in neural differential equations
5. SciML + LLMs - Combining large language models with scientific machine learning
"""

EARLY_MILESTONE_BEHAVIOR = """
### Milestones 1-2 Guidance
Student is in the early research phase.

Milestone 1 (Literature Review):
- Help find relevant SciML papers (PINNs, Neural ODEs, UDEs)
- Guide on what to extract from papers (architectures, loss functions, benchmarks)
- Remind them to keep a paper tracker (15+ papers)
- Review their research questions

Milestone 2 (Implementation Setup):
- Help with Julia environment setup and DifferentialEquations.jl
- Debug code issues in Julia/Flux.jl/Lux.jl
- Help set up the SciML ecosystem (DiffEqFlux, NeuralPDE, etc.)
- Ensure a baseline differential equation solver is working
"""

LATE_MILESTONE_BEHAVIOR = """
### Milestones 3-4 Guidance
Student is in the advanced research phase.

Milestone 3 (Core Experiments):
- Help design ablation studies (architecture, loss weighting, training strategies)
- Review experiment results comparing PINN/UDE/Neural ODE approaches
- Suggest visualizations for differential equation solutions

Milestone 4 (Analysis & Writing):
- Help structure the manuscript (problem formulation, method, experiments)
- Review drafts with detailed feedback on scientific rigor
- Identify target venues: NeurIPS, ICLR, ICML workshops on SciML
"""

# Interest keyword -> research category titles
INTEREST_CATEGORY_MAP = {
    "healthcare": ["Neural ODEs"],
    "medical": ["Neural ODEs"],
    "clinical": ["Neural ODEs"],
    "finance": ["Neural ODEs"],
    "epidemic": ["Universal Differential Equations (UDEs)"],
    "biology": ["Universal Differential Equations (UDEs)"],
    "chemistry": ["Universal Differential Equations (UDEs)"],
    "physics": ["Physics-Informed Neural Networks (PINNs)"],
    "heat": ["Physics-Informed Neural Networks (PINNs)"],
    "fluid": ["Physics-Informed Neural Networks (PINNs)"],
    "pde": ["Physics-Informed Neural Networks (PINNs)"],
    "uncertainty": ["Bayesian Neural ODEs"],
    "bayesian": ["Bayesian Neural ODEs"],
    "llm": ["SciML + LLMs"],
    "agents": ["SciML + LLMs"],
    "rag": ["SciML + LLMs"],
}


def get_milestone_status(milestone: int) -> str:
    return MILESTONE_STATUS.get(milestone, "Unknown")


def build_phase2_context(profile: StudentProfile) -> str:
    """Research status plus the behaviour block matching topic and milestone."""
    has_topic = bool(profile.research_topic)
    milestone = profile.current_milestone

    notes = []
    if not has_topic:
        notes.append("Warning: Student has not selected a research topic yet. Help them choose one.")
    if milestone >= 3:
        notes.append("Student is in later milestones. May need manuscript guidance soon.")

    if not has_topic:
        behavior = TOPIC_SELECTION_BEHAVIOR
    elif milestone <= 2:
        behavior = EARLY_MILESTONE_BEHAVIOR
    else:
        behavior = LATE_MILESTONE_BEHAVIOR

    return f"""## Phase II Context
This student is in Phase II, working on their research project.

Research topic: {profile.research_topic or 'Not yet selected'}
Current milestone: {milestone} of 5
Milestone status: {get_milestone_status(milestone)}
Days in Phase II: {profile.days_in_current_phase}
{chr(10).join(notes)}

## Phase II Behaviors
{behavior}
## Research Support Guidelines
1. Be specific: reference exact papers, datasets, and methods relevant to their topic.
2. Track blockers: note challenges they mention for follow-up.
3. Encourage writing early: even in early milestones, suggest documenting findings.
4. Check progress regularly: ask about milestone status and deliverables.
"""


def get_roadmap_generation_prompt(student_name: str, topic_title: str) -> str:
    return f"""## Roadmap Generation Task

Generate a detailed research roadmap for {student_name} on the topic: {topic_title}

The roadmap has a title, subtitle, abstract, scope with 3-4 research questions, a primary
dataset fixed upfront and 5 milestones of about 2 weeks each.

Each milestone MUST have:
- Objectives (2-3 bullet points)
- Concrete steps (numbered, specific actions)
- Deliverables (what they'll produce)
- Acceptance checks (how to verify completion)
- Risks and mitigations

Make the roadmap specific, actionable, and achievable by a single researcher.
"""


def get_milestone_check_in_prompt(current_milestone: int, days_in_milestone: int) -> str:
    """Check-in note; flags the milestone when it runs past 16 days."""
    on_track = days_in_milestone <= ON_TRACK_DAYS

    prompt = f"""## Milestone {current_milestone} Check-In

Days in current milestone: {days_in_milestone}
Expected duration: {EXPECTED_MILESTONE_DAYS} days
Status: {'On track' if on_track else 'May need acceleration'}
"""
    if not on_track:
        prompt += """
The student is taking longer than expected on this milestone. Consider:
- Asking what's blocking them
- Offering to help with specific deliverables
- Suggesting ways to simplify if needed
"""
    prompt += """
Check on:
1. Progress toward deliverables
2. Any blockers or questions
3. Quality of work so far
4. Readiness to move to next milestone
"""
    return prompt


def get_manuscript_phase_prompt() -> str:
    return """## Manuscript Writing Phase

The student is ready to write their research paper. Guide them through:

1. Paper structure:
   - Abstract (write last, 150-250 words)
   - Introduction (motivation, contributions, outline)
   - Related Work (position against literature)
   - Methodology (approach, implementation details)
   - Experiments (setup, results, ablations)
   - Discussion and Conclusion (limitations, future work)

2. Review process:
   - Review each section as they write
   - Verify claims are supported by experiments
   - Ensure figures and tables are clear

3. Venue identification:
   - Look for relevant workshops on OpenReview
   - Find venues with deadlines 1-3 weeks out
"""


def get_conference_guidance() -> str:
    return """## Conference Identification
Help the student find appropriate venues for their paper:
1. Search OpenReview for relevant workshops and conferences
2. Look for deadlines 1-3 weeks out (allows time for revision)
3. Consider venue fit:
   - Workshop papers (4-6 pages) are good for first publications
   - Main conferences are more competitive
4. Common venues for SciML work:
   - NeurIPS, ICML and ICLR workshops on machine learning for physical sciences
   - JuliaCon proceedings
   - Domain-specific venues (computational physics, biology, engineering)
5. Help with submission: formatting requirements, anonymization rules, supplementary material
"""


def handle_topic_selection(profile: StudentProfile) -> str:
    """Where the student is in topic selection: no_topic, selected or roadmap_generated."""
    if profile.research_topic:
        if profile.current_milestone > 0:
            return "roadmap_generated"
        return "selected"
    return "no_topic"


def get_phase2_topic_suggestions(interests: Iterable[str], topics_discussed: Iterable[str] = ()) -> List[str]:
    """Research categories implied by interests and discussed topics, without duplicates."""
    suggestions: List[str] = []
    for term in list(interests) + list(topics_discussed):
        lowered = term.lower()
        for keyword, categories in INTEREST_CATEGORY_MAP.items():
            if keyword in lowered:
                for category in categories:
                    if category not in suggestions:
                        suggestions.append(category)
    return suggestions


def is_ready_for_manuscript(profile: StudentProfile) -> bool:
    return bool(profile.research_topic) and profile.current_milestone >= MANUSCRIPT_MILESTONE


def build_phase2_prompt(profile: StudentProfile) -> str:
    """
    Assemble the Phase II guidance appended to the system prompt.

    Days in phase stand in for days in the current milestone.
    """
    prompt = build_phase2_context(profile)

    if profile.research_topic and profile.current_milestone > 0:
        prompt += "\n" + get_milestone_check_in_prompt(
            profile.current_milestone, profile.days_in_current_phase
        )

    if profile.current_milestone >= MANUSCRIPT_MILESTONE:
        prompt += "\n" + get_manuscript_phase_prompt()

    return prompt
