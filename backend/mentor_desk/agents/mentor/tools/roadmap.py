"""Research roadmap tools.

These tools let the agent:
- Generate a milestone-by-milestone research roadmap for a chosen topic
- Look up one milestone of the student's latest roadmap
- Check whether a roadmap exists yet

The roadmap is produced by the LLM as JSON, validated against
``RoadmapDocument`` and stored in the ``roadmaps`` table.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from mentor_desk.agents.base.llm import get_llm
from mentor_desk.core.config import get_settings
from mentor_desk.core.timeutil import utc_now, utc_now_iso
from mentor_desk.db.base import get_session
from mentor_desk.db.models import Roadmap
from mentor_desk.db.queries import get_latest_roadmap, get_student_with_user, update_student
from mentor_desk.resources import get_research_topic

from .registry import ToolContext, ToolDefinition, ToolRegistry, ToolResult, missing_parameter

logger = logging.getLogger(__name__)

DEFAULT_DURATION_WEEKS = 10


# =============================================================================
# Roadmap document
# =============================================================================

class RoadmapRisk(BaseModel):
    risk: str
    mitigation: str


class RoadmapMilestone(BaseModel):
    number: int
    weeks: str
    title: str
    objectives: List[str] = []
    reading_list: List[str] = []
    tasks: List[str] = []
    deliverables: List[str] = []
    acceptance_check: Optional[str] = None
    risks: List[RoadmapRisk] = []


class RoadmapScope(BaseModel):
    goal: str
    questions: List[str] = []


class RoadmapDataset(BaseModel):
    name: str
    description: str = ""
    optional: List[str] = []


class RoadmapDocument(BaseModel):
    """Structured research plan returned by the LLM."""

    title: str
    subtitle: str
    researcher: str = ""
    date: str = ""
    abstract: str = ""
    scope: Optional[RoadmapScope] = None
    dataset: Optional[RoadmapDataset] = None
    milestones: List[RoadmapMilestone]
    timeline_table: List[Dict[str, Any]] = []


ROADMAP_GENERATION_PROMPT = """You are generating a DETAILED research roadmap for a student in a \
Scientific Machine Learning research program. Every section must be specific enough to act on: \
name real methods, real datasets and real papers.

Student: {student_name}
Research topic: {topic}
Topic description: {description}
Duration: {duration_weeks} weeks
Date: {date}
{custom_requirements}

Return ONLY valid JSON (no markdown, no code blocks) with this structure:
{{
  "title": "{duration_title}-Week Research Roadmap",
  "subtitle": "<research topic>",
  "researcher": "<student name>",
  "date": "<date>",
  "abstract": "<4-6 sentences: methodology, primary dataset, key metrics, deliverables, target venue>",
  "scope": {{
    "goal": "<2-3 sentences naming the method, the model class and the evaluation approach>",
    "questions": ["RQ1: ...", "RQ2: ...", "RQ3: ..."]
  }},
  "dataset": {{
    "name": "<real dataset or simulator with version>",
    "description": "<3-4 sentences: contents, format, suitability, limitations>",
    "optional": ["<dataset: what it stress-tests>"]
  }},
  "milestones": [
    {{
      "number": 1,
      "weeks": "1-2",
      "title": "Literature Review & Foundations",
      "objectives": ["..."],
      "reading_list": ["Author et al. (Year). Title. Venue."],
      "tasks": ["1. ..."],
      "deliverables": ["literature_review/review_memo.pdf"],
      "acceptance_check": "<how the student knows the milestone is done>",
      "risks": [{{"risk": "...", "mitigation": "..."}}]
    }}
  ],
  "timeline_table": [{{"milestone": "M1: Literature Review", "weeks": "1-2", "deliverables": "..."}}]
}}

Produce exactly 5 milestones: Literature Review, Setup & Baselines, Core Experiments & Ablations,
Evaluation & Analysis, Manuscript Writing. Spread them evenly over {duration_weeks} weeks."""


def _duration_title(weeks: int) -> str:
    return {8: "Eight", 12: "Twelve"}.get(weeks, "Ten")


def _parse_roadmap_json(text: str) -> Dict[str, Any]:
    """Extract the JSON object from raw model output."""
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        text = text.split("```")[1].split("```")[0]
    text = text.strip()

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("Roadmap response did not contain a JSON object")
    return json.loads(text[start:end + 1])


async def _generate_roadmap_document(
    student_name: str,
    topic: str,
    description: str,
    duration_weeks: int,
    custom_requirements: Optional[str] = None,
) -> RoadmapDocument:
    settings = get_settings()
    llm = get_llm(temperature=0.7, max_tokens=settings.ROADMAP_LLM_MAX_TOKENS)

    prompt = ROADMAP_GENERATION_PROMPT.format(
        student_name=student_name,
        topic=topic,
        description=description,
        duration_weeks=duration_weeks,
        duration_title=_duration_title(duration_weeks),
        date=utc_now().strftime("%B %d, %Y"),
        custom_requirements=f"Student requirements: {custom_requirements}" if custom_requirements else "",
    )

    response = await llm.ainvoke(prompt)
    content = response.content if isinstance(response.content, str) else str(response.content)
    return RoadmapDocument.model_validate(_parse_roadmap_json(content))


async def generate_roadmap_for_student(
    student_id: int,
    topic: str,
    duration_weeks: int = DEFAULT_DURATION_WEEKS,
    custom_requirements: Optional[str] = None,
) -> ToolResult:
    """
    Generate, store and attach a research roadmap to a student.

    ``topic`` may be a catalog id (e.g. "2.1") or free text.

    Args:
        student_id: The student's ID
        topic: Research topic id or title
        duration_weeks: Planned length of the project
        custom_requirements: Extra focus areas from the student

    Returns:
        ToolResult with the stored roadmap summary
    """
    try:
        async with get_session() as session:
            student = await get_student_with_user(session, student_id)
            if student is None:
                return {"success": False, "error": f"Student not found: {student_id}"}
            student_name = student.user.name if student.user else "Student"

        predefined = get_research_topic(topic)
        if predefined is not None:
            topic_title = predefined.title
            description = predefined.description
        else:
            topic_title = topic
            description = custom_requirements or f"Research project on {topic}"

        document = await _generate_roadmap_document(
            student_name, topic_title, description, duration_weeks, custom_requirements
        )
        content = document.model_dump()
        content["generated_at"] = utc_now_iso()

        async with get_session() as session:
            roadmap = Roadmap(student_id=student_id, topic=topic_title, content=content)
            session.add(roadmap)
            await session.commit()
            await session.refresh(roadmap)

            student = await get_student_with_user(session, student_id)
            await update_student(session, student, research_topic=topic_title, current_milestone=1)

        logger.info(f"Generated roadmap {roadmap.id} for student {student_id} ({topic_title})")
        return {
            "success": True,
            "data": {
                "roadmap_id": roadmap.id,
                "topic": topic_title,
                "milestone_count": len(document.milestones),
                "duration": f"{duration_weeks} weeks",
                "message": f'Research roadmap generated successfully for "{topic_title}".',
                "roadmap": content,
            },
        }
    except Exception as e:
        logger.error(f"Roadmap generation error: {e}")
        return {"success": False, "error": str(e)}


# =============================================================================
# Definitions
# =============================================================================

ROADMAP_TOOL_DEFINITIONS: Dict[str, ToolDefinition] = {
    "generate_roadmap": {
        "name": "generate_roadmap",
        "description": (
            "Generate a detailed research roadmap for the student's chosen topic, with milestones, "
            "deliverables, and guidance. Use this when the student has confirmed their research "
            "topic and needs a structured plan."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "topic": {
                    "type": "string",
                    "description": (
                        'The research topic title (can be a topic ID like "1.1" or a custom topic name)'
                    ),
                },
                "duration_weeks": {
                    "type": "number",
                    "description": "Duration in weeks (8, 10, or 12). Default is 10.",
                },
                "custom_requirements": {
                    "type": "string",
                    "description": "Any custom requirements or focus areas from the student",
                },
            },
            "required": ["topic"],
        },
    },
    "get_milestone_details": {
        "name": "get_milestone_details",
        "description": "Get details of a specific milestone in the student's roadmap.",
        "input_schema": {
            "type": "object",
            "properties": {
                "milestone_number": {"type": "number", "description": "Milestone number (1-5)"},
            },
            "required": ["milestone_number"],
        },
    },
    "get_roadmap_status": {
        "name": "get_roadmap_status",
        "description": "Check if the student has a roadmap and get its status.",
        "input_schema": {"type": "object", "properties": {}, "required": []},
    },
}


# =============================================================================
# Handlers
# =============================================================================

async def generate_roadmap_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    topic = params.get("topic")
    if not topic or not isinstance(topic, str):
        return missing_parameter("topic")

    duration_weeks = params.get("duration_weeks") or DEFAULT_DURATION_WEEKS
    return await generate_roadmap_for_student(
        context["student_id"],
        topic,
        duration_weeks=int(duration_weeks),
        custom_requirements=params.get("custom_requirements"),
    )


async def get_milestone_details_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    milestone_number = params.get("milestone_number")
    if milestone_number is None or isinstance(milestone_number, bool):
        return missing_parameter("milestone_number")
    try:
        milestone_number = int(milestone_number)
    except (TypeError, ValueError):
        return missing_parameter("milestone_number")

    student_id = context["student_id"]
    try:
        async with get_session() as session:
            roadmap = await get_latest_roadmap(session, student_id)
            if roadmap is None:
                return {
                    "success": False,
                    "error": "No roadmap found. Generate a roadmap first using the generate_roadmap tool.",
                }
            student = await get_student_with_user(session, student_id)

        content = roadmap.content if isinstance(roadmap.content, dict) else {}
        milestone = next(
            (m for m in content.get("milestones") or [] if m.get("number") == milestone_number),
            None,
        )
        if milestone is None:
            return {"success": False, "error": f"Milestone {milestone_number} not found in the roadmap."}

        return {
            "success": True,
            "data": {
                "milestone": milestone,
                "is_current_milestone": student is not None and student.current_milestone == milestone_number,
                "roadmap_topic": roadmap.topic,
            },
        }
    except Exception as e:
        logger.error(f"Error getting milestone details: {e}")
        return {"success": False, "error": str(e)}


async def get_roadmap_status_tool(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    try:
        async with get_session() as session:
            roadmap = await get_latest_roadmap(session, context["student_id"])

        if roadmap is None:
            return {
                "success": True,
                "data": {
                    "has_roadmap": False,
                    "message": (
                        "No roadmap found. Help the student choose a research topic and generate a roadmap."
                    ),
                },
            }

        content = roadmap.content if isinstance(roadmap.content, dict) else {}
        return {
            "success": True,
            "data": {
                "has_roadmap": True,
                "topic": roadmap.topic,
                "milestone_count": len(content.get("milestones") or []),
                "accepted": bool(roadmap.accepted),
                "created_at": roadmap.created_at,
                "message": f'Roadmap exists for "{roadmap.topic}".',
            },
        }
    except Exception as e:
        logger.error(f"Error checking roadmap status: {e}")
        return {"success": False, "error": str(e)}


# =============================================================================
# Registration
# =============================================================================

def register_roadmap_tools(registry: ToolRegistry) -> None:
    registry.register(ROADMAP_TOOL_DEFINITIONS["generate_roadmap"], generate_roadmap_tool)
    registry.register(ROADMAP_TOOL_DEFINITIONS["get_milestone_details"], get_milestone_details_tool)
    registry.register(ROADMAP_TOOL_DEFINITIONS["get_roadmap_status"], get_roadmap_status_tool)


def get_roadmap_tools() -> List[ToolDefinition]:
    return list(ROADMAP_TOOL_DEFINITIONS.values())
