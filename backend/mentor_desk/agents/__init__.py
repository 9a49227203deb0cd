"""Mentor Desk - LangGraph Agents Package.

This package contains the AI side of the mentor workflow:
- Base: LLM factory and message helpers
- Mentor: draft generation with phase-specific tools and prompts
"""

from .base import get_llm

__all__ = [
    "get_llm",
]
