"""Base infrastructure for all agents."""

from .llm import get_llm
from .utils import (
    message_text,
    messages_to_langchain,
    strip_markdown_emphasis,
    truncate_text,
    usage_tokens,
)

__all__ = [
    "get_llm",
    "message_text",
    "messages_to_langchain",
    "strip_markdown_emphasis",
    "truncate_text",
    "usage_tokens",
]
