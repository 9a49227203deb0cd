"""Shared utilities for agent implementations."""

import re
from typing import Any, Dict, List

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

_BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")
_ITALIC_RE = re.compile(r"\*([^*]+)\*")


def messages_to_langchain(messages: List[Any]) -> List[BaseMessage]:
    """
    Convert chat-turn dicts to LangChain message objects.

    Args:
        messages: Dicts with 'role' ("user" | "assistant" | "system") and 'content',
            or LangChain messages (passed through unchanged)

    Returns:
        List of LangChain message objects
    """
    result: List[BaseMessage] = []
    for msg in messages:
        if isinstance(msg, BaseMessage):
            result.append(msg)
            continue

        if isinstance(msg, dict):
            role = str(msg.get("role", "")).lower()
            content = msg.get("content", "")

            if role == "assistant":
                result.append(AIMessage(content=content))
            elif role == "system":
                result.append(SystemMessage(content=content))
            else:
                result.append(HumanMessage(content=content))
            continue

        result.append(HumanMessage(content=str(msg)))

    return result


def message_text(message: BaseMessage) -> str:
    """Plain text of a message whose content may be a list of parts."""
    content = message.content
    if isinstance(content, str):
        return content

    parts: List[str] = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(str(part.get("text", "")))
    return "".join(parts)


def usage_tokens(message: BaseMessage) -> Dict[str, int]:
    """Input/output token counts reported by the model, zero when absent."""
    usage = getattr(message, "usage_metadata", None) or {}
    return {
        "input": int(usage.get("input_tokens", 0) or 0),
        "output": int(usage.get("output_tokens", 0) or 0),
    }


def strip_markdown_emphasis(text: str) -> str:
    """Remove **bold** and *italic* markers, keeping the enclosed text."""
    text = _BOLD_RE.sub(r"\1", text)
    return _ITALIC_RE.sub(r"\1", text)


def truncate_text(text: str, max_length: int = 1000, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length (default 1000)
        suffix: Suffix to add when truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
