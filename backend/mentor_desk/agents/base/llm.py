"""LLM client factory.

Provides a factory function to create LLM clients for any OpenAI-compatible
API (OpenAI, LM Studio, Ollama proxies, hosted providers).
"""

from typing import Optional

from langchain_openai import ChatOpenAI

from ...core.config import get_settings


def _resolve_api_key(base_url: str, api_key: str) -> str:
    """Provide a placeholder API key for local OpenAI-compatible servers."""
    if api_key:
        return api_key
    base = (base_url or "").lower()
    if "127.0.0.1" in base or "localhost" in base:
        return "lm-studio"
    return ""


def get_llm(
    temperature: Optional[float] = None,
    model: Optional[str] = None,
    max_tokens: Optional[int] = None,
) -> ChatOpenAI:
    """
    Get a configured chat model client.

    Args:
        temperature: Override default temperature (0.0-1.0)
        model: Override default model name
        max_tokens: Override default max tokens

    Returns:
        Configured ChatOpenAI instance

    Example:
        >>> llm = get_llm(max_tokens=500)
        >>> response = await llm.ainvoke("Hello!")
    """
    settings = get_settings()

    return ChatOpenAI(
        base_url=settings.LLM_BASE_URL,
        api_key=_resolve_api_key(settings.LLM_BASE_URL, settings.LLM_API_KEY),
        model=model or settings.LLM_MODEL,
        temperature=temperature if temperature is not None else settings.LLM_TEMPERATURE,
        max_tokens=max_tokens or settings.LLM_MAX_TOKENS,
    )
