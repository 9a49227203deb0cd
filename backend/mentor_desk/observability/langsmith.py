"""LangSmith tracing setup and run-config helpers for the mentor agent."""

import logging
import os
from typing import Any, Dict, Iterable, Optional

from mentor_desk.core.config import Settings

logger = logging.getLogger(__name__)


def _export(names: Iterable[str], value: str) -> None:
    for name in names:
        os.environ[name] = value


def initialize_langsmith(settings: Settings) -> bool:
    """
    Export LangSmith settings to the environment LangChain reads at runtime.

    Returns:
        True when tracing was requested and an API key is configured.
    """
    requested = bool(settings.LANGSMITH_TRACING)
    api_key = settings.LANGSMITH_API_KEY.strip()
    enabled = requested and bool(api_key)

    _export(["LANGSMITH_TRACING", "LANGCHAIN_TRACING_V2"], "true" if enabled else "false")

    if api_key:
        _export(["LANGSMITH_API_KEY", "LANGCHAIN_API_KEY"], api_key)
    if settings.LANGSMITH_ENDPOINT:
        _export(["LANGSMITH_ENDPOINT", "LANGCHAIN_ENDPOINT"], settings.LANGSMITH_ENDPOINT)
    if settings.LANGSMITH_PROJECT:
        _export(["LANGSMITH_PROJECT", "LANGCHAIN_PROJECT"], settings.LANGSMITH_PROJECT)
    if settings.LANGSMITH_WORKSPACE_ID:
        _export(["LANGSMITH_WORKSPACE_ID"], settings.LANGSMITH_WORKSPACE_ID)

    if enabled:
        logger.info(f"LangSmith tracing enabled (project={settings.LANGSMITH_PROJECT})")
    elif requested:
        logger.warning("LANGSMITH_TRACING is set but LANGSMITH_API_KEY is empty; tracing disabled")
    else:
        logger.info("LangSmith tracing disabled")

    return enabled


def build_trace_config(
    thread_id: str,
    tags: Optional[Iterable[str]] = None,
    metadata: Optional[Dict[str, Any]] = None,
    run_name: Optional[str] = None,
    recursion_limit: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Runnable config for a LangGraph invocation.

    Args:
        thread_id: Identifier grouping the run's traces
        tags: Trace tags
        metadata: Trace metadata (student id, phase, ...)
        run_name: Display name of the root run
        recursion_limit: LangGraph super-step limit

    Returns:
        Config dict accepted by ``ainvoke``
    """
    config: Dict[str, Any] = {"configurable": {"thread_id": thread_id}}
    if tags:
        config["tags"] = list(tags)
    if metadata:
        config["metadata"] = dict(metadata)
    if run_name:
        config["run_name"] = run_name
    if recursion_limit is not None:
        config["recursion_limit"] = recursion_limit
    return config
