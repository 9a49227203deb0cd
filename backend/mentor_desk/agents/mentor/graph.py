"""Bounded tool-calling loop for the mentor agent.

This module defines the LangGraph that turns one student message into a
draft reply:

    agent --(tool calls)--> tools --(budget left)--> agent
      |                       |
      |                       +--(budget spent)--> END
      +--(no text yet, tools were used, budget left)--> final_answer --> END
      +--(otherwise)--> END

Every visit to ``agent`` or ``final_answer`` is one LLM call, and the total
never exceeds ``max_iterations``.
"""

import json
import logging
import uuid
from typing import Any, Dict, List, Optional

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage
from langgraph.graph import END, StateGraph

from mentor_desk.agents.base.llm import get_llm
from mentor_desk.agents.base.utils import (
    message_text,
    messages_to_langchain,
    strip_markdown_emphasis,
    usage_tokens,
)
from mentor_desk.core.config import get_settings
from mentor_desk.observability.langsmith import build_trace_config

from .state import ToolLoopResult, ToolLoopState, create_initial_loop_state
from .tools import ToolContext, ToolRegistry

logger = logging.getLogger(__name__)

FALLBACK_RESPONSE = "Thanks for your message. Let me think about this and get back to you shortly."


class ToolLoopGraph:
    """
    Wrapper class for the mentor tool-loop graph.

    Provides a clean interface for running one draft generation.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        context: ToolContext,
        llm: Optional[Any] = None,
        max_iterations: Optional[int] = None,
    ):
        """
        Initialize the tool loop.

        Args:
            registry: Tools the model may call
            context: Student and phase passed to every tool
            llm: Chat model (defaults to the configured OpenAI-compatible model)
            max_iterations: Cap on LLM calls (defaults to AGENT_MAX_TOOL_ITERATIONS)
        """
        self.registry = registry
        self.context = context
        self.llm = llm if llm is not None else get_llm()
        self.max_iterations = max(1, max_iterations or get_settings().AGENT_MAX_TOOL_ITERATIONS)

        openai_tools = registry.get_openai_tools()
        if openai_tools:
            self.tool_llm = self.llm.bind_tools(openai_tools, tool_choice="auto")
        else:
            self.tool_llm = self.llm

        self.graph = self._build_graph()

    def _build_graph(self):
        graph = StateGraph(ToolLoopState)

        graph.add_node("agent", self._agent_node)
        graph.add_node("tools", self._tools_node)
        graph.add_node("final_answer", self._final_answer_node)

        graph.set_entry_point("agent")

        graph.add_conditional_edges(
            "agent",
            self._route_after_agent,
            {
                "tools": "tools",
                "final_answer": "final_answer",
                "end": END,
            },
        )
        graph.add_conditional_edges(
            "tools",
            self._route_after_tools,
            {
                "agent": "agent",
                "end": END,
            },
        )
        graph.add_edge("final_answer", END)

        return graph.compile()

    # =========================================================================
    # Nodes
    # =========================================================================

    def _absorb(self, state: ToolLoopState, response: AIMessage) -> Dict[str, Any]:
        """State update for one LLM response."""
        tokens = usage_tokens(response)
        return {
            "messages": [response],
            "iterations": state["iterations"] + 1,
            "content": state["content"] + message_text(response),
            "input_tokens": state["input_tokens"] + tokens["input"],
            "output_tokens": state["output_tokens"] + tokens["output"],
        }

    async def _agent_node(self, state: ToolLoopState) -> Dict[str, Any]:
        response = await self.tool_llm.ainvoke(state["messages"])
        return self._absorb(state, response)

    async def _final_answer_node(self, state: ToolLoopState) -> Dict[str, Any]:
        """Ask for a final answer without offering tools."""
        response = await self.llm.ainvoke(state["messages"])
        return self._absorb(state, response)

    async def _tools_node(self, state: ToolLoopState) -> Dict[str, Any]:
        last = state["messages"][-1]
        records = list(state["tool_calls"])
        tool_messages: List[ToolMessage] = []

        for call in getattr(last, "tool_calls", None) or []:
            name = call["name"]
            args = call.get("args") or {}
            call_id = call.get("id") or f"call_{uuid.uuid4().hex[:12]}"

            result = await self._execute_tool(name, args)
            records.append({"id": call_id, "name": name, "input": args, "result": result})
            tool_messages.append(
                ToolMessage(
                    content=json.dumps(result, default=str, indent=2),
                    tool_call_id=call_id,
                    name=name,
                )
            )

        return {"messages": tool_messages, "tool_calls": records}

    async def _execute_tool(self, name: str, args: Dict[str, Any]) -> Dict[str, Any]:
        if not self.registry.has_tool(name):
            logger.warning(f"Model requested unknown tool: {name}")
            return {"error": f"Unknown tool: {name}"}
        try:
            return await self.registry.execute(name, args, self.context)
        except Exception as e:
            logger.error(f"Tool {name} raised: {e}")
            return {"error": str(e)}

    # =========================================================================
    # Routing
    # =========================================================================

    def _route_after_agent(self, state: ToolLoopState) -> str:
        last = state["messages"][-1]
        if getattr(last, "tool_calls", None):
            return "tools"
        if (
            not state["content"].strip()
            and state["tool_calls"]
            and state["iterations"] < self.max_iterations
        ):
            return "final_answer"
        return "end"

    def _route_after_tools(self, state: ToolLoopState) -> str:
        if state["iterations"] < self.max_iterations:
            return "agent"
        return "end"

    # =========================================================================
    # Invocation
    # =========================================================================

    async def run(
        self,
        system_prompt: str,
        history: List[Any],
        message: str,
    ) -> ToolLoopResult:
        """
        Run the loop for one student message.

        Args:
            system_prompt: Fully assembled system prompt
            history: Prior turns as {"role", "content"} dicts, oldest first
            message: The new student message

        Returns:
            ToolLoopResult with cleaned content, tool calls and token usage
        """
        messages = [
            SystemMessage(content=system_prompt),
            *messages_to_langchain(history),
            HumanMessage(content=message),
        ]

        config = build_trace_config(
            thread_id=f"draft_{self.context['student_id']}_{uuid.uuid4().hex[:8]}",
            tags=["mentor", "tool_loop", self.context["current_phase"]],
            metadata={
                "student_id": self.context["student_id"],
                "phase": self.context["current_phase"],
                "max_iterations": self.max_iterations,
            },
            run_name="mentor_draft",
            recursion_limit=2 * self.max_iterations + 5,
        )

        final_state = await self.graph.ainvoke(create_initial_loop_state(messages), config=config)

        content = final_state["content"]
        if content.strip():
            content = strip_markdown_emphasis(content)
        else:
            content = FALLBACK_RESPONSE

        logger.info(
            f"Tool loop finished for student {self.context['student_id']}: "
            f"{final_state['iterations']} LLM call(s), {len(final_state['tool_calls'])} tool call(s)"
        )

        return ToolLoopResult(
            content=content,
            tool_calls=final_state["tool_calls"],
            iterations=final_state["iterations"],
            tokens_used={
                "input": final_state["input_tokens"],
                "output": final_state["output_tokens"],
            },
        )


async def run_tool_loop(
    system_prompt: str,
    history: List[Any],
    message: str,
    registry: ToolRegistry,
    context: ToolContext,
    max_iterations: Optional[int] = None,
    llm: Optional[Any] = None,
) -> ToolLoopResult:
    """
    Build a ToolLoopGraph and run it once.

    This is the main entry point used by the draft pipeline.
    """
    loop = ToolLoopGraph(registry, context, llm=llm, max_iterations=max_iterations)
    return await loop.run(system_prompt, history, message)
