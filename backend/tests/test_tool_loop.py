"""
Test the bounded tool-calling loop.
"""

import json

from langchain_core.messages import SystemMessage, ToolMessage

from mentor_desk.agents.mentor import FALLBACK_RESPONSE, run_tool_loop
from mentor_desk.agents.mentor.tools import ToolRegistry

CONTEXT = {"student_id": 42, "current_phase": "phase1"}


def make_registry(calls: list) -> ToolRegistry:
    registry = ToolRegistry()

    async def lookup(params, context):
        calls.append((params, context))
        return {"success": True, "data": {"answer": params.get("q", "").upper()}}

    async def explode(params, context):
        raise RuntimeError("kaboom")

    registry.register(
        {
            "name": "lookup",
            "description": "Look something up",
            "input_schema": {"type": "object", "properties": {"q": {"type": "string"}}, "required": ["q"]},
        },
        lookup,
    )
    registry.register(
        {
            "name": "explode",
            "description": "Always fails",
            "input_schema": {"type": "object", "properties": {}, "required": []},
        },
        explode,
    )
    return registry


class TestToolLoop:
    """Test iteration, tool execution and output shaping."""

    async def test_plain_answer_uses_one_call(self, fake_llm, ai_text):
        llm = fake_llm([ai_text("Hello **there**, *welcome*!", usage={"input": 12, "output": 4})])

        result = await run_tool_loop("system", [], "Hi", make_registry([]), CONTEXT, llm=llm)

        assert result.content == "Hello there, welcome!"
        assert result.tool_calls == []
        assert result.iterations == 1
        assert result.tokens_used == {"input": 12, "output": 4}

    async def test_italics_span_lines_and_spacing_is_kept(self, fake_llm, ai_text):
        llm = fake_llm([ai_text("*Step one\nstep two* done\n")])

        result = await run_tool_loop("system", [], "Hi", make_registry([]), CONTEXT, llm=llm)

        assert result.content == "Step one\nstep two done\n"
        assert len(llm.calls) == 1

    async def test_tools_are_offered_with_auto_choice(self, fake_llm, ai_text):
        llm = fake_llm([ai_text("ok")])

        await run_tool_loop("system", [], "Hi", make_registry([]), CONTEXT, llm=llm)

        assert llm.bind_kwargs == {"tool_choice": "auto"}
        assert [t["function"]["name"] for t in llm.bound_tools] == ["lookup", "explode"]
        assert llm.calls[0]["with_tools"] is True

    async def test_prompt_layout(self, fake_llm, ai_text):
        llm = fake_llm([ai_text("ok")])
        history = [
            {"role": "user", "content": "first question"},
            {"role": "assistant", "content": "first answer"},
        ]

        await run_tool_loop("SYSTEM PROMPT", history, "new message", make_registry([]), CONTEXT, llm=llm)

        messages = llm.calls[0]["messages"]
        assert isinstance(messages[0], SystemMessage)
        assert messages[0].content == "SYSTEM PROMPT"
        assert [m.content for m in messages[1:]] == ["first question", "first answer", "new message"]
        assert [m.type for m in messages[1:]] == ["human", "ai", "human"]

    async def test_tool_call_then_answer(self, fake_llm, ai_tool_call, ai_text):
        executed = []
        llm = fake_llm([
            ai_tool_call({"name": "lookup", "args": {"q": "pinn"}, "id": "call_a"}, usage={"input": 10, "output": 3}),
            ai_text("PINNs are covered in topic 5.", usage={"input": 20, "output": 8}),
        ])

        result = await run_tool_loop("system", [], "Where are PINNs?", make_registry(executed), CONTEXT, llm=llm)

        assert executed == [({"q": "pinn"}, CONTEXT)]
        assert result.content == "PINNs are covered in topic 5."
        assert result.iterations == 2
        assert result.tokens_used == {"input": 30, "output": 11}
        assert result.tool_calls == [{
            "id": "call_a",
            "name": "lookup",
            "input": {"q": "pinn"},
            "result": {"success": True, "data": {"answer": "PINN"}},
        }]

        # Second call sees the assistant tool request and the tool result
        second = llm.calls[1]["messages"]
        tool_message = second[-1]
        assert isinstance(tool_message, ToolMessage)
        assert tool_message.tool_call_id == "call_a"
        assert json.loads(tool_message.content) == {"success": True, "data": {"answer": "PINN"}}
        assert second[-2].tool_calls[0]["id"] == "call_a"

    async def test_unknown_tool_is_reported_inline(self, fake_llm, ai_tool_call, ai_text):
        llm = fake_llm([
            ai_tool_call({"name": "teleport", "args": {}, "id": "call_x"}),
            ai_text("Sorry, I can't do that."),
        ])

        result = await run_tool_loop("system", [], "Go", make_registry([]), CONTEXT, llm=llm)

        assert result.tool_calls[0]["result"] == {"error": "Unknown tool: teleport"}
        assert json.loads(llm.calls[1]["messages"][-1].content) == {"error": "Unknown tool: teleport"}
        assert result.content == "Sorry, I can't do that."

    async def test_failing_tool_does_not_stop_the_loop(self, fake_llm, ai_tool_call, ai_text):
        llm = fake_llm([
            ai_tool_call({"name": "explode", "args": {}}),
            ai_text("Something went wrong on my side."),
        ])

        result = await run_tool_loop("system", [], "Go", make_registry([]), CONTEXT, llm=llm)

        assert result.tool_calls[0]["result"] == {"success": False, "error": "kaboom"}
        assert result.content == "Something went wrong on my side."

    async def test_multiple_tool_calls_in_one_response(self, fake_llm, ai_tool_call, ai_text):
        executed = []
        llm = fake_llm([
            ai_tool_call(
                {"name": "lookup", "args": {"q": "a"}, "id": "c1"},
                {"name": "lookup", "args": {"q": "b"}, "id": "c2"},
            ),
            ai_text("Done."),
        ])

        result = await run_tool_loop("system", [], "Go", make_registry(executed), CONTEXT, llm=llm)

        assert [c["id"] for c in result.tool_calls] == ["c1", "c2"]
        assert [p["q"] for p, _ in executed] == ["a", "b"]
        assert result.iterations == 2

    async def test_budget_caps_total_calls(self, fake_llm, ai_tool_call):
        executed = []
        llm = fake_llm([ai_tool_call({"name": "lookup", "args": {"q": "again"}})])

        result = await run_tool_loop(
            "system", [], "Loop forever", make_registry(executed), CONTEXT, max_iterations=3, llm=llm
        )

        assert len(llm.calls) == 3
        assert result.iterations == 3
        assert len(result.tool_calls) == 3
        assert all(call["with_tools"] for call in llm.calls)
        assert result.content == FALLBACK_RESPONSE

    async def test_final_answer_call_without_tools(self, fake_llm, ai_tool_call, ai_text):
        llm = fake_llm([
            ai_tool_call({"name": "lookup", "args": {"q": "x"}}),
            ai_text(""),
            ai_text("Here is my final answer."),
        ])

        result = await run_tool_loop("system", [], "Go", make_registry([]), CONTEXT, max_iterations=5, llm=llm)

        assert len(llm.calls) == 3
        assert [call["with_tools"] for call in llm.calls] == [True, True, False]
        assert result.content == "Here is my final answer."
        assert result.iterations == 3

    async def test_final_answer_respects_budget(self, fake_llm, ai_tool_call, ai_text):
        llm = fake_llm([
            ai_tool_call({"name": "lookup", "args": {"q": "x"}}),
            ai_text(""),
        ])

        result = await run_tool_loop("system", [], "Go", make_registry([]), CONTEXT, max_iterations=2, llm=llm)

        assert len(llm.calls) == 2
        assert result.content == FALLBACK_RESPONSE

    async def test_empty_answer_without_tools_falls_back(self, fake_llm, ai_text):
        llm = fake_llm([ai_text("   ")])

        result = await run_tool_loop("system", [], "Hi", make_registry([]), CONTEXT, llm=llm)

        assert len(llm.calls) == 1
        assert result.content == FALLBACK_RESPONSE

    async def test_text_is_accumulated_across_calls(self, fake_llm, ai_tool_call, ai_text):
        llm = fake_llm([
            ai_tool_call({"name": "lookup", "args": {"q": "x"}}, content="Let me check. "),
            ai_text("Found it."),
        ])

        result = await run_tool_loop("system", [], "Go", make_registry([]), CONTEXT, llm=llm)

        assert result.content == "Let me check. Found it."

    async def test_empty_registry_skips_binding(self, fake_llm, ai_text):
        llm = fake_llm([ai_text("No tools here.")])

        result = await run_tool_loop("system", [], "Hi", ToolRegistry(), CONTEXT, llm=llm)

        assert llm.bound_tools is None
        assert llm.calls[0]["with_tools"] is False
        assert result.content == "No tools here."
