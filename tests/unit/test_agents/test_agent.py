"""Unit tests for sandbox_coder.agents.agent module."""

import json

import pytest
from pydantic import BaseModel

from sandbox_coder.agents.agent import Agent
from sandbox_coder.core.step import StepExecutionError
from sandbox_coder.execution.sandbox_tools import sandbox_tools
from sandbox_coder.llm.providers.base import LLMResponse
from sandbox_coder.middleware.hook import HookResult
from sandbox_coder.tools.tool import Tool


class NoteInput(BaseModel):
    text: str


def make_agent(provider, tools=None, **kwargs):
    return Agent(
        id="test-agent",
        provider="openai",
        model="gpt-4.1",
        system_prompt="You are a test agent.",
        tools=tools or [],
        llm_provider=provider,
        **kwargs,
    )


class TestAgentInit:
    def test_duplicate_tool_ids_are_rejected(self, get_fake_sandbox):
        tools = sandbox_tools(get_fake_sandbox)
        with pytest.raises(ValueError, match="Duplicate tool id"):
            make_agent(None, tools=tools + tools[:1])

    def test_single_hook_is_normalized(self):
        def on_end(ctx, hook_context):
            return None

        assert make_agent(None, on_agent_step_end=on_end).on_agent_step_end == [on_end]

    def test_invalid_hook_type(self):
        with pytest.raises(TypeError):
            make_agent(None, on_agent_step_end="not a hook")

    def test_agent_config_carries_tool_schemas(self, get_fake_sandbox):
        config = make_agent(None, tools=sandbox_tools(get_fake_sandbox)).agent_config()

        assert [t["function"]["name"] for t in config.tools] == [
            "terminal",
            "create_or_update_file",
            "read_files",
        ]
        assert config.system_prompt == "You are a test agent."


class TestRunTurn:
    @pytest.mark.asyncio
    async def test_text_only_turn(self, job_context, scripted_provider):
        scripted_provider.responses = [
            LLMResponse(content="Hello", usage={"input_tokens": 3, "output_tokens": 1})
        ]
        conversation = [{"role": "user", "content": "hi"}]

        turn = await make_agent(scripted_provider).run_turn(job_context, conversation, turn=1)

        assert turn.turn == 1
        assert turn.content == "Hello"
        assert turn.tool_calls == []
        assert turn.usage.input_tokens == 3
        assert conversation[-1] == {"role": "assistant", "content": "Hello"}

    @pytest.mark.asyncio
    async def test_executes_tool_calls_in_order(
        self, job_context, scripted_provider, fake_sandbox, get_fake_sandbox, tool_call
    ):
        scripted_provider.responses = [
            LLMResponse(
                content="",
                tool_calls=[
                    tool_call("create_or_update_file", {"path": "a.txt", "content": "A"}, "c1"),
                    tool_call("read_files", {"paths": ["a.txt"]}, "c2"),
                ],
            )
        ]
        conversation = [{"role": "user", "content": "write a"}]
        agent = make_agent(scripted_provider, tools=sandbox_tools(get_fake_sandbox))

        turn = await agent.run_turn(job_context, conversation, turn=1)

        assert [r.tool_name for r in turn.tool_results] == ["create_or_update_file", "read_files"]
        assert json.loads(turn.tool_results[1].result) == [{"path": "a.txt", "content": "A"}]
        assert job_context.state.files == {"a.txt": "A"}
        assert [m.get("type") for m in conversation[1:]] == [
            "function_call",
            "function_call",
            "function_call_output",
            "function_call_output",
        ]
        assert conversation[3] == {
            "type": "function_call_output",
            "call_id": "c1",
            "output": "Successfully wrote a.txt",
        }

    @pytest.mark.asyncio
    async def test_unknown_tool_becomes_error_output(
        self, job_context, scripted_provider, tool_call
    ):
        scripted_provider.responses = [
            LLMResponse(tool_calls=[tool_call("deploy", {}, "c1")])
        ]
        conversation = []

        turn = await make_agent(scripted_provider).run_turn(job_context, conversation, turn=1)

        assert turn.tool_results[0].status == "failed"
        assert conversation[-1]["output"] == "Error: unknown tool 'deploy'"

    @pytest.mark.asyncio
    async def test_invalid_arguments_become_error_output(
        self, job_context, scripted_provider, get_fake_sandbox
    ):
        scripted_provider.responses = [
            LLMResponse(
                tool_calls=[
                    {
                        "call_id": "c1",
                        "function": {"name": "terminal", "arguments": "{broken"},
                    }
                ]
            )
        ]
        agent = make_agent(scripted_provider, tools=sandbox_tools(get_fake_sandbox))

        turn = await agent.run_turn(job_context, [], turn=1)

        assert turn.tool_results[0].status == "failed"
        assert "Invalid JSON arguments for tool 'terminal'" in turn.tool_results[0].error

    @pytest.mark.asyncio
    async def test_tool_call_key_is_set_during_the_call(
        self, job_context, scripted_provider, tool_call
    ):
        seen = []

        def note(ctx, input: NoteInput):
            seen.append(ctx.tool_call_key)
            return "noted"

        tool = Tool(id="note", description="Take a note", input_schema=NoteInput, func=note)
        scripted_provider.responses = [
            LLMResponse(
                tool_calls=[tool_call("note", {"text": "a"}), tool_call("note", {"text": "b"})]
            )
        ]

        await make_agent(scripted_provider, tools=[tool]).run_turn(job_context, [], turn=4)

        assert seen == ["note:4:0", "note:4:1"]
        assert job_context.tool_call_key is None

    @pytest.mark.asyncio
    async def test_history_is_sent_on_later_turns(self, job_context, scripted_provider):
        scripted_provider.responses = [LLMResponse(content="one"), LLMResponse(content="two")]
        conversation = [{"role": "user", "content": "task"}]
        agent = make_agent(scripted_provider)

        await agent.run_turn(job_context, conversation, turn=1)
        await agent.run_turn(job_context, conversation, turn=2)

        assert scripted_provider.calls[1]["messages"] == [
            {"role": "user", "content": "task"},
            {"role": "assistant", "content": "one"},
        ]
        assert [t.turn for t in agent.turns] == [1, 2]

    @pytest.mark.asyncio
    async def test_replayed_turn_does_not_call_the_model(self, job_context, scripted_provider):
        scripted_provider.responses = [LLMResponse(content="recorded")]
        await make_agent(scripted_provider).run_turn(job_context, [], turn=1)

        replay = await make_agent(scripted_provider).run_turn(job_context, [], turn=1)

        assert replay.content == "recorded"
        assert len(scripted_provider.calls) == 1

    @pytest.mark.asyncio
    async def test_hooks_receive_the_turn(self, job_context, scripted_provider):
        received = []

        def on_end(ctx, hook_context):
            received.append(hook_context.current_output.content)
            return HookResult.continue_with()

        scripted_provider.responses = [LLMResponse(content="hello")]
        await make_agent(scripted_provider, on_agent_step_end=[on_end]).run_turn(
            job_context, [], turn=1
        )

        assert received == ["hello"]

    @pytest.mark.asyncio
    async def test_failing_hook_raises(self, job_context, scripted_provider):
        def on_end(ctx, hook_context):
            return HookResult.fail("policy violation")

        with pytest.raises(StepExecutionError, match="policy violation"):
            await make_agent(scripted_provider, on_agent_step_end=on_end).run_turn(
                job_context, [], turn=1
            )
