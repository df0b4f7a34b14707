"""Unit tests for sandbox_coder.agents.loop module."""

import pytest

from sandbox_coder.agents.agent import Agent
from sandbox_coder.agents.loop import LoopStatus, next_transition, run_agent_loop
from sandbox_coder.agents.termination import create_termination_hook
from sandbox_coder.core.state import AgentRunState
from sandbox_coder.llm.providers.base import LLMResponse


class TestNextTransition:
    def test_initializes_missing_state(self):
        transition = next_transition(None)

        assert transition.status == LoopStatus.RUNNING
        assert transition.should_invoke
        assert transition.state.iteration_count == 1
        assert transition.state.files == {}
        assert transition.state.completed is False

    def test_increments_by_one_without_mutating_input(self):
        state = AgentRunState(iteration_count=4)
        transition = next_transition(state)

        assert transition.state.iteration_count == 5
        assert state.iteration_count == 4

    def test_completed_state_is_done(self):
        state = AgentRunState(completed=True, iteration_count=2)
        transition = next_transition(state)

        assert transition.status == LoopStatus.DONE
        assert transition.state.iteration_count == 3

    def test_cap_allows_exactly_max_invocations(self):
        state = None
        invocations = 0
        while True:
            transition = next_transition(state, max_iterations=15)
            state = transition.state
            if not transition.should_invoke:
                break
            invocations += 1

        assert invocations == 15
        assert state.iteration_count == 16

    def test_keeps_files_and_summary(self):
        state = AgentRunState(files={"a": "1"}, summary="s")
        transition = next_transition(state)
        assert transition.state.files == {"a": "1"}
        assert transition.state.summary == "s"

    def test_rejects_non_positive_cap(self):
        with pytest.raises(ValueError):
            next_transition(None, max_iterations=0)


def _agent(provider):
    return Agent(
        id="test-agent",
        provider="openai",
        model="gpt-4.1",
        on_agent_step_end=[create_termination_hook()],
        llm_provider=provider,
    )


class TestRunAgentLoop:
    @pytest.mark.asyncio
    async def test_stops_at_the_cap_without_marker(self, job_context, scripted_provider):
        job_context.state = None

        state = await run_agent_loop(job_context, _agent(scripted_provider), "Build it", 15)

        assert len(scripted_provider.calls) == 15
        assert state.completed is False
        assert state.summary is None

    @pytest.mark.asyncio
    async def test_stops_right_after_completion(self, job_context, scripted_provider):
        job_context.state = None
        scripted_provider.responses = [
            LLMResponse(content="Working"),
            LLMResponse(content="<task_summary>Done</task_summary>"),
        ]

        state = await run_agent_loop(job_context, _agent(scripted_provider), "Build it")

        assert len(scripted_provider.calls) == 2
        assert state.completed is True
        assert state.iteration_count == 3

    @pytest.mark.asyncio
    async def test_already_completed_state_never_invokes(self, job_context, scripted_provider):
        job_context.state = AgentRunState(completed=True, summary="earlier", files={"a": "1"})

        state = await run_agent_loop(job_context, _agent(scripted_provider), "Build it")

        assert scripted_provider.calls == []
        assert state.summary == "earlier"
        assert state.files == {"a": "1"}

    @pytest.mark.asyncio
    async def test_task_is_first_user_message(self, job_context, scripted_provider):
        job_context.state = None
        scripted_provider.responses = [LLMResponse(content="TASK COMPLETED")]

        await run_agent_loop(job_context, _agent(scripted_provider), "Build a hello-world page")

        assert scripted_provider.calls[0]["messages"] == [
            {"role": "user", "content": "Build a hello-world page"}
        ]
