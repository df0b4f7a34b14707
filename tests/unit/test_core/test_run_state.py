"""Unit tests for sandbox_coder.core.state and context modules."""

from sandbox_coder.core.context import JobContext
from sandbox_coder.core.state import AgentRunState
from sandbox_coder.core.store import InMemoryStepStore


class TestAgentRunState:
    def test_starts_empty(self):
        state = AgentRunState()
        assert state.files == {}
        assert state.summary is None
        assert state.completed is False
        assert state.iteration_count == 0

    def test_last_write_wins(self):
        state = AgentRunState()
        state.record_file("app/page.tsx", "v1")
        state.record_file("app/page.tsx", "v2")
        state.record_file("app/layout.tsx", "layout")

        assert state.files == {"app/page.tsx": "v2", "app/layout.tsx": "layout"}

    def test_instances_do_not_share_files(self):
        first = AgentRunState()
        first.record_file("a", "1")
        assert AgentRunState().files == {}

    def test_mark_completed(self):
        state = AgentRunState()
        state.mark_completed("<task_summary>done</task_summary>")
        assert state.completed is True
        assert state.summary == "<task_summary>done</task_summary>"


class TestJobContext:
    def test_defaults(self):
        ctx = JobContext(job_id="job", execution_id="exec")

        assert isinstance(ctx.step_store, InMemoryStepStore)
        assert ctx.state is None
        assert ctx.sandbox_id is None
        assert ctx.tool_call_key is None
        assert ctx.step.ctx is ctx
