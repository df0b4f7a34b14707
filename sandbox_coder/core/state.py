"""Run-scoped state shared by the agent loop, its tools, and its hooks."""

from pydantic import BaseModel, ConfigDict


class RunState(BaseModel):
    """Base class for run state.

    Run state is a Pydantic model owned by a single job execution. It is
    created when the run starts, passed by reference to every tool call and
    lifecycle hook, and discarded once the job result has been derived from it.
    """

    model_config = ConfigDict(validate_assignment=True)


class AgentRunState(RunState):
    """Shared state of one coding-agent run.

    Example:
        state = AgentRunState()
        state.record_file("app/page.tsx", "export default function Page() {}")
        state.mark_completed("<task_summary>Built the page</task_summary>")
    """

    files: dict[str, str] = {}
    summary: str | None = None
    completed: bool = False
    iteration_count: int = 0

    def record_file(self, path: str, content: str) -> None:
        """Record the full content of a written file. Last write wins."""
        files = dict(self.files or {})
        files[path] = content
        self.files = files

    def mark_completed(self, summary: str) -> None:
        """Store the final report and flag the run as completed."""
        self.summary = summary
        self.completed = True
