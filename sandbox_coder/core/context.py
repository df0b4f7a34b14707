"""Context class for job execution."""

from .state import AgentRunState
from .store import InMemoryStepStore, StepStore


class JobContext:
    """Context available to a job, its agent, tools, and hooks.

    Carries the execution identity, the durable Step helper, and the
    run-owned shared state. ``state`` starts as None; the agent loop
    initializes it on its first transition.
    """

    def __init__(
        self,
        job_id: str,
        execution_id: str,
        step_store: StepStore | None = None,
        state: AgentRunState | None = None,
    ):
        self.job_id = job_id
        self.execution_id = execution_id
        self.step_store = step_store or InMemoryStepStore()
        self.state = state
        self.sandbox_id: str | None = None
        # Step key prefix for the tool call currently executing, e.g. "terminal:3:0"
        self.tool_call_key: str | None = None

        from .step import Step

        self.step = Step(self)
