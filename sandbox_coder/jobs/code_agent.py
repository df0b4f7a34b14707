"""The code agent job: provision a sandbox, run the agent loop, report the result."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from pydantic import BaseModel, Field

from ..agents.agent import Agent
from ..agents.loop import DEFAULT_MAX_ITERATIONS, run_agent_loop
from ..agents.termination import TerminationConfig, create_termination_hook
from ..core.context import JobContext
from ..core.store import FileStepStore, InMemoryStepStore, StepStore
from ..execution.e2b import E2BSandboxProvider
from ..execution.local import LocalSandboxProvider
from ..execution.sandbox import SandboxProvider
from ..execution.sandbox_tools import cached_sandbox, sandbox_tools
from ..execution.types import E2BSandboxConfig, TerminalToolConfig
from ..llm.providers.base import LLMProvider
from ..persistence.store import FileResultStore, HttpResultStore, ResultStore
from ..utils.config import Settings
from ..utils.tracing import get_tracer
from .prompts import CODING_AGENT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

RESULT_TITLE = "Fragment"
DEFAULT_SUMMARY = "Task completed"


class CodeAgentPayload(BaseModel):
    """Job input: the task description."""

    value: str = Field(description="What the agent should build")


class CodeAgentResult(BaseModel):
    """Job output."""

    sandbox_url: str
    title: str = RESULT_TITLE
    files: dict[str, str] = {}
    summary: str = DEFAULT_SUMMARY


class CodeAgentJob:
    """
    Runs one coding task end to end.

    Steps, in order: ``get-sandbox-id`` (create the sandbox), the agent
    loop, ``get-sandbox-url`` (public URL of the app port) and
    ``save-result``. Each is a durable step, so re-running an execution id
    against the same step store resumes instead of starting over.

    Example:
        job = CodeAgentJob.from_settings(Settings.from_env())
        result = await job.run({"value": "Build a hello-world page"})
    """

    def __init__(
        self,
        sandbox_provider: SandboxProvider,
        result_store: ResultStore,
        provider: str = "openai",
        model: str = "gpt-4.1",
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        terminal_config: TerminalToolConfig | None = None,
        termination_config: TerminationConfig | None = None,
        app_port: int = 3000,
        step_store: StepStore | None = None,
        llm_provider: LLMProvider | None = None,
        system_prompt: str = CODING_AGENT_SYSTEM_PROMPT,
        job_id: str = "code-agent",
    ):
        self.sandbox_provider = sandbox_provider
        self.result_store = result_store
        self.provider = provider
        self.model = model
        self.max_iterations = max_iterations
        self.terminal_config = terminal_config or TerminalToolConfig()
        self.termination_config = termination_config or TerminationConfig()
        self.app_port = app_port
        self.step_store = step_store or InMemoryStepStore()
        self.llm_provider = llm_provider
        self.system_prompt = system_prompt
        self.job_id = job_id

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> CodeAgentJob:
        """Build a job from ``Settings``. Keyword arguments override the derived parts."""
        if "sandbox_provider" not in kwargs:
            if settings.sandbox == "local":
                kwargs["sandbox_provider"] = LocalSandboxProvider()
            else:
                kwargs["sandbox_provider"] = E2BSandboxProvider(
                    E2BSandboxConfig(template=settings.e2b_template)
                )

        if "result_store" not in kwargs:
            if settings.result_store_url:
                kwargs["result_store"] = HttpResultStore(settings.result_store_url)
            else:
                kwargs["result_store"] = FileResultStore(settings.result_store_path)

        if "step_store" not in kwargs and settings.step_store_path:
            kwargs["step_store"] = FileStepStore(settings.step_store_path)

        kwargs.setdefault("provider", settings.provider)
        kwargs.setdefault("model", settings.model)
        kwargs.setdefault("max_iterations", settings.max_iterations)
        kwargs.setdefault(
            "terminal_config",
            TerminalToolConfig(
                max_attempts=settings.command_max_attempts,
                retry_delay_ms=settings.command_retry_delay_ms,
            ),
        )
        kwargs.setdefault(
            "termination_config", TerminationConfig(markers=settings.completion_markers)
        )
        kwargs.setdefault("app_port", settings.app_port)
        return cls(**kwargs)

    def build_agent(self, ctx: JobContext) -> Agent:
        """Create the coding agent wired to this execution's sandbox."""
        get_sandbox = cached_sandbox(self.sandbox_provider, lambda: ctx.sandbox_id)
        return Agent(
            id=f"{self.job_id}-agent",
            provider=self.provider,
            model=self.model,
            system_prompt=self.system_prompt,
            tools=sandbox_tools(get_sandbox, self.terminal_config),
            on_agent_step_end=[create_termination_hook(self.termination_config)],
            llm_provider=self.llm_provider,
        )

    async def _create_sandbox(self) -> str:
        sandbox = await self.sandbox_provider.create()
        return sandbox.sandbox_id

    async def _get_sandbox_url(self, sandbox_id: str) -> str:
        sandbox = await self.sandbox_provider.connect(sandbox_id)
        return f"https://{sandbox.get_host(self.app_port)}"

    async def run(
        self,
        payload: CodeAgentPayload | dict[str, Any],
        execution_id: str | None = None,
    ) -> CodeAgentResult:
        """
        Execute the job.

        Args:
            payload: Task description (``{"value": ...}``)
            execution_id: Id used to key durable steps; a fresh one when omitted

        Returns:
            CodeAgentResult with the sandbox URL, files written, and summary

        Raises:
            StepExecutionError: If sandbox creation, URL lookup, an LLM call,
                or saving the result fails after retries
        """
        if not isinstance(payload, CodeAgentPayload):
            payload = CodeAgentPayload.model_validate(payload)
        execution_id = execution_id or uuid.uuid4().hex

        ctx = JobContext(job_id=self.job_id, execution_id=execution_id, step_store=self.step_store)

        with get_tracer().start_as_current_span(
            name=f"job.{self.job_id}",
            attributes={"job.id": self.job_id, "job.execution_id": execution_id},
        ) as span:
            ctx.sandbox_id = await ctx.step.run("get-sandbox-id", self._create_sandbox)
            span.set_attribute("job.sandbox_id", ctx.sandbox_id)
            logger.info("Execution %s using sandbox %s", execution_id, ctx.sandbox_id)

            agent = self.build_agent(ctx)
            state = await run_agent_loop(ctx, agent, payload.value, self.max_iterations)

            sandbox_url = await ctx.step.run(
                "get-sandbox-url", self._get_sandbox_url, ctx.sandbox_id
            )

            result = CodeAgentResult(
                sandbox_url=sandbox_url,
                title=RESULT_TITLE,
                files=dict(state.files),
                summary=state.summary or DEFAULT_SUMMARY,
            )

            await ctx.step.run(
                "save-result",
                self.result_store.save,
                {
                    "job_id": self.job_id,
                    "execution_id": execution_id,
                    "completed": state.completed,
                    **result.model_dump(mode="json"),
                },
            )
            logger.info(
                "Execution %s finished (completed=%s, files=%d)",
                execution_id,
                state.completed,
                len(result.files),
            )

        return result
