"""Shared pytest configuration and fixtures."""

import json
import uuid
from typing import Any

import pytest

from sandbox_coder.core.context import JobContext
from sandbox_coder.core.state import AgentRunState
from sandbox_coder.core.store import InMemoryStepStore
from sandbox_coder.execution.sandbox import Sandbox, SandboxError, SandboxProvider
from sandbox_coder.llm.providers.base import LLMProvider, LLMResponse


class FakeSandbox(Sandbox):
    """In-memory sandbox. Commands pop scripted outcomes from ``command_results``.

    Each outcome is ``(exit_code, stdout, stderr)`` or an exception to raise.
    Unscripted commands exit 0 with no output.
    """

    def __init__(self, sandbox_id: str = "sbx-test"):
        self._sandbox_id = sandbox_id
        self.files: dict[str, str] = {}
        self.commands: list[str] = []
        self.command_results: list[Any] = []
        self.write_error: Exception | None = None
        self.reads: list[str] = []

    @property
    def sandbox_id(self) -> str:
        return self._sandbox_id

    async def run_command(self, command, on_stdout=None, on_stderr=None):
        self.commands.append(command)
        outcome = self.command_results.pop(0) if self.command_results else (0, "", "")
        if isinstance(outcome, Exception):
            raise outcome
        exit_code, stdout, stderr = outcome
        if stdout and on_stdout:
            on_stdout(stdout)
        if stderr and on_stderr:
            on_stderr(stderr)
        return exit_code

    async def write_file(self, path, content):
        if self.write_error is not None:
            raise self.write_error
        self.files[path] = content

    async def read_file(self, path):
        self.reads.append(path)
        if path not in self.files:
            raise FileNotFoundError(f"No such file: {path}")
        return self.files[path]

    def get_host(self, port):
        return f"{port}-{self._sandbox_id}.e2b.app"


class FakeSandboxProvider(SandboxProvider):
    """Hands out a single FakeSandbox and counts create/connect calls."""

    def __init__(self, sandbox: FakeSandbox):
        self.sandbox = sandbox
        self.created = 0
        self.connected = 0

    async def create(self):
        self.created += 1
        return self.sandbox

    async def connect(self, sandbox_id):
        self.connected += 1
        if sandbox_id != self.sandbox.sandbox_id:
            raise SandboxError(f"Unknown sandbox {sandbox_id}")
        return self.sandbox


class ScriptedLLMProvider(LLMProvider):
    """Returns queued responses in order; once empty, keeps answering without tools."""

    def __init__(self, responses: list[LLMResponse] | None = None):
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        messages,
        model,
        tools=None,
        temperature=None,
        max_tokens=None,
        agent_config=None,
        **kwargs,
    ):
        self.calls.append({"messages": [dict(m) for m in messages], "model": model, "tools": tools})
        if self.responses:
            return self.responses.pop(0)
        return LLMResponse(content="Still working on it.", model=model)


def make_tool_call(name: str, arguments: dict[str, Any], call_id: str | None = None) -> dict:
    """Build a tool call in the shape providers return."""
    return {
        "call_id": call_id or f"call_{uuid.uuid4().hex[:8]}",
        "id": "",
        "type": "function",
        "function": {"name": name, "arguments": json.dumps(arguments)},
    }


@pytest.fixture
def job_context():
    """A JobContext with a fresh in-memory step store and run state."""
    ctx = JobContext(
        job_id="test-job",
        execution_id=str(uuid.uuid4()),
        step_store=InMemoryStepStore(),
    )
    ctx.state = AgentRunState()
    ctx.sandbox_id = "sbx-test"
    return ctx


@pytest.fixture
def fake_sandbox():
    return FakeSandbox()


@pytest.fixture
def fake_sandbox_provider(fake_sandbox):
    return FakeSandboxProvider(fake_sandbox)


@pytest.fixture
def get_fake_sandbox(fake_sandbox):
    """Async getter returning the fake sandbox, as tools expect."""

    async def get_sandbox():
        return fake_sandbox

    return get_sandbox


@pytest.fixture
def scripted_provider():
    return ScriptedLLMProvider()


@pytest.fixture
def tool_call():
    """Factory for provider-shaped tool calls."""
    return make_tool_call
