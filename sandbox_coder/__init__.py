__version__ = "0.1.0"

from .agents.agent import Agent
from .agents.loop import LoopStatus, LoopTransition, next_transition, run_agent_loop
from .agents.termination import (
    TerminationConfig,
    create_termination_hook,
    detect_completion,
    find_completion_marker,
)
from .core.context import JobContext
from .core.state import AgentRunState, RunState
from .core.step import Step, StepExecutionError
from .core.store import FileStepStore, InMemoryStepStore, StepRecord, StepStore
from .execution import (
    E2BSandboxProvider,
    LocalSandboxProvider,
    Sandbox,
    SandboxError,
    SandboxProvider,
    TerminalToolConfig,
    sandbox_tools,
)
from .jobs import CodeAgentJob, CodeAgentPayload, CodeAgentResult
from .middleware.hook import HookAction, HookContext, HookResult, hook
from .persistence import FileResultStore, HttpResultStore, ResultStore
from .tools.tool import Tool
from .types.types import AgentConfig, AgentTurn, ToolCall, ToolResult, Usage
from .utils.config import Settings
from .utils.logging import configure_logging
from .utils.retry import RetryExhaustedError, retry_with_fixed_delay

__all__ = [
    "Agent",
    "AgentConfig",
    "AgentRunState",
    "AgentTurn",
    "CodeAgentJob",
    "CodeAgentPayload",
    "CodeAgentResult",
    "E2BSandboxProvider",
    "FileResultStore",
    "FileStepStore",
    "HookAction",
    "HookContext",
    "HookResult",
    "HttpResultStore",
    "InMemoryStepStore",
    "JobContext",
    "LocalSandboxProvider",
    "LoopStatus",
    "LoopTransition",
    "ResultStore",
    "RetryExhaustedError",
    "RunState",
    "Sandbox",
    "SandboxError",
    "SandboxProvider",
    "Settings",
    "Step",
    "StepExecutionError",
    "StepRecord",
    "StepStore",
    "TerminalToolConfig",
    "TerminationConfig",
    "Tool",
    "ToolCall",
    "ToolResult",
    "Usage",
    "configure_logging",
    "create_termination_hook",
    "detect_completion",
    "find_completion_marker",
    "hook",
    "next_transition",
    "retry_with_fixed_delay",
    "run_agent_loop",
    "sandbox_tools",
]
