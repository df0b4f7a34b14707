"""Execution layer -- the sandbox the agent works in and the tools that drive it."""

from .e2b import E2BSandbox, E2BSandboxProvider
from .local import LocalSandbox, LocalSandboxProvider
from .output import strip_ansi, truncate_output
from .sandbox import Sandbox, SandboxError, SandboxProvider
from .sandbox_tools import cached_sandbox, sandbox_tools
from .tools.read import create_read_tool
from .tools.terminal import create_terminal_tool, run_command_with_retries
from .tools.write import create_write_tool
from .types import CommandAttempt, E2BSandboxConfig, LocalSandboxConfig, TerminalToolConfig

__all__ = [
    "CommandAttempt",
    "E2BSandbox",
    "E2BSandboxConfig",
    "E2BSandboxProvider",
    "LocalSandbox",
    "LocalSandboxConfig",
    "LocalSandboxProvider",
    "Sandbox",
    "SandboxError",
    "SandboxProvider",
    "TerminalToolConfig",
    "cached_sandbox",
    "create_read_tool",
    "create_terminal_tool",
    "create_write_tool",
    "run_command_with_retries",
    "sandbox_tools",
    "strip_ansi",
    "truncate_output",
]
