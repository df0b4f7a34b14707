"""Sandbox tools factory.

Creates the terminal, write, and read tools sharing one sandbox handle.

Example::

    from sandbox_coder.execution import cached_sandbox, sandbox_tools

    get_sandbox = cached_sandbox(provider, lambda: ctx.sandbox_id)
    agent = Agent(id="code-agent", ..., tools=sandbox_tools(get_sandbox))
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from ..tools.tool import Tool
from .sandbox import Sandbox, SandboxError, SandboxProvider
from .tools.read import create_read_tool
from .tools.terminal import create_terminal_tool
from .tools.write import create_write_tool
from .types import TerminalToolConfig


def cached_sandbox(
    provider: SandboxProvider,
    get_sandbox_id: Callable[[], str | None],
) -> Callable[[], Awaitable[Sandbox]]:
    """Return an async getter that connects to the job's sandbox once and reuses it.

    Args:
        provider: Provider used to connect by id
        get_sandbox_id: Returns the id of the sandbox created for the job
    """
    cache: dict[str, Sandbox] = {}
    lock = asyncio.Lock()

    async def get_sandbox() -> Sandbox:
        sandbox_id = get_sandbox_id()
        if not sandbox_id:
            raise SandboxError("No sandbox has been created for this job")

        async with lock:
            if sandbox_id not in cache:
                cache[sandbox_id] = await provider.connect(sandbox_id)
            return cache[sandbox_id]

    return get_sandbox


def sandbox_tools(
    get_sandbox: Callable[[], Awaitable[Sandbox]],
    terminal_config: TerminalToolConfig | None = None,
) -> list[Tool]:
    """Create the coding agent's sandbox tools.

    Args:
        get_sandbox: Async callable that returns the job's sandbox.
        terminal_config: Optional retry configuration for the terminal tool.

    Returns:
        List of Tool instances: terminal, create_or_update_file, read_files.
    """
    return [
        create_terminal_tool(get_sandbox, terminal_config),
        create_write_tool(get_sandbox),
        create_read_tool(get_sandbox),
    ]
