"""Terminal tool -- run a shell command in the sandbox with a bounded, fixed-delay retry."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field

from ...core.context import JobContext
from ...tools.tool import Tool, run_tool_step
from ...utils.retry import RetryExhaustedError, retry_with_fixed_delay
from ..output import truncate_output
from ..sandbox import Sandbox
from ..types import CommandAttempt, TerminalToolConfig

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Command completed successfully"


class TerminalInput(BaseModel):
    """Input schema for the terminal tool."""

    command: str = Field(description="The shell command to run in the sandbox")


class CommandFailedError(Exception):
    """A command attempt finished with a non-zero exit code."""

    def __init__(self, attempt: CommandAttempt):
        self.attempt = attempt
        super().__init__(attempt.failure_message())


async def run_command_with_retries(
    get_sandbox: Callable[[], Awaitable[Sandbox]],
    command: str,
    config: TerminalToolConfig | None = None,
) -> str:
    """
    Run ``command`` until it exits 0 or the attempts run out.

    The sandbox is resolved through ``get_sandbox`` at the start of every
    attempt. Output of each attempt is collected through the sandbox's
    streaming callbacks into fresh buffers. A non-zero exit, or an exception
    raised while connecting to or invoking the sandbox, counts as a failed
    attempt.

    Returns:
        stdout, else stderr, else a generic success message on success;
        ``"FAILED after {n} attempts: {last error}"`` once every attempt failed
    """
    config = config or TerminalToolConfig()

    async def attempt_once(attempt_number: int) -> CommandAttempt:
        attempt = CommandAttempt(attempt=attempt_number)
        sandbox = await get_sandbox()
        exit_code = await sandbox.run_command(
            command,
            on_stdout=attempt.append_stdout,
            on_stderr=attempt.append_stderr,
        )
        attempt.exit_code = exit_code if exit_code is not None else 0
        if not attempt.succeeded:
            raise CommandFailedError(attempt)
        return attempt

    try:
        attempt = await retry_with_fixed_delay(
            attempt_once,
            max_attempts=config.max_attempts,
            delay=config.retry_delay_ms / 1000,
            label=f"command {command!r}",
        )
    except RetryExhaustedError as e:
        logger.warning("Command %r failed after %d attempts", command, e.attempts)
        return str(e)

    output = attempt.stdout or attempt.stderr or SUCCESS_MESSAGE
    output, _ = truncate_output(output, config.max_output_chars)
    return output


def create_terminal_tool(
    get_sandbox: Callable[[], Awaitable[Sandbox]],
    config: TerminalToolConfig | None = None,
) -> Tool:
    """Create the terminal tool.

    Args:
        get_sandbox: Async callable that returns the job's sandbox.
        config: Optional retry configuration.

    Returns:
        A Tool instance for terminal.
    """
    config = config or TerminalToolConfig()

    async def run_in_sandbox(command: str) -> str:
        return await run_command_with_retries(get_sandbox, command, config)

    async def handler(ctx: JobContext, input: TerminalInput) -> str:
        return await run_tool_step(ctx, run_in_sandbox, input.command)

    return Tool(
        id="terminal",
        description=(
            "Run a shell command in the sandbox, e.g. to install packages or list files. "
            "Returns the command output. Failing commands are retried before the failure "
            "is reported."
        ),
        input_schema=TerminalInput,
        func=handler,
    )
