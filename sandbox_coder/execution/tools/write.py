"""Write tool -- create or overwrite a file in the sandbox and record it in the run state."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field

from ...core.context import JobContext
from ...core.state import AgentRunState
from ...tools.tool import Tool, run_tool_step
from ..sandbox import Sandbox

logger = logging.getLogger(__name__)


class WriteInput(BaseModel):
    """Input schema for the write tool."""

    path: str = Field(description="Path of the file relative to the app directory")
    content: str = Field(description="Complete content of the file")


def create_write_tool(get_sandbox: Callable[[], Awaitable[Sandbox]]) -> Tool:
    """Create the write tool.

    A successful write sets ``files[path] = content`` on the run state. A
    failed write is reported back to the agent as text.
    """

    async def write_in_sandbox(path: str, content: str) -> str | None:
        try:
            sandbox = await get_sandbox()
            await sandbox.write_file(path, content)
        except Exception as e:
            logger.warning("Failed to write %s: %s", path, e)
            return f"Error writing file {path}: {e}"
        return None

    async def handler(ctx: JobContext, input: WriteInput) -> str:
        error = await run_tool_step(ctx, write_in_sandbox, input.path, input.content)
        if error:
            return error

        if ctx.state is None:
            ctx.state = AgentRunState()
        ctx.state.record_file(input.path, input.content)
        return f"Successfully wrote {input.path}"

    return Tool(
        id="create_or_update_file",
        description=(
            "Create a file or overwrite it entirely. Always pass the complete file content; "
            "partial edits are not supported. Parent directories are created automatically."
        ),
        input_schema=WriteInput,
        func=handler,
    )
