"""Read tool -- read one or more files from the sandbox."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field

from ...core.context import JobContext
from ...tools.tool import Tool, run_tool_step
from ..sandbox import Sandbox

logger = logging.getLogger(__name__)


class ReadInput(BaseModel):
    """Input schema for the read tool."""

    paths: list[str] = Field(description="Paths of the files to read")


def create_read_tool(get_sandbox: Callable[[], Awaitable[Sandbox]]) -> Tool:
    """Create the read tool.

    Files are read one after another. The result is a JSON array of
    ``{"path", "content"}`` objects, or an error message if any read fails.
    """

    async def read_in_sandbox(paths: list[str]) -> str:
        try:
            sandbox = await get_sandbox()
            contents = []
            for path in paths:
                contents.append({"path": path, "content": await sandbox.read_file(path)})
        except Exception as e:
            logger.warning("Failed to read files %s: %s", paths, e)
            return f"Error reading files: {e}"
        return json.dumps(contents)

    async def handler(ctx: JobContext, input: ReadInput) -> str:
        return await run_tool_step(ctx, read_in_sandbox, list(input.paths))

    return Tool(
        id="read_files",
        description="Read files from the sandbox. Returns a JSON list of {path, content}.",
        input_schema=ReadInput,
        func=handler,
    )
