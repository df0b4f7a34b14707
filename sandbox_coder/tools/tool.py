"""Tool class for defining tools that can be called by the coding agent."""

import inspect
import json
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from ..core.context import JobContext


class ToolInputError(ValueError):
    """Raised when the model sends arguments a tool cannot accept."""


class Tool:
    """
    A named, described, schema-typed callable exposed to the LLM.

    The handler has the signature ``(ctx: JobContext, input: InputModel)``
    where ``InputModel`` is the Pydantic class the JSON schema was built from.
    """

    def __init__(
        self,
        id: str,
        description: str,
        input_schema: type[BaseModel],
        func: Callable,
    ):
        """
        Initialize a tool.

        Args:
            id: Unique tool identifier, used as the function name sent to the LLM
            description: Description for LLM (what this tool does)
            input_schema: Pydantic model describing the arguments
            func: Sync or async handler called with (ctx, validated input)
        """
        self.id = id
        self._tool_description = description
        self._input_schema_class = input_schema
        self._tool_parameters = input_schema.model_json_schema()
        self._func = func

    @property
    def description(self) -> str:
        return self._tool_description

    @property
    def parameters(self) -> dict[str, Any]:
        return self._tool_parameters

    def parse_arguments(self, arguments: str | dict[str, Any] | None) -> BaseModel:
        """Validate raw LLM arguments (JSON string or dict) against the input schema.

        Raises:
            ToolInputError: If the arguments are not valid JSON or fail validation
        """
        if arguments is None or arguments == "":
            arguments = {}
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments)
            except json.JSONDecodeError as e:
                raise ToolInputError(f"Invalid JSON arguments for tool '{self.id}': {e}") from e
        try:
            return self._input_schema_class.model_validate(arguments)
        except ValidationError as e:
            raise ToolInputError(f"Invalid arguments for tool '{self.id}': {e}") from e

    async def call(self, ctx: JobContext, arguments: str | dict[str, Any] | None) -> Any:
        """Validate arguments and run the handler."""
        input_obj = self.parse_arguments(arguments)
        result = self._func(ctx, input_obj)
        if inspect.isawaitable(result):
            result = await result
        return result

    def to_llm_tool_definition(self) -> dict[str, Any]:
        """
        Convert tool to LLM function calling format.

        Returns format compatible with OpenAI function calling:
        {
            "type": "function",
            "function": {
                "name": "tool_id",
                "description": "...",
                "parameters": {...}
            }
        }
        """
        return {
            "type": "function",
            "function": {
                "name": self.id,
                "description": self._tool_description,
                "parameters": self._tool_parameters,
            },
        }

    def __repr__(self) -> str:
        return f"Tool(id={self.id!r})"


async def run_tool_step(ctx: JobContext, func: Callable, *args, **kwargs) -> Any:
    """Run a tool's side effect as a durable step keyed by the current tool call.

    Outside an agent turn there is no tool call key and ``func`` runs directly.
    Tools own their retry policy, so the step itself is not retried.
    """
    if ctx.tool_call_key is None:
        return await func(*args, **kwargs)
    return await ctx.step.run(ctx.tool_call_key, func, *args, max_retries=0, **kwargs)
