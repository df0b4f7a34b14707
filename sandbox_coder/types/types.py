"""Records exchanged between the agent, its LLM provider, tools and hooks."""

from typing import Any, Literal

from pydantic import BaseModel


class Usage(BaseModel):
    """Token counts reported for one model call."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class ToolCallFunction(BaseModel):
    name: str
    # Raw JSON text as produced by the model
    arguments: str


class ToolCall(BaseModel):
    """One function call requested by the model.

    Providers return the call identifier in ``call_id``; ``id`` is kept for
    providers that only fill that field.
    """

    function: ToolCallFunction
    call_id: str | None = None
    id: str = ""
    type: str = "function"

    @property
    def reference(self) -> str:
        """Identifier that ties the call to its output in the conversation."""
        return self.call_id or self.id


class ToolResult(BaseModel):
    """Outcome of one tool call, as fed back to the model."""

    tool_name: str
    status: Literal["completed", "failed"]
    tool_call_call_id: str | None = None
    result: Any | None = None
    error: str | None = None

    @property
    def output(self) -> Any:
        return self.error if self.status == "failed" else self.result


class AgentTurn(BaseModel):
    """One agent turn: the model's reply plus the tool calls it made."""

    turn: int
    content: str | None = None
    tool_calls: list[ToolCall] = []
    tool_results: list[ToolResult] = []
    usage: Usage | None = None


class AgentConfig(BaseModel):
    """Everything a provider needs to make a model call for an agent."""

    name: str
    provider: str
    model: str
    system_prompt: str | None = None
    # OpenAI-style function definitions
    tools: list[dict[str, Any]] = []
    temperature: float | None = None
    max_output_tokens: int | None = None
    provider_base_url: str | None = None
    provider_kwargs: dict[str, Any] | None = None
