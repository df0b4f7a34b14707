"""Agent class: one LLM call per turn plus sequential execution of the tool calls it issued."""

import logging
from collections.abc import Callable
from typing import Any

from ..core.context import JobContext
from ..core.step import StepExecutionError
from ..llm.generate import llm_generate
from ..llm.providers.base import LLMProvider
from ..middleware.hook import HookContext
from ..middleware.hook_executor import execute_hooks
from ..tools.tool import Tool, ToolInputError
from ..types.types import AgentConfig, AgentTurn, ToolCall, ToolResult, Usage
from ..utils.serializer import json_serialize, serialize
from ..utils.tracing import get_tracer

logger = logging.getLogger(__name__)


def _append_normalized_assistant(conversation: list[dict[str, Any]], turn: AgentTurn) -> None:
    """Append the assistant text and its tool calls in the normalized format."""
    if turn.content:
        conversation.append({"role": "assistant", "content": turn.content})

    for tool_call in turn.tool_calls:
        conversation.append(
            {
                "type": "function_call",
                "name": tool_call.function.name,
                "call_id": tool_call.reference,
                "arguments": tool_call.function.arguments,
            }
        )

    if not turn.content and not turn.tool_calls:
        conversation.append({"role": "assistant", "content": ""})


def _append_normalized_tool_results(
    conversation: list[dict[str, Any]], tool_results: list[ToolResult]
) -> None:
    for tool_result in tool_results:
        output = tool_result.output
        conversation.append(
            {
                "type": "function_call_output",
                "call_id": tool_result.tool_call_call_id,
                "output": json_serialize(output),
            }
        )


class Agent:
    """
    A coding agent bound to a provider, a model, a system prompt, and a tool set.

    The agent keeps no state of its own between turns; the caller owns the
    conversation list and the run state carried by the JobContext.

    Example:
        agent = Agent(
            id="code-agent",
            provider="openai",
            model="gpt-4.1",
            system_prompt=CODING_AGENT_SYSTEM_PROMPT,
            tools=sandbox_tools(get_sandbox),
            on_agent_step_end=[create_termination_hook()],
        )
        turn = await agent.run_turn(ctx, conversation, turn=1)
    """

    def __init__(
        self,
        id: str,
        provider: str,
        model: str,
        system_prompt: str | None = None,
        tools: list[Tool] | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
        provider_base_url: str | None = None,
        provider_kwargs: dict[str, Any] | None = None,
        on_agent_step_end: Callable | list[Callable] | None = None,
        llm_provider: LLMProvider | None = None,
    ):
        self.id = id
        self.provider = provider
        self.model = model
        self.system_prompt = system_prompt
        self.tools = tools or []
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.provider_base_url = provider_base_url
        self.provider_kwargs = provider_kwargs
        self.on_agent_step_end = self._normalize_hooks(on_agent_step_end)
        # Explicit provider instance; built from the provider name on first use otherwise
        self.llm_provider = llm_provider

        self._tools_by_id: dict[str, Tool] = {}
        for tool in self.tools:
            if tool.id in self._tools_by_id:
                raise ValueError(f"Duplicate tool id '{tool.id}' for agent '{id}'")
            self._tools_by_id[tool.id] = tool

        self._turns: list[AgentTurn] = []

    @staticmethod
    def _normalize_hooks(hooks: Callable | list[Callable] | None) -> list[Callable]:
        if hooks is None:
            return []
        if callable(hooks):
            return [hooks]
        if isinstance(hooks, list):
            for hook_func in hooks:
                if not callable(hook_func):
                    raise TypeError(f"Invalid hook type: {type(hook_func)}. Expected a callable.")
            return list(hooks)
        raise TypeError(f"Invalid hooks type: {type(hooks)}. Expected callable or list.")

    @property
    def turns(self) -> list[AgentTurn]:
        """Turns completed by this agent instance, oldest first."""
        return list(self._turns)

    def _build_tools_schema(self) -> list[dict[str, Any]]:
        return [tool.to_llm_tool_definition() for tool in self.tools]

    def agent_config(self) -> AgentConfig:
        return AgentConfig(
            name=self.id,
            provider=self.provider,
            model=self.model,
            tools=self._build_tools_schema(),
            system_prompt=self.system_prompt,
            max_output_tokens=self.max_output_tokens,
            temperature=self.temperature,
            provider_base_url=self.provider_base_url,
            provider_kwargs=self.provider_kwargs,
        )

    async def _execute_tool_call(
        self, ctx: JobContext, tool_call: ToolCall, turn: int, index: int
    ) -> ToolResult:
        """Run one tool call. Errors become agent-visible text, never exceptions."""
        tool_name = tool_call.function.name
        call_id = tool_call.reference

        tool = self._tools_by_id.get(tool_name)
        if tool is None:
            logger.warning("Tool '%s' requested by the model is not registered", tool_name)
            return ToolResult(
                tool_name=tool_name,
                status="failed",
                error=f"Error: unknown tool '{tool_name}'",
                tool_call_call_id=call_id,
            )

        ctx.tool_call_key = f"{tool_name}:{turn}:{index}"
        try:
            result = await tool.call(ctx, tool_call.function.arguments)
        except ToolInputError as e:
            return ToolResult(
                tool_name=tool_name,
                status="failed",
                error=f"Error: {e}",
                tool_call_call_id=call_id,
            )
        finally:
            ctx.tool_call_key = None

        return ToolResult(
            tool_name=tool_name,
            status="completed",
            result=serialize(result),
            tool_call_call_id=call_id,
        )

    async def run_turn(
        self,
        ctx: JobContext,
        conversation: list[dict[str, Any]],
        turn: int,
    ) -> AgentTurn:
        """
        Run one agent turn and extend ``conversation`` in place.

        The turn is: one durable LLM call, then each tool call it issued, one
        at a time in the order given, then the ``on_agent_step_end`` hooks.

        Args:
            ctx: JobContext carrying the run state
            conversation: Normalized message history, mutated in place
            turn: 1-based turn number, used in durable step keys

        Returns:
            AgentTurn describing what the model said and which tools ran

        Raises:
            StepExecutionError: If the LLM step fails or a hook returns FAIL
        """
        with get_tracer().start_as_current_span(
            name="agent.turn",
            attributes={"agent.id": self.id, "agent.turn": turn},
        ):
            return await self._run_turn(ctx, conversation, turn)

    async def _run_turn(
        self, ctx: JobContext, conversation: list[dict[str, Any]], turn: int
    ) -> AgentTurn:
        agent_config = self.agent_config()

        llm_response = await llm_generate(
            ctx, agent_config, conversation, turn, provider=self.llm_provider
        )

        tool_calls = [ToolCall.model_validate(tc) for tc in llm_response.tool_calls or []]
        usage = Usage.model_validate(llm_response.usage) if llm_response.usage else None
        agent_turn = AgentTurn(
            turn=turn,
            content=llm_response.content,
            tool_calls=tool_calls,
            usage=usage,
        )
        _append_normalized_assistant(conversation, agent_turn)

        tool_results = []
        for index, tool_call in enumerate(tool_calls):
            tool_results.append(await self._execute_tool_call(ctx, tool_call, turn, index))

        agent_turn.tool_results = tool_results
        _append_normalized_tool_results(conversation, tool_results)
        self._turns.append(agent_turn)

        if self.on_agent_step_end:
            hook_context = HookContext(
                job_id=ctx.job_id,
                agent_id=self.id,
                execution_id=ctx.execution_id,
                agent_config=agent_config,
                turns=list(self._turns),
                current_output=agent_turn,
            )
            hook_result = await execute_hooks(
                f"{turn}.hook.on_agent_step_end", self.on_agent_step_end, hook_context, ctx
            )
            if hook_result.failed:
                raise StepExecutionError(hook_result.error_message or "Hook execution failed")

        return agent_turn

    def __repr__(self) -> str:
        return f"Agent(id={self.id!r}, provider={self.provider!r}, model={self.model!r})"
