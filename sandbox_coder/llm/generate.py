"""Durable LLM generation for one agent turn."""

from typing import Any

from ..core.context import JobContext
from ..types.types import AgentConfig
from .providers import LLMProvider, LLMResponse, get_provider


def provider_for(agent_config: AgentConfig) -> LLMProvider:
    """Build the provider named by an agent config."""
    provider_kwargs = {}
    if agent_config.provider_base_url:
        provider_kwargs["base_url"] = agent_config.provider_base_url
    return get_provider(agent_config.provider, **provider_kwargs)


async def llm_generate(
    ctx: JobContext,
    agent_config: AgentConfig,
    messages: list[dict[str, Any]],
    turn: int,
    provider: LLMProvider | None = None,
) -> LLMResponse:
    """
    Call the LLM for one agent turn as a durable step.

    The step key is ``llm_generate:{turn}``, so replaying an execution returns
    the recorded response instead of calling the provider again.

    Args:
        ctx: JobContext for the current execution
        agent_config: Provider, model, tool schemas, and system prompt
        messages: Normalized conversation history (without the system prompt)
        turn: 1-based agent turn number
        provider: Provider instance to use; built from agent_config when omitted

    Returns:
        LLMResponse with content, tool_calls, and usage
    """
    if provider is None:
        provider = provider_for(agent_config)

    provider_kwargs = agent_config.provider_kwargs or {}

    return await ctx.step.run(
        f"llm_generate:{turn}",
        provider.generate,
        messages=list(messages),
        model=agent_config.model,
        tools=agent_config.tools,
        temperature=agent_config.temperature,
        max_tokens=agent_config.max_output_tokens,
        agent_config=agent_config.model_dump(mode="json"),
        **provider_kwargs,
    )
