"""Provider interface, response model and the name -> provider registry."""

import importlib
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

# Filled by @register_provider when a provider module is imported
_PROVIDER_REGISTRY: dict[str, type["LLMProvider"]] = {}

# Modules that register the built-in providers, imported on first lookup
_BUILTIN_PROVIDER_MODULES = {
    "openai": ".openai",
    "gemini": ".gemini",
}


def register_provider(name: str):
    """Class decorator that makes a provider available to ``get_provider(name)``.

    Names are case-insensitive.
    """

    def decorator(cls: type["LLMProvider"]) -> type["LLMProvider"]:
        _PROVIDER_REGISTRY[name.lower()] = cls
        return cls

    return decorator


class LLMResponse(BaseModel):
    """A single model reply.

    ``tool_calls`` entries have the shape
    ``{"call_id", "id", "type": "function", "function": {"name", "arguments"}}``.
    ``usage`` holds ``input_tokens``, ``output_tokens`` and ``total_tokens``.
    """

    content: str | None = None
    tool_calls: list[dict[str, Any]] | None = Field(default_factory=list)
    usage: dict[str, Any] | None = Field(default_factory=dict)
    model: str | None = None
    stop_reason: str | None = None


class LLMProvider(ABC):
    """Something that can turn a conversation into the next assistant reply."""

    @abstractmethod
    async def generate(
        self,
        messages: list[dict[str, Any]],
        model: str,
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        agent_config: dict[str, Any] | None = None,
        **kwargs,
    ) -> LLMResponse:
        """
        Produce the next assistant message.

        Args:
            messages: Conversation in the normalized format, without the
                system prompt
            model: Model name, e.g. "gpt-4.1"
            tools: Function definitions the model may call
            temperature: Sampling temperature, provider default when None
            max_tokens: Output token limit, provider default when None
            agent_config: Dumped AgentConfig; ``system_prompt`` is read from it
            **kwargs: Extra request parameters passed through to the API

        Returns:
            LLMResponse for the reply
        """

    def convert_history_messages(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Map normalized history onto the provider's message format.

        The agent records tool traffic as ``{"type": "function_call", ...}``
        and ``{"type": "function_call_output", ...}`` items. Providers whose
        API expects something else override this; by default messages pass
        through untouched.
        """
        return messages


def get_provider(provider_name: str, **kwargs) -> LLMProvider:
    """
    Instantiate the provider registered as ``provider_name``.

    Built-in providers are imported the first time they are asked for, so the
    SDK of an unused provider is never loaded.

    Raises:
        ValueError: If no provider is known by that name
    """
    key = provider_name.lower()

    if key not in _PROVIDER_REGISTRY and key in _BUILTIN_PROVIDER_MODULES:
        importlib.import_module(_BUILTIN_PROVIDER_MODULES[key], package=__package__)

    provider_class = _PROVIDER_REGISTRY.get(key)
    if provider_class is None:
        supported = ", ".join(sorted(set(_BUILTIN_PROVIDER_MODULES) | set(_PROVIDER_REGISTRY)))
        raise ValueError(
            f"Unknown LLM provider: {provider_name}. Supported providers: {supported}."
        )

    return provider_class(**kwargs)
