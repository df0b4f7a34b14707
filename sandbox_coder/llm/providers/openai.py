"""OpenAI provider backed by the Chat Completions API."""

import json
import logging
import os
from typing import Any

from openai import AsyncOpenAI

from .base import LLMProvider, LLMResponse, register_provider

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"


def _validate_tools_chat_completions(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Bring tool definitions into the nested ``{"type", "function": {...}}`` form.

    Flat definitions (``name``/``description``/``parameters`` at the top level)
    are nested; entries without a name are dropped with a warning.
    """
    normalized = []
    for tool in tools:
        if not isinstance(tool, dict):
            continue

        function = tool.get("function")
        if not isinstance(function, dict):
            if not tool.get("name"):
                logger.warning("Dropping tool definition without a name: %s", tool)
                continue
            function = {
                "name": tool["name"],
                "description": tool.get("description", ""),
                "parameters": tool.get("parameters") or {"type": "object", "properties": {}},
            }
        normalized.append({"type": "function", "function": function})
    return normalized


def _chat_tool_call(item: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": item.get("call_id", ""),
        "type": "function",
        "function": {"name": item.get("name", ""), "arguments": item.get("arguments", "{}")},
    }


def _tool_calls_from_message(message: Any) -> list[dict[str, Any]]:
    return [
        {
            "call_id": call.id,
            "id": "",
            "type": "function",
            "function": {"name": call.function.name, "arguments": call.function.arguments},
        }
        for call in (message.tool_calls or [])
    ]


def _usage_from_response(response: Any) -> dict[str, int]:
    usage = response.usage
    if not usage:
        return {"input_tokens": 0, "output_tokens": 0, "total_tokens": 0}
    return {
        "input_tokens": usage.prompt_tokens,
        "output_tokens": usage.completion_tokens,
        "total_tokens": usage.total_tokens,
    }


@register_provider("openai")
class OpenAIProvider(LLMProvider):
    """Chat Completions provider. Also serves OpenAI-compatible endpoints via ``base_url``."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None):
        """
        Args:
            api_key: API key, defaults to ``OPENAI_API_KEY``
            base_url: Endpoint, defaults to ``OPENAI_BASE_URL`` or the public API

        Raises:
            ValueError: If no API key is available
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "OpenAI API key not provided. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self.base_url = base_url or os.getenv("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL)
        self.client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)

    def convert_history_messages(self, messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Rewrite normalized tool traffic as Chat Completions messages.

        A run of ``function_call`` items becomes one assistant message with
        ``tool_calls``, merged into the assistant text message right before
        it when there is one. Each ``function_call_output`` becomes a
        ``role: "tool"`` message.
        """
        converted: list[dict[str, Any]] = []

        for item in messages:
            kind = item.get("type")

            if kind == "function_call":
                previous = converted[-1] if converted else None
                if previous is not None and previous.get("role") == "assistant":
                    previous.setdefault("tool_calls", []).append(_chat_tool_call(item))
                else:
                    converted.append({"role": "assistant", "tool_calls": [_chat_tool_call(item)]})
            elif kind == "function_call_output":
                output = item.get("output", "")
                converted.append(
                    {
                        "role": "tool",
                        "tool_call_id": item.get("call_id", ""),
                        "content": output if isinstance(output, str) else json.dumps(output),
                    }
                )
            else:
                converted.append(dict(item))

        return converted

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
        chat_messages = self.convert_history_messages(list(messages or []))

        system_prompt = (agent_config or {}).get("system_prompt")
        if system_prompt and not any(m.get("role") == "system" for m in chat_messages):
            chat_messages.insert(0, {"role": "system", "content": system_prompt})

        request: dict[str, Any] = {"model": model, "messages": chat_messages}
        if temperature is not None:
            request["temperature"] = temperature
        if max_tokens is not None:
            request["max_tokens"] = max_tokens
        chat_tools = _validate_tools_chat_completions(tools or [])
        if chat_tools:
            request["tools"] = chat_tools
        request.update(kwargs)

        try:
            response = await self.client.chat.completions.create(**request)
        except Exception as e:
            raise RuntimeError(f"OpenAI Chat Completions API call failed: {e}") from e

        if not response or not response.choices:
            raise RuntimeError("OpenAI API returned no choices")
        choice = response.choices[0]
        if not choice.message:
            raise RuntimeError("OpenAI API returned no message")

        return LLMResponse(
            content=choice.message.content or "",
            tool_calls=_tool_calls_from_message(choice.message),
            usage=_usage_from_response(response),
            model=response.model or model,
            stop_reason=choice.finish_reason,
        )
