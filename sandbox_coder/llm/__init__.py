"""LLM generation and providers."""

from .generate import llm_generate, provider_for

__all__ = [
    "llm_generate",
    "provider_for",
]
