"""Gemini through Google's OpenAI-compatible Chat Completions endpoint."""

import os

from .base import register_provider
from .openai import OpenAIProvider

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


@register_provider("gemini")
class GeminiProvider(OpenAIProvider):
    """Reuses the OpenAI provider with a Gemini key and endpoint."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None):
        api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise ValueError(
                "Gemini API key not provided. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter."
            )
        super().__init__(api_key=api_key, base_url=base_url or GEMINI_OPENAI_BASE_URL)
