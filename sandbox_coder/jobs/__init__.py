"""Jobs built on the coding agent."""

from .code_agent import (
    DEFAULT_SUMMARY,
    RESULT_TITLE,
    CodeAgentJob,
    CodeAgentPayload,
    CodeAgentResult,
)
from .prompts import CODING_AGENT_SYSTEM_PROMPT

__all__ = [
    "CODING_AGENT_SYSTEM_PROMPT",
    "DEFAULT_SUMMARY",
    "RESULT_TITLE",
    "CodeAgentJob",
    "CodeAgentPayload",
    "CodeAgentResult",
]
