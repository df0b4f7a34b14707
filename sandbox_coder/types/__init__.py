"""Type definitions for sandbox_coder."""

from .types import (
    AgentConfig,
    AgentTurn,
    ToolCall,
    ToolCallFunction,
    ToolResult,
    Usage,
)

__all__ = [
    "AgentConfig",
    "AgentTurn",
    "ToolCall",
    "ToolCallFunction",
    "ToolResult",
    "Usage",
]
