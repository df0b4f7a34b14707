"""Sandbox tools exposed to the coding agent."""

from .read import ReadInput, create_read_tool
from .terminal import TerminalInput, create_terminal_tool, run_command_with_retries
from .write import WriteInput, create_write_tool

__all__ = [
    "ReadInput",
    "TerminalInput",
    "WriteInput",
    "create_read_tool",
    "create_terminal_tool",
    "create_write_tool",
    "run_command_with_retries",
]
