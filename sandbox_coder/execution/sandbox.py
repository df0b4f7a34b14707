"""Abstract interface for the remote sandbox the agent works in.

Tools only talk to a sandbox through this interface. Implementations wrap
E2B cloud sandboxes and a local directory.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

OutputCallback = Callable[[str], None]


class SandboxError(Exception):
    """Raised when a sandbox cannot be created, connected to, or addressed."""


class Sandbox(ABC):
    """A running sandbox: command execution, file access, and a public host per port."""

    @property
    @abstractmethod
    def sandbox_id(self) -> str:
        """Identifier that can be passed to ``SandboxProvider.connect``."""
        ...

    @abstractmethod
    async def run_command(
        self,
        command: str,
        on_stdout: OutputCallback | None = None,
        on_stderr: OutputCallback | None = None,
    ) -> int | None:
        """Run a shell command, streaming output to the callbacks.

        A non-zero exit is reported through the return value, not raised.

        Returns:
            Exit code, or None when the backend does not report one
        """
        ...

    @abstractmethod
    async def write_file(self, path: str, content: str) -> None:
        """Write the full content of a file, creating parent directories."""
        ...

    @abstractmethod
    async def read_file(self, path: str) -> str:
        """Read a file's contents as text."""
        ...

    @abstractmethod
    def get_host(self, port: int) -> str:
        """Public hostname that forwards to ``port`` inside the sandbox."""
        ...


class SandboxProvider(ABC):
    """Creates new sandboxes and reconnects to existing ones by id."""

    @abstractmethod
    async def create(self) -> Sandbox:
        ...

    @abstractmethod
    async def connect(self, sandbox_id: str) -> Sandbox:
        ...
