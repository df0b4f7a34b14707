"""E2B cloud sandbox backend."""

from __future__ import annotations

import logging
import posixpath

from e2b import AsyncSandbox, CommandExitException

from .sandbox import OutputCallback, Sandbox, SandboxError, SandboxProvider
from .types import E2BSandboxConfig

logger = logging.getLogger(__name__)


class E2BSandbox(Sandbox):
    """Sandbox backed by an ``e2b.AsyncSandbox``."""

    def __init__(self, sandbox: AsyncSandbox, config: E2BSandboxConfig | None = None) -> None:
        self._sandbox = sandbox
        self._config = config or E2BSandboxConfig()

    @property
    def sandbox_id(self) -> str:
        return self._sandbox.sandbox_id

    def _resolve_path(self, path: str) -> str:
        if posixpath.isabs(path):
            return path
        return posixpath.join(self._config.cwd, path)

    async def run_command(
        self,
        command: str,
        on_stdout: OutputCallback | None = None,
        on_stderr: OutputCallback | None = None,
    ) -> int | None:
        try:
            result = await self._sandbox.commands.run(
                command,
                cwd=self._config.cwd,
                on_stdout=on_stdout,
                on_stderr=on_stderr,
            )
        except CommandExitException as exc:
            # Output already reached the callbacks; only the exit code is left
            return exc.exit_code
        return result.exit_code

    async def write_file(self, path: str, content: str) -> None:
        await self._sandbox.files.write(self._resolve_path(path), content)

    async def read_file(self, path: str) -> str:
        return await self._sandbox.files.read(self._resolve_path(path))

    def get_host(self, port: int) -> str:
        return self._sandbox.get_host(port)


class E2BSandboxProvider(SandboxProvider):
    """Creates and reconnects to E2B sandboxes."""

    def __init__(self, config: E2BSandboxConfig | None = None) -> None:
        self._config = config or E2BSandboxConfig()

    async def create(self) -> E2BSandbox:
        create_kwargs: dict = {"timeout": self._config.timeout}
        if self._config.template:
            create_kwargs["template"] = self._config.template
        if self._config.api_key:
            create_kwargs["api_key"] = self._config.api_key

        try:
            sandbox = await AsyncSandbox.create(**create_kwargs)
        except Exception as e:
            raise SandboxError(f"Failed to create E2B sandbox: {e}") from e

        logger.info("Created E2B sandbox %s", sandbox.sandbox_id)
        return E2BSandbox(sandbox, self._config)

    async def connect(self, sandbox_id: str) -> E2BSandbox:
        connect_kwargs: dict = {}
        if self._config.api_key:
            connect_kwargs["api_key"] = self._config.api_key

        try:
            sandbox = await AsyncSandbox.connect(sandbox_id, **connect_kwargs)
        except Exception as e:
            raise SandboxError(f"Failed to connect to E2B sandbox {sandbox_id}: {e}") from e
        return E2BSandbox(sandbox, self._config)
