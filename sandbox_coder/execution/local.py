"""Local sandbox backend.

Each sandbox is a workspace directory on the host. Commands run through
``sh -c`` inside it, and file paths are confined to it.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
import uuid

from .output import strip_ansi
from .sandbox import OutputCallback, Sandbox, SandboxError, SandboxProvider
from .types import LocalSandboxConfig

logger = logging.getLogger(__name__)

# Exit code reported when a command is killed for exceeding its timeout
TIMEOUT_EXIT_CODE = 137


async def _pump(stream: asyncio.StreamReader, callback: OutputCallback | None) -> None:
    while True:
        chunk = await stream.read(4096)
        if not chunk:
            break
        if callback is not None:
            callback(strip_ansi(chunk.decode("utf-8", errors="replace")))


class LocalSandbox(Sandbox):
    """Sandbox rooted at a directory on the host machine."""

    def __init__(self, sandbox_id: str, root: str, config: LocalSandboxConfig | None = None):
        self._sandbox_id = sandbox_id
        self._root = os.path.abspath(root)
        self._config = config or LocalSandboxConfig()

    @property
    def sandbox_id(self) -> str:
        return self._sandbox_id

    @property
    def root(self) -> str:
        return self._root

    def _resolve_path(self, path: str) -> str:
        resolved = os.path.abspath(os.path.join(self._root, path))
        if resolved != self._root and not resolved.startswith(self._root + os.sep):
            raise ValueError(f'Path traversal detected: "{path}" is outside of the sandbox')
        return resolved

    async def run_command(
        self,
        command: str,
        on_stdout: OutputCallback | None = None,
        on_stderr: OutputCallback | None = None,
    ) -> int | None:
        proc = await asyncio.create_subprocess_exec(
            "sh",
            "-c",
            command,
            cwd=self._root,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

        try:
            await asyncio.wait_for(
                asyncio.gather(
                    _pump(proc.stdout, on_stdout),
                    _pump(proc.stderr, on_stderr),
                    proc.wait(),
                ),
                timeout=self._config.timeout,
            )
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            if on_stderr is not None:
                on_stderr("\n[Process killed: timeout exceeded]")
            return TIMEOUT_EXIT_CODE

        return proc.returncode

    async def write_file(self, path: str, content: str) -> None:
        resolved = self._resolve_path(path)
        os.makedirs(os.path.dirname(resolved), exist_ok=True)
        with open(resolved, "w", encoding="utf-8") as f:
            f.write(content)

    async def read_file(self, path: str) -> str:
        with open(self._resolve_path(path), encoding="utf-8") as f:
            return f.read()

    def get_host(self, port: int) -> str:
        return f"localhost:{port}"


class LocalSandboxProvider(SandboxProvider):
    """Creates workspace directories under ``base_dir`` and reopens them by id."""

    def __init__(self, config: LocalSandboxConfig | None = None) -> None:
        self._config = config or LocalSandboxConfig()
        self._base_dir = os.path.abspath(
            self._config.base_dir or os.path.join(tempfile.gettempdir(), "sandbox-coder")
        )

    async def create(self) -> LocalSandbox:
        sandbox_id = f"local-{uuid.uuid4().hex[:12]}"
        root = os.path.join(self._base_dir, sandbox_id)
        os.makedirs(root, exist_ok=False)
        logger.info("Created local sandbox %s at %s", sandbox_id, root)
        return LocalSandbox(sandbox_id, root, self._config)

    async def connect(self, sandbox_id: str) -> LocalSandbox:
        if os.sep in sandbox_id or sandbox_id in ("", ".", ".."):
            raise SandboxError(f"Invalid local sandbox id: {sandbox_id!r}")
        root = os.path.join(self._base_dir, sandbox_id)
        if not os.path.isdir(root):
            raise SandboxError(f"Local sandbox {sandbox_id} does not exist")
        return LocalSandbox(sandbox_id, root, self._config)
