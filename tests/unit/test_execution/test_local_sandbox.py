"""Unit tests for the local sandbox backend (runs real shell commands)."""

import os

import pytest

from sandbox_coder.execution.local import LocalSandbox, LocalSandboxProvider
from sandbox_coder.execution.sandbox import SandboxError
from sandbox_coder.execution.types import LocalSandboxConfig


@pytest.fixture
def provider(tmp_path):
    return LocalSandboxProvider(LocalSandboxConfig(base_dir=str(tmp_path)))


class TestLocalSandbox:
    @pytest.mark.asyncio
    async def test_streams_stdout_and_stderr(self, provider):
        sandbox = await provider.create()
        stdout, stderr = [], []

        exit_code = await sandbox.run_command(
            "echo hello; echo oops >&2", on_stdout=stdout.append, on_stderr=stderr.append
        )

        assert exit_code == 0
        assert "".join(stdout) == "hello\n"
        assert "".join(stderr) == "oops\n"

    @pytest.mark.asyncio
    async def test_non_zero_exit_code(self, provider):
        sandbox = await provider.create()
        assert await sandbox.run_command("false") == 1

    @pytest.mark.asyncio
    async def test_ansi_codes_are_stripped(self, provider):
        sandbox = await provider.create()
        stdout = []

        await sandbox.run_command("printf '\\033[32mready\\033[0m'", on_stdout=stdout.append)

        assert "".join(stdout) == "ready"

    @pytest.mark.asyncio
    async def test_commands_run_in_the_workspace(self, provider):
        sandbox = await provider.create()
        await sandbox.write_file("pkg/index.ts", "export {}")
        stdout = []

        await sandbox.run_command("ls pkg", on_stdout=stdout.append)

        assert "".join(stdout).strip() == "index.ts"

    @pytest.mark.asyncio
    async def test_timeout_kills_the_command(self, tmp_path):
        provider = LocalSandboxProvider(LocalSandboxConfig(base_dir=str(tmp_path), timeout=0.2))
        sandbox = await provider.create()
        stderr = []

        exit_code = await sandbox.run_command("sleep 5", on_stderr=stderr.append)

        assert exit_code == 137
        assert "timeout" in "".join(stderr)

    @pytest.mark.asyncio
    async def test_write_then_read(self, provider):
        sandbox = await provider.create()
        await sandbox.write_file("app/page.tsx", "<main />")

        assert await sandbox.read_file("app/page.tsx") == "<main />"
        assert os.path.isfile(os.path.join(sandbox.root, "app", "page.tsx"))

    @pytest.mark.asyncio
    async def test_read_missing_file_raises(self, provider):
        sandbox = await provider.create()
        with pytest.raises(FileNotFoundError):
            await sandbox.read_file("nope.txt")

    @pytest.mark.asyncio
    async def test_path_traversal_is_rejected(self, provider):
        sandbox = await provider.create()
        with pytest.raises(ValueError, match="Path traversal"):
            await sandbox.write_file("../escape.txt", "x")
        with pytest.raises(ValueError, match="Path traversal"):
            await sandbox.read_file("/etc/passwd")

    def test_host(self, tmp_path):
        assert LocalSandbox("local-1", str(tmp_path)).get_host(3000) == "localhost:3000"


class TestLocalSandboxProvider:
    @pytest.mark.asyncio
    async def test_create_makes_a_fresh_workspace(self, provider, tmp_path):
        first = await provider.create()
        second = await provider.create()

        assert first.sandbox_id != second.sandbox_id
        assert first.sandbox_id.startswith("local-")
        assert os.path.dirname(first.root) == str(tmp_path)

    @pytest.mark.asyncio
    async def test_connect_reopens_by_id(self, provider):
        created = await provider.create()
        await created.write_file("a.txt", "kept")

        connected = await provider.connect(created.sandbox_id)

        assert await connected.read_file("a.txt") == "kept"

    @pytest.mark.asyncio
    async def test_connect_unknown_id(self, provider):
        with pytest.raises(SandboxError, match="does not exist"):
            await provider.connect("local-missing")

    @pytest.mark.asyncio
    async def test_connect_rejects_path_like_ids(self, provider):
        with pytest.raises(SandboxError, match="Invalid"):
            await provider.connect("../other")
