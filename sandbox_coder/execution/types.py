"""Shared types for the execution layer: command attempts and sandbox configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CommandAttempt(BaseModel):
    """One try of a shell command. Buffers are append-only while the command runs."""

    attempt: int = Field(description="1-based attempt number")
    stdout: str = Field(default="", description="Captured standard output")
    stderr: str = Field(default="", description="Captured standard error")
    exit_code: int = Field(default=0, description="Process exit code (0 when unavailable)")

    def append_stdout(self, data: str) -> None:
        self.stdout += data

    def append_stderr(self, data: str) -> None:
        self.stderr += data

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def failure_message(self) -> str:
        """Describe a failed attempt as ``Exit code {code}: {stderr or stdout}``."""
        return f"Exit code {self.exit_code}: {self.stderr or self.stdout}"


class TerminalToolConfig(BaseModel):
    """Configuration for the terminal tool's retry policy."""

    max_attempts: int = Field(default=3, ge=1, description="Attempts before giving up")
    retry_delay_ms: int = Field(
        default=500, ge=0, description="Constant delay between attempts in milliseconds"
    )
    max_output_chars: int | None = Field(
        default=None, description="Truncate returned output beyond this many characters"
    )


class E2BSandboxConfig(BaseModel):
    """Configuration for E2B cloud sandboxes."""

    template: str | None = Field(default=None, description="E2B template name or ID")
    timeout: int = Field(default=3600, description="Sandbox lifetime in seconds")
    api_key: str | None = Field(default=None, description="E2B API key (default: E2B_API_KEY)")
    cwd: str = Field(default="/home/user", description="Directory relative paths resolve to")


class LocalSandboxConfig(BaseModel):
    """Configuration for sandboxes backed by a directory on the host."""

    base_dir: str | None = Field(
        default=None, description="Parent directory for sandbox workspaces (default: temp dir)"
    )
    timeout: float = Field(default=300, description="Command timeout in seconds")
