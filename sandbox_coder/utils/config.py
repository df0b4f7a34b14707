"""Environment-driven settings for the code agent job."""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ENV_PREFIX = "SANDBOX_CODER_"

DEFAULT_COMPLETION_MARKERS = [
    "<task_summary>",
    "TASK COMPLETED",
    "Task completed successfully",
]


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(f"{ENV_PREFIX}{name}")
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    value = _env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}") from None


def parse_markers(value: str | None) -> list[str]:
    """Split a comma-separated marker list, dropping empty entries."""
    if not value:
        return list(DEFAULT_COMPLETION_MARKERS)
    return [marker.strip() for marker in value.split(",") if marker.strip()]


class Settings(BaseModel):
    """Top-level settings for a code agent worker process."""

    provider: str = "openai"
    model: str = "gpt-4.1"
    max_iterations: int = Field(default=15, ge=1)
    command_max_attempts: int = Field(default=3, ge=1)
    command_retry_delay_ms: int = Field(default=500, ge=0)
    completion_markers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_COMPLETION_MARKERS)
    )
    sandbox: Literal["e2b", "local"] = "e2b"
    e2b_template: str | None = None
    app_port: int = 3000
    step_store_path: str | None = None
    result_store_path: str = "results.jsonl"
    result_store_url: str | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from ``SANDBOX_CODER_*`` environment variables.

        Args:
            dotenv: Load a ``.env`` file from the working directory first
        """
        if dotenv:
            load_dotenv()

        return cls(
            provider=_env("PROVIDER", "openai"),
            model=_env("MODEL", "gpt-4.1"),
            max_iterations=_env_int("MAX_ITERATIONS", 15),
            command_max_attempts=_env_int("COMMAND_MAX_ATTEMPTS", 3),
            command_retry_delay_ms=_env_int("COMMAND_RETRY_DELAY_MS", 500),
            completion_markers=parse_markers(_env("COMPLETION_MARKERS")),
            sandbox=_env("SANDBOX", "e2b"),
            e2b_template=_env("E2B_TEMPLATE"),
            app_port=_env_int("APP_PORT", 3000),
            step_store_path=_env("STEP_STORE_PATH"),
            result_store_path=_env("RESULT_STORE_PATH", "results.jsonl"),
            result_store_url=_env("RESULT_STORE_URL"),
            log_level=_env("LOG_LEVEL", "INFO"),
        )
