"""Step output stores backing durable step execution.

A store keeps one record per (execution_id, step_key). A step whose key is
already recorded is never executed again for that execution; its recorded
output (or error) is replayed instead.
"""

from __future__ import annotations

import asyncio
import json
import os
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


class StepRecord(BaseModel):
    """Stored outcome of one named step."""

    step_key: str
    success: bool
    outputs: Any | None = None
    output_schema_name: str | None = None
    error: str | None = None


class StepStore(ABC):
    """Abstract store for step outputs."""

    @abstractmethod
    async def get(self, execution_id: str, step_key: str) -> StepRecord | None:
        """Return the record for a step, or None if it never ran."""
        ...

    @abstractmethod
    async def put(self, execution_id: str, record: StepRecord) -> None:
        """Record a step outcome."""
        ...


class InMemoryStepStore(StepStore):
    """Process-local store. Survives replays within one process only."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, StepRecord]] = {}

    async def get(self, execution_id: str, step_key: str) -> StepRecord | None:
        return self._records.get(execution_id, {}).get(step_key)

    async def put(self, execution_id: str, record: StepRecord) -> None:
        self._records.setdefault(execution_id, {})[record.step_key] = record


class FileStepStore(StepStore):
    """JSON file store, one file per execution under ``directory``.

    Lets a job that crashed mid-run be re-run with the same execution id and
    skip every step that already finished.
    """

    def __init__(self, directory: str) -> None:
        self._directory = os.path.abspath(directory)
        self._lock = asyncio.Lock()

    def _path(self, execution_id: str) -> str:
        safe_id = "".join(c if c.isalnum() or c in "-_" else "_" for c in execution_id)
        return os.path.join(self._directory, f"{safe_id}.json")

    def _load(self, execution_id: str) -> dict[str, Any]:
        path = self._path(execution_id)
        if not os.path.exists(path):
            return {}
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    async def get(self, execution_id: str, step_key: str) -> StepRecord | None:
        async with self._lock:
            data = self._load(execution_id).get(step_key)
        return StepRecord.model_validate(data) if data is not None else None

    async def put(self, execution_id: str, record: StepRecord) -> None:
        async with self._lock:
            os.makedirs(self._directory, exist_ok=True)
            data = self._load(execution_id)
            data[record.step_key] = record.model_dump(mode="json")
            path = self._path(execution_id)
            tmp_path = f"{path}.tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, path)
