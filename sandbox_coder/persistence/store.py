"""Result stores: where a finished job's result record goes."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ResultStore(ABC):
    """Persists job result records."""

    @abstractmethod
    async def save(self, record: dict[str, Any]) -> None:
        """Persist one result record. Raises on failure so the job step can retry."""
        ...


class FileResultStore(ResultStore):
    """Appends one JSON line per result to a local file."""

    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(path)
        self._lock = asyncio.Lock()

    def _append(self, line: str) -> None:
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")

    async def save(self, record: dict[str, Any]) -> None:
        line = json.dumps(record, ensure_ascii=False)
        async with self._lock:
            await asyncio.to_thread(self._append, line)
        logger.debug("Appended result record to %s", self.path)

    def read_all(self) -> list[dict[str, Any]]:
        """Read every stored record, oldest first."""
        if not os.path.exists(self.path):
            return []
        with open(self.path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]


class HttpResultStore(ResultStore):
    """POSTs each result record as JSON to an HTTP endpoint."""

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def save(self, record: dict[str, Any]) -> None:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout), transport=self._transport
        ) as client:
            response = await client.post(self.url, json=record, headers=self._get_headers())
            response.raise_for_status()
        logger.debug("Posted result record to %s", self.url)
