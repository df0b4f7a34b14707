"""Unit tests for sandbox_coder.core.store module."""

import os
import tempfile

import pytest

from sandbox_coder.core.store import FileStepStore, InMemoryStepStore, StepRecord


@pytest.fixture
def tmp_dir():
    with tempfile.TemporaryDirectory() as d:
        yield d


class TestInMemoryStepStore:
    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self):
        assert await InMemoryStepStore().get("exec", "step") is None

    @pytest.mark.asyncio
    async def test_records_are_scoped_per_execution(self):
        store = InMemoryStepStore()
        await store.put("a", StepRecord(step_key="s", success=True, outputs=1))

        assert (await store.get("a", "s")).outputs == 1
        assert await store.get("b", "s") is None


class TestFileStepStore:
    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_dir):
        await FileStepStore(tmp_dir).put(
            "exec-1", StepRecord(step_key="get-sandbox-id", success=True, outputs="sbx-1")
        )

        record = await FileStepStore(tmp_dir).get("exec-1", "get-sandbox-id")

        assert record.success is True
        assert record.outputs == "sbx-1"

    @pytest.mark.asyncio
    async def test_overwrites_same_step_key(self, tmp_dir):
        store = FileStepStore(tmp_dir)
        await store.put("exec", StepRecord(step_key="s", success=False, error="x"))
        await store.put("exec", StepRecord(step_key="s", success=True, outputs="ok"))

        record = await store.get("exec", "s")
        assert record.success is True
        assert record.error is None

    @pytest.mark.asyncio
    async def test_execution_id_is_sanitized(self, tmp_dir):
        store = FileStepStore(tmp_dir)
        await store.put("../escape", StepRecord(step_key="s", success=True))

        assert os.listdir(tmp_dir) == ["___escape.json"]
        assert (await store.get("../escape", "s")).success is True
