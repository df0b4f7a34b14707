"""Durable steps: named units of work whose outcome is recorded once per execution."""

from __future__ import annotations

import asyncio
import contextvars
import inspect
import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from opentelemetry.trace import Status, StatusCode

from ..utils.retry import retry_with_backoff
from ..utils.serializer import deserialize, safe_serialize, schema_name_for, serialize
from ..utils.tracing import get_tracer
from .store import StepRecord

if TYPE_CHECKING:
    from .context import JobContext

logger = logging.getLogger(__name__)


class StepExecutionError(Exception):
    """A step failed, now or in an earlier run of the same execution. Fails the job."""

    def __init__(self, reason: str | None = None):
        self.reason = reason
        super().__init__(reason)


async def _call(func: Callable, args: tuple, kwargs: dict) -> Any:
    """Await ``func``; plain functions run in the default executor with our contextvars."""
    if inspect.iscoroutinefunction(func):
        return await func(*args, **kwargs)

    snapshot = contextvars.copy_context()
    result = await asyncio.get_running_loop().run_in_executor(
        None, lambda: snapshot.run(func, *args, **kwargs)
    )
    if inspect.isawaitable(result):
        result = await result
    return result


class Step:
    """Durable execution primitives bound to one JobContext.

    ``run`` looks the step key up in the context's step store first. A recorded
    success is returned as-is and a recorded failure is raised again, so
    re-running an execution id resumes after the last completed step.
    """

    def __init__(self, ctx: JobContext):
        self.ctx = ctx

    async def _replay(self, step_key: str) -> tuple[bool, Any]:
        record = await self.ctx.step_store.get(self.ctx.execution_id, step_key)
        if record is None:
            return False, None

        logger.debug("Replaying step %s for execution %s", step_key, self.ctx.execution_id)
        if not record.success:
            raise StepExecutionError(record.error or "Step execution failed")
        return True, deserialize(record.outputs, record.output_schema_name)

    async def _record_success(self, step_key: str, result: Any) -> None:
        schema_name = schema_name_for(result)
        try:
            if schema_name and isinstance(result, list):
                outputs = [serialize(item) for item in result]
            else:
                outputs = serialize(result)
        except TypeError as e:
            raise StepExecutionError(f"Step '{step_key}' returned an unstorable result: {e}") from e

        await self.ctx.step_store.put(
            self.ctx.execution_id,
            StepRecord(
                step_key=step_key,
                success=True,
                outputs=outputs,
                output_schema_name=schema_name,
            ),
        )

    async def _record_failure(self, step_key: str, error: str) -> None:
        await self.ctx.step_store.put(
            self.ctx.execution_id,
            StepRecord(step_key=step_key, success=False, error=error),
        )

    async def run(
        self,
        step_key: str,
        func: Callable,
        *args,
        max_retries: int = 2,
        base_delay: float = 1.0,
        max_delay: float = 10.0,
        **kwargs,
    ) -> Any:
        """
        Run ``func(*args, **kwargs)`` as the step ``step_key``.

        On first execution the call is retried with exponential backoff; the
        result (or the final error) is then recorded under ``step_key``. Later
        calls with the same key in the same execution return the recorded
        result without calling ``func``. A Pydantic result, or list of them,
        comes back as the same model type.

        Args:
            step_key: Name of the step, unique within the execution
            func: Sync or async callable
            *args: Positional arguments for ``func``
            max_retries: Retries after the first failure (0 disables retrying)
            base_delay: First backoff delay in seconds
            max_delay: Upper bound for any backoff delay in seconds
            **kwargs: Keyword arguments for ``func``

        Returns:
            The step's result

        Raises:
            StepExecutionError: If every attempt failed, the step failed in an
                earlier run, or the result cannot be stored
        """
        replayed, result = await self._replay(step_key)
        if replayed:
            return result

        step_input = json.dumps(
            {
                "args": [safe_serialize(arg) for arg in args],
                "kwargs": {name: safe_serialize(value) for name, value in kwargs.items()},
            }
        )
        attributes = {
            "step.key": step_key,
            "step.function": getattr(func, "__name__", str(func)),
            "step.execution_id": self.ctx.execution_id,
            "step.max_retries": max_retries,
            "step.input": step_input,
        }

        with get_tracer().start_as_current_span(
            name=f"step.{step_key}", attributes=attributes
        ) as span:
            try:
                result = await retry_with_backoff(
                    _call,
                    max_retries,
                    base_delay,
                    max_delay,
                    func,
                    args,
                    kwargs,
                )
            except Exception as e:
                error = str(e) or type(e).__name__
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, error))
                span.set_attribute("step.status", "failed")
                logger.error("Step %s failed after %d retries: %s", step_key, max_retries, error)

                await self._record_failure(step_key, error)
                raise StepExecutionError(
                    f"Step {step_key} failed after {max_retries} retries: {error}"
                ) from e

            await self._record_success(step_key, result)
            span.set_attribute("step.status", "completed")
            span.set_status(Status(StatusCode.OK))
            return result
