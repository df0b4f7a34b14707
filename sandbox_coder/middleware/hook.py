"""Lifecycle hooks that run after each agent turn.

A hook is called as ``hook(ctx, hook_context)``. ``ctx`` is the JobContext,
whose ``state`` the hook may change. ``hook_context`` describes the turn that
just ended. Returning None means continue.
"""

import inspect
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict

from ..types.types import AgentConfig, AgentTurn


class HookAction(Enum):
    CONTINUE = "continue"
    FAIL = "fail"


class HookContext(BaseModel):
    """What a hook gets to see about the agent and the turn that just ended."""

    job_id: str
    agent_id: str | None = None
    execution_id: str | None = None
    agent_config: AgentConfig | None = None
    # Every turn so far, the current one last
    turns: list[AgentTurn] = []
    current_output: AgentTurn | None = None

    @property
    def latest_message(self) -> str | None:
        """Assistant text of the current turn, if any."""
        if self.current_output is None:
            return None
        return self.current_output.content


class HookResult(BaseModel):
    """Verdict of a hook: keep going, or fail the turn with a message."""

    model_config = ConfigDict(use_enum_values=True)

    action: HookAction = HookAction.CONTINUE
    error_message: str | None = None

    @classmethod
    def continue_with(cls) -> "HookResult":
        return cls()

    @classmethod
    def fail(cls, message: str) -> "HookResult":
        return cls(action=HookAction.FAIL, error_message=message)

    @property
    def failed(self) -> bool:
        return HookAction(self.action) == HookAction.FAIL


def _validate_hook_signature(func: Callable) -> None:
    """Reject callables that cannot be called as ``(ctx, hook_context)``.

    Raises:
        TypeError: If the callable does not take exactly two parameters
    """
    param_count = len(inspect.signature(func).parameters)
    if param_count != 2:
        name = getattr(func, "__name__", repr(func))
        raise TypeError(
            f"Hook '{name}' must take exactly 2 parameters (ctx, hook_context), "
            f"got {param_count}"
        )


def hook(func: Callable | None = None):
    """
    Mark a function as a lifecycle hook, checking its signature up front.

    Works bare or called:

        @hook
        def log_turn(ctx, hook_context):
            logger.info("turn %d done", hook_context.current_output.turn)

        @hook()
        async def audit(ctx, hook_context):
            return HookResult.continue_with()
    """

    def decorator(f: Callable) -> Callable:
        _validate_hook_signature(f)
        return f

    if func is not None:
        return decorator(func)
    return decorator
