"""Runs a list of lifecycle hooks in order."""

import inspect
import logging
from collections.abc import Callable

from ..core.context import JobContext
from .hook import HookContext, HookResult

logger = logging.getLogger(__name__)


def _hook_label(func: Callable, index: int) -> str:
    name = getattr(func, "__name__", None)
    if not name or name == "<lambda>":
        return f"hook_{index}"
    return name


async def execute_hooks(
    hook_name: str,
    hooks: list[Callable],
    hook_context: HookContext,
    ctx: JobContext,
) -> HookResult:
    """
    Call each hook with ``(ctx, hook_context)`` until one fails.

    Hooks are called directly, not as durable steps. What they do is change the
    run state, and a replayed turn has to make those changes again.

    A hook may be sync or async and may return None (continue). Any return
    value other than None or a HookResult fails the chain.

    Args:
        hook_name: Prefix for log lines, e.g. "3.hook.on_agent_step_end"
        hooks: Hook callables, in call order
        hook_context: The turn being reported
        ctx: JobContext for the current execution

    Returns:
        The first failing HookResult, otherwise a CONTINUE result
    """
    for index, hook_func in enumerate(hooks):
        label = _hook_label(hook_func, index)

        outcome = hook_func(ctx, hook_context)
        if inspect.isawaitable(outcome):
            outcome = await outcome

        if outcome is None:
            continue
        if not isinstance(outcome, HookResult):
            outcome = HookResult.fail(
                f"Hook '{label}' returned invalid result type {type(outcome).__name__}; "
                "expected HookResult or None"
            )

        if outcome.failed:
            logger.warning("Hook %s.%s failed: %s", hook_name, label, outcome.error_message)
            return outcome

    return HookResult.continue_with()
