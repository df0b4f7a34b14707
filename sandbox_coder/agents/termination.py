"""Completion detection: turns an agent message containing a marker into a finished run."""

import logging

from pydantic import BaseModel, Field

from ..core.context import JobContext
from ..core.state import AgentRunState
from ..middleware.hook import HookContext, HookResult, hook
from ..utils.config import DEFAULT_COMPLETION_MARKERS

logger = logging.getLogger(__name__)


class TerminationConfig(BaseModel):
    """Configuration for the completion detector.

    Markers are matched as case-sensitive substrings of the agent's text.
    """

    markers: list[str] = Field(default_factory=lambda: list(DEFAULT_COMPLETION_MARKERS))


def find_completion_marker(message: str | None, markers: list[str]) -> str | None:
    """Return the first marker contained in ``message``, or None."""
    if not message:
        return None
    for marker in markers:
        if marker and marker in message:
            return marker
    return None


def detect_completion(state: AgentRunState, message: str | None, markers: list[str]) -> bool:
    """
    Mark the run completed if ``message`` carries a completion marker.

    The full message becomes the summary. Detecting a marker again later just
    re-sets the same fields; nothing here ever clears ``completed``.

    Returns:
        True if a marker was found in this message
    """
    marker = find_completion_marker(message, markers)
    if marker is None:
        return False

    state.mark_completed(message)
    logger.info("Completion marker %r detected", marker)
    return True


def create_termination_hook(config: TerminationConfig | None = None):
    """
    Build an ``on_agent_step_end`` hook that runs the completion detector.

    Only the text of the turn that just ended is inspected, never tool output.

    Usage:
        agent = Agent(..., on_agent_step_end=[create_termination_hook()])
    """
    config = config or TerminationConfig()

    @hook
    def detect_task_completion(ctx: JobContext, hook_context: HookContext) -> HookResult:
        if ctx.state is None:
            return HookResult.fail("Run state is not initialized")

        detect_completion(ctx.state, hook_context.latest_message, config.markers)
        return HookResult.continue_with()

    return detect_task_completion
