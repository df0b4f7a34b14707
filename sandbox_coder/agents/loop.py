"""Agent iteration loop: a pure transition function plus the driver that runs it."""

import logging
from enum import Enum

from pydantic import BaseModel

from ..core.context import JobContext
from ..core.state import AgentRunState
from .agent import Agent

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 15


class LoopStatus(str, Enum):
    """Loop states. DONE is terminal."""

    RUNNING = "running"
    DONE = "done"


class LoopTransition(BaseModel):
    """Outcome of one transition check: the next state and whether to invoke the agent."""

    state: AgentRunState
    status: LoopStatus

    @property
    def should_invoke(self) -> bool:
        return self.status == LoopStatus.RUNNING


def next_transition(
    state: AgentRunState | None, max_iterations: int = DEFAULT_MAX_ITERATIONS
) -> LoopTransition:
    """
    Compute the transition evaluated before each loop pass.

    An uninitialized state starts empty. Every pass bumps ``iteration_count``
    by one. The run is DONE once ``completed`` is set, or once the count has
    gone past ``max_iterations``, so at most ``max_iterations`` passes invoke
    the agent.

    The input state is not modified; the returned state is a copy.

    Args:
        state: Current run state, or None before the first pass
        max_iterations: Maximum number of agent invocations per run

    Returns:
        LoopTransition with the updated state and the new status
    """
    if max_iterations < 1:
        raise ValueError("max_iterations must be at least 1")

    if state is None:
        state = AgentRunState()

    next_state = state.model_copy(update={"iteration_count": state.iteration_count + 1})

    if next_state.completed:
        return LoopTransition(state=next_state, status=LoopStatus.DONE)
    if next_state.iteration_count > max_iterations:
        return LoopTransition(state=next_state, status=LoopStatus.DONE)
    return LoopTransition(state=next_state, status=LoopStatus.RUNNING)


async def run_agent_loop(
    ctx: JobContext,
    agent: Agent,
    task: str,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> AgentRunState:
    """
    Drive ``agent`` against ``task`` until the run is DONE.

    The run state lives on ``ctx.state`` for the whole run so tools and hooks
    see and mutate the same record. Conversation history is kept across
    turns.

    Args:
        ctx: JobContext for the current execution
        agent: Agent to invoke once per RUNNING pass
        task: Task description, sent as the first user message
        max_iterations: Maximum number of agent invocations

    Returns:
        The final run state
    """
    conversation = [{"role": "user", "content": task}]
    invocations = 0

    while True:
        transition = next_transition(ctx.state, max_iterations)
        ctx.state = transition.state

        if not transition.should_invoke:
            break

        invocations += 1
        logger.debug(
            "Agent turn %d for execution %s (iteration %d/%d)",
            invocations,
            ctx.execution_id,
            ctx.state.iteration_count,
            max_iterations,
        )
        await agent.run_turn(ctx, conversation, turn=ctx.state.iteration_count)

    if ctx.state.completed:
        logger.info("Agent completed after %d turns", invocations)
    else:
        logger.warning(
            "Agent stopped after %d turns without a completion marker", invocations
        )
    return ctx.state
