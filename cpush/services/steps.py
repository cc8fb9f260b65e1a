"""Linear step runner.

A workflow is a mapping of step name -> handler. Each handler receives the
current state and returns either an advanced state (whose ``get_step``
names the next handler), a finish marker, or an error. The first error
stops the run; nothing after it executes.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

from cpush.core.result import Err, Ok, Result

S = TypeVar("S")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class StepAdvance(Generic[S]):
    state: S


@dataclass(frozen=True, slots=True)
class StepFinish(Generic[S]):
    state: S


StepOutcome = StepAdvance[S] | StepFinish[S]
StepHandler = Callable[[S], Result[StepOutcome[S], E]]
GetStep = Callable[[S], str]


def advance(state: S) -> StepAdvance[S]:
    return StepAdvance(state=state)


def finish(state: S) -> StepFinish[S]:
    return StepFinish(state=state)


def run_steps(
    *,
    initial_state: S,
    get_step: GetStep[S],
    handlers: Mapping[str, StepHandler[S, E]],
) -> Result[S, E]:
    """Drive handlers until one finishes or fails; return the final state.

    Raises:
        AssertionError: A handler advanced to a step with no handler.
    """
    current = initial_state

    while True:
        step = get_step(current)
        handler = handlers.get(step)
        if handler is None:
            raise AssertionError(f"unknown workflow step: {step}")

        outcome = handler(current)
        if isinstance(outcome, Err):
            return outcome

        if isinstance(outcome.value, StepFinish):
            return Ok(outcome.value.state)

        current = outcome.value.state
