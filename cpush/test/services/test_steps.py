from __future__ import annotations

from dataclasses import dataclass, replace

import pytest

from cpush.core.result import Err, Ok, Result
from cpush.services.steps import StepOutcome, advance, finish, run_steps


@dataclass(frozen=True, slots=True)
class Counter:
    step: str
    visited: tuple[str, ...] = ()


def _go(next_step: str):
    def handler(state: Counter) -> Result[StepOutcome[Counter], str]:
        return Ok(advance(replace(state, step=next_step, visited=state.visited + (state.step,))))

    return handler


def _done(state: Counter) -> Result[StepOutcome[Counter], str]:
    return Ok(finish(replace(state, visited=state.visited + (state.step,))))


def test_runs_handlers_in_order_until_finish() -> None:
    result = run_steps(
        initial_state=Counter(step="a"),
        get_step=lambda s: s.step,
        handlers={"a": _go("b"), "b": _go("c"), "c": _done},
    )
    assert isinstance(result, Ok)
    assert result.value.visited == ("a", "b", "c")


def test_first_error_short_circuits() -> None:
    seen: list[str] = []

    def fail(state: Counter) -> Result[StepOutcome[Counter], str]:
        seen.append(state.step)
        return Err("broken")

    def never(state: Counter) -> Result[StepOutcome[Counter], str]:
        raise AssertionError("must not run")

    result = run_steps(
        initial_state=Counter(step="a"),
        get_step=lambda s: s.step,
        handlers={"a": _go("b"), "b": fail, "c": never},
    )
    assert result == Err("broken")
    assert seen == ["b"]


def test_unknown_step_is_a_programming_error() -> None:
    with pytest.raises(AssertionError, match="unknown workflow step: z"):
        run_steps(
            initial_state=Counter(step="a"),
            get_step=lambda s: s.step,
            handlers={"a": _go("z")},
        )
