"""Step outcomes.

A step returns exactly one of:

* ``Done``: advance to the next step.
* ``Recoverable(error, recover)``: the step knows how this failure can be
  handled; the engine calls ``recover(state)`` and follows its ``Decision``.
  Without a ``recover`` callable the run aborts.
* ``Fatal(error)``: stop the run.

Recovery policy lives with the step that failed, never in the engine.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias, Union

from .state import WorkflowState


class Decision(Enum):
    CONTINUE = "continue"
    RETRY = "retry"
    ABORT = "abort"


@dataclass(frozen=True, slots=True)
class StepError:
    """Canonical step failure payload.

    ``kind`` is a stable machine-readable category (``git``, ``advice``,
    ``cancelled``, ``branch_exists``, ``merge_conflict``,
    ``rebase_interrupted``, ``retry_exhausted``, ...). ``advice`` is the
    ``tagrel.output.advice.ADVICE`` key printed for advisory failures.
    """

    kind: str
    message: str
    hint: str | None = None
    advice: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


Recover = Callable[[WorkflowState], Decision]


@dataclass(frozen=True, slots=True)
class Done:
    value: object = None


@dataclass(frozen=True, slots=True)
class Recoverable:
    error: StepError
    recover: Recover | None = None


@dataclass(frozen=True, slots=True)
class Fatal:
    error: StepError


Outcome: TypeAlias = Union[Done, Recoverable, Fatal]

DONE = Done()


def fatal(kind: str, message: str, hint: str | None = None) -> Fatal:
    return Fatal(StepError(kind=kind, message=message, hint=hint))


def continue_anyway(_: WorkflowState) -> Decision:
    """Recovery for failures that only deserve a warning."""
    return Decision.CONTINUE
