"""Sequential step engine.

Runs a ``Workflow`` (an ordered tuple of step functions) against one
``WorkflowState``. Each step runs only after its predecessor's outcome has
been settled; there is no parallel dispatch and no global error handler.
Exceptions raised inside a step propagate to the caller unchanged.

Usage:
    engine = StepEngine(ctx)
    match engine.run(workflows.RELEASE, WorkflowState()):
        case Ok(state):
            console.success(f"released {state.tag}")
        case Err(failure):
            console.error(f"{failure.step}: {failure.error.pretty()}")
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from tagrel.core.result import Err, Ok, Result
from tagrel.output.console import Style

from .context import StepContext
from .outcome import Decision, Done, Fatal, Outcome, Recoverable, StepError
from .state import WorkflowState

Step = Callable[[WorkflowState, StepContext], Outcome]


@dataclass(frozen=True, slots=True)
class Workflow:
    name: str
    steps: tuple[Step, ...]

    def step_names(self) -> list[str]:
        return [step_name(s) for s in self.steps]

    def __add__(self, other: Workflow) -> Workflow:
        return Workflow(name=self.name, steps=self.steps + other.steps)


@dataclass(frozen=True, slots=True)
class RunFailure:
    """Where a run stopped.

    Side effects of ``completed`` steps (branches created, tags pushed) are
    not rolled back.
    """

    step: str
    error: StepError
    completed: tuple[str, ...]


def step_name(step: Step) -> str:
    return getattr(step, "__name__", repr(step))


class StepEngine:
    def __init__(self, ctx: StepContext, *, max_retries: int | None = None) -> None:
        retries = ctx.config.max_retries if max_retries is None else max_retries
        if retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.ctx = ctx
        self.max_retries = retries
        self._running = False

    def run(
        self,
        workflow: Workflow | Sequence[Step],
        state: WorkflowState,
    ) -> Result[WorkflowState, RunFailure]:
        """Run every step in order.

        Raises:
            RuntimeError: If called while this engine is already running.
        """
        if self._running:
            raise RuntimeError("StepEngine.run is not re-entrant")

        steps = workflow.steps if isinstance(workflow, Workflow) else tuple(workflow)
        self._running = True
        try:
            return self._run(steps, state)
        finally:
            self._running = False

    def _run(self, steps: tuple[Step, ...], state: WorkflowState) -> Result[WorkflowState, RunFailure]:
        completed: list[str] = []
        cursor = 0
        retries = 0

        while cursor < len(steps):
            step = steps[cursor]
            name = step_name(step)
            state.step = name

            outcome = step(state, self.ctx)
            match outcome:
                case Done():
                    pass
                case Fatal(error):
                    return Err(RunFailure(step=name, error=error, completed=tuple(completed)))
                case Recoverable(error, recover):
                    decision = recover(state) if recover is not None else Decision.ABORT
                    if decision is Decision.ABORT:
                        return Err(RunFailure(step=name, error=error, completed=tuple(completed)))
                    if decision is Decision.RETRY:
                        retries += 1
                        if retries > self.max_retries:
                            exhausted = StepError(
                                kind="retry_exhausted",
                                message=f"{name} still failing after {self.max_retries} retries",
                                hint=error.message,
                            )
                            return Err(RunFailure(step=name, error=exhausted, completed=tuple(completed)))
                        self.ctx.console.print(f"retrying {name} ({retries}/{self.max_retries})", Style.DIM)
                        continue
                case _:
                    raise TypeError(f"{name} returned {outcome!r}, expected Done | Recoverable | Fatal")

            completed.append(name)
            cursor += 1
            retries = 0

        return Ok(state)


def run_workflow(
    workflow: Workflow,
    state: WorkflowState,
    ctx: StepContext,
    *,
    max_retries: int | None = None,
) -> Result[WorkflowState, RunFailure]:
    return StepEngine(ctx, max_retries=max_retries).run(workflow, state)
