"""Workflow orchestration.

A workflow is an ordered tuple of steps run by ``StepEngine`` against one
``WorkflowState``. Steps reach git, GitHub, npm, the prompter and the file
system only through the ``StepContext`` they are given.
"""

from .context import StepContext
from .engine import RunFailure, Step, StepEngine, Workflow, run_workflow, step_name
from .outcome import DONE, Decision, Done, Fatal, Outcome, Recoverable, StepError
from .state import Dependency, WorkflowState

__all__ = [
    "DONE",
    "Decision",
    "Dependency",
    "Done",
    "Fatal",
    "Outcome",
    "Recoverable",
    "RunFailure",
    "Step",
    "StepContext",
    "StepEngine",
    "StepError",
    "Workflow",
    "WorkflowState",
    "run_workflow",
    "step_name",
]
