"""Helpers shared by step modules."""

from __future__ import annotations

from tagrel.core.structured import StrDict
from tagrel.git.repository import GitError
from tagrel.output.advice import print_advice
from tagrel.output.console import Style

from ..context import StepContext
from ..outcome import Decision, Fatal, Recoverable, StepError
from ..ports import Answer, Question
from ..state import WorkflowState


def advise(ctx: StepContext, key: str) -> Fatal:
    """Print advice ``key`` and stop the run."""
    advice = print_advice(ctx.console, key)
    return Fatal(StepError(kind="advice", message=advice.message, hint=advice.hint, advice=key))


def warn_and_continue(ctx: StepContext, key: str, error: str) -> Recoverable:
    """Failure that only prints advice ``key``; the run goes on."""

    def recover(_: WorkflowState) -> Decision:
        print_advice(ctx.console, key)
        return Decision.CONTINUE

    return Recoverable(StepError(kind="advice", message=error, advice=key), recover)


def git_failed(ctx: StepContext, error: GitError, key: str | None = None) -> Fatal:
    """Fatal outcome for a git failure, printing advice ``key`` when given."""
    ctx.console.error(error.message)
    hint: str | None = None
    if key is not None:
        hint = print_advice(ctx.console, key).hint
    return Fatal(StepError(kind="git", message=error.message, hint=hint, advice=key))


def ask(ctx: StepContext, question: Question) -> Answer:
    return ctx.prompter.ask([question])[question.name]


def ask_text(ctx: StepContext, question: Question) -> str:
    answer = ask(ctx, question)
    return answer if isinstance(answer, str) else ""


def ask_confirm(ctx: StepContext, question: Question) -> bool:
    return ask(ctx, question) is True


def ask_many(ctx: StepContext, question: Question) -> list[str]:
    answer = ask(ctx, question)
    return answer if isinstance(answer, list) else []


def confirm(ctx: StepContext, name: str, message: str, *, default: bool = True) -> bool:
    return ask_confirm(ctx, Question(kind="confirm", name=name, message=message, default=default))


def read_config(state: WorkflowState, ctx: StepContext) -> StrDict | None:
    return ctx.files.read_json(state.config_path)


def base_branch(state: WorkflowState, ctx: StepContext) -> str:
    return ctx.develop if state.has_develop_branch else ctx.master


def show(ctx: StepContext, title: str, body: str) -> None:
    ctx.console.print(title, Style.BOLD)
    ctx.console.print(body, Style.SUCCESS)
