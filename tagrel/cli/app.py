from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer

from tagrel import __version__
from tagrel.core.errors import ErrorCode
from tagrel.core.result import Err, Ok
from tagrel.output.console import Style
from tagrel.release.bumps import PROMOTION_BRANCH_PREFIX
from tagrel.release.semver import ALL_KINDS, ReleaseKind
from tagrel.workflow import workflows
from tagrel.workflow.context import StepContext
from tagrel.workflow.engine import RunFailure, StepEngine, Workflow
from tagrel.workflow.outcome import StepError
from tagrel.workflow.state import WorkflowState

from .context import build_context

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

_GIT_KINDS = frozenset({"git", "branch_exists", "merge_conflict", "rebase_interrupted", "retry_exhausted"})


@dataclass(frozen=True, slots=True)
class _Options:
    repo: Path
    config: Path | None


def exit_code_for(error: StepError) -> ErrorCode:
    """Exit code of a run that stopped on ``error``."""
    if error.kind == "cancelled":
        return ErrorCode.OK
    if error.kind in _GIT_KINDS:
        return ErrorCode.GIT_ERROR
    if error.kind == "host":
        return ErrorCode.NETWORK_ERROR
    if error.kind == "io":
        return ErrorCode.IO_ERROR
    return ErrorCode.USER_ERROR


def _exit(message: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=int(code))


def _release_kind(value: str | None) -> ReleaseKind | None:
    if value is None:
        return None
    for kind in ALL_KINDS:
        if kind == value:
            return kind
    _exit(f"invalid --release '{value}' (expected one of {', '.join(ALL_KINDS)})", code=ErrorCode.USER_ERROR)


def _report(ctx: StepContext, failure: RunFailure) -> None:
    if failure.error.kind == "cancelled":
        ctx.console.info(failure.error.message)
        return
    # Advice was already printed by the step.
    if failure.error.kind != "advice":
        ctx.console.error(f"{failure.step}: {failure.error.pretty()}")
    if failure.completed:
        ctx.console.print(f"completed before stopping: {', '.join(failure.completed)}", Style.DIM)


def _context(typer_ctx: typer.Context) -> StepContext:
    options: _Options = typer_ctx.obj
    return build_context(options.repo, options.config)


def _run(
    typer_ctx: typer.Context,
    workflow: Workflow,
    state: WorkflowState,
    ctx: StepContext | None = None,
) -> None:
    if ctx is None:
        ctx = _context(typer_ctx)
    state.config_path = ctx.config.config_path

    problem = state.check_release_kind()
    if problem:
        _exit(problem, code=ErrorCode.USER_ERROR)

    ctx.console.header(f"tagrel {workflow.name}")
    match StepEngine(ctx).run(workflow, state):
        case Ok(_):
            ctx.console.success(f"{workflow.name} finished")
        case Err(failure):
            _report(ctx, failure)
            code = exit_code_for(failure.error)
            if not code.is_success:
                raise typer.Exit(code=int(code))


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    typer_ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True, help="Show version and exit."
    ),
    repo: Path = typer.Option(Path("."), "--repo", help="Repository to release (default: current directory)."),
    config: Path | None = typer.Option(None, "--config", help="TOML configuration file."),
) -> None:
    typer_ctx.obj = _Options(repo=repo, config=config)


@app.command()
def release(
    typer_ctx: typer.Context,
    kind: str | None = typer.Option(None, "--release", help="major, minor or patch (asked when omitted)."),
    release_name: str = typer.Option("", "--release-name", help="Name of the GitHub release."),
) -> None:
    """Release master: bump, changelog, tag, publish, GitHub release."""
    _run(typer_ctx, workflows.RELEASE, WorkflowState(release=_release_kind(kind), release_name=release_name))


@app.command()
def prerelease(
    typer_ctx: typer.Context,
    identifier: str = typer.Option("", "--identifier", help="Pre-release identifier (asked when omitted)."),
    kind: str | None = typer.Option(None, "--release", help="premajor, preminor, prepatch or prerelease."),
    release_name: str = typer.Option("", "--release-name", help="Name of the GitHub release."),
) -> None:
    """Cut a pre-release from the current feature branch."""
    state = WorkflowState(release=_release_kind(kind), prerelease=identifier, release_name=release_name)
    _run(typer_ctx, workflows.PRERELEASE, state)


@app.command()
def promote(
    typer_ctx: typer.Context,
    tag: str | None = typer.Argument(None, help="Pre-release tag to promote (chosen from a list when omitted)."),
    kind: str | None = typer.Option(None, "--release", help="major, minor or patch (asked when omitted)."),
    release_name: str = typer.Option("", "--release-name", help="Name of the GitHub release."),
) -> None:
    """Promote a pre-release to a stable release on master."""
    state = WorkflowState(
        promote=tag or "",
        select_promote=tag is None,
        release=_release_kind(kind),
        release_name=release_name,
    )
    _run(typer_ctx, workflows.PROMOTE, state)


@app.command()
def qa(
    typer_ctx: typer.Context,
    scope: str = typer.Option("", "--scope", help="npm scope of the dependencies to bump."),
) -> None:
    """Bump scoped dependencies on a feature branch and cut a pre-release."""
    _run(typer_ctx, workflows.QA, WorkflowState(scope=scope))


@app.command()
def pr(
    typer_ctx: typer.Context,
    scope: str = typer.Option("", "--scope", help="npm scope of the dependencies to bump."),
) -> None:
    """Rebase a bump branch, update dependencies and open a pull request."""
    _run(typer_ctx, workflows.PR, WorkflowState(scope=scope))


@app.command("pull-request")
def pull_request(
    typer_ctx: typer.Context,
    dev_branch: str = typer.Option("", "--dev-branch", help="Upstream branch to target (default: same name)."),
) -> None:
    """Open a pull request from your fork's branch into upstream."""
    _run(typer_ctx, workflows.PULL_REQUEST, WorkflowState(dev_branch=dev_branch))


@app.command("continue")
def continue_(
    typer_ctx: typer.Context,
    scope: str = typer.Option("", "--scope", help="npm scope of the dependencies to bump."),
) -> None:
    """Resume a promote or pr run that stopped on a rebase."""
    ctx = _context(typer_ctx)
    branch = ctx.git.current_branch() or ""
    if branch.startswith(PROMOTION_BRANCH_PREFIX):
        _run(typer_ctx, workflows.PROMOTE_CONTINUE, WorkflowState(), ctx)
    else:
        _run(typer_ctx, workflows.CONTINUE, WorkflowState(scope=scope), ctx)


def main() -> None:
    app()
