"""Diff review, staging, committing and tagging steps."""

from __future__ import annotations

from tagrel.core.result import Err
from tagrel.release.bumps import format_bump_message, parse_bump_message

from ..context import StepContext
from ..outcome import DONE, Outcome, fatal
from ..state import WorkflowState
from ._common import confirm, git_failed

GITIGNORE_PATH = ".gitignore"


def _release_files(state: WorkflowState, ctx: StepContext) -> list[str]:
    files = [state.config_path]
    for path in (ctx.config.changelog_path, ctx.config.package_lock_path):
        if ctx.files.exists(path):
            files.append(path)
    return files


def git_diff(state: WorkflowState, ctx: StepContext) -> Outcome:
    result = ctx.git.diff(_release_files(state, ctx))
    if isinstance(result, Err):
        return git_failed(ctx, result.error, "git_command_failed")

    ctx.console.print(result.value)
    if not confirm(ctx, "proceed", "Are you OK with this diff?"):
        return fatal("cancelled", "diff was not accepted")
    return DONE


def _lock_ignored(ctx: StepContext) -> bool:
    ignore = ctx.files.read_text(GITIGNORE_PATH)
    if ignore is None:
        return False
    lock = ctx.config.package_lock_path
    return any(lock in line for line in ignore.split("\n"))


def git_add(state: WorkflowState, ctx: StepContext) -> Outcome:
    files = [ctx.config.changelog_path, state.config_path]
    if ctx.files.exists(ctx.config.package_lock_path) and not _lock_ignored(ctx):
        files.append(ctx.config.package_lock_path)

    result = ctx.git.add(files)
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def stage_config_file(state: WorkflowState, ctx: StepContext) -> Outcome:
    result = ctx.git.add([state.config_path])
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def git_commit(state: WorkflowState, ctx: StepContext) -> Outcome:
    if state.versions is None:
        return fatal("invalid_release", "version was not updated")
    result = ctx.git.commit(state.versions.new)
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def git_tag(state: WorkflowState, ctx: StepContext) -> Outcome:
    if state.versions is None:
        return fatal("invalid_release", "version was not updated")
    tag = f"v{state.versions.new}"
    result = ctx.git.tag(tag)
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    state.tag = tag
    return DONE


def _bump_comment(state: WorkflowState) -> str:
    return format_bump_message(((d.name, d.version) for d in state.dependencies), state.change_reason)


def commit_bump_message(state: WorkflowState, ctx: StepContext) -> Outcome:
    state.bump_comment = _bump_comment(state)
    result = ctx.git.commit(state.bump_comment)
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def amend_bump_message(state: WorkflowState, ctx: StepContext) -> Outcome:
    state.bump_comment = _bump_comment(state)
    result = ctx.git.commit(state.bump_comment, amend=True)
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def repos_from_bump_commit(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Recover the bumped packages and reason from the last commit message."""
    result = ctx.git.last_commit_message()
    if isinstance(result, Err):
        return git_failed(ctx, result.error)

    bump = parse_bump_message(result.value)
    if bump is None:
        state.packages = []
        state.change_reason = ""
        return DONE
    state.packages = bump.names
    state.change_reason = bump.reason
    return DONE
