"""Release notes: collecting, previewing and editing the log."""

from __future__ import annotations

from tagrel.core.result import Err
from tagrel.release.changelog import extract_next_section
from tagrel.release.commits import build_change_log, select_log_baseline
from tagrel.release.tags import VersionTagSet

from ..context import StepContext
from ..outcome import DONE, Outcome
from ..state import WorkflowState
from ._common import advise, confirm, git_failed, show


def git_short_log(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Fill ``state.log`` with the notes for this release.

    A hand-written ``### Next`` section of the changelog wins and is removed
    from the file; otherwise the notes are the commit subjects since the
    previous release.
    """
    path = ctx.config.changelog_path
    contents = ctx.files.read_text(path)
    if contents is not None:
        notes, remaining = extract_next_section(contents)
        if notes is not None:
            state.log = notes
            ctx.files.write_text(path, remaining)
            return DONE

    tags = ctx.git.tags()
    if isinstance(tags, Err):
        return git_failed(ctx, tags.error, "git_log")

    since = select_log_baseline(
        tags.value,
        current_version=state.current_version,
        prerelease=state.prerelease,
    )
    subjects = ctx.git.log(since)
    if isinstance(subjects, Err):
        return git_failed(ctx, subjects.error, "git_log")

    state.log = build_change_log(subjects.value)
    if not state.log:
        return advise(ctx, "git_log")
    return DONE


def preview_log(state: WorkflowState, ctx: StepContext) -> Outcome:
    show(ctx, "Here is a preview of your log:", state.log)
    return DONE


def update_log(state: WorkflowState, ctx: StepContext) -> Outcome:
    if confirm(ctx, "log", "Would you like to edit your log?"):
        ctx.console.begin("log preview")
        state.log = ctx.prompter.edit(state.log).strip()
        ctx.console.end()
    return DONE


def check_new_commits(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Record commits made since the latest stable tag, if there is one."""
    tags = ctx.git.tags()
    if isinstance(tags, Err):
        return git_failed(ctx, tags.error)

    stable = VersionTagSet(tags.value).stable()
    if not stable:
        return DONE

    result = ctx.git.log(stable[-1])
    if isinstance(result, Err):
        return git_failed(ctx, result.error, "git_log")
    state.log = result.value
    return DONE
