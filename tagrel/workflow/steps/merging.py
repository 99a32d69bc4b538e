"""Fetch, merge and rebase steps, including package.json conflict resolution."""

from __future__ import annotations

from tagrel.core.result import Err, Ok
from tagrel.output.advice import print_advice
from tagrel.release.bumps import PROMOTION_BRANCH_PREFIX, promotion_branch
from tagrel.release.commits import build_rebase_plan
from tagrel.release.conflicts import resolve_conflicts

from .. import scratch
from ..context import StepContext
from ..outcome import DONE, Decision, Done, Outcome, Recover, Recoverable, StepError
from ..state import ConflictScratch, WorkflowState
from ._common import advise, base_branch, confirm, git_failed


def fetch_upstream(state: WorkflowState, ctx: StepContext) -> Outcome:
    ctx.console.begin(f"fetching {ctx.upstream}")
    result = ctx.git.fetch(ctx.upstream)
    ctx.console.end()
    if isinstance(result, Err):
        return git_failed(ctx, result.error, "fetch_upstream")
    return DONE


def _merge(ctx: StepContext, ref: str, advice: str | None = None, *, ff_only: bool = True) -> Outcome:
    ctx.console.begin(f"merging {ref}")
    result = ctx.git.merge(ref, ff_only=ff_only)
    ctx.console.end()
    if isinstance(result, Err):
        return git_failed(ctx, result.error, advice)
    return DONE


def merge_upstream_master(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _merge(ctx, f"{ctx.upstream}/{ctx.master}")


def merge_upstream_develop(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.has_develop_branch:
        return DONE
    return _merge(ctx, f"{ctx.upstream}/{ctx.develop}")


def merge_upstream_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _merge(ctx, f"{ctx.upstream}/{state.branch}", "git_merge_upstream_branch")


def merge_upstream_master_no_ff(state: WorkflowState, ctx: StepContext) -> Outcome:
    result = ctx.git.merge(f"{ctx.upstream}/{ctx.master}", ff_only=False)
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    state.status = "up-to-date" if "Already up" in result.value else "merged"
    return DONE


def merge_master_into_develop(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.has_develop_branch:
        return DONE
    return _merge(ctx, ctx.master, "git_merge_develop_with_master", ff_only=False)


def merge_promotion_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _merge(ctx, promotion_branch(state.promote), ff_only=False)


def _rebase(ctx: StepContext, onto: str) -> Outcome:
    ctx.console.begin(f"rebasing onto {onto}")
    result = ctx.git.rebase(onto)
    ctx.console.end()
    if isinstance(result, Err):
        return git_failed(ctx, result.error, "git_rebase_upstream_base")
    return DONE


def rebase_upstream_master(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _rebase(ctx, f"{ctx.upstream}/{ctx.master}")


def rebase_upstream_develop(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _rebase(ctx, f"{ctx.upstream}/{ctx.develop}")


def rebase_upstream_base_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _rebase(ctx, f"{ctx.upstream}/{base_branch(state, ctx)}")


def rebase_upstream_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _rebase(ctx, f"{ctx.upstream}/{state.dev_branch or state.branch}")


def _config_conflicted(state: WorkflowState, ctx: StepContext) -> bool:
    status = ctx.git.status()
    return isinstance(status, Ok) and status.value.mentions(state.config_path)


def detect_package_json_conflict(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Flag a conflict in the tracked config file left by an earlier rebase."""
    state.conflict = _config_conflicted(state, ctx)
    state.rebase_in_progress = state.rebase_in_progress or state.conflict
    return DONE


def rebase_upstream_base_with_conflict_flag(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Rebase onto the upstream base branch, tolerating package.json conflicts.

    A conflict touching the config file is recorded in ``state.conflict`` and
    left for ``resolve_package_json_conflicts``; any other failure aborts.
    """
    onto = f"{ctx.upstream}/{base_branch(state, ctx)}"
    ctx.console.begin(f"rebasing onto {onto}")
    result = ctx.git.rebase(onto)
    ctx.console.end()
    if isinstance(result, Ok):
        state.conflict = False
        return DONE
    error = result.error

    def recover(s: WorkflowState) -> Decision:
        if _config_conflicted(s, ctx):
            s.conflict = True
            s.rebase_in_progress = True
            return Decision.CONTINUE
        ctx.console.error(error.message)
        print_advice(ctx.console, "git_rebase_upstream_base")
        return Decision.ABORT

    return Recoverable(
        StepError(kind="merge_conflict", message=error.message, advice="git_rebase_upstream_base"),
        recover,
    )


def resolve_package_json_conflicts(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.conflict:
        return DONE

    text = ctx.files.read_text(state.config_path)
    if text is None:
        return advise(ctx, "missing_package_json")

    resolution = resolve_conflicts(text, scope=state.scope, local_changes=state.dependency_map())
    state.cr = ConflictScratch(
        local_changes=resolution.local_changes,
        blocks=list(resolution.blocks),
        lines=list(resolution.lines),
    )
    for note in resolution.notes:
        ctx.console.warning(note.message())

    ctx.files.write_text(state.config_path, resolution.text)
    ctx.console.success(f"resolved {len(resolution.blocks)} conflict(s) in {state.config_path}")
    return DONE


def verify_conflict_resolution(state: WorkflowState, ctx: StepContext) -> Outcome:
    ctx.console.begin("verifying conflict resolution")
    result = ctx.git.check_conflict_markers()
    ctx.console.end()
    if isinstance(result, Err):
        return git_failed(ctx, result.error, "git_check_conflict_markers")
    return DONE


def stage_files(state: WorkflowState, ctx: StepContext) -> Outcome:
    result = ctx.git.add_updated()
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def _retry_rebase(ctx: StepContext) -> Recover:
    """Ask the user to fix the stopped rebase, then retry the step."""

    def recover(state: WorkflowState) -> Decision:
        state.rebase_in_progress = True
        print_advice(ctx.console, "git_rebase_interactive")
        if not confirm(ctx, "resolved", "Have you resolved the conflicts? Continue the rebase?"):
            return Decision.ABORT
        staged = ctx.git.add_updated()
        if isinstance(staged, Err):
            ctx.console.error(staged.error.message)
            return Decision.ABORT
        return Decision.RETRY

    return recover


def rebase_continue(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Continue an interrupted rebase until git reports it finished."""
    ctx.console.begin("continuing with rebase")
    result = ctx.git.rebase_continue()
    ctx.console.end()
    if isinstance(result, Ok) or "No rebase in progress" in result.error.message:
        state.rebase_in_progress = False
        return DONE
    return Recoverable(
        StepError(kind="rebase_interrupted", message=result.error.message, advice="git_rebase_interactive"),
        _retry_rebase(ctx),
    )


def generate_rebase_plan(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Write the todo list that replays the branch without version marker commits."""
    result = ctx.git.oneline_log(f"{ctx.upstream}/{ctx.master}")
    if isinstance(result, Err):
        return git_failed(ctx, result.error, "git_log")

    plan = build_rebase_plan(result.value)
    if not plan:
        return advise(ctx, "git_log")
    ctx.files.write_text(scratch.REBASE_PLAN_FILE, plan)
    return DONE


def remove_prerelease_commits(state: WorkflowState, ctx: StepContext) -> Outcome:
    if state.rebase_in_progress:
        return rebase_continue(state, ctx)

    ctx.console.begin("Removing pre-release commit history")
    result = ctx.git.rebase_interactive(
        f"{ctx.upstream}/{ctx.master}",
        ctx.files.resolve(scratch.REBASE_PLAN_FILE),
    )
    ctx.console.end()
    if isinstance(result, Ok):
        return DONE
    return Recoverable(
        StepError(kind="rebase_interrupted", message=result.error.message, advice="git_rebase_interactive"),
        _retry_rebase(ctx),
    )


def remove_promotion_branches(state: WorkflowState, ctx: StepContext) -> Outcome:
    result = ctx.git.local_branches()
    if isinstance(result, Err):
        return git_failed(ctx, result.error)

    for branch in result.value:
        if not branch.startswith(PROMOTION_BRANCH_PREFIX):
            continue
        deleted = ctx.git.delete_branch(branch)
        if isinstance(deleted, Err):
            ctx.console.warning(deleted.error.message)
        else:
            ctx.console.print(f"deleted {branch}")
    return DONE


def finish_conflicted_rebase(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Check, stage and continue a rebase that stopped on package.json."""
    if not state.conflict:
        return DONE
    for step in (verify_conflict_resolution, stage_files, rebase_continue):
        outcome = step(state, ctx)
        if not isinstance(outcome, Done):
            return outcome
    state.conflict = False
    return DONE
