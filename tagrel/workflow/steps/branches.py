"""Branch selection, creation and cleanup steps."""

from __future__ import annotations

import re

from tagrel.core.result import Err, Ok
from tagrel.output.advice import print_advice
from tagrel.release.bumps import promotion_branch

from ..context import StepContext
from ..outcome import DONE, Decision, Outcome, Recoverable, StepError, continue_anyway
from ..ports import Question, choices_of
from ..state import WorkflowState
from ._common import advise, ask_text, confirm, git_failed, warn_and_continue

_BRANCH_NAME_RE = re.compile(r"[^*/ ]+$")


def _checkout(state: WorkflowState, ctx: StepContext, branch: str) -> Outcome:
    state.branch = branch
    ctx.console.begin(f"checking out {branch}")
    result = ctx.git.checkout(branch)
    ctx.console.end()
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def get_current_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    current = ctx.git.current_branch() or ""
    state.branch = current
    state.working_branch = current
    return DONE


def checkout_working_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _checkout(state, ctx, state.working_branch)


def checkout_master(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _checkout(state, ctx, ctx.master)


def checkout_develop(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.has_develop_branch:
        return DONE
    return _checkout(state, ctx, ctx.develop)


def checkout_base_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    if state.has_develop_branch:
        return checkout_develop(state, ctx)
    return checkout_master(state, ctx)


def checkout_tag(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Check out the promoted tag on a fresh ``promote-release-<tag>`` branch."""
    if not state.promote.startswith("v"):
        state.promote = f"v{state.promote}"

    branch = promotion_branch(state.promote)
    result = ctx.git.checkout(branch, create=True, start_point=state.promote)
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    state.branch = branch
    return DONE


def checkout_and_create_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    if state.keep_branch:
        return DONE

    result = ctx.git.checkout(state.branch, create=True)
    if isinstance(result, Ok):
        return DONE

    error = result.error
    if "already exists" in error.message:

        def recover(_: WorkflowState) -> Decision:
            print_advice(ctx.console, "git_branch_already_exists")
            return Decision.ABORT

        return Recoverable(
            StepError(
                kind="branch_exists",
                message=f"A branch named '{state.branch}' already exists",
                advice="git_branch_already_exists",
            ),
            recover,
        )
    return git_failed(ctx, error, "git_command_failed")


def create_or_checkout_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Check out ``state.branch``, tracking the upstream copy when only it exists."""
    branch = state.branch
    if not ctx.git.branch_exists(branch) and ctx.git.branch_exists_remote(branch, ctx.upstream):
        result = ctx.git.checkout(branch, create=True, start_point=f"{ctx.upstream}/{branch}")
        if isinstance(result, Err):
            return git_failed(ctx, result.error)
        return DONE
    return _checkout(state, ctx, branch)


def check_has_develop_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    match ctx.git.remote_branches():
        case Ok(branches):
            target = f"{ctx.upstream}/{ctx.develop}"
            state.has_develop_branch = any(b.strip() == target for b in branches)
        case Err(_):
            state.has_develop_branch = False
    return DONE


def verify_master_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    if ctx.git.branch_exists(ctx.master):
        return DONE
    result = ctx.git.create_branch(ctx.master, f"{ctx.upstream}/{ctx.master}")
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def verify_develop_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.has_develop_branch or ctx.git.branch_exists(ctx.develop):
        return DONE
    result = ctx.git.create_branch(ctx.develop, f"{ctx.upstream}/{ctx.develop}")
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def reset_master(state: WorkflowState, ctx: StepContext) -> Outcome:
    result = ctx.git.reset_hard(f"{ctx.upstream}/{ctx.master}")
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def reset_develop(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.has_develop_branch:
        return DONE
    result = ctx.git.reset_hard(f"{ctx.upstream}/{ctx.develop}")
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def find_branch_by_tag(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Find the feature branch the promoted tag was cut from."""
    result = ctx.git.branches_containing(state.promote)
    if isinstance(result, Err):
        return git_failed(ctx, result.error)

    branches: list[str] = []
    for line in result.value:
        m = _BRANCH_NAME_RE.search(line.strip())
        if m and m.group(0) not in branches:
            branches.append(m.group(0))

    if len(branches) > 1:
        state.branch_to_remove = ask_text(
            ctx,
            Question(
                kind="list",
                name="branch",
                message="Which branch contains the tag you are promoting?",
                choices=choices_of(branches),
            ),
        )
    else:
        state.branch_to_remove = branches[0] if branches else ""
    return DONE


def delete_local_feature_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.branch_to_remove:
        return DONE
    ctx.console.begin("Cleaning local feature branch")
    result = ctx.git.delete_branch(state.branch_to_remove)
    ctx.console.end()
    if isinstance(result, Err):
        return Recoverable(StepError(kind="git", message=result.error.message), continue_anyway)
    return DONE


def delete_upstream_feature_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.branch_to_remove:
        return DONE
    ctx.console.begin("Cleaning upstream feature branch")
    result = ctx.git.delete_remote_branch(state.branch_to_remove, ctx.upstream)
    ctx.console.end()
    if isinstance(result, Err):
        return Recoverable(StepError(kind="git", message=result.error.message), continue_anyway)
    return DONE


def create_upstream_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Make sure the branch the pull request targets exists upstream."""
    branch = state.dev_branch or state.branch
    if ctx.git.branch_exists_remote(branch, ctx.upstream):
        return DONE
    base = ctx.develop if state.has_develop_branch else ctx.master
    result = ctx.git.create_remote_branch(branch, ctx.upstream, base)
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def create_origin_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    branch = state.branch
    if not ctx.git.branch_exists_remote(branch, ctx.origin):
        result = ctx.git.create_remote_branch(branch, ctx.origin, branch)
        if isinstance(result, Err):
            return git_failed(ctx, result.error)
        return DONE

    pushed = ctx.git.push(branch, ctx.origin, set_upstream=True)
    if isinstance(pushed, Err):
        return warn_and_continue(ctx, "remote_branch_out_of_date", pushed.error.message)
    return DONE


def prompt_branch_name(state: WorkflowState, ctx: StepContext) -> Outcome:
    if state.keep_branch:
        return DONE
    state.branch = ask_text(
        ctx,
        Question(
            kind="input",
            name="branchName",
            message="What do you want your branch name to be?",
            default=f"{state.change_type}-{state.prerelease}",
        ),
    ).strip()
    return DONE


def prompt_keep_branch_or_create_new(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Offer to reuse the current branch when it has unreleased commits."""
    if not state.log_lines():
        return DONE

    state.keep_branch = confirm(ctx, "keep", "Would you like to use your current branch?")
    if not ctx.git.branch_exists_remote(state.branch, ctx.upstream):
        return DONE

    result = ctx.git.merge(f"{ctx.upstream}/{state.branch}")
    if isinstance(result, Err):
        return git_failed(ctx, result.error, "git_merge_upstream_branch")
    return DONE


def use_current_or_base_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    if state.log_lines():
        return DONE
    if state.has_develop_branch:
        return checkout_develop(state, ctx)
    return advise(ctx, "qa_no_change_no_develop")


def stash(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Stash uncommitted work so the workflow starts from a clean tree."""
    changes = ctx.git.uncommitted_changes()
    if isinstance(changes, Err) or not changes.value:
        return DONE

    state.stashed = ctx.git.current_branch() or ""
    result = ctx.git.stash()
    if isinstance(result, Err):
        return git_failed(ctx, result.error)
    return DONE


def reset_if_stashed(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.stashed:
        return DONE

    checked_out = ctx.git.checkout(state.stashed)
    if isinstance(checked_out, Err):
        return git_failed(ctx, checked_out.error)

    ctx.console.begin("git stash pop")
    result = ctx.git.stash_pop()
    ctx.console.end()
    if isinstance(result, Err):
        return warn_and_continue(ctx, "git_stash_pop", result.error.message)
    return DONE
