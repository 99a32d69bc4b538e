"""Push and publish steps."""

from __future__ import annotations

from tagrel.core.result import Err
from tagrel.core.structured import get_bool

from ..context import StepContext
from ..outcome import DONE, Outcome
from ..state import WorkflowState
from ._common import git_failed, read_config, warn_and_continue

NPM_PACKAGE_FILE = "package.json"


def _push(
    ctx: StepContext,
    branch: str,
    remote: str,
    *,
    tag: str | None = None,
    set_upstream: bool = False,
    force: bool = False,
) -> Outcome:
    label = f"pushing {branch} to {remote}" + (f" with {tag}" if tag else "")
    ctx.console.begin(label)
    result = ctx.git.push(branch, remote, tag=tag, set_upstream=set_upstream, force=force)
    ctx.console.end()
    if isinstance(result, Err):
        return git_failed(ctx, result.error, "git_command_failed")
    return DONE


def push_upstream_master(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _push(ctx, ctx.master, ctx.upstream, tag=state.tag or None)


def push_upstream_develop(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.has_develop_branch:
        return DONE
    return _push(ctx, ctx.develop, ctx.upstream)


def push_upstream_feature_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.branch:
        return DONE
    return _push(ctx, state.branch, ctx.upstream, tag=state.tag or None, set_upstream=True)


def force_push_upstream_feature_branch(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.branch:
        return DONE
    return _push(ctx, state.branch, ctx.upstream, force=True)


def push_origin_master(state: WorkflowState, ctx: StepContext) -> Outcome:
    return _push(ctx, ctx.master, ctx.origin)


def npm_publish(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Publish to npm; pre-releases go out under their identifier's dist-tag.

    Only npm packages are published, and never private ones.
    """
    if state.config_path.removeprefix("./") != NPM_PACKAGE_FILE:
        return DONE
    data = read_config(state, ctx)
    if data is None or get_bool(data, "private"):
        return DONE

    tag = state.prerelease or None
    ctx.console.begin("npm publish" + (f" --tag {tag}" if tag else ""))
    result = ctx.npm.publish(tag)
    ctx.console.end()
    if isinstance(result, Err):
        return warn_and_continue(ctx, "npm_publish", result.error.message)
    return DONE
