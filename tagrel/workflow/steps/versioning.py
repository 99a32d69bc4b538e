"""Version, changelog and package metadata steps."""

from __future__ import annotations

from tagrel.core.result import Err
from tagrel.core.structured import get_bool, get_str
from tagrel.release.bumps import clean_identifier, normalize_scope, promoted_tag
from tagrel.release.changelog import update_changelog as render_changelog
from tagrel.release.semver import inc, prerelease_identifier, release_kinds_for
from tagrel.release.tags import VersionTagSet

from .. import scratch
from ..context import StepContext
from ..outcome import DONE, Outcome, fatal
from ..ports import Choice, Question, choices_of
from ..state import VersionChange, WorkflowState
from ._common import advise, ask_text, confirm, read_config, warn_and_continue

PROMOTE_CHOICES_LIMIT = 10

_KIND_LABELS = {
    "major": "Major (Breaking Change)",
    "minor": "Minor (New Feature)",
    "patch": "Patch (Bug Fix)",
    "premajor": "Pre-major (Breaking Change)",
    "preminor": "Pre-minor (New Feature)",
    "prepatch": "Pre-patch (Bug Fix)",
    "prerelease": "Pre-release (Bump existing Pre-release)",
}


def get_current_branch_version(state: WorkflowState, ctx: StepContext) -> Outcome:
    data = read_config(state, ctx)
    if data is None:
        return advise(ctx, "missing_package_json")
    state.current_version = get_str(data, "version") or "0.0.0"
    return DONE


def check_existing_prerelease_identifier(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Keep cutting pre-releases of the identifier the current version already has."""
    if state.prerelease:
        return DONE
    identifier = prerelease_identifier(state.current_version)
    if identifier:
        state.prerelease = identifier
        state.release = "prerelease"
    return DONE


def set_prerelease_identifier(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.prerelease:
        state.prerelease = ask_text(
            ctx,
            Question(
                kind="input",
                name="prereleaseIdentifier",
                message="What is your pre-release Identifier?",
            ),
        )
    state.prerelease = clean_identifier(state.prerelease)
    return DONE


def ask_semver_jump(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Ask which kind of release this is, unless given on the command line.

    Without any stable tag the repository has never been released, so the
    choices are computed from ``0.0.0``.
    """
    if state.release is not None:
        problem = state.check_release_kind()
        return fatal("invalid_release", problem) if problem else DONE

    current = state.current_version
    tags = ctx.git.tags()
    if isinstance(tags, Err) or not VersionTagSet(tags.value).stable():
        current = "0.0.0"

    kinds = release_kinds_for(state.prerelease)
    choices = tuple(
        Choice(label=f"{_KIND_LABELS[kind]} v{inc(current, kind, state.prerelease)}", value=kind)
        for kind in kinds
    )
    answer = ask_text(
        ctx,
        Question(kind="list", name="release", message="What type of release is this?", choices=choices),
    )
    for kind in kinds:
        if kind == answer:
            state.release = kind
    state.current_version = current
    return DONE


def update_version(state: WorkflowState, ctx: StepContext) -> Outcome:
    data = read_config(state, ctx)
    if data is None:
        return advise(ctx, "missing_package_json")
    if state.release is None:
        return fatal("invalid_release", "no release kind selected")

    old = state.current_version
    new = inc(old, state.release, state.prerelease)
    if new is None:
        return fatal("invalid_version", f"cannot bump invalid version '{old}'")

    data["version"] = new
    ctx.files.write_json(state.config_path, data)
    state.versions = VersionChange(old=old, new=new)
    state.current_version = new
    ctx.console.success(f"Updated {state.config_path} from {old} to {new}")
    return DONE


def update_changelog(state: WorkflowState, ctx: StepContext) -> Outcome:
    if state.versions is None:
        return fatal("invalid_release", "version was not updated")

    ctx.console.begin("update changelog")
    path = ctx.config.changelog_path
    contents = ctx.files.read_text(path) or ""
    ctx.files.write_text(
        path,
        render_changelog(
            contents,
            new_version=state.versions.new,
            log=state.log,
            is_major=state.release == "major",
        ),
    )
    ctx.console.end()
    return DONE


def update_package_lock(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Sync package-lock.json: the package version and exact dependency installs."""
    lock_path = ctx.config.package_lock_path
    if not ctx.files.exists(lock_path):
        return DONE

    if state.current_version:
        lock = ctx.files.read_json(lock_path)
        if lock is not None:
            lock["version"] = state.current_version
            ctx.files.write_json(lock_path, lock)

    for dep in state.dependencies:
        spec = f"{state.scope}/{dep.name}@{dep.version}"
        ctx.console.begin(f"npm install {spec} -E")
        result = ctx.npm.install(spec, exact=True)
        ctx.console.end()
        if isinstance(result, Err):
            return warn_and_continue(ctx, "npm_install", result.error.message)
    return DONE


def select_prerelease_to_promote(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.select_promote:
        return DONE

    tags = ctx.git.tags()
    if isinstance(tags, Err):
        ctx.console.error(tags.error.message)
        return advise(ctx, "git_command_failed")

    candidates = VersionTagSet(tags.value).latest_per_identifier(PROMOTE_CHOICES_LIMIT)
    state.promote = ask_text(
        ctx,
        Question(
            kind="list",
            name="prereleaseToPromote",
            message="Which pre-release do you wish to promote?",
            choices=choices_of(candidates),
        ),
    )
    return DONE


def set_promote(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Recover the promoted tag from a ``promote-release-<tag>`` branch name."""
    state.promote = promoted_tag(state.branch)
    return DONE


def get_package_scope(state: WorkflowState, ctx: StepContext) -> Outcome:
    if state.scope:
        state.scope = normalize_scope(state.scope)
    else:
        state.scope = scratch.load_scope(ctx.files) or normalize_scope(ctx.config.default_scope)
    return DONE


def verify_package_json(state: WorkflowState, ctx: StepContext) -> Outcome:
    ctx.console.begin(f"Verifying {state.config_path}")
    exists = ctx.files.exists(state.config_path)
    ctx.console.end()
    if not exists:
        return advise(ctx, "missing_package_json")
    return DONE


def is_package_private(state: WorkflowState, ctx: StepContext) -> Outcome:
    data = read_config(state, ctx)
    if data is not None and get_bool(data, "private"):
        return advise(ctx, "private_package")
    return DONE


def verify_changelog(state: WorkflowState, ctx: StepContext) -> Outcome:
    path = ctx.config.changelog_path
    if ctx.files.exists(path):
        return DONE
    if confirm(ctx, "changelog", f"Would you like us to create a {path}?"):
        ctx.files.write_text(path, "")
        ctx.console.success(f"Created {path}")
    return DONE
