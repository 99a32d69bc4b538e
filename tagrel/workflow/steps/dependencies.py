"""Scoped dependency bumps and the records carried between phases."""

from __future__ import annotations

from tagrel.core.result import Err
from tagrel.core.structured import StrDict, get_str_map, get_table
from tagrel.release.bumps import CHANGE_TYPES, identifier_from_reason, identifier_from_versions

from .. import scratch
from ..context import StepContext
from ..outcome import DONE, Outcome
from ..ports import Question, choices_of
from ..state import Dependency, WorkflowState
from ._common import advise, ask_many, ask_text, read_config

DEPENDENCY_SECTIONS = ("devDependencies", "dependencies")


def scoped_repos(data: StrDict, scope: str) -> list[str]:
    """Names (without scope) of the package's dependencies under ``scope``."""
    repos: list[str] = []
    prefix = f"{scope}/"
    for section in DEPENDENCY_SECTIONS:
        for key in get_str_map(data, section):
            if key.startswith(prefix):
                repos.append(key.removeprefix(prefix))
    return repos


def ask_repos_to_update(state: WorkflowState, ctx: StepContext) -> Outcome:
    data = read_config(state, ctx)
    if data is None:
        return advise(ctx, "missing_package_json")

    repos = scoped_repos(data, state.scope)
    if not repos:
        return advise(ctx, "no_packages_in_scope")

    state.packages = ask_many(
        ctx,
        Question(
            kind="checkbox",
            name="packagesToPromote",
            message="Which package(s) do you wish to update?",
            choices=choices_of(repos),
        ),
    )
    return DONE


def ask_versions(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Ask the new version of every selected dependency.

    The pre-release identifier follows the first pre-release version chosen,
    or is derived from the change reason.
    """
    upstream = state.github.upstream
    owner = upstream.owner if upstream is not None else ""

    chosen: list[Dependency] = []
    for dep in state.dependencies:
        tags = ctx.host.list_tags(owner, dep.name)
        if isinstance(tags, Err):
            ctx.console.error(tags.error.message)
            versions: list[str] = []
        else:
            versions = [t.removeprefix("v") for t in tags.value]

        version = ask_text(
            ctx,
            Question(
                kind="list",
                name="tag",
                message=f"Update {dep.name} from {dep.version} to:",
                choices=choices_of(versions),
            ),
        )
        chosen.append(Dependency(name=dep.name, version=version))

    state.set_dependencies(chosen)
    state.prerelease = identifier_from_versions([d.version for d in chosen]) or identifier_from_reason(
        state.change_reason
    )
    return DONE


def ask_change_type(state: WorkflowState, ctx: StepContext) -> Outcome:
    if state.keep_branch:
        return DONE
    state.change_type = ask_text(
        ctx,
        Question(
            kind="list",
            name="changeType",
            message="What type of change is this work?",
            choices=choices_of(CHANGE_TYPES),
        ),
    )
    return DONE


def change_reason_is_valid(reason: str) -> bool:
    return bool(reason.strip())


def ask_change_reason(state: WorkflowState, ctx: StepContext) -> Outcome:
    reason = ask_text(
        ctx,
        Question(
            kind="input",
            name="changeReason",
            message="What is the reason for this change? (required)",
            validate=change_reason_is_valid,
        ),
    )
    state.change_reason = reason.replace('"', "")
    return DONE


def update_dependencies(state: WorkflowState, ctx: StepContext) -> Outcome:
    """Write the chosen versions into whichever section lists each dependency."""
    data = read_config(state, ctx)
    if data is None:
        return advise(ctx, "missing_package_json")

    for dep in state.dependencies:
        key = f"{state.scope}/{dep.name}"
        for section in DEPENDENCY_SECTIONS:
            table = get_table(data, section)
            if table is not None and key in table:
                table[key] = dep.version

    ctx.files.write_json(state.config_path, data)
    return DONE


def get_current_dependency_versions(state: WorkflowState, ctx: StepContext) -> Outcome:
    data = read_config(state, ctx)
    if data is None:
        return advise(ctx, "missing_package_json")

    found: list[Dependency] = []
    for name in state.packages:
        key = f"{state.scope}/{name}"
        for section in DEPENDENCY_SECTIONS:
            version = get_str_map(data, section).get(key)
            if version is not None and all(d.name != name for d in found):
                found.append(Dependency(name=name, version=version))
    state.set_dependencies(found)
    return DONE


def verify_packages_to_promote(state: WorkflowState, ctx: StepContext) -> Outcome:
    if not state.packages:
        return advise(ctx, "no_packages")
    return DONE


def save_state(state: WorkflowState, ctx: StepContext) -> Outcome:
    try:
        scratch.save_scope(ctx.files, state.scope)
    except OSError:
        return advise(ctx, "save_state")
    return DONE


def save_dependencies(state: WorkflowState, ctx: StepContext) -> Outcome:
    try:
        scratch.save_dependencies(ctx.files, state.dependencies, state.change_reason)
    except OSError:
        return advise(ctx, "save_dependencies")
    return DONE


def get_dependencies_from_file(state: WorkflowState, ctx: StepContext) -> Outcome:
    loaded = scratch.load_dependencies(ctx.files)
    if loaded is not None:
        dependencies, reason = loaded
        state.set_dependencies(dependencies)
        state.change_reason = reason
    return DONE


def clean_up_tmp_files(state: WorkflowState, ctx: StepContext) -> Outcome:
    scratch.clear(ctx.files)
    return DONE
