"""Named workflows.

Each workflow is an ordered tuple of steps; the CLI picks one per command and
runs it with a fresh ``WorkflowState``. Shared tails are composed with ``+``.
"""

from __future__ import annotations

from .engine import Workflow
from .steps import branches, commits, dependencies, github, merging, notes, publishing, versioning

# Version bump, changelog, tag and publication of master; develop catches up.
TAG_AND_RELEASE = Workflow(
    name="tag_and_release",
    steps=(
        versioning.get_current_branch_version,
        branches.check_has_develop_branch,
        merging.merge_upstream_develop,
        notes.git_short_log,
        notes.preview_log,
        versioning.ask_semver_jump,
        notes.update_log,
        versioning.update_version,
        versioning.update_changelog,
        versioning.update_package_lock,
        commits.git_diff,
        commits.git_add,
        commits.git_commit,
        commits.git_tag,
        publishing.push_upstream_master,
        publishing.npm_publish,
        branches.checkout_develop,
        merging.merge_master_into_develop,
        publishing.push_upstream_develop,
        publishing.push_origin_master,
        github.github_upstream,
        github.github_release,
    ),
)

RELEASE = (
    Workflow(
        name="release",
        steps=(
            versioning.verify_package_json,
            versioning.verify_changelog,
            branches.stash,
            branches.check_has_develop_branch,
            branches.verify_master_branch,
            branches.verify_develop_branch,
            merging.fetch_upstream,
            branches.checkout_master,
            merging.merge_upstream_master,
        ),
    )
    + TAG_AND_RELEASE
    + Workflow(name="reset", steps=(branches.reset_if_stashed,))
)

PRERELEASE = Workflow(
    name="prerelease",
    steps=(
        versioning.verify_package_json,
        branches.get_current_branch,
        merging.fetch_upstream,
        versioning.get_current_branch_version,
        versioning.check_existing_prerelease_identifier,
        versioning.set_prerelease_identifier,
        notes.git_short_log,
        notes.preview_log,
        versioning.ask_semver_jump,
        notes.update_log,
        versioning.update_version,
        versioning.update_package_lock,
        commits.git_diff,
        commits.stage_config_file,
        commits.git_commit,
        commits.git_tag,
        publishing.push_upstream_feature_branch,
        publishing.npm_publish,
        github.github_upstream,
        github.github_release,
    ),
)

# Everything after the pre-release commits were dropped from the promotion branch.
PROMOTE_FINISH = Workflow(
    name="promote_finish",
    steps=(
        branches.check_has_develop_branch,
        versioning.get_current_branch_version,
        notes.git_short_log,
        notes.preview_log,
        versioning.ask_semver_jump,
        notes.update_log,
        versioning.update_version,
        versioning.update_changelog,
        versioning.update_package_lock,
        commits.git_diff,
        commits.git_add,
        commits.git_commit,
        commits.git_tag,
        branches.checkout_master,
        merging.merge_promotion_branch,
        publishing.push_upstream_master,
        publishing.npm_publish,
        branches.checkout_develop,
        merging.merge_master_into_develop,
        publishing.push_upstream_develop,
        publishing.push_origin_master,
        github.github_upstream,
        github.github_release,
        merging.remove_promotion_branches,
        branches.delete_local_feature_branch,
        branches.delete_upstream_feature_branch,
        branches.reset_if_stashed,
    ),
)

PROMOTE = (
    Workflow(
        name="promote",
        steps=(
            versioning.verify_package_json,
            versioning.verify_changelog,
            branches.stash,
            branches.check_has_develop_branch,
            branches.verify_master_branch,
            branches.verify_develop_branch,
            merging.fetch_upstream,
            branches.checkout_master,
            merging.merge_upstream_master,
            versioning.select_prerelease_to_promote,
            branches.checkout_tag,
            branches.find_branch_by_tag,
            merging.generate_rebase_plan,
            merging.remove_prerelease_commits,
        ),
    )
    + PROMOTE_FINISH
)

# Resumes ``promote`` on a ``promote-release-<tag>`` branch after a stopped rebase.
PROMOTE_CONTINUE = (
    Workflow(
        name="promote_continue",
        steps=(
            branches.get_current_branch,
            versioning.set_promote,
            branches.find_branch_by_tag,
            merging.rebase_continue,
        ),
    )
    + PROMOTE_FINISH
)

QA = Workflow(
    name="qa",
    steps=(
        versioning.get_package_scope,
        versioning.verify_package_json,
        branches.check_has_develop_branch,
        merging.fetch_upstream,
        branches.get_current_branch,
        notes.check_new_commits,
        branches.use_current_or_base_branch,
        branches.prompt_keep_branch_or_create_new,
        dependencies.ask_repos_to_update,
        dependencies.get_current_dependency_versions,
        dependencies.ask_change_type,
        dependencies.ask_change_reason,
        github.github_upstream,
        dependencies.ask_versions,
        branches.prompt_branch_name,
        branches.checkout_and_create_branch,
        dependencies.update_dependencies,
        versioning.update_package_lock,
        commits.git_diff,
        commits.git_add,
        commits.commit_bump_message,
        versioning.get_current_branch_version,
        versioning.set_prerelease_identifier,
        notes.git_short_log,
        versioning.ask_semver_jump,
        versioning.update_version,
        commits.stage_config_file,
        commits.git_commit,
        commits.git_tag,
        publishing.push_upstream_feature_branch,
        publishing.npm_publish,
        github.github_release,
        dependencies.save_state,
    ),
)

# Second phase of ``pr``; reads what the first phase saved under ``.tagrel/``.
CREATE_PULL_REQUEST = Workflow(
    name="create_pull_request",
    steps=(
        dependencies.get_dependencies_from_file,
        github.github_upstream,
        dependencies.ask_versions,
        dependencies.update_dependencies,
        versioning.update_package_lock,
        commits.git_diff,
        commits.git_add,
        commits.amend_bump_message,
        publishing.force_push_upstream_feature_branch,
        github.create_pull_request_against_base,
        dependencies.clean_up_tmp_files,
    ),
)

PR = (
    Workflow(
        name="pr",
        steps=(
            versioning.get_package_scope,
            versioning.verify_package_json,
            branches.check_has_develop_branch,
            merging.fetch_upstream,
            branches.get_current_branch,
            commits.repos_from_bump_commit,
            dependencies.verify_packages_to_promote,
            dependencies.get_current_dependency_versions,
            dependencies.save_state,
            dependencies.save_dependencies,
            merging.rebase_upstream_base_with_conflict_flag,
            merging.resolve_package_json_conflicts,
            merging.finish_conflicted_rebase,
        ),
    )
    + CREATE_PULL_REQUEST
)

# Resumes ``pr`` after the user settled a rebase that stopped outside package.json.
CONTINUE = (
    Workflow(
        name="continue",
        steps=(
            versioning.get_package_scope,
            branches.get_current_branch,
            branches.check_has_develop_branch,
            dependencies.get_dependencies_from_file,
            merging.detect_package_json_conflict,
            merging.resolve_package_json_conflicts,
            merging.verify_conflict_resolution,
            merging.stage_files,
            merging.rebase_continue,
        ),
    )
    + CREATE_PULL_REQUEST
)

PULL_REQUEST = Workflow(
    name="pull_request",
    steps=(
        github.verify_remotes,
        github.github_origin,
        github.verify_origin,
        github.verify_upstream,
        github.github_upstream,
        branches.check_has_develop_branch,
        branches.get_current_branch,
        branches.create_upstream_branch,
        merging.fetch_upstream,
        merging.rebase_upstream_branch,
        branches.create_origin_branch,
        github.update_pull_request_title,
        github.update_pull_request_body,
        github.create_pull_request_against_branch,
    ),
)

WORKFLOWS: dict[str, Workflow] = {
    w.name: w
    for w in (
        RELEASE,
        PRERELEASE,
        PROMOTE,
        PROMOTE_CONTINUE,
        QA,
        PR,
        CREATE_PULL_REQUEST,
        CONTINUE,
        PULL_REQUEST,
    )
}


def get_workflow(name: str) -> Workflow | None:
    return WORKFLOWS.get(name)
