"""Advisory messages keyed by stable identifiers.

Steps that stop a run on purpose (missing package.json, nothing to release,
private package, ...) print one of these and report the key in their error.
Keys are stable: tests and scripts match on them.
"""

from __future__ import annotations

from dataclasses import dataclass

from tagrel.output.console import ConsoleProtocol, Style

__all__ = ["ADVICE", "Advice", "print_advice"]


@dataclass(frozen=True, slots=True)
class Advice:
    message: str
    hint: str | None = None


ADVICE: dict[str, Advice] = {
    "git_command_failed": Advice(
        "A git command failed.",
        "Inspect the output above, fix the working tree, and run the command again.",
    ),
    "git_branch_already_exists": Advice(
        "A branch with that name already exists.",
        "Pick another branch name, or delete the existing branch with `git branch -D <name>`.",
    ),
    "git_merge_upstream_branch": Advice(
        "Unable to merge the upstream branch into your local branch.",
        "Resolve the conflicts, commit, and run the command again.",
    ),
    "git_merge_develop_with_master": Advice(
        "Unable to merge master into develop.",
        "Resolve the conflicts on develop manually and push the result upstream.",
    ),
    "git_rebase_upstream_base": Advice(
        "Unable to rebase onto the upstream base branch.",
        "Run `git rebase --abort`, update your branch, and try again.",
    ),
    "git_rebase_interactive": Advice(
        "The rebase stopped and could not be continued.",
        "Resolve the conflicts, stage the files, and run `tagrel continue`.",
    ),
    "git_check_conflict_markers": Advice(
        "Conflict markers are still present in the working tree.",
        "Remove every <<<<<<<, ======= and >>>>>>> line before continuing.",
    ),
    "git_stash_pop": Advice(
        "Unable to restore your stashed changes.",
        "Run `git stash pop` yourself once the working tree is clean.",
    ),
    "git_log": Advice(
        "There are no commits since the last release.",
        "Commit your changes before cutting a release.",
    ),
    "git_origin": Advice(
        "No `origin` remote is configured.",
        "Add one with `git remote add origin <url>`.",
    ),
    "remote_branch_out_of_date": Advice(
        "Your origin branch is out of date with your local branch.",
        "Pull the remote changes and push again.",
    ),
    "qa_no_change_no_develop": Advice(
        "There are no changes on this branch and the repository has no develop branch.",
    ),
    "no_packages_in_scope": Advice(
        "No dependencies in package.json match the requested scope.",
        "Pass the scope explicitly, e.g. `tagrel qa --scope @myorg`.",
    ),
    "no_packages": Advice("No packages were selected."),
    "missing_package_json": Advice(
        "No package.json was found in the current directory.",
        "Run tagrel from the root of an npm package.",
    ),
    "private_package": Advice(
        "This package is marked private and cannot be published.",
        'Remove "private": true from package.json to publish it.',
    ),
    "npm_publish": Advice(
        "npm publish failed.",
        "Run `npm publish` manually once the problem above is fixed.",
    ),
    "npm_install": Advice(
        "npm install failed.",
        "Run the install manually and commit package-lock.json.",
    ),
    "save_state": Advice("Unable to save the workflow state file."),
    "save_dependencies": Advice("Unable to save the selected dependency versions."),
    "fetch_upstream": Advice(
        "Unable to fetch from upstream.",
        "Check that the `upstream` remote exists and that you have network access.",
    ),
}


def print_advice(console: ConsoleProtocol, key: str) -> Advice:
    """Print the advice registered under ``key`` and return it.

    Unknown keys fall back to the generic git failure advice.
    """
    advice = ADVICE.get(key, ADVICE["git_command_failed"])
    console.warning(advice.message)
    if advice.hint:
        console.print(f"hint: {advice.hint}", Style.DIM)
    return advice
