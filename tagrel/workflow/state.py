"""Per-run workflow state.

One ``WorkflowState`` is created per run and threaded through every step in
order. Steps read what earlier steps recorded (the branch chosen by
``prompt_branch_name`` is pushed by ``push_upstream_feature_branch``) and record
their own results for later steps.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from tagrel.release.bumps import RepoCoordinates
from tagrel.release.conflicts import ConflictBlock
from tagrel.release.semver import PRERELEASE_KINDS, ReleaseKind


@dataclass(frozen=True, slots=True)
class Dependency:
    """A scoped dependency (``name`` without the scope) and its version."""

    name: str
    version: str


@dataclass(frozen=True, slots=True)
class VersionChange:
    old: str
    new: str


@dataclass(frozen=True, slots=True)
class RemoteInfo:
    exists: bool
    url: str | None = None


@dataclass(slots=True)
class GithubInfo:
    upstream: RepoCoordinates | None = None
    origin: RepoCoordinates | None = None


@dataclass(slots=True)
class PullRequestDraft:
    title: str = ""
    body: str = ""
    number: int | None = None
    url: str | None = None


@dataclass(slots=True)
class ConflictScratch:
    """Scratch data of one package.json conflict resolution pass."""

    local_changes: dict[str, str] = field(default_factory=dict)
    blocks: list[ConflictBlock] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)


@dataclass(slots=True)
class WorkflowState:
    step: str = ""
    branch: str = ""
    working_branch: str = ""
    branch_to_remove: str = ""
    current_version: str = ""
    release: ReleaseKind | None = None
    prerelease: str = ""
    log: str = ""
    dependencies: list[Dependency] = field(default_factory=list)
    conflict: bool = False
    cr: ConflictScratch | None = None
    github: GithubInfo = field(default_factory=GithubInfo)
    remotes: dict[str, RemoteInfo] = field(default_factory=dict)
    pull_request: PullRequestDraft = field(default_factory=PullRequestDraft)

    config_path: str = "package.json"
    scope: str = ""
    change_type: str = ""
    change_reason: str = ""
    keep_branch: bool = False
    has_develop_branch: bool = False
    dev_branch: str = ""
    versions: VersionChange | None = None
    tag: str = ""
    packages: list[str] = field(default_factory=list)
    promote: str = ""
    select_promote: bool = False
    stashed: str = ""
    bump_comment: str = ""
    release_name: str = ""
    rebase_in_progress: bool = False
    status: str = ""

    def log_lines(self) -> list[str]:
        return [line for line in self.log.splitlines() if line.strip()]

    def set_dependencies(self, dependencies: Iterable[Dependency]) -> None:
        """Replace the dependency list.

        Raises:
            ValueError: If two entries share a name.
        """
        deps = list(dependencies)
        seen: set[str] = set()
        for dep in deps:
            if dep.name in seen:
                raise ValueError(f"duplicate dependency: {dep.name}")
            seen.add(dep.name)
        self.dependencies = deps

    def set_dependency(self, name: str, version: str) -> None:
        """Append ``name`` at ``version``.

        Raises:
            ValueError: If ``name`` is already listed.
        """
        if any(dep.name == name for dep in self.dependencies):
            raise ValueError(f"duplicate dependency: {name}")
        self.dependencies.append(Dependency(name=name, version=version))

    def dependency_map(self) -> dict[str, str]:
        return {dep.name: dep.version for dep in self.dependencies}

    def check_release_kind(self) -> str | None:
        """Describe an inconsistent ``release``/``prerelease`` pair, or None."""
        if self.prerelease and self.release is not None and self.release not in PRERELEASE_KINDS:
            return f"pre-release '{self.prerelease}' needs one of {', '.join(PRERELEASE_KINDS)}, got '{self.release}'"
        return None
