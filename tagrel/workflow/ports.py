"""Capabilities the workflow steps depend on.

Each Protocol has one production implementation (``tagrel.git``,
``tagrel.services``, ``tagrel.platform.files``, ``tagrel.cli.prompter``) and one
fake in ``tagrel/test/fakes.py``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

from tagrel.core.result import Result
from tagrel.core.structured import StrDict
from tagrel.git.repository import GitError, GitStatus
from tagrel.services.github import HostError, PullRequest, RepoDetails
from tagrel.services.npm import PackageError

QuestionKind = Literal["input", "confirm", "list", "checkbox"]
Answer = str | bool | list[str]


@dataclass(frozen=True, slots=True)
class Choice:
    label: str
    value: str


@dataclass(frozen=True, slots=True)
class Question:
    """One prompt.

    ``list`` answers with one choice value, ``checkbox`` with a list of them,
    ``confirm`` with a bool and ``input`` with the typed text.
    """

    kind: QuestionKind
    name: str
    message: str
    default: str | bool | None = None
    choices: tuple[Choice, ...] = ()
    validate: Callable[[str], bool] | None = None


def choices_of(values: Sequence[str]) -> tuple[Choice, ...]:
    return tuple(Choice(label=v, value=v) for v in values)


class Prompter(Protocol):
    def ask(self, questions: Sequence[Question]) -> Mapping[str, Answer]: ...

    def edit(self, text: str) -> str:
        """Open ``text`` in the user's editor and return the saved result."""
        ...


class FileStore(Protocol):
    def exists(self, path: str | Path) -> bool: ...

    def read_text(self, path: str | Path) -> str | None: ...

    def write_text(self, path: str | Path, text: str) -> None: ...

    def read_json(self, path: str | Path) -> StrDict | None: ...

    def write_json(self, path: str | Path, data: StrDict) -> None: ...

    def delete(self, path: str | Path) -> None: ...

    def resolve(self, path: str | Path) -> Path: ...


class VersionControl(Protocol):
    def current_branch(self) -> str | None: ...

    def branch_exists(self, name: str) -> bool: ...

    def branch_exists_remote(self, name: str, remote: str) -> bool: ...

    def local_branches(self) -> Result[list[str], GitError]: ...

    def remote_branches(self) -> Result[list[str], GitError]: ...

    def branches_containing(self, ref: str) -> Result[list[str], GitError]: ...

    def checkout(
        self,
        name: str,
        *,
        create: bool = False,
        start_point: str | None = None,
    ) -> Result[str, GitError]: ...

    def create_branch(self, name: str, start_point: str | None = None) -> Result[str, GitError]: ...

    def delete_branch(self, name: str) -> Result[str, GitError]: ...

    def delete_remote_branch(self, name: str, remote: str) -> Result[str, GitError]: ...

    def create_remote_branch(self, name: str, remote: str, base: str) -> Result[str, GitError]: ...

    def fetch(self, remote: str) -> Result[str, GitError]: ...

    def merge(self, ref: str, *, ff_only: bool = True) -> Result[str, GitError]: ...

    def rebase(self, onto: str) -> Result[str, GitError]: ...

    def rebase_interactive(self, onto: str, plan_path: Path) -> Result[str, GitError]: ...

    def rebase_continue(self) -> Result[str, GitError]: ...

    def reset_hard(self, ref: str) -> Result[str, GitError]: ...

    def add(self, paths: Sequence[str]) -> Result[str, GitError]: ...

    def add_updated(self) -> Result[str, GitError]: ...

    def commit(self, message: str, *, amend: bool = False) -> Result[str, GitError]: ...

    def tag(self, name: str) -> Result[str, GitError]: ...

    def tags(self) -> Result[list[str], GitError]: ...

    def push(
        self,
        branch: str,
        remote: str,
        *,
        tag: str | None = None,
        set_upstream: bool = False,
        force: bool = False,
    ) -> Result[str, GitError]: ...

    def diff(self, paths: Sequence[str] = ()) -> Result[str, GitError]: ...

    def check_conflict_markers(self) -> Result[str, GitError]: ...

    def log(self, since: str | None = None) -> Result[str, GitError]: ...

    def oneline_log(self, base: str) -> Result[str, GitError]: ...

    def last_commit_message(self) -> Result[str, GitError]: ...

    def status(self) -> Result[GitStatus, GitError]: ...

    def uncommitted_changes(self) -> Result[list[str], GitError]: ...

    def stash(self) -> Result[str, GitError]: ...

    def stash_pop(self) -> Result[str, GitError]: ...

    def remotes(self) -> Result[list[str], GitError]: ...

    def remote_url(self, remote: str) -> Result[str, GitError]: ...

    def add_remote(self, name: str, url: str) -> Result[str, GitError]: ...


class PullRequestHost(Protocol):
    def create_release(
        self,
        owner: str,
        repo: str,
        *,
        tag: str,
        title: str,
        body: str,
        prerelease: bool,
    ) -> Result[str, HostError]: ...

    def create_pull_request(
        self,
        owner: str,
        repo: str,
        *,
        title: str,
        head: str,
        base: str,
        body: str = "",
    ) -> Result[PullRequest, HostError]: ...

    def add_labels(
        self,
        owner: str,
        repo: str,
        number: int,
        labels: Sequence[str],
    ) -> Result[None, HostError]: ...

    def list_tags(self, owner: str, repo: str) -> Result[list[str], HostError]: ...

    def repo_details(self, owner: str, repo: str) -> Result[RepoDetails, HostError]: ...


class PackageManager(Protocol):
    def install(self, spec: str, *, exact: bool = True) -> Result[str, PackageError]: ...

    def publish(self, tag: str | None = None) -> Result[str, PackageError]: ...
