"""Git repository adapter.

This module provides ``GitRepository``, the ``VersionControl`` implementation
used by the CLI. Every operation shells out to ``git`` and returns a Result;
steps inspect ``GitError.message`` for known substrings ("already exists",
"CONFLICT") to choose a remediation path.

Usage:
    repo = GitRepository(Path("/path/to/package"))

    match repo.checkout("feature-login", create=True):
        case Ok(_):
            console.success("switched")
        case Err(e) if "already exists" in e.message:
            console.warning(e.message)
        case Err(e):
            console.error(e.message)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from tagrel.core.result import Err, Ok, Result
from tagrel.platform.process import ProcessError
from tagrel.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_LONG_TIMEOUT_SECONDS = 3 * 60.0
_LONG_COMMANDS = {"fetch", "push", "ls-remote", "merge", "rebase"}

__all__ = [
    "GitError",
    "GitRepository",
    "GitStatus",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message (stderr, falling back to stdout)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", "UU", "??")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_conflicted(self) -> bool:
        """True for unmerged paths (``UU``, ``AA``, ``DU``, ...)."""
        return "U" in self.xy or self.xy in {"AA", "DD"}


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed ``git status --porcelain=v1 -b``.

    Attributes:
        branch: Current branch name
        upstream: Upstream branch (e.g., "origin/main"), None if not set
        entries: All status entries
    """

    branch: str
    upstream: str | None = None
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return len(self.entries) == 0

    @property
    def conflicted(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_conflicted]

    def mentions(self, path: str) -> bool:
        """True if any entry refers to ``path``."""
        return any(e.path == path or e.path.endswith(f"/{path}") for e in self.entries)


class GitRepository:
    """Git CLI adapter rooted at one working tree.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a valid git repository."""
        return (self.path / ".git").exists()

    # -- branches -----------------------------------------------------------

    def current_branch(self) -> str | None:
        """Current branch name, None on detached HEAD or error."""
        match self._git(["rev-parse", "--abbrev-ref", "HEAD"]):
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def branch_exists(self, name: str) -> bool:
        match self._git(["branch", "--list", name]):
            case Ok(stdout):
                return bool(stdout.strip())
            case Err(_):
                return False

    def branch_exists_remote(self, name: str, remote: str) -> bool:
        match self._git(["ls-remote", "--heads", remote, name]):
            case Ok(stdout):
                return bool(stdout.strip())
            case Err(_):
                return False

    def local_branches(self) -> Result[list[str], GitError]:
        return self._git(["branch", "--format=%(refname:short)"]).map(_lines)

    def remote_branches(self) -> Result[list[str], GitError]:
        return self._git(["branch", "-r"]).map(_lines)

    def branches_containing(self, ref: str) -> Result[list[str], GitError]:
        """Local and remote branches containing ``ref`` (raw ``git branch -a`` lines)."""
        return self._git(["branch", "-a", "--contains", ref]).map(_lines)

    def checkout(
        self,
        name: str,
        *,
        create: bool = False,
        start_point: str | None = None,
    ) -> Result[str, GitError]:
        args = ["checkout"]
        if create:
            args.append("-b")
        args.append(name)
        if start_point:
            args.append(start_point)
        return self._git(args)

    def create_branch(self, name: str, start_point: str | None = None) -> Result[str, GitError]:
        args = ["branch", name]
        if start_point:
            args.append(start_point)
        return self._git(args)

    def delete_branch(self, name: str) -> Result[str, GitError]:
        return self._git(["branch", "-D", name])

    def delete_remote_branch(self, name: str, remote: str) -> Result[str, GitError]:
        return self._git(["push", remote, f":{name}"])

    def create_remote_branch(self, name: str, remote: str, base: str) -> Result[str, GitError]:
        """Create ``remote/name`` pointing at the local ref ``base``."""
        return self._git(["push", remote, f"{base}:refs/heads/{name}"])

    # -- history ------------------------------------------------------------

    def fetch(self, remote: str) -> Result[str, GitError]:
        return self._git(["fetch", remote])

    def merge(self, ref: str, *, ff_only: bool = True) -> Result[str, GitError]:
        args = ["merge"]
        if ff_only:
            args.append("--ff-only")
        args.append(ref)
        return self._git(args)

    def rebase(self, onto: str) -> Result[str, GitError]:
        return self._git(["rebase", onto])

    def rebase_interactive(self, onto: str, plan_path: Path) -> Result[str, GitError]:
        """Replay commits on ``onto`` using the todo list stored at ``plan_path``.

        The sequence editor overwrites git's generated todo with the plan.
        """
        env = {"GIT_SEQUENCE_EDITOR": f'cat "{plan_path}" >'}
        return self._git(["rebase", "-i", onto], env=env)

    def rebase_continue(self) -> Result[str, GitError]:
        return self._git(["rebase", "--continue"], env={"GIT_EDITOR": "cat"})

    def reset_hard(self, ref: str) -> Result[str, GitError]:
        return self._git(["reset", "--hard", ref])

    def add(self, paths: Sequence[str]) -> Result[str, GitError]:
        return self._git(["add", *paths])

    def add_updated(self) -> Result[str, GitError]:
        """Stage modifications to tracked files (``git add -u``)."""
        return self._git(["add", "-u"])

    def commit(self, message: str, *, amend: bool = False) -> Result[str, GitError]:
        args = ["commit"]
        if amend:
            args.append("--amend")
        args.extend(["-m", message])
        return self._git(args)

    def tag(self, name: str) -> Result[str, GitError]:
        return self._git(["tag", name])

    def tags(self) -> Result[list[str], GitError]:
        """All tags, ascending by version."""
        return self._git(["tag", "--sort=v:refname"]).map(_lines)

    def push(
        self,
        branch: str,
        remote: str,
        *,
        tag: str | None = None,
        set_upstream: bool = False,
        force: bool = False,
    ) -> Result[str, GitError]:
        args = ["push"]
        if set_upstream:
            args.append("-u")
        if force:
            args.append("-f")
        args.extend([remote, branch])
        if tag:
            args.append(tag)
        return self._git(args)

    def diff(self, paths: Sequence[str] = ()) -> Result[str, GitError]:
        args = ["--no-pager", "diff", "--color"]
        if paths:
            args.extend(["--", *paths])
        return self._git(args)

    def check_conflict_markers(self) -> Result[str, GitError]:
        """Ok when ``git diff --check`` finds no leftover conflict markers."""
        return self._git(["diff", "--check"])

    def log(self, since: str | None = None) -> Result[str, GitError]:
        """Commit subjects newest first, optionally limited to ``since..HEAD``."""
        args = ["--no-pager", "log", "--no-merges", "--date-order", "--pretty=format:%s"]
        if since:
            args.append(f"{since}..")
        return self._git(args)

    def oneline_log(self, base: str) -> Result[str, GitError]:
        """``<short hash> <subject>`` lines for commits in ``base..HEAD``, newest first."""
        return self._git(["--no-pager", "log", "--no-merges", "--pretty=format:%h %s", f"{base}..HEAD"])

    def last_commit_message(self) -> Result[str, GitError]:
        return self._git(["log", "-1", "--pretty=%B"])

    # -- working tree -------------------------------------------------------

    def status(self) -> Result[GitStatus, GitError]:
        """Runs ``git status --porcelain=v1 -b`` and parses the output."""
        return self._git(["status", "--porcelain=v1", "-b"]).map(_parse_status)

    def uncommitted_changes(self) -> Result[list[str], GitError]:
        return self._git(["diff-index", "HEAD", "--"]).map(_lines)

    def stash(self) -> Result[str, GitError]:
        return self._git(["stash", "--include-untracked"])

    def stash_pop(self) -> Result[str, GitError]:
        return self._git(["stash", "pop"])

    # -- remotes ------------------------------------------------------------

    def remotes(self) -> Result[list[str], GitError]:
        return self._git(["remote"]).map(_lines)

    def remote_url(self, remote: str) -> Result[str, GitError]:
        return self._git(["config", "--get", f"remote.{remote}.url"]).map(str.strip)

    def add_remote(self, name: str, url: str) -> Result[str, GitError]:
        return self._git(["remote", "add", name, url])

    # -- internals ----------------------------------------------------------

    def _git(
        self,
        args: list[str],
        env: Mapping[str, str] | None = None,
    ) -> Result[str, GitError]:
        """Run a git command in this repository."""
        command = next((a for a in args if not a.startswith("-")), "")
        result = self._run(args, command, env)
        match result:
            case Err(e):
                return Err(_to_git_error(command, e))
            case Ok(stdout):
                return Ok(stdout)

    def _run(
        self,
        args: list[str],
        command: str,
        env: Mapping[str, str] | None,
    ) -> Result[str, ProcessError]:
        timeout = _GIT_LONG_TIMEOUT_SECONDS if command in _LONG_COMMANDS else _GIT_TIMEOUT_SECONDS
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, env=env, timeout=timeout)


def _to_git_error(command: str, error: ProcessError) -> GitError:
    message = error.stderr.strip() or error.stdout.strip() or f"git {command} failed"
    # merge/rebase report conflicts on stdout; keep both so callers can match.
    if error.stdout.strip() and error.stderr.strip():
        message = f"{error.stderr.strip()}\n{error.stdout.strip()}"
    return GitError(command=command, message=message, returncode=error.returncode)


def _lines(output: str) -> list[str]:
    return [ln.strip() for ln in output.splitlines() if ln.strip()]


def _parse_status(output: str) -> GitStatus:
    lines = [ln for ln in output.splitlines() if ln.strip()]
    if not lines:
        return GitStatus(branch="")

    # First line is branch info: ## branch...upstream [ahead N, behind M]
    head = lines[0]
    s = head[2:].strip() if head.startswith("##") else head.strip()
    s = s.split(" [", 1)[0].strip()
    upstream: str | None = None
    if "..." in s:
        s, upstream = s.split("...", 1)

    entries = tuple(StatusEntry(xy=ln[:2], path=ln[3:]) for ln in lines[1:] if len(ln) >= 4)
    return GitStatus(branch=s.strip(), upstream=upstream, entries=entries)
