"""GitHub adapter over the ``gh`` CLI.

``GhHost`` implements the ``PullRequestHost`` capability with ``gh api`` calls.
Reads retry on transient network failures; writes (release, pull request,
labels) run once.
"""

from __future__ import annotations

import json
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from time import sleep
from typing import Literal

from tagrel.core.result import Err, Ok, Result
from tagrel.core.structured import as_obj_list, as_str_dict, get_str, get_table
from tagrel.platform.process import ProcessError
from tagrel.platform.process import run as run_process

GH_TIMEOUT_SECONDS = 60.0
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0

HostErrorKind = Literal["gh_missing", "request_failed", "invalid_payload"]


@dataclass(frozen=True, slots=True)
class HostError:
    kind: HostErrorKind
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class PullRequest:
    number: int
    url: str


@dataclass(frozen=True, slots=True)
class RepoDetails:
    """Clone URLs of a repository and, for forks, of its parent."""

    ssh_url: str
    https_url: str
    parent: RepoDetails | None = None

    def source(self) -> RepoDetails:
        """The repository a fork was created from (itself when not a fork)."""
        return self.parent or self


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = error.output.lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "http 429",
        "http 502",
        "http 503",
        "http 504",
    )
    return any(marker in text for marker in markers)


def ensure_gh_available() -> Result[None, HostError]:
    if shutil.which("gh") is None:
        return Err(
            HostError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


class GhHost:
    """``PullRequestHost`` backed by ``gh api``.

    ``token`` (from ``GITHUB_TOKEN``) is forwarded as ``GH_TOKEN``; without it
    ``gh`` falls back to its own stored login.
    """

    def __init__(self, workspace_root: Path, token: str | None = None) -> None:
        self.workspace_root = workspace_root
        self._env = {"GH_TOKEN": token} if token else None

    def create_release(
        self,
        owner: str,
        repo: str,
        *,
        tag: str,
        title: str,
        body: str,
        prerelease: bool,
    ) -> Result[str, HostError]:
        """Create a GitHub release and return its URL."""
        result = self._api_write(
            f"repos/{owner}/{repo}/releases",
            fields={"tag_name": tag, "name": title, "body": body},
            typed={"prerelease": "true" if prerelease else "false"},
        )
        if isinstance(result, Err):
            return result

        url = get_str(result.value, "html_url")
        if url is None:
            return Err(HostError(kind="invalid_payload", message="release response has no html_url"))
        return Ok(url)

    def create_pull_request(
        self,
        owner: str,
        repo: str,
        *,
        title: str,
        head: str,
        base: str,
        body: str = "",
    ) -> Result[PullRequest, HostError]:
        result = self._api_write(
            f"repos/{owner}/{repo}/pulls",
            fields={"title": title, "head": head, "base": base, "body": body},
        )
        if isinstance(result, Err):
            return result

        number = result.value.get("number")
        url = get_str(result.value, "html_url")
        if not isinstance(number, int) or url is None:
            return Err(HostError(kind="invalid_payload", message="unexpected pull request payload"))
        return Ok(PullRequest(number=number, url=url))

    def add_labels(
        self,
        owner: str,
        repo: str,
        number: int,
        labels: Sequence[str],
    ) -> Result[None, HostError]:
        result = self._api_write(
            f"repos/{owner}/{repo}/issues/{number}/labels",
            fields={"labels[]": list(labels)},
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def list_tags(self, owner: str, repo: str) -> Result[list[str], HostError]:
        """Tag names of ``owner/repo`` as returned by GitHub (newest first)."""
        result = self._api_read(f"repos/{owner}/{repo}/tags?per_page=100")
        if isinstance(result, Err):
            return result

        raw = as_obj_list(result.value)
        if raw is None:
            return Err(HostError(kind="invalid_payload", message=f"unexpected tags payload: {owner}/{repo}"))

        out: list[str] = []
        for item in raw:
            d = as_str_dict(item)
            if d is None:
                continue
            name = get_str(d, "name")
            if name:
                out.append(name)
        return Ok(out)

    def repo_details(self, owner: str, repo: str) -> Result[RepoDetails, HostError]:
        result = self._api_read(f"repos/{owner}/{repo}")
        if isinstance(result, Err):
            return result

        data = as_str_dict(result.value)
        details = _parse_details(data) if data is not None else None
        if details is None:
            return Err(HostError(kind="invalid_payload", message=f"unexpected repo payload: {owner}/{repo}"))
        return Ok(details)

    def _api_read(self, endpoint: str) -> Result[object, HostError]:
        attempts = max(1, GH_READ_RETRY_ATTEMPTS)
        for attempt in range(attempts):
            result = run_process(
                ["gh", "api", endpoint],
                cwd=self.workspace_root,
                env=self._env,
                timeout=GH_TIMEOUT_SECONDS,
            )
            if isinstance(result, Ok):
                return _decode(result.value, endpoint)

            error = result.error
            if attempt < attempts - 1 and _is_transient_gh_error(error):
                sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
                continue

            return Err(
                HostError(
                    kind="request_failed",
                    message=f"gh api failed: {endpoint}",
                    hint=error.stderr.strip() or None,
                )
            )

        return Err(HostError(kind="request_failed", message=f"gh api failed: {endpoint}"))

    def _api_write(
        self,
        endpoint: str,
        *,
        fields: dict[str, str | list[str]],
        typed: dict[str, str] | None = None,
    ) -> Result[dict[str, object], HostError]:
        cmd = ["gh", "api", "-X", "POST", endpoint]
        for key, value in fields.items():
            values = value if isinstance(value, list) else [value]
            for v in values:
                cmd.extend(["-f", f"{key}={v}"])
        for key, value in (typed or {}).items():
            cmd.extend(["-F", f"{key}={value}"])

        result = run_process(cmd, cwd=self.workspace_root, env=self._env, timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                HostError(
                    kind="request_failed",
                    message=f"gh api POST failed: {endpoint}",
                    hint=result.error.stderr.strip() or None,
                )
            )

        decoded = _decode(result.value, endpoint)
        if isinstance(decoded, Err):
            return decoded
        data = as_str_dict(decoded.value)
        if data is None:
            # label endpoints answer with a list
            return Ok({})
        return Ok(data)


def _decode(payload: str, endpoint: str) -> Result[object, HostError]:
    try:
        obj: object = json.loads(payload)
    except json.JSONDecodeError as e:
        return Err(
            HostError(
                kind="invalid_payload",
                message=f"gh api returned invalid JSON: {e}",
                hint=endpoint,
            )
        )
    return Ok(obj)


def _parse_details(data: dict[str, object]) -> RepoDetails | None:
    ssh_url = get_str(data, "ssh_url")
    https_url = get_str(data, "clone_url")
    if ssh_url is None or https_url is None:
        return None

    parent: RepoDetails | None = None
    parent_tbl = get_table(data, "parent")
    if parent_tbl is not None:
        parent = _parse_details(parent_tbl)
    return RepoDetails(ssh_url=ssh_url, https_url=https_url, parent=parent)
