"""Typed run configuration.

Configuration comes from an explicit TOML file (``tagrel --config PATH``) and
the process environment. Nothing is discovered implicitly: without ``--config``
the defaults below apply.

Example ``tagrel.toml``::

    config_path = "package.json"
    default_scope = "@lk"
    max_retries = 5

    [remotes]
    upstream = "upstream"
    origin = "origin"

    [branches]
    master = "master"
    develop = "develop"

    [labels]
    base = "Ready to Merge Into Develop"
    branch = "Needs Developer Review"
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_table

__all__ = [
    "BranchesConfig",
    "Config",
    "ConfigError",
    "LabelsConfig",
    "RemotesConfig",
    "load_config",
    "load_config_or_default",
    "DEFAULT_MAX_RETRIES",
]

DEFAULT_MAX_RETRIES = 10
DEFAULT_BASE_LABEL = "Ready to Merge Into Develop"
DEFAULT_BRANCH_LABEL = "Needs Developer Review"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RemotesConfig:
    upstream: str = "upstream"
    origin: str = "origin"


@dataclass(frozen=True, slots=True)
class BranchesConfig:
    master: str = "master"
    develop: str = "develop"


@dataclass(frozen=True, slots=True)
class LabelsConfig:
    """Labels applied to pull requests after they are opened."""

    base: str = DEFAULT_BASE_LABEL
    branch: str = DEFAULT_BRANCH_LABEL


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    config_path: str = "package.json"
    changelog_path: str = "CHANGELOG.md"
    package_lock_path: str = "package-lock.json"
    pull_request_template_path: str = ".github/PULL_REQUEST_TEMPLATE.md"
    default_scope: str = "@lk"
    max_retries: int = DEFAULT_MAX_RETRIES
    remotes: RemotesConfig = field(default_factory=RemotesConfig)
    branches: BranchesConfig = field(default_factory=BranchesConfig)
    labels: LabelsConfig = field(default_factory=LabelsConfig)
    github_token: str | None = None
    no_output: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        remotes: StrDict = get_table(data, "remotes") or {}
        branches: StrDict = get_table(data, "branches") or {}
        labels: StrDict = get_table(data, "labels") or {}

        max_retries = get_int(data, "max_retries")
        if max_retries is not None and max_retries < 1:
            raise ValueError("max_retries must be >= 1")

        return cls(
            config_path=get_str(data, "config_path") or "package.json",
            changelog_path=get_str(data, "changelog_path") or "CHANGELOG.md",
            package_lock_path=get_str(data, "package_lock_path") or "package-lock.json",
            pull_request_template_path=get_str(data, "pull_request_template_path")
            or ".github/PULL_REQUEST_TEMPLATE.md",
            default_scope=get_str(data, "default_scope") or "@lk",
            max_retries=max_retries or DEFAULT_MAX_RETRIES,
            remotes=RemotesConfig(
                upstream=get_str(remotes, "upstream") or "upstream",
                origin=get_str(remotes, "origin") or "origin",
            ),
            branches=BranchesConfig(
                master=get_str(branches, "master") or "master",
                develop=get_str(branches, "develop") or "develop",
            ),
            labels=LabelsConfig(
                base=get_str(labels, "base") or DEFAULT_BASE_LABEL,
                branch=get_str(labels, "branch") or DEFAULT_BRANCH_LABEL,
            ),
        )

    def with_environment(self, env: Mapping[str, str] | None = None) -> Config:
        """Return a copy with ``GITHUB_TOKEN`` and ``NO_OUTPUT`` applied."""
        source = os.environ if env is None else env
        token = (source.get("GITHUB_TOKEN") or "").strip() or None
        no_output = bool((source.get("NO_OUTPUT") or "").strip())
        return replace(self, github_token=token, no_output=no_output)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path given with ``--config``.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure.
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path | None) -> Result[Config, ConfigError]:
    """Load ``path`` when given, otherwise return the defaults."""
    if path is None:
        return Ok(Config())
    return load_config(path)
