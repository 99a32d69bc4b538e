from __future__ import annotations

from dataclasses import dataclass

from tagrel.core.config import Config
from tagrel.output.console import ConsoleProtocol

from .ports import FileStore, PackageManager, Prompter, PullRequestHost, VersionControl


@dataclass(frozen=True, slots=True)
class StepContext:
    """Collaborators handed to every step.

    Built once per run by the CLI (real adapters) or by tests (fakes).
    """

    git: VersionControl
    host: PullRequestHost
    npm: PackageManager
    prompter: Prompter
    files: FileStore
    config: Config
    console: ConsoleProtocol

    @property
    def upstream(self) -> str:
        return self.config.remotes.upstream

    @property
    def origin(self) -> str:
        return self.config.remotes.origin

    @property
    def master(self) -> str:
        return self.config.branches.master

    @property
    def develop(self) -> str:
        return self.config.branches.develop
