from __future__ import annotations

from pathlib import Path

import typer

from tagrel.core.config import load_config_or_default
from tagrel.core.errors import ErrorCode
from tagrel.core.result import Err
from tagrel.git.repository import GitRepository
from tagrel.output.console import RichConsole
from tagrel.platform.files import LocalFileStore
from tagrel.services.github import GhHost, ensure_gh_available
from tagrel.services.npm import NpmPackageManager
from tagrel.workflow.context import StepContext

from .prompter import TyperPrompter


def build_context(repo: Path, config_path: Path | None) -> StepContext:
    """Wire the production collaborators for the repository at ``repo``.

    Exits with ``ENV_ERROR`` when ``repo`` is not a git repository or the
    configuration cannot be loaded.
    """
    console = RichConsole()

    try:
        root = repo.expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --repo: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    git = GitRepository(root)
    if not git.exists():
        typer.echo(f"error: '{root}' is not a git repository", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config_result = load_config_or_default(config_path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    config = config_result.value.with_environment()

    gh = ensure_gh_available()
    if isinstance(gh, Err):
        console.warning(gh.error.message)
        if gh.error.hint:
            console.print(f"hint: {gh.error.hint}")

    return StepContext(
        git=git,
        host=GhHost(root, token=config.github_token),
        npm=NpmPackageManager(root),
        prompter=TyperPrompter(console),
        files=LocalFileStore(root),
        config=config,
        console=console,
    )
