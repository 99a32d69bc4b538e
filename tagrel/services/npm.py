"""npm adapter implementing the ``PackageManager`` capability."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from tagrel.core.result import Err, Ok, Result
from tagrel.platform.process import run as run_process

NPM_TIMEOUT_SECONDS = 10 * 60.0


@dataclass(frozen=True, slots=True)
class PackageError:
    command: str
    message: str


class NpmPackageManager:
    def __init__(self, root: Path) -> None:
        self.root = root

    def install(self, spec: str, *, exact: bool = True) -> Result[str, PackageError]:
        """``npm install <spec> [-E]``; ``spec`` is ``@scope/name@version``."""
        args = ["install", spec]
        if exact:
            args.append("-E")
        return self._npm(args)

    def publish(self, tag: str | None = None) -> Result[str, PackageError]:
        args = ["publish"]
        if tag:
            args.extend(["--tag", tag])
        return self._npm(args)

    def _npm(self, args: list[str]) -> Result[str, PackageError]:
        command = " ".join(["npm", *args])
        result = run_process(["npm", *args], cwd=self.root, timeout=NPM_TIMEOUT_SECONDS)
        match result:
            case Err(e):
                return Err(PackageError(command=command, message=e.stderr.strip() or str(e)))
            case Ok(stdout):
                return Ok(stdout)
