"""Filesystem helpers and the local ``FileStore``."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from tagrel.core.structured import StrDict, as_str_dict

__all__ = ["LocalFileStore", "atomic_write_text"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


class LocalFileStore:
    """File access rooted at the repository being released.

    Relative paths resolve against ``root``. Reads return ``None`` for missing
    files so steps can branch on absence; write failures raise ``OSError`` and
    abort the run.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def resolve(self, path: str | Path) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.root / p

    def exists(self, path: str | Path) -> bool:
        return self.resolve(path).is_file()

    def read_text(self, path: str | Path) -> str | None:
        try:
            return self.resolve(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write_text(self, path: str | Path, text: str) -> None:
        atomic_write_text(self.resolve(path), text)

    def read_json(self, path: str | Path) -> StrDict | None:
        """Read a JSON object; missing, invalid or non-object files yield None."""
        text = self.read_text(path)
        if text is None:
            return None
        try:
            obj: object = json.loads(text)
        except json.JSONDecodeError:
            return None
        return as_str_dict(obj)

    def write_json(self, path: str | Path, data: StrDict) -> None:
        # npm writes 2-space JSON with a trailing newline; keep diffs minimal.
        self.write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")

    def delete(self, path: str | Path) -> None:
        self.resolve(path).unlink(missing_ok=True)
