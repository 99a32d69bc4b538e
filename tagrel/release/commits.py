"""Commit log curation: rebase plans and release-note bullets.

Pre-release builds leave "version marker" commits behind (a commit whose whole
message is ``1.2.0-feature.3``). Before promoting a pre-release those markers
are dropped with an interactive rebase whose todo list comes from
``build_rebase_plan``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .tags import VersionTagSet

VERSION_MARKER_RE = re.compile(r"^v?\d+\.\d+\.\d+-[\w-]+\.\d+$")


@dataclass(frozen=True, slots=True)
class CommitRecord:
    hash: str
    message: str

    @property
    def is_version_marker(self) -> bool:
        return VERSION_MARKER_RE.match(self.message) is not None


def parse_commit_log(log: str | Iterable[str]) -> list[CommitRecord]:
    """Parse ``<hash> <message>`` lines; blank lines are skipped."""
    lines = log.splitlines() if isinstance(log, str) else log
    records: list[CommitRecord] = []
    for line in lines:
        parts = line.strip().split(None, 1)
        if not parts:
            continue
        records.append(CommitRecord(hash=parts[0], message=parts[1] if len(parts) > 1 else ""))
    return records


def build_rebase_plan(log: str | Iterable[str]) -> str:
    """Build a ``git rebase -i`` todo list without version marker commits.

    ``log`` is newest first (``git log`` order); the plan is oldest first with
    one ``pick <hash> <message>`` line per kept commit. Returns ``""`` when
    nothing survives.
    """
    kept = [r for r in parse_commit_log(log) if not r.is_version_marker]
    return "".join(f"pick {r.hash} {r.message}\n" for r in reversed(kept))


def select_log_baseline(
    tags: Iterable[str],
    *,
    current_version: str,
    prerelease: str,
) -> str | None:
    """Pick the ref release notes start from.

    Returns None when the repository has no tags at all. While cutting a
    pre-release the notes start at the current version's tag; otherwise at the
    most recent stable tag.
    """
    tag_list = [t for t in tags if t.strip()]
    if not tag_list:
        return None
    if prerelease:
        return f"v{current_version}"
    stable = VersionTagSet(tag_list).stable()
    return stable[-1] if stable else None


def build_change_log(subjects: str | Sequence[str], limit: int | None = None) -> str:
    """Format commit subjects (newest first) as ``* subject`` bullet lines."""
    lines = subjects.splitlines() if isinstance(subjects, str) else list(subjects)
    bullets = [f"* {s.strip()}" for s in lines if s.strip()]
    if limit is not None:
        bullets = bullets[:limit]
    return "\n".join(bullets)


def change_log_subjects(log: str) -> list[str]:
    """Undo ``build_change_log``: the subjects without their bullets."""
    out: list[str] = []
    for line in log.splitlines():
        text = line.strip()
        if text.startswith("* "):
            text = text[2:]
        if text:
            out.append(text)
    return out
