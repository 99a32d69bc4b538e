"""Resolve conflict markers left in package.json by a rebase.

When a rebase of a dependency-bump branch conflicts only on version strings,
the conflicts can be settled mechanically: versions we bumped ourselves win,
versions bumped by someone else on the other side are adopted, everything else
keeps the first side of the conflict.

The resolver runs a two-state machine over the file's lines:

* COPY: lines are copied to the output.
* IN_CONFLICT: lines are collected into the current ``ConflictBlock``.

A line starting with ``<<<<<<<`` enters IN_CONFLICT (the marker is dropped and
the preceding output line becomes the block's anchor); a line starting with
``>>>>>>>`` returns to COPY. The ``=======`` separator is kept inside the block
and only matters during resolution. Blocks are spliced back by position, so
two blocks sharing an anchor line (or having none) never collide.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, auto

LEFT_MARKER = "<<<<<<<"
SEPARATOR = "======="
RIGHT_MARKER = ">>>>>>>"

_VERSION_VALUE_RE = re.compile(r'^(\s*".+": ")[^"]+(".*)$')
_RELEASE_VERSION_RE = re.compile(r"\d+(?:\.\d+)*")


class _Mode(Enum):
    COPY = auto()
    IN_CONFLICT = auto()


@dataclass(slots=True)
class ConflictBlock:
    """One conflict region.

    Attributes:
        index: Position of the block among all blocks in the file.
        anchor: Output line preceding the block ("" when the block opens the file).
        position: Index of ``anchor`` in the excised output, -1 when none.
        lines: Block content; both sides and the separator until resolved.
    """

    index: int
    anchor: str
    position: int
    lines: list[str] = field(default_factory=list)

    def separator_index(self) -> int | None:
        for i, line in enumerate(self.lines):
            if line.startswith(SEPARATOR):
                return i
        return None

    def ours(self) -> list[str]:
        i = self.separator_index()
        return list(self.lines) if i is None else self.lines[:i]

    def incoming(self) -> list[str]:
        i = self.separator_index()
        return [] if i is None else self.lines[i + 1 :]


@dataclass(slots=True)
class ConflictScan:
    """Output lines with conflict regions cut out, plus the cut blocks."""

    lines: list[str]
    blocks: list[ConflictBlock]


@dataclass(frozen=True, slots=True)
class ResolutionNote:
    """A local change that was not applied because the other side's version was kept."""

    name: str
    local_version: str
    kept_version: str | None

    def message(self) -> str:
        kept = self.kept_version or "unknown"
        return f"You had a local change of {self.local_version} for {self.name}, but we used HEAD's version of {kept}"


@dataclass(frozen=True, slots=True)
class ConflictResolution:
    text: str
    notes: tuple[ResolutionNote, ...]
    blocks: tuple[ConflictBlock, ...]
    lines: tuple[str, ...]
    local_changes: dict[str, str]

    @property
    def had_conflicts(self) -> bool:
        return bool(self.blocks)


def scan_conflicts(text: str) -> ConflictScan:
    """Split ``text`` into marker-free output lines and conflict blocks.

    A block still open at end of input is closed there.
    """
    out: list[str] = []
    blocks: list[ConflictBlock] = []
    mode = _Mode.COPY
    current: ConflictBlock | None = None

    for line in text.split("\n"):
        if mode is _Mode.COPY:
            if line.startswith(LEFT_MARKER):
                current = ConflictBlock(
                    index=len(blocks),
                    anchor=out[-1] if out else "",
                    position=len(out) - 1,
                )
                blocks.append(current)
                mode = _Mode.IN_CONFLICT
            else:
                out.append(line)
        elif line.startswith(RIGHT_MARKER):
            mode = _Mode.COPY
            current = None
        elif current is not None:
            current.lines.append(line)

    return ConflictScan(lines=out, blocks=blocks)


def _scoped_key(scope: str, name: str) -> str:
    return f'"{scope}/{name}"'


def _dependency_re(scope: str) -> re.Pattern[str]:
    return re.compile(rf'"{re.escape(scope)}/([\w-]+)": "([^"]+)"')


def merge_block(
    block: ConflictBlock,
    *,
    scope: str,
    local_changes: Mapping[str, str],
) -> dict[str, str]:
    """Collect the incoming side's dependency versions and truncate to "ours".

    Incoming lines naming one of our own changed dependencies are superseded
    and skipped. Returns ``{name: version}`` for every other scoped dependency
    found on the incoming side at a release version; incoming pre-releases
    are left out. ``block.lines`` is left holding only the lines before the
    separator.
    """
    dep_re = _dependency_re(scope)
    keys = [_scoped_key(scope, name) for name in local_changes]

    merged: dict[str, str] = {}
    for line in block.incoming():
        if any(key in line for key in keys):
            continue
        m = dep_re.search(line)
        if m and _RELEASE_VERSION_RE.fullmatch(m.group(2)):
            merged[m.group(1)] = m.group(2)

    block.lines = block.ours()
    return merged


def rewrite_block(
    block: ConflictBlock,
    *,
    scope: str,
    merged: Mapping[str, str],
) -> list[ResolutionNote]:
    """Apply pre-release versions from ``merged`` to the block in place.

    Only versions containing ``-`` (pre-releases cut for this change) are
    written. For the others, each block line naming the dependency yields a
    ``ResolutionNote`` since the block's own version is kept.
    """
    dep_re = _dependency_re(scope)
    notes: list[ResolutionNote] = []

    for name, version in merged.items():
        key = _scoped_key(scope, name)
        if "-" in version:
            for i, line in enumerate(block.lines):
                if key in line:
                    block.lines[i] = _VERSION_VALUE_RE.sub(
                        lambda m, v=version: f"{m.group(1)}{v}{m.group(2)}", line
                    )
                    break
            continue

        for line in block.lines:
            if key in line:
                m = dep_re.search(line)
                notes.append(
                    ResolutionNote(name=name, local_version=version, kept_version=m.group(2) if m else None)
                )

    return notes


def reassemble(scan: ConflictScan) -> str:
    """Splice every block back after its anchor position and join with newlines."""
    by_position: dict[int, list[ConflictBlock]] = {}
    for block in scan.blocks:
        by_position.setdefault(block.position, []).append(block)

    out: list[str] = []
    for block in by_position.get(-1, []):
        out.extend(block.lines)
    for i, line in enumerate(scan.lines):
        out.append(line)
        for block in by_position.get(i, []):
            out.extend(block.lines)
    return "\n".join(out)


def resolve_conflicts(
    text: str,
    *,
    scope: str,
    local_changes: Mapping[str, str],
) -> ConflictResolution:
    """Resolve every conflict block of ``text``.

    ``local_changes`` maps dependency names (without scope) to the versions we
    set ourselves. Text without markers comes back unchanged.
    """
    scan = scan_conflicts(text)
    merged: dict[str, str] = dict(local_changes)
    for block in scan.blocks:
        merged.update(merge_block(block, scope=scope, local_changes=local_changes))

    notes: list[ResolutionNote] = []
    for block in scan.blocks:
        notes.extend(rewrite_block(block, scope=scope, merged=merged))

    return ConflictResolution(
        text=reassemble(scan),
        notes=tuple(notes),
        blocks=tuple(scan.blocks),
        lines=tuple(scan.lines),
        local_changes=merged,
    )
