from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Literal

ReleaseKind = Literal[
    "major",
    "minor",
    "patch",
    "premajor",
    "preminor",
    "prepatch",
    "prerelease",
]

RELEASE_KINDS: tuple[ReleaseKind, ...] = ("major", "minor", "patch")
PRERELEASE_KINDS: tuple[ReleaseKind, ...] = ("premajor", "preminor", "prepatch", "prerelease")
ALL_KINDS: tuple[ReleaseKind, ...] = RELEASE_KINDS + PRERELEASE_KINDS

_VERSION_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)
_PRERELEASE_ID_RE = re.compile(r"^v?\d+\.\d+\.\d+-(.+)\.\d+$")


@total_ordering
@dataclass(frozen=True, slots=True)
class SemVer:
    """A ``MAJOR.MINOR.PATCH[-IDENTIFIER.N]`` version.

    ``identifier``/``number`` are both None for stable versions. Ordering puts a
    pre-release below its stable release, then compares identifier strings and
    finally the integer ``number``.
    """

    major: int
    minor: int
    patch: int
    identifier: str | None = None
    number: int | None = None

    @property
    def is_prerelease(self) -> bool:
        return self.identifier is not None or self.number is not None

    @property
    def core(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    @property
    def sort_key(self) -> tuple[int, int, int, int, str, int]:
        return (
            self.major,
            self.minor,
            self.patch,
            0 if self.is_prerelease else 1,
            self.identifier or "",
            -1 if self.number is None else self.number,
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if not self.is_prerelease:
            return base
        parts = [p for p in (self.identifier, None if self.number is None else str(self.number)) if p]
        return f"{base}-{'.'.join(parts)}"

    def to_tag(self) -> str:
        return f"v{self}"

    def stable(self) -> SemVer:
        return SemVer(self.major, self.minor, self.patch)

    def bump(self, kind: ReleaseKind, identifier: str = "") -> SemVer:
        """Increment following npm ``semver.inc`` rules.

        ``identifier`` only matters for the pre-release kinds; an empty string
        means "no identifier" (``1.2.4-0`` rather than ``1.2.4-beta.0``).

        Raises:
            ValueError: If ``kind`` is not a release kind.
        """
        match kind:
            case "major":
                if self.minor != 0 or self.patch != 0 or not self.is_prerelease:
                    return SemVer(self.major + 1, 0, 0)
                return self.stable()
            case "minor":
                if self.patch != 0 or not self.is_prerelease:
                    return SemVer(self.major, self.minor + 1, 0)
                return self.stable()
            case "patch":
                if not self.is_prerelease:
                    return SemVer(self.major, self.minor, self.patch + 1)
                return self.stable()
            case "premajor":
                return SemVer(self.major + 1, 0, 0)._pre(identifier)
            case "preminor":
                return SemVer(self.major, self.minor + 1, 0)._pre(identifier)
            case "prepatch":
                return SemVer(self.major, self.minor, self.patch + 1)._pre(identifier)
            case "prerelease":
                if not self.is_prerelease:
                    return SemVer(self.major, self.minor, self.patch + 1)._pre(identifier)
                return self._pre(identifier)
            case _:
                raise ValueError(f"unknown release kind: {kind}")

    def _pre(self, identifier: str) -> SemVer:
        ident = identifier or None
        if not self.is_prerelease:
            return SemVer(self.major, self.minor, self.patch, ident, 0)

        number = 0 if self.number is None else self.number + 1
        if ident is not None and ident != self.identifier:
            return SemVer(self.major, self.minor, self.patch, ident, 0)
        return SemVer(self.major, self.minor, self.patch, self.identifier, number)


def parse_version(text: str) -> SemVer | None:
    """Parse ``1.2.3``, ``v1.2.3`` or ``v1.2.3-feature.4``; None if invalid."""
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    major, minor, patch = int(m.group(1)), int(m.group(2)), int(m.group(3))
    pre = m.group(4)
    if pre is None:
        return SemVer(major, minor, patch)

    parts = pre.split(".")
    if parts[-1].isdigit():
        identifier = ".".join(parts[:-1]) or None
        return SemVer(major, minor, patch, identifier, int(parts[-1]))
    return SemVer(major, minor, patch, pre, None)


def inc(version: str, kind: ReleaseKind, identifier: str = "") -> str | None:
    """String form of ``SemVer.bump``; None when ``version`` does not parse."""
    parsed = parse_version(version)
    if parsed is None:
        return None
    return str(parsed.bump(kind, identifier))


def prerelease_identifier(version: str) -> str | None:
    """Identifier of a ``X.Y.Z-identifier.N`` version, e.g. ``feature`` for ``1.0.0-feature.2``."""
    m = _PRERELEASE_ID_RE.match(version.strip())
    return m.group(1) if m else None


def release_kinds_for(prerelease: str) -> tuple[ReleaseKind, ...]:
    """Kinds the user may choose from: pre-release kinds when an identifier is set."""
    return PRERELEASE_KINDS if prerelease else RELEASE_KINDS
