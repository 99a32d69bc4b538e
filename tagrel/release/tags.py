"""Semantic-version aware views over a repository's tag list."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from tagrel.core.result import Err, Ok, Result

from .semver import SemVer, parse_version


@dataclass(frozen=True, slots=True)
class NoStableTag:
    """No stable ``vX.Y.Z`` tag exists; callers use ``0.0.0`` as the baseline."""

    message: str = "no stable release tag found"


class VersionTagSet:
    """An unordered collection of tag strings.

    Strings that are not version tags (``latest``, ``release-2020``) are
    ignored. The original spelling of each tag is preserved in results.
    """

    def __init__(self, tags: Iterable[str]) -> None:
        parsed: list[tuple[SemVer, str]] = []
        for raw in tags:
            tag = raw.strip()
            version = parse_version(tag)
            if version is not None:
                parsed.append((version, tag))
        parsed.sort(key=lambda item: item[0].sort_key)
        self._tags = parsed

    def __iter__(self) -> Iterator[str]:
        return (tag for _, tag in self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def stable(self) -> tuple[str, ...]:
        """Stable tags, ascending."""
        return tuple(tag for v, tag in self._tags if not v.is_prerelease)

    def prereleases(self) -> tuple[str, ...]:
        """Pre-release tags, ascending."""
        return tuple(tag for v, tag in self._tags if v.is_prerelease)

    def latest_stable(self, limit: int | None = None) -> Result[tuple[str, ...], NoStableTag]:
        """Stable tags ascending, keeping only the most recent ``limit``."""
        tags = self.stable()
        if not tags:
            return Err(NoStableTag())
        if limit is not None:
            tags = tags[-limit:] if limit > 0 else ()
        return Ok(tags)

    def latest_per_identifier(self, limit: int) -> tuple[str, ...]:
        """Highest pre-release tag for each identifier, newest first.

        Example: ``v18.0.0-robert.0``, ``v18.0.0-robert.1``, ``v17.12.0-break.0``
        and ``v17.12.0-break.1`` give ``("v18.0.0-robert.1", "v17.12.0-break.1")``.
        """
        best: dict[str, tuple[SemVer, str]] = {}
        for version, tag in self._tags:
            if not version.is_prerelease:
                continue
            key = version.identifier or ""
            current = best.get(key)
            if current is None or current[0] < version:
                best[key] = (version, tag)

        ordered = sorted(best.values(), key=lambda item: item[0].sort_key, reverse=True)
        return tuple(tag for _, tag in ordered[: max(limit, 0)])
