"""Release domain helpers: versions, tags, commit logs, changelog, conflicts.

Everything here is pure; the workflow steps feed it data read through the
collaborators.
"""

from .commits import CommitRecord, build_change_log, build_rebase_plan, parse_commit_log, select_log_baseline
from .conflicts import ConflictBlock, ConflictResolution, ResolutionNote, resolve_conflicts
from .semver import PRERELEASE_KINDS, RELEASE_KINDS, ReleaseKind, SemVer, inc, parse_version
from .tags import NoStableTag, VersionTagSet

__all__ = [
    "CommitRecord",
    "ConflictBlock",
    "ConflictResolution",
    "NoStableTag",
    "PRERELEASE_KINDS",
    "RELEASE_KINDS",
    "ReleaseKind",
    "ResolutionNote",
    "SemVer",
    "VersionTagSet",
    "build_change_log",
    "build_rebase_plan",
    "inc",
    "parse_commit_log",
    "parse_version",
    "resolve_conflicts",
    "select_log_baseline",
]
