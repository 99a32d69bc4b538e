"""Adapters for external services (GitHub, npm)."""

from .github import GhHost, HostError, PullRequest, RepoDetails
from .npm import NpmPackageManager, PackageError

__all__ = [
    "GhHost",
    "HostError",
    "NpmPackageManager",
    "PackageError",
    "PullRequest",
    "RepoDetails",
]
