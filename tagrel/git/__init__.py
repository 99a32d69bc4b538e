"""Git operations."""

from .repository import GitError, GitRepository, GitStatus, StatusEntry

__all__ = [
    "GitError",
    "GitRepository",
    "GitStatus",
    "StatusEntry",
]
