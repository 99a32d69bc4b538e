"""Process exit codes for tagrel commands.

These values are used as shell exit codes and should remain stable:
- 0: Success (including a run the user cancelled on purpose)
- 1: User error (bad option, declined input, advisory stop)
- 2: Environment error (missing tool, missing package.json, bad config)
- 3: Git error (merge/rebase/push failed)
- 4: Network error (GitHub API unreachable or refused)
- 5: I/O error (file could not be read or written)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    GIT_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
