"""Platform adapters: subprocess execution and filesystem access."""

from .files import LocalFileStore, atomic_write_text
from .process import ProcessError, run

__all__ = ["LocalFileStore", "ProcessError", "atomic_write_text", "run"]
