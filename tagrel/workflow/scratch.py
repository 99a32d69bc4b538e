"""Records persisted between workflow phases.

``qa`` and ``pr`` can stop halfway (rebase conflicts) and resume in a later
process. What the next phase needs is kept under ``.tagrel/`` in the
repository root and removed by ``clean_up_tmp_files``.
"""

from __future__ import annotations

from tagrel.core.structured import as_obj_list, as_str_dict, get_str

from .ports import FileStore
from .state import Dependency

SCRATCH_DIR = ".tagrel"
STATE_FILE = f"{SCRATCH_DIR}/state.json"
DEPENDENCIES_FILE = f"{SCRATCH_DIR}/dependencies.json"
REBASE_PLAN_FILE = f"{SCRATCH_DIR}/rebase-plan.txt"

SCRATCH_FILES = (STATE_FILE, DEPENDENCIES_FILE, REBASE_PLAN_FILE)


def save_scope(files: FileStore, scope: str) -> None:
    """Raises ``OSError`` when the file cannot be written."""
    files.write_json(STATE_FILE, {"scope": scope})


def load_scope(files: FileStore) -> str | None:
    data = files.read_json(STATE_FILE)
    if data is None:
        return None
    return get_str(data, "scope") or None


def save_dependencies(files: FileStore, dependencies: list[Dependency], change_reason: str) -> None:
    """Raises ``OSError`` when the file cannot be written."""
    files.write_json(
        DEPENDENCIES_FILE,
        {
            "dependencies": [{"name": d.name, "version": d.version} for d in dependencies],
            "changeReason": change_reason,
        },
    )


def load_dependencies(files: FileStore) -> tuple[list[Dependency], str] | None:
    data = files.read_json(DEPENDENCIES_FILE)
    if data is None:
        return None

    deps: list[Dependency] = []
    for item in as_obj_list(data.get("dependencies")) or []:
        entry = as_str_dict(item)
        if entry is None:
            continue
        name = get_str(entry, "name")
        version = get_str(entry, "version")
        if name and version is not None:
            deps.append(Dependency(name=name, version=version))
    return deps, get_str(data, "changeReason") or ""


def clear(files: FileStore) -> None:
    for path in SCRATCH_FILES:
        files.delete(path)
