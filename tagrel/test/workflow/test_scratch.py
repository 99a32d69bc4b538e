from __future__ import annotations

from pathlib import Path

from tagrel.platform.files import LocalFileStore
from tagrel.workflow import scratch
from tagrel.workflow.state import Dependency


def test_scope_round_trip(tmp_path: Path) -> None:
    files = LocalFileStore(tmp_path)
    assert scratch.load_scope(files) is None
    scratch.save_scope(files, "@lk")
    assert scratch.load_scope(files) == "@lk"
    assert (tmp_path / ".tagrel" / "state.json").is_file()


def test_dependencies_file_layout(tmp_path: Path) -> None:
    files = LocalFileStore(tmp_path)
    scratch.save_dependencies(files, [Dependency("core", "1.2.0")], "Add login")
    assert files.read_json(scratch.DEPENDENCIES_FILE) == {
        "dependencies": [{"name": "core", "version": "1.2.0"}],
        "changeReason": "Add login",
    }


def test_malformed_entries_are_skipped(tmp_path: Path) -> None:
    files = LocalFileStore(tmp_path)
    files.write_json(
        scratch.DEPENDENCIES_FILE,
        {"dependencies": [{"name": "core", "version": "1.2.0"}, {"version": "1.0.0"}, "ui"]},
    )
    assert scratch.load_dependencies(files) == ([Dependency("core", "1.2.0")], "")


def test_clear_removes_every_scratch_file(tmp_path: Path) -> None:
    files = LocalFileStore(tmp_path)
    scratch.save_scope(files, "@lk")
    files.write_text(scratch.REBASE_PLAN_FILE, "pick abc1234 Add login\n")
    scratch.clear(files)
    scratch.clear(files)
    assert not any(files.exists(p) for p in scratch.SCRATCH_FILES)
