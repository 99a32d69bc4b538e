from __future__ import annotations

import pytest

from tagrel.cli import prompter as prompter_mod
from tagrel.cli.prompter import TyperPrompter
from tagrel.output.console import MockConsole
from tagrel.workflow.ports import Question, choices_of


def _script(monkeypatch: pytest.MonkeyPatch, replies: list[str]) -> list[str]:
    prompts: list[str] = []

    def fake_prompt(text: str, **_: object) -> str:
        prompts.append(text)
        return replies.pop(0)

    monkeypatch.setattr(prompter_mod.typer, "prompt", fake_prompt)
    return prompts


def test_confirm_uses_default(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    def fake_confirm(text: str, default: bool = False) -> bool:
        seen["default"] = default
        return False

    monkeypatch.setattr(prompter_mod.typer, "confirm", fake_confirm)
    answers = TyperPrompter(MockConsole()).ask([Question(kind="confirm", name="log", message="Edit?", default=False)])
    assert answers == {"log": False}
    assert seen["default"] is False


def test_input_revalidates(monkeypatch: pytest.MonkeyPatch) -> None:
    _script(monkeypatch, ["  ", "Add login"])
    console = MockConsole()
    question = Question(kind="input", name="changeReason", message="Why?", validate=lambda s: bool(s.strip()))
    assert TyperPrompter(console).ask([question]) == {"changeReason": "Add login"}
    assert console.has_warning()


def test_list_picks_by_number(monkeypatch: pytest.MonkeyPatch) -> None:
    prompts = _script(monkeypatch, ["7", "2"])
    console = MockConsole()
    question = Question(kind="list", name="release", message="Release kind?", choices=choices_of(["major", "minor"]))
    assert TyperPrompter(console).ask([question]) == {"release": "minor"}
    assert prompts == ["Choice", "Choice"]
    assert console.messages[:3] == ["Release kind?", "  1) major", "  2) minor"]
    assert console.find("warning: enter a number between 1 and 2")


def test_list_without_choices_is_free_text(monkeypatch: pytest.MonkeyPatch) -> None:
    _script(monkeypatch, ["1.2.0"])
    question = Question(kind="list", name="tag", message="Update core to:")
    assert TyperPrompter(MockConsole()).ask([question]) == {"tag": "1.2.0"}


def test_checkbox(monkeypatch: pytest.MonkeyPatch) -> None:
    _script(monkeypatch, ["1, 3", ""])
    question = Question(kind="checkbox", name="packagesToPromote", message="Which?", choices=choices_of(["a", "b", "c"]))
    prompter = TyperPrompter(MockConsole())
    assert prompter.ask([question]) == {"packagesToPromote": ["a", "c"]}
    assert prompter.ask([question]) == {"packagesToPromote": []}


def test_edit_keeps_text_when_editor_is_closed_unsaved(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(prompter_mod.typer, "edit", lambda text: None)
    assert TyperPrompter(MockConsole()).edit("* Add login") == "* Add login"
    monkeypatch.setattr(prompter_mod.typer, "edit", lambda text: "* Edited\n")
    assert TyperPrompter(MockConsole()).edit("* Add login") == "* Edited\n"
