"""Terminal ``Prompter`` built on typer's prompt helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import typer

from tagrel.output.console import ConsoleProtocol, Style
from tagrel.workflow.ports import Answer, Choice, Question


class TyperPrompter:
    """Ask questions one at a time on the terminal.

    ``list`` and ``checkbox`` questions print numbered choices; a checkbox
    answer is a comma-separated list of numbers (empty selects nothing).
    """

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def ask(self, questions: Sequence[Question]) -> Mapping[str, Answer]:
        answers: dict[str, Answer] = {}
        for question in questions:
            answers[question.name] = self._ask_one(question)
        return answers

    def edit(self, text: str) -> str:
        edited = typer.edit(text)
        return text if edited is None else edited

    def _ask_one(self, question: Question) -> Answer:
        match question.kind:
            case "confirm":
                default = question.default if isinstance(question.default, bool) else True
                return typer.confirm(question.message, default=default)
            case "list":
                return self._pick(question)
            case "checkbox":
                return self._pick_many(question)
            case _:
                return self._input(question)

    def _input(self, question: Question) -> str:
        default = question.default if isinstance(question.default, str) else None
        while True:
            value: str = typer.prompt(question.message, default=default or "", show_default=bool(default))
            if question.validate is None or question.validate(value):
                return value
            self._console.warning("please enter a value")

    def _show_choices(self, question: Question) -> None:
        self._console.print(question.message, Style.BOLD)
        for i, choice in enumerate(question.choices, start=1):
            self._console.print(f"  {i}) {choice.label}")

    def _pick(self, question: Question) -> str:
        if not question.choices:
            return self._input(question)

        self._show_choices(question)
        while True:
            raw: str = typer.prompt("Choice", default="1")
            choice = _choice_at(question.choices, raw)
            if choice is not None:
                return choice.value
            self._console.warning(f"enter a number between 1 and {len(question.choices)}")

    def _pick_many(self, question: Question) -> list[str]:
        if not question.choices:
            return []

        self._show_choices(question)
        while True:
            raw: str = typer.prompt("Choices (comma separated)", default="", show_default=False)
            picked = [_choice_at(question.choices, part) for part in raw.split(",") if part.strip()]
            if all(c is not None for c in picked):
                return [c.value for c in picked if c is not None]
            self._console.warning(f"enter numbers between 1 and {len(question.choices)}")


def _choice_at(choices: Sequence[Choice], raw: str) -> Choice | None:
    try:
        index = int(raw.strip())
    except ValueError:
        return None
    if 1 <= index <= len(choices):
        return choices[index - 1]
    return None
