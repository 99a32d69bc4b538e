"""Tests for tagrel.output.console module."""

from __future__ import annotations

import pytest

from tagrel.output.console import MockConsole, RichConsole, Style


class TestMockConsole:
    """Tests for MockConsole."""

    def test_records_prefixed_lines(self) -> None:
        console = MockConsole()
        console.success("tagged v1.0.0")
        console.error("push failed")
        console.warning("no develop branch")
        console.info("cancelled")
        assert console.messages == [
            "OK tagged v1.0.0",
            "error: push failed",
            "warning: no develop branch",
            "info: cancelled",
        ]

    def test_begin_end(self) -> None:
        console = MockConsole()
        console.begin("npm publish")
        console.end()
        assert console.messages == ["npm publish ...", "done"]
        assert all(o.style == Style.DIM for o in console.outputs)

    def test_helpers(self) -> None:
        console = MockConsole()
        console.print("plain")
        console.header("tagrel release")
        console.newline()
        assert not console.has_error()
        assert not console.has_warning()
        console.warning("careful")
        assert console.has_warning()
        assert console.text == "plain\ntagrel release\n\nwarning: careful"
        assert [o.message for o in console.find("care")] == ["warning: careful"]


class TestRichConsole:
    """Tests for RichConsole rendering."""

    def test_markup_in_messages_is_escaped(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.error("[bold]not markup[/bold]")
        out = capsys.readouterr().out
        assert "error:" in out
        assert "[bold]not markup[/bold]" in out

    def test_begin_end(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.begin("git fetch upstream")
        console.end()
        console.end()
        out = capsys.readouterr().out
        assert "git fetch upstream ..." in out
        assert out.count("done") == 1

    def test_quiet(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole(quiet=True)
        console.success("hidden")
        assert capsys.readouterr().out == ""

    def test_style_str(self) -> None:
        assert str(Style.WARNING) == "warning"
