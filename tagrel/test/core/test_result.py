"""Tests for tagrel.core.result module."""

import pytest

from tagrel.core.result import Err, Ok, Result, is_err, is_ok


class TestOk:
    """Tests for Ok type."""

    def test_value(self) -> None:
        result = Ok(42)
        assert result.value == 42
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42
        assert Ok(42).unwrap_or(0) == 42

    def test_map(self) -> None:
        """Ok.map() transforms the value."""
        assert Ok(21).map(lambda x: x * 2) == Ok(42)

    def test_map_err_is_noop(self) -> None:
        result = Ok(42)
        assert result.map_err(lambda e: f"wrapped: {e}") is result

    def test_repr(self) -> None:
        assert repr(Ok("v1.0.0")) == "Ok('v1.0.0')"


class TestErr:
    """Tests for Err type."""

    def test_error(self) -> None:
        result = Err("boom")
        assert result.error == "boom"
        assert result.is_ok() is False
        assert result.is_err() is True

    def test_unwrap_raises(self) -> None:
        """Err.unwrap() raises ValueError."""
        with pytest.raises(ValueError, match="called unwrap on Err"):
            Err("boom").unwrap()

    def test_unwrap_or(self) -> None:
        assert Err("boom").unwrap_or(7) == 7

    def test_map_is_noop(self) -> None:
        result = Err("boom")
        assert result.map(lambda x: x * 2) is result

    def test_map_err(self) -> None:
        assert Err("boom").map_err(lambda e: e.upper()) == Err("BOOM")


class TestTypeGuards:
    """Tests for is_ok/is_err."""

    def test_guards(self) -> None:
        ok: Result[int, str] = Ok(1)
        err: Result[int, str] = Err("x")
        assert is_ok(ok) and not is_err(ok)
        assert is_err(err) and not is_ok(err)

    def test_match(self) -> None:
        """Results destructure with match."""
        result: Result[int, str] = Err("nope")
        match result:
            case Ok(value):
                seen = f"ok {value}"
            case Err(error):
                seen = f"err {error}"
        assert seen == "err nope"
