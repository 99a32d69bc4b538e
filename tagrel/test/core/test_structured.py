from __future__ import annotations

from tagrel.core.structured import as_obj_list, as_str_dict, get_bool, get_int, get_str, get_str_map


def test_as_str_dict() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict({1: "a"}) is None
    assert as_str_dict([]) is None


def test_as_obj_list() -> None:
    assert as_obj_list([1, "a"]) == [1, "a"]
    assert as_obj_list("a") is None


def test_getters() -> None:
    table: dict[str, object] = {"s": "  x ", "blank": " ", "i": 3, "b": True}
    assert get_str(table, "s") == "x"
    assert get_str(table, "blank") is None
    assert get_int(table, "i") == 3
    assert get_int(table, "b") is None
    assert get_bool(table, "b") is True
    assert get_bool(table, "i") is None


def test_get_str_map() -> None:
    data: dict[str, object] = {"dependencies": {"@lk/core": "1.0.0", "bad": 3}}
    assert get_str_map(data, "dependencies") == {"@lk/core": "1.0.0"}
    assert get_str_map(data, "devDependencies") == {}
