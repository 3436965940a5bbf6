"""Tests for gplay.core.structured helpers."""

from __future__ import annotations

from gplay.core.structured import (
    as_obj_list,
    as_str_dict,
    get_float,
    get_int,
    get_list,
    get_str,
    get_table,
    is_str_dict,
)


class TestStrDict:
    def test_str_keys(self) -> None:
        assert is_str_dict({"a": 1}) is True
        assert as_str_dict({"a": 1}) == {"a": 1}

    def test_non_str_keys(self) -> None:
        assert is_str_dict({1: "a"}) is False
        assert as_str_dict({1: "a"}) is None

    def test_not_a_dict(self) -> None:
        assert as_str_dict(["a"]) is None


class TestGetters:
    def test_get_str_strips(self) -> None:
        assert get_str({"track": "  beta "}, "track") == "beta"

    def test_get_str_empty_is_none(self) -> None:
        assert get_str({"track": "   "}, "track") is None
        assert get_str({"track": 3}, "track") is None
        assert get_str({}, "track") is None

    def test_get_int_accepts_decimal_strings(self) -> None:
        """Version codes arrive as JSON strings."""
        assert get_int({"versionCode": "42"}, "versionCode") == 42
        assert get_int({"versionCode": 42}, "versionCode") == 42

    def test_get_int_rejects_bool_and_garbage(self) -> None:
        assert get_int({"n": True}, "n") is None
        assert get_int({"n": "4x"}, "n") is None
        assert get_int({"n": 1.5}, "n") is None

    def test_get_float(self) -> None:
        assert get_float({"t": 5}, "t") == 5.0
        assert get_float({"t": 2.5}, "t") == 2.5
        assert get_float({"t": False}, "t") is None
        assert get_float({"t": "5"}, "t") is None

    def test_get_table(self) -> None:
        assert get_table({"auth": {"x": 1}}, "auth") == {"x": 1}
        assert get_table({"auth": 1}, "auth") is None

    def test_get_list(self) -> None:
        assert get_list({"tracks": [1, 2]}, "tracks") == [1, 2]
        assert get_list({"tracks": "x"}, "tracks") is None
        assert as_obj_list(None) is None
