"""Tests for lockledger.core.result — Ok/Err error values."""

from __future__ import annotations

import dataclasses

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lockledger.core.result import Err, Ok, unwrap


class TestOkErr:
    def test_ok_holds_value(self) -> None:
        assert Ok(42).value == 42
        assert Ok(42).is_ok

    def test_err_holds_error(self) -> None:
        assert Err("fail").error == "fail"
        assert not Err("fail").is_ok

    def test_ok_is_frozen(self) -> None:
        ok = Ok(42)
        with pytest.raises(dataclasses.FrozenInstanceError):
            ok.value = 99  # type: ignore[misc]

    def test_pattern_match(self) -> None:
        match Err("boom"):
            case Ok(_):
                pytest.fail("Should match Err")
            case Err(e):
                assert e == "boom"


class TestCombinators:
    def test_map_ok(self) -> None:
        assert Ok(2).map(lambda x: x * 3) == Ok(6)

    def test_map_err_passthrough(self) -> None:
        assert Err("e").map(lambda x: x * 3) == Err("e")

    def test_bind_chains(self) -> None:
        assert Ok(10).bind(lambda x: Ok(x + 1)) == Ok(11)
        assert Ok(10).bind(lambda x: Err(f"bad {x}")) == Err("bad 10")

    def test_bind_short_circuits(self) -> None:
        called: list[int] = []
        Err("e").bind(lambda x: called.append(x) or Ok(x))
        assert called == []

    def test_map_err_transforms_only_err(self) -> None:
        assert Err("e").map_err(str.upper) == Err("E")
        assert Ok(1).map_err(str.upper) == Ok(1)

    def test_unwrap_err_raises(self) -> None:
        with pytest.raises(RuntimeError, match="unwrap"):
            unwrap(Err("nope"))
        with pytest.raises(RuntimeError):
            Err("nope").unwrap()


class TestLaws:
    @given(st.integers())
    def test_unwrap_of_ok_is_value(self, x: int) -> None:
        assert unwrap(Ok(x)) == x

    @given(st.integers())
    def test_bind_ok_is_map(self, x: int) -> None:
        assert Ok(x).bind(lambda v: Ok(v * 2)) == Ok(x).map(lambda v: v * 2)
