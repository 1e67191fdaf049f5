"""Tests for lockledger.oracle.calculator — spreaded settlement amounts."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lockledger.core.errors import (
    AmountOverflow,
    InvalidAmount,
    InvalidQuote,
    MalformedRequest,
    MismatchedOracleDecimals,
    StaleQuote,
)
from lockledger.core.result import Err, Ok, unwrap
from lockledger.core.types import UINT256_MAX, UtcDatetime
from lockledger.infra.config import OracleConfig
from lockledger.infra.memory_adapter import InMemoryQuoteSource
from lockledger.oracle.calculator import OracleAmountCalculator
from lockledger.oracle.codec import encode_request
from lockledger.oracle.quote import OracleQuote
from lockledger.oracle.request import DoubleQuoteRequest, SingleQuoteRequest

_NOW = UtcDatetime(value=datetime(2025, 6, 15, 12, 0, tzinfo=UTC))
_D = 10**9
_ETH_DAI = "0x" + "aa" * 20
_ETH_USD = "0x" + "bb" * 20
_DAI_USD = "0x" + "cc" * 20

# 0.00025 ETH per DAI at 18 decimals
_PRICE = 250_000_000_000_000


def _quote(
    oracle: str, price: int, decimals: int = 18, age: timedelta = timedelta(0),
) -> OracleQuote:
    return OracleQuote(oracle=oracle, price=price, decimals=decimals, updated_at=_NOW.shift(-age))


def _calc(*quotes: OracleQuote, config: OracleConfig | None = None) -> OracleAmountCalculator:
    return OracleAmountCalculator(InMemoryQuoteSource(*quotes), config, clock=lambda: _NOW)


def _err_type(result: object) -> type:
    assert isinstance(result, Err)
    return type(result.error)


# ---------------------------------------------------------------------------
# Single-quote mode
# ---------------------------------------------------------------------------


class TestSingleQuote:
    def test_direct_4000_dai_is_1_eth(self) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE))
        req = SingleQuoteRequest(oracle=_ETH_DAI, spread=_D)
        assert calc.compute_amount(req, 4000 * 10**18) == Ok(10**18)

    def test_inverse_1_eth_is_4000_dai(self) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE))
        req = SingleQuoteRequest(oracle=_ETH_DAI, spread=_D, inverse=True)
        assert calc.compute_amount(req, 10**18) == Ok(4000 * 10**18)

    def test_spread_discount(self) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE))
        req = SingleQuoteRequest(oracle=_ETH_DAI, spread=990_000_000)
        assert calc.compute_amount(req, 4000 * 10**18) == Ok(990_000_000_000_000_000)

    def test_floor_division(self) -> None:
        calc = _calc(_quote(_ETH_DAI, 3, decimals=0))
        req = SingleQuoteRequest(oracle=_ETH_DAI, spread=_D, inverse=True)
        assert calc.compute_amount(req, 10) == Ok(3)

    def test_zero_amount_is_zero(self) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE))
        req = SingleQuoteRequest(oracle=_ETH_DAI, spread=_D)
        assert calc.compute_amount(req, 0) == Ok(0)

    @given(st.integers(min_value=1, max_value=10**6))
    def test_direct_and_inverse_are_reciprocal(self, units: int) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE))
        direct = SingleQuoteRequest(oracle=_ETH_DAI, spread=_D)
        inverse = SingleQuoteRequest(oracle=_ETH_DAI, spread=_D, inverse=True)
        eth = unwrap(calc.compute_amount(direct, units * 4000 * 10**18))
        assert eth == units * 10**18
        assert calc.compute_amount(inverse, eth) == Ok(units * 4000 * 10**18)


# ---------------------------------------------------------------------------
# Double-quote mode
# ---------------------------------------------------------------------------


class TestDoubleQuote:
    def test_cross_rate(self) -> None:
        calc = _calc(_quote(_ETH_USD, 2000 * 10**8, 8), _quote(_DAI_USD, 10**8, 8))
        req = DoubleQuoteRequest(oracle1=_ETH_USD, oracle2=_DAI_USD, decimals_scale=0, spread=_D)
        assert calc.compute_amount(req, 10**18) == Ok(2000 * 10**18)

    def test_negative_scale_divides(self) -> None:
        calc = _calc(_quote(_ETH_USD, 2000 * 10**8, 8), _quote(_DAI_USD, 10**8, 8))
        req = DoubleQuoteRequest(oracle1=_ETH_USD, oracle2=_DAI_USD, decimals_scale=-12, spread=_D)
        assert calc.compute_amount(req, 10**18) == Ok(2000 * 10**6)

    def test_positive_scale_multiplies(self) -> None:
        calc = _calc(_quote(_ETH_USD, 2000 * 10**8, 8), _quote(_DAI_USD, 10**8, 8))
        req = DoubleQuoteRequest(oracle1=_ETH_USD, oracle2=_DAI_USD, decimals_scale=12, spread=_D)
        assert calc.compute_amount(req, 10**6) == Ok(2000 * 10**18)

    def test_spread_applied_after_division(self) -> None:
        calc = _calc(_quote(_ETH_USD, 3, 0), _quote(_DAI_USD, 2, 0))
        req = DoubleQuoteRequest(
            oracle1=_ETH_USD, oracle2=_DAI_USD, decimals_scale=0, spread=500_000_000,
        )
        # 1 * 3 // 2 = 1, then * 0.5 -> 0
        assert calc.compute_amount(req, 1) == Ok(0)

    def test_mismatched_decimals(self) -> None:
        calc = _calc(_quote(_ETH_USD, 2000 * 10**18, 18), _quote(_DAI_USD, 10**6, 6))
        req = DoubleQuoteRequest(oracle1=_ETH_USD, oracle2=_DAI_USD, decimals_scale=0, spread=_D)
        assert _err_type(calc.compute_amount(req, 10**18)) is MismatchedOracleDecimals

    @given(st.integers(min_value=0, max_value=10**30), st.integers(min_value=0, max_value=2 * _D))
    def test_mismatch_regardless_of_amount_and_spread(self, amount: int, spread: int) -> None:
        calc = _calc(
            _quote(_ETH_USD, 0, 18, age=timedelta(hours=9)), _quote(_DAI_USD, 10**6, 6),
        )
        req = DoubleQuoteRequest(
            oracle1=_ETH_USD, oracle2=_DAI_USD, decimals_scale=0, spread=spread,
        )
        assert _err_type(calc.compute_amount(req, amount)) is MismatchedOracleDecimals

    def test_stale_second_quote(self) -> None:
        calc = _calc(
            _quote(_ETH_USD, 2000 * 10**8, 8),
            _quote(_DAI_USD, 10**8, 8, age=timedelta(hours=5)),
        )
        req = DoubleQuoteRequest(oracle1=_ETH_USD, oracle2=_DAI_USD, decimals_scale=0, spread=_D)
        assert _err_type(calc.compute_amount(req, 10**18)) is StaleQuote

    def test_zero_second_price(self) -> None:
        calc = _calc(_quote(_ETH_USD, 2000 * 10**8, 8), _quote(_DAI_USD, 0, 8))
        req = DoubleQuoteRequest(oracle1=_ETH_USD, oracle2=_DAI_USD, decimals_scale=0, spread=_D)
        assert _err_type(calc.compute_amount(req, 10**18)) is InvalidQuote


# ---------------------------------------------------------------------------
# Quote validity
# ---------------------------------------------------------------------------


class TestQuoteValidity:
    def test_five_hour_old_quote_is_stale(self) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE, age=timedelta(hours=5)))
        for inverse in (False, True):
            req = SingleQuoteRequest(oracle=_ETH_DAI, spread=_D, inverse=inverse)
            assert _err_type(calc.compute_amount(req, 10**18)) is StaleQuote

    def test_configured_ttl(self) -> None:
        calc = _calc(
            _quote(_ETH_DAI, _PRICE, age=timedelta(minutes=11)),
            config=OracleConfig(quote_ttl=timedelta(minutes=10)),
        )
        req = SingleQuoteRequest(oracle=_ETH_DAI, spread=_D)
        assert _err_type(calc.compute_amount(req, 10**18)) is StaleQuote

    @pytest.mark.parametrize("inverse", [False, True])
    def test_zero_price_is_invalid_not_a_crash(self, inverse: bool) -> None:
        calc = _calc(_quote(_ETH_DAI, 0))
        req = SingleQuoteRequest(oracle=_ETH_DAI, spread=_D, inverse=inverse)
        assert _err_type(calc.compute_amount(req, 10**18)) is InvalidQuote

    def test_unknown_oracle(self) -> None:
        calc = _calc()
        result = calc.compute_amount(SingleQuoteRequest(oracle=_ETH_DAI, spread=_D), 1)
        assert isinstance(result, Err)
        assert result.error.code == "UNKNOWN_ORACLE"


# ---------------------------------------------------------------------------
# Amount validity and overflow
# ---------------------------------------------------------------------------


class TestAmounts:
    @pytest.mark.parametrize("amount", [-1, UINT256_MAX + 1, True])
    def test_invalid_base_amount(self, amount: int) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE))
        req = SingleQuoteRequest(oracle=_ETH_DAI, spread=_D)
        assert _err_type(calc.compute_amount(req, amount)) is InvalidAmount

    def test_overflow_is_reported(self) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE))
        req = SingleQuoteRequest(oracle=_ETH_DAI, spread=_D)
        assert _err_type(calc.compute_amount(req, UINT256_MAX)) is AmountOverflow

    def test_scale_beyond_uint256_overflows(self) -> None:
        calc = _calc(_quote(_ETH_USD, 1, 8), _quote(_DAI_USD, 1, 8))
        req = DoubleQuoteRequest(oracle1=_ETH_USD, oracle2=_DAI_USD, decimals_scale=78, spread=_D)
        assert _err_type(calc.compute_amount(req, 1)) is AmountOverflow

    def test_large_negative_scale_overflows_power(self) -> None:
        calc = _calc(_quote(_ETH_USD, 1, 8), _quote(_DAI_USD, 1, 8))
        req = DoubleQuoteRequest(
            oracle1=_ETH_USD, oracle2=_DAI_USD, decimals_scale=-100, spread=_D,
        )
        assert _err_type(calc.compute_amount(req, 1)) is AmountOverflow


# ---------------------------------------------------------------------------
# Encoded entry points
# ---------------------------------------------------------------------------


class TestEncodedRequests:
    def test_get_spreaded_amount_decodes(self) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE))
        blob = unwrap(encode_request(SingleQuoteRequest(oracle=_ETH_DAI, spread=_D)))
        assert calc.get_spreaded_amount(4000 * 10**18, blob) == Ok(10**18)

    def test_making_and_taking_agree(self) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE))
        blob = unwrap(encode_request(SingleQuoteRequest(oracle=_ETH_DAI, spread=_D)))
        assert calc.get_making_amount(4000 * 10**18, blob) == calc.get_taking_amount(
            4000 * 10**18, blob,
        )

    def test_malformed_blob(self) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE))
        assert _err_type(calc.get_spreaded_amount(1, b"\x00" * 10)) is MalformedRequest

    def test_lax_config_accepts_reserved_bits(self) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE), config=OracleConfig(strict_reserved_flags=False))
        blob = bytearray(unwrap(encode_request(SingleQuoteRequest(oracle=_ETH_DAI, spread=_D))))
        blob[0] |= 0x01
        assert calc.get_spreaded_amount(4000 * 10**18, bytes(blob)) == Ok(10**18)

    def test_repeated_calls_are_identical(self) -> None:
        calc = _calc(_quote(_ETH_DAI, _PRICE))
        blob = unwrap(encode_request(SingleQuoteRequest(oracle=_ETH_DAI, spread=_D)))
        assert calc.get_spreaded_amount(123, blob) == calc.get_spreaded_amount(123, blob)
