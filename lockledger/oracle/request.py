"""Spreaded-amount requests: SingleQuoteRequest | DoubleQuoteRequest.

The binary flag/offset layout only exists at the boundary (oracle.codec).
Inside the package a request is one of these two variants.

Spread is a fixed-point multiplier over SPREAD_DENOMINATOR (1e9):
1_000_000_000 leaves the oracle price untouched, 990_000_000 gives 1% less.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from lockledger.core.amounts import is_amount
from lockledger.core.types import INT256_MAX, INT256_MIN

INVERSE_FLAG: int = 0x80
DOUBLE_PRICE_FLAG: int = 0x40
RESERVED_FLAGS_MASK: int = 0x3F


@final
@dataclass(frozen=True, slots=True)
class SingleQuoteRequest:
    """One feed. inverse=True prices the other leg of the pair."""

    oracle: str
    spread: int
    inverse: bool = False

    def __post_init__(self) -> None:
        if not self.oracle:
            raise TypeError("SingleQuoteRequest.oracle must be non-empty")
        if not is_amount(self.spread):
            raise TypeError(f"SingleQuoteRequest.spread must be uint256, got {self.spread!r}")

    @property
    def flags(self) -> int:
        return INVERSE_FLAG if self.inverse else 0x00


@final
@dataclass(frozen=True, slots=True)
class DoubleQuoteRequest:
    """Cross rate from two feeds quoted against a common unit.

    decimals_scale shifts the intermediate product by 10**decimals_scale
    (negative divides). It is never inferred from the feeds.
    """

    oracle1: str
    oracle2: str
    decimals_scale: int
    spread: int

    def __post_init__(self) -> None:
        if not self.oracle1 or not self.oracle2:
            raise TypeError("DoubleQuoteRequest oracles must be non-empty")
        if isinstance(self.decimals_scale, bool) or not isinstance(self.decimals_scale, int):
            raise TypeError(
                f"DoubleQuoteRequest.decimals_scale must be int, got {self.decimals_scale!r}"
            )
        if not INT256_MIN <= self.decimals_scale <= INT256_MAX:
            raise TypeError(
                f"DoubleQuoteRequest.decimals_scale must be int256, got {self.decimals_scale}"
            )
        if not is_amount(self.spread):
            raise TypeError(f"DoubleQuoteRequest.spread must be uint256, got {self.spread!r}")

    @property
    def flags(self) -> int:
        return DOUBLE_PRICE_FLAG


type SpreadedAmountRequest = SingleQuoteRequest | DoubleQuoteRequest
