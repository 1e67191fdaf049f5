"""Token amounts, refined string/integer types and checked uint256 arithmetic.

Amounts are integers in the asset's smallest unit. Division is floor
division. Every intermediate result is bounded by UINT256_MAX so that no
computation yields a number the settlement chain could not represent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from lockledger.core.result import Err, Ok
from lockledger.core.types import UINT256_MAX


def is_amount(raw: object) -> bool:
    """True for a plain int in [0, UINT256_MAX]. bool is not an amount."""
    return isinstance(raw, int) and not isinstance(raw, bool) and 0 <= raw <= UINT256_MAX


# --- Refined types ---


@final
@dataclass(frozen=True, slots=True)
class PositiveAmount:
    """Integer amount constrained to 0 < value <= UINT256_MAX."""

    value: int

    def __post_init__(self) -> None:
        if not is_amount(self.value) or self.value == 0:
            raise TypeError(f"PositiveAmount requires uint256 > 0, got {self.value!r}")

    @staticmethod
    def parse(raw: object) -> Ok[PositiveAmount] | Err[str]:
        if not isinstance(raw, int) or isinstance(raw, bool):
            return Err(f"PositiveAmount requires int, got {type(raw).__name__}")
        if raw <= 0:
            return Err(f"PositiveAmount requires > 0, got {raw}")
        if raw > UINT256_MAX:
            return Err(f"PositiveAmount exceeds uint256, got {raw}")
        return Ok(PositiveAmount(value=raw))


@final
@dataclass(frozen=True, slots=True)
class NonEmptyStr:
    """String constrained to be non-empty (after stripping whitespace)."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise TypeError("NonEmptyStr requires non-empty string")

    @staticmethod
    def parse(raw: object) -> Ok[NonEmptyStr] | Err[str]:
        if not isinstance(raw, str):
            return Err(f"NonEmptyStr requires str, got {type(raw).__name__}")
        if not raw.strip():
            return Err("NonEmptyStr requires non-empty string")
        return Ok(NonEmptyStr(value=raw))


# --- Checked arithmetic ---


def checked_mul(a: int, b: int) -> Ok[int] | Err[str]:
    product = a * b
    if product > UINT256_MAX:
        return Err(f"{a} * {b} overflows uint256")
    return Ok(product)


def pow10(exponent: int) -> Ok[int] | Err[str]:
    """10**exponent for exponent >= 0, bounded by uint256 (10**77 is the largest)."""
    if exponent < 0:
        return Err(f"negative exponent {exponent}")
    if exponent > 77:
        return Err(f"10**{exponent} overflows uint256")
    return Ok(10**exponent)


def checked_div(a: int, b: int) -> Ok[int] | Err[str]:
    """Floor division; a zero divisor is an Err, never ZeroDivisionError."""
    if b == 0:
        return Err(f"{a} / 0")
    return Ok(a // b)
