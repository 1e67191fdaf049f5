"""Core types: UtcDatetime, Clock, Address, and uint256 bounds."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import final

from lockledger.core.result import Err, Ok

UINT256_MAX: int = 2**256 - 1
INT256_MIN: int = -(2**255)
INT256_MAX: int = 2**255 - 1


@final
@dataclass(frozen=True, slots=True)
class UtcDatetime:
    """Timezone-aware UTC datetime. Naive datetimes are rejected."""

    value: datetime

    def __post_init__(self) -> None:
        if self.value.tzinfo is None:
            raise TypeError("UtcDatetime requires timezone-aware datetime, got naive")

    @staticmethod
    def parse(raw: datetime) -> Ok[UtcDatetime] | Err[str]:
        """Parse a datetime, rejecting naive (no tzinfo) datetimes."""
        if raw.tzinfo is None:
            return Err("UtcDatetime requires timezone-aware datetime, got naive")
        return Ok(UtcDatetime(value=raw.astimezone(UTC)))

    @staticmethod
    def now() -> UtcDatetime:
        return UtcDatetime(value=datetime.now(tz=UTC))

    @staticmethod
    def from_epoch(seconds: int) -> UtcDatetime:
        """Build from unix seconds, the unit oracle feeds report in."""
        return UtcDatetime(value=datetime.fromtimestamp(seconds, tz=UTC))

    @property
    def epoch(self) -> int:
        return int(self.value.timestamp())

    def shift(self, delta: timedelta) -> UtcDatetime:
        return UtcDatetime(value=self.value + delta)

    def age(self, now: UtcDatetime) -> timedelta:
        """How long before `now` this instant lies (negative if in the future)."""
        return now.value - self.value


type Clock = Callable[[], UtcDatetime]


@final
@dataclass(frozen=True, slots=True)
class Address:
    """20-byte account or oracle address, stored as lowercase 0x-hex."""

    value: str

    def __post_init__(self) -> None:
        if not _is_address(self.value) or self.value != self.value.lower():
            raise TypeError(
                f"Address requires lowercase 0x-prefixed 40 hex chars, got {self.value!r}"
            )

    @staticmethod
    def parse(raw: str) -> Ok[Address] | Err[str]:
        if not _is_address(raw):
            return Err(f"Address requires 0x-prefixed 40 hex chars, got {raw!r}")
        return Ok(Address(value=raw.lower()))

    @staticmethod
    def from_bytes(raw: bytes) -> Ok[Address] | Err[str]:
        if len(raw) != 20:
            return Err(f"Address requires 20 bytes, got {len(raw)}")
        return Ok(Address(value="0x" + raw.hex()))

    def to_bytes(self) -> bytes:
        return bytes.fromhex(self.value[2:])


def _is_address(raw: str) -> bool:
    if len(raw) != 42 or not raw.startswith("0x"):
        return False
    try:
        bytes.fromhex(raw[2:])
    except ValueError:
        return False
    return True
