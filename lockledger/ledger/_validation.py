"""Shared validation helpers for ledger operations.

Reduces the ~10-line error-construction pattern to a 1-liner.
"""

from __future__ import annotations

from lockledger.core.amounts import NonEmptyStr, PositiveAmount
from lockledger.core.errors import (
    InsufficientLockedBalance,
    InvalidAmount,
    InvalidAsset,
    InvalidOwner,
    LockNotFound,
    PersistenceError,
)
from lockledger.core.result import Err, Ok
from lockledger.core.types import UtcDatetime


def parse_amount(
    value: object,
    field_name: str,
    timestamp: UtcDatetime,
    source: str,
) -> Ok[int] | Err[InvalidAmount]:
    """Parse a uint256 > 0, wrapping errors as InvalidAmount."""
    match PositiveAmount.parse(value):
        case Err(pe):
            return Err(InvalidAmount(
                message=f"{field_name}: {pe}",
                code="INVALID_AMOUNT",
                timestamp=timestamp, source=source,
                field=field_name, actual=repr(value),
            ))
        case Ok(pa):
            return Ok(pa.value)


def parse_owner(
    value: object, timestamp: UtcDatetime, source: str,
) -> Ok[str] | Err[InvalidOwner]:
    match NonEmptyStr.parse(value):
        case Err(pe):
            return Err(InvalidOwner(
                message=f"owner: {pe}", code="INVALID_OWNER",
                timestamp=timestamp, source=source, actual=repr(value),
            ))
        case Ok(s):
            return Ok(s.value)


def parse_asset(
    value: object, timestamp: UtcDatetime, source: str,
) -> Ok[str] | Err[InvalidAsset]:
    match NonEmptyStr.parse(value):
        case Err(pe):
            return Err(InvalidAsset(
                message=f"asset: {pe}", code="INVALID_ASSET",
                timestamp=timestamp, source=source, actual=repr(value),
            ))
        case Ok(s):
            return Ok(s.value)


def not_found(
    lock_id: int, timestamp: UtcDatetime, source: str,
) -> Err[LockNotFound]:
    return Err(LockNotFound(
        message=f"No active lock with id {lock_id}",
        code="LOCK_NOT_FOUND",
        timestamp=timestamp, source=source, lock_id=lock_id,
    ))


def insufficient(
    requested: int, available: int, timestamp: UtcDatetime, source: str,
) -> Err[InsufficientLockedBalance]:
    return Err(InsufficientLockedBalance(
        message=f"Requested {requested}, only {available} available",
        code="INSUFFICIENT_LOCKED_BALANCE",
        timestamp=timestamp, source=source,
        requested=requested, available=available,
    ))


def persistence_err(
    operation: str, detail: str, timestamp: UtcDatetime, source: str,
) -> Err[PersistenceError]:
    return Err(PersistenceError(
        message=f"{operation}: {detail}", code="PERSISTENCE_ERROR",
        timestamp=timestamp, source=source, operation=operation,
    ))
