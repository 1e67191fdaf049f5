"""Error value hierarchy — no domain function raises exceptions.

Every error is a frozen dataclass value that can be pattern-matched,
serialized and logged. Base class LockLedgerError, six category bases
(not final), and @final leaf errors carrying the context a caller needs
to decide what to do next.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import ClassVar, final

from lockledger.core.types import UtcDatetime


@dataclass(frozen=True, slots=True)
class LockLedgerError:
    """Base error value. NOT @final — has subclasses."""

    message: str
    code: str
    timestamp: UtcDatetime
    source: str  # "module.function" that produced this error

    retryable: ClassVar[bool] = False

    def with_context(self, context: str) -> LockLedgerError:
        """Return a copy with context prepended to message."""
        return replace(self, message=f"{context}: {self.message}")

    def to_dict(self) -> dict[str, object]:
        """Serialize to dict with stable keys."""
        return {
            "message": self.message,
            "code": self.code,
            "timestamp": self.timestamp.value.isoformat(),
            "source": self.source,
        }


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class InputError(LockLedgerError):
    """Caller error. Never retried automatically."""


@dataclass(frozen=True, slots=True)
class FreshnessError(LockLedgerError):
    """Data too old. A later call may succeed once the feed updates."""

    retryable: ClassVar[bool] = True


@dataclass(frozen=True, slots=True)
class AccountingError(LockLedgerError):
    """Escrow bookkeeping refused the operation."""


@dataclass(frozen=True, slots=True)
class AuthorizationError(LockLedgerError):
    """Terminal for the claim. A new claim must be signed."""


@dataclass(frozen=True, slots=True)
class IntegrityError(LockLedgerError):
    """Misconfigured oracle pairing or unrepresentable arithmetic."""


@dataclass(frozen=True, slots=True)
class InfrastructureError(LockLedgerError):
    """An external collaborator (store, custody, bus) failed."""

    retryable: ClassVar[bool] = True


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class InvalidAmount(InputError):
    field: str
    actual: str

    def to_dict(self) -> dict[str, object]:
        return {**LockLedgerError.to_dict(self), "field": self.field, "actual": self.actual}


@final
@dataclass(frozen=True, slots=True)
class InvalidAsset(InputError):
    actual: str

    def to_dict(self) -> dict[str, object]:
        return {**LockLedgerError.to_dict(self), "actual": self.actual}


@final
@dataclass(frozen=True, slots=True)
class InvalidOwner(InputError):
    actual: str

    def to_dict(self) -> dict[str, object]:
        return {**LockLedgerError.to_dict(self), "actual": self.actual}


@final
@dataclass(frozen=True, slots=True)
class MalformedRequest(InputError):
    """Encoded request does not match the layout its flag byte announces."""

    expected_length: int
    actual_length: int

    def to_dict(self) -> dict[str, object]:
        return {
            **LockLedgerError.to_dict(self),
            "expected_length": self.expected_length,
            "actual_length": self.actual_length,
        }


# ---------------------------------------------------------------------------
# Freshness
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class StaleQuote(FreshnessError):
    oracle: str
    updated_at: str
    max_age_s: int

    def to_dict(self) -> dict[str, object]:
        return {
            **LockLedgerError.to_dict(self),
            "oracle": self.oracle,
            "updated_at": self.updated_at,
            "max_age_s": self.max_age_s,
        }


# ---------------------------------------------------------------------------
# Accounting
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class LockNotFound(AccountingError):
    """No active lock under this id (never created, or destroyed)."""

    lock_id: int

    def to_dict(self) -> dict[str, object]:
        return {**LockLedgerError.to_dict(self), "lock_id": self.lock_id}


@final
@dataclass(frozen=True, slots=True)
class InsufficientLockedBalance(AccountingError):
    """`available` is the actual figure, so the caller can retry with it."""

    requested: int
    available: int

    def to_dict(self) -> dict[str, object]:
        return {
            **LockLedgerError.to_dict(self),
            "requested": self.requested,
            "available": self.available,
        }


@final
@dataclass(frozen=True, slots=True)
class LockAlreadyActive(AccountingError):
    """The (owner, asset) pair already has an active lock."""

    owner: str
    asset: str
    lock_id: int

    def to_dict(self) -> dict[str, object]:
        return {
            **LockLedgerError.to_dict(self),
            "owner": self.owner,
            "asset": self.asset,
            "lock_id": self.lock_id,
        }


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class ClaimExpired(AuthorizationError):
    claim_hash: str
    expires_at: str

    def to_dict(self) -> dict[str, object]:
        return {
            **LockLedgerError.to_dict(self),
            "claim_hash": self.claim_hash,
            "expires_at": self.expires_at,
        }


@final
@dataclass(frozen=True, slots=True)
class InvalidSignature(AuthorizationError):
    claim_hash: str
    sponsor: str

    def to_dict(self) -> dict[str, object]:
        return {
            **LockLedgerError.to_dict(self),
            "claim_hash": self.claim_hash,
            "sponsor": self.sponsor,
        }


@final
@dataclass(frozen=True, slots=True)
class ClaimProcessingFailed(AuthorizationError):
    """Ledger refused the allocation. The ledger detail is deliberately absent."""

    claim_hash: str
    lock_id: int

    def to_dict(self) -> dict[str, object]:
        return {
            **LockLedgerError.to_dict(self),
            "claim_hash": self.claim_hash,
            "lock_id": self.lock_id,
        }


# ---------------------------------------------------------------------------
# Integrity
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class MismatchedOracleDecimals(IntegrityError):
    decimals1: int
    decimals2: int

    def to_dict(self) -> dict[str, object]:
        return {
            **LockLedgerError.to_dict(self),
            "decimals1": self.decimals1,
            "decimals2": self.decimals2,
        }


@final
@dataclass(frozen=True, slots=True)
class InvalidQuote(IntegrityError):
    oracle: str
    price: str

    def to_dict(self) -> dict[str, object]:
        return {**LockLedgerError.to_dict(self), "oracle": self.oracle, "price": self.price}


@final
@dataclass(frozen=True, slots=True)
class AmountOverflow(IntegrityError):
    operation: str

    def to_dict(self) -> dict[str, object]:
        return {**LockLedgerError.to_dict(self), "operation": self.operation}


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class TransferFailed(InfrastructureError):
    """Custody could not move funds between owner and ledger."""

    operation: str
    owner: str
    asset: str
    amount: int

    def to_dict(self) -> dict[str, object]:
        return {
            **LockLedgerError.to_dict(self),
            "operation": self.operation,
            "owner": self.owner,
            "asset": self.asset,
            "amount": self.amount,
        }


@final
@dataclass(frozen=True, slots=True)
class PersistenceError(InfrastructureError):
    """Lock store or event bus operation failed."""

    operation: str

    def to_dict(self) -> dict[str, object]:
        return {**LockLedgerError.to_dict(self), "operation": self.operation}
