"""Ledger domain types: ResourceLock, LockEventKind, LedgerEvent.

Lock records are immutable values. The ledger mutates state by replacing a
record with an updated copy, so the previous record doubles as the rollback
snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import final

from lockledger.core.types import UtcDatetime


@final
@dataclass(frozen=True, slots=True)
class ResourceLock:
    """Escrowed funds of one owner in one asset.

    Invariants:
    - total > 0 and never changes after creation
    - 0 <= allocated <= total
    """

    lock_id: int
    owner: str
    asset: str
    total: int
    allocated: int
    active: bool
    created_at: UtcDatetime

    def __post_init__(self) -> None:
        if self.total <= 0:
            raise TypeError(f"ResourceLock.total must be > 0, got {self.total}")
        if not 0 <= self.allocated <= self.total:
            raise TypeError(
                f"ResourceLock.allocated must be in [0, {self.total}], got {self.allocated}"
            )

    @property
    def available(self) -> int:
        return self.total - self.allocated

    def with_allocated(self, allocated: int) -> ResourceLock:
        return replace(self, allocated=allocated)

    def destroyed(self) -> ResourceLock:
        return replace(self, active=False)


class LockEventKind(Enum):
    LOCKED = "Locked"
    ALLOCATED = "Allocated"
    RELEASED = "Released"
    UNLOCKED = "Unlocked"
    CLAIM_PROCESSED = "ClaimProcessed"


@final
@dataclass(frozen=True, slots=True)
class LedgerEvent:
    """One committed state change, published as canonical JSON."""

    kind: LockEventKind
    lock_id: int
    owner: str
    asset: str
    amount: int
    allocated: int
    total: int
    timestamp: UtcDatetime
    claim_hash: str | None = None

    @staticmethod
    def of(
        kind: LockEventKind,
        lock: ResourceLock,
        amount: int,
        timestamp: UtcDatetime,
        claim_hash: str | None = None,
    ) -> LedgerEvent:
        """Snapshot `lock` as it stands after the change."""
        return LedgerEvent(
            kind=kind, lock_id=lock.lock_id, owner=lock.owner, asset=lock.asset,
            amount=amount, allocated=lock.allocated, total=lock.total,
            timestamp=timestamp, claim_hash=claim_hash,
        )
