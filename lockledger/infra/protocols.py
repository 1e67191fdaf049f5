"""Infrastructure protocols: where lock records live, how funds move, where events go.

Domain code depends on these abstractions; adapters implement them. All
protocols return Ok[T] | Err[...]: collaborator failures are values, never
invisible exceptions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from lockledger.core.errors import PersistenceError, TransferFailed
from lockledger.core.result import Err, Ok

if TYPE_CHECKING:
    from lockledger.ledger.types import ResourceLock


@runtime_checkable
class LockStore(Protocol):
    """Lock records keyed by id plus the (owner, asset) -> lock id index.

    Invariants:
      - next_lock_id() is strictly increasing and never hands out an id twice,
        even if the lock it was drawn for is never written.
      - next_lock_id() is atomic: concurrent callers always get distinct ids.
        The ledger calls it holding only a per-(owner, asset) mutex.
      - get_lock() returns Ok(None) for ids that were never written.
      - put_index(owner, asset, None) clears the index entry.
      - delete_lock() only undoes the write of a lock that was never committed.
    """

    def next_lock_id(self) -> Ok[int] | Err[PersistenceError]: ...

    def get_lock(self, lock_id: int) -> Ok[ResourceLock | None] | Err[PersistenceError]: ...

    def put_lock(self, lock: ResourceLock) -> Ok[None] | Err[PersistenceError]: ...

    def delete_lock(self, lock_id: int) -> Ok[None] | Err[PersistenceError]: ...

    def get_index(self, owner: str, asset: str) -> Ok[int | None] | Err[PersistenceError]: ...

    def put_index(
        self, owner: str, asset: str, lock_id: int | None,
    ) -> Ok[None] | Err[PersistenceError]: ...

    def locks(self) -> Ok[tuple[ResourceLock, ...]] | Err[PersistenceError]: ...


@runtime_checkable
class Custody(Protocol):
    """Token transfer primitive between an owner's external balance and the ledger.

    Each call is atomic: it either moves the full amount or nothing.
    """

    def deposit(
        self, owner: str, asset: str, amount: int,
    ) -> Ok[None] | Err[TransferFailed]: ...

    def withdraw(
        self, owner: str, asset: str, amount: int,
    ) -> Ok[None] | Err[TransferFailed]: ...


@runtime_checkable
class EventBus(Protocol):
    """Append-only event transport. Values are opaque bytes."""

    def publish(
        self, topic: str, key: str, value: bytes,
    ) -> Ok[None] | Err[PersistenceError]: ...
