"""In-memory implementations of the store, custody, event bus and quote source.

Test doubles that let the whole suite run without a database, a chain or a
message broker. All classes are @final. None of them are production code.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import TYPE_CHECKING, final

from lockledger.core.errors import InvalidQuote, PersistenceError, TransferFailed
from lockledger.core.result import Err, Ok
from lockledger.core.types import UtcDatetime

if TYPE_CHECKING:
    from lockledger.ledger.types import ResourceLock
    from lockledger.oracle.quote import OracleQuote


def _persistence_error(operation: str, detail: str) -> PersistenceError:
    return PersistenceError(
        message=detail,
        code="PERSISTENCE_ERROR",
        timestamp=UtcDatetime.now(),
        source=f"memory_adapter.{operation}",
        operation=operation,
    )


@final
class InMemoryLockStore:
    """Lock records by id and the latest lock id per (owner, asset)."""

    def __init__(self) -> None:
        self._locks: dict[int, ResourceLock] = {}
        self._index: dict[tuple[str, str], int] = {}
        self._last_id = 0
        self._guard = threading.Lock()

    def next_lock_id(self) -> Ok[int] | Err[PersistenceError]:
        with self._guard:
            self._last_id += 1
            return Ok(self._last_id)

    def get_lock(self, lock_id: int) -> Ok[ResourceLock | None] | Err[PersistenceError]:
        return Ok(self._locks.get(lock_id))

    def put_lock(self, lock: ResourceLock) -> Ok[None] | Err[PersistenceError]:
        with self._guard:
            self._locks[lock.lock_id] = lock
        return Ok(None)

    def delete_lock(self, lock_id: int) -> Ok[None] | Err[PersistenceError]:
        with self._guard:
            self._locks.pop(lock_id, None)
        return Ok(None)

    def get_index(self, owner: str, asset: str) -> Ok[int | None] | Err[PersistenceError]:
        return Ok(self._index.get((owner, asset)))

    def put_index(
        self, owner: str, asset: str, lock_id: int | None,
    ) -> Ok[None] | Err[PersistenceError]:
        if lock_id is None:
            self._index.pop((owner, asset), None)
        else:
            self._index[(owner, asset)] = lock_id
        return Ok(None)

    def locks(self) -> Ok[tuple[ResourceLock, ...]] | Err[PersistenceError]:
        with self._guard:
            return Ok(tuple(self._locks[k] for k in sorted(self._locks)))

    def count(self) -> int:
        """Test-only helper."""
        return len(self._locks)


@final
class InMemoryCustody:
    """External owner balances plus the ledger's custody holdings per asset."""

    def __init__(self) -> None:
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._held: dict[str, int] = defaultdict(int)
        self._guard = threading.Lock()

    def fund(self, owner: str, asset: str, amount: int) -> None:
        """Test-only helper: credit an owner's external balance."""
        with self._guard:
            self._balances[(owner, asset)] += amount

    def deposit(
        self, owner: str, asset: str, amount: int,
    ) -> Ok[None] | Err[TransferFailed]:
        with self._guard:
            balance = self._balances[(owner, asset)]
            if balance < amount:
                return Err(TransferFailed(
                    message=f"{owner} holds {balance} {asset}, cannot deposit {amount}",
                    code="TRANSFER_FAILED",
                    timestamp=UtcDatetime.now(),
                    source="memory_adapter.deposit",
                    operation="deposit", owner=owner, asset=asset, amount=amount,
                ))
            self._balances[(owner, asset)] -= amount
            self._held[asset] += amount
            return Ok(None)

    def withdraw(
        self, owner: str, asset: str, amount: int,
    ) -> Ok[None] | Err[TransferFailed]:
        with self._guard:
            held = self._held[asset]
            if held < amount:
                return Err(TransferFailed(
                    message=f"Custody holds {held} {asset}, cannot release {amount}",
                    code="TRANSFER_FAILED",
                    timestamp=UtcDatetime.now(),
                    source="memory_adapter.withdraw",
                    operation="withdraw", owner=owner, asset=asset, amount=amount,
                ))
            self._held[asset] -= amount
            self._balances[(owner, asset)] += amount
            return Ok(None)

    def balance_of(self, owner: str, asset: str) -> int:
        """Test-only helper."""
        return self._balances.get((owner, asset), 0)

    def held(self, asset: str) -> int:
        """Test-only helper."""
        return self._held.get(asset, 0)


@final
class InMemoryEventBus:
    """Messages stored per topic as (key, value) pairs."""

    def __init__(self) -> None:
        self._topics: dict[str, list[tuple[str, bytes]]] = {}

    def publish(
        self, topic: str, key: str, value: bytes,
    ) -> Ok[None] | Err[PersistenceError]:
        if not topic:
            return Err(_persistence_error("publish", "Topic must be non-empty"))
        self._topics.setdefault(topic, []).append((key, value))
        return Ok(None)

    def get_messages(self, topic: str) -> list[tuple[str, bytes]]:
        """Test-only helper."""
        return list(self._topics.get(topic, []))


@final
class InMemoryQuoteSource:
    """Latest quote per oracle, replaced wholesale by set_quote."""

    def __init__(self, *quotes: OracleQuote) -> None:
        self._quotes: dict[str, OracleQuote] = {q.oracle: q for q in quotes}

    def set_quote(self, quote: OracleQuote) -> None:
        self._quotes[quote.oracle] = quote

    def latest_quote(self, oracle: str) -> Ok[OracleQuote] | Err[InvalidQuote]:
        quote = self._quotes.get(oracle)
        if quote is None:
            return Err(InvalidQuote(
                message=f"No feed registered for oracle {oracle}",
                code="UNKNOWN_ORACLE",
                timestamp=UtcDatetime.now(),
                source="memory_adapter.latest_quote",
                oracle=oracle,
                price="unavailable",
            ))
        return Ok(quote)
