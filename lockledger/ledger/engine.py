"""Resource-escrow ledger: lock -> allocate/release -> unlock.

State machine per lock: Uncreated -> Active -> Destroyed (terminal).

Core invariant: for every active lock, 0 <= allocated <= total before and
after every operation, and unlock never succeeds while allocated > 0.

Every public mutation is all-or-nothing. Lock records are immutable, so the
record read before a mutation is its own snapshot. Each completed step
pushes an undo action onto a rollback log; any later failure (store write,
custody transfer, event publish) unwinds the log newest first.

Exactly one event is published per committed operation, as its last step.
Claim allocations are published as CLAIM_PROCESSED on the claims topic.

ResourceLedger is @final but NOT a dataclass — it holds mutable internal
state (per-key mutexes). Lock records live in the injected LockStore.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable, Iterator
from contextlib import contextmanager
from typing import final

from lockledger.core.errors import LockAlreadyActive, LockLedgerError
from lockledger.core.result import Err, Ok
from lockledger.core.serialization import canonical_bytes
from lockledger.core.types import Clock, UtcDatetime
from lockledger.infra.config import LedgerConfig
from lockledger.infra.protocols import Custody, EventBus, LockStore
from lockledger.ledger._validation import (
    insufficient,
    not_found,
    parse_amount,
    parse_asset,
    parse_owner,
    persistence_err,
)
from lockledger.ledger.types import LedgerEvent, LockEventKind, ResourceLock

logger = logging.getLogger(__name__)

_SOURCE = "ledger.engine.ResourceLedger"

type _Undo = Callable[[], Ok[None] | Err[LockLedgerError]]


class _RollbackLog:
    """Undo actions for the completed steps of one operation."""

    def __init__(self, operation: str, lock_id: int) -> None:
        self._operation = operation
        self._lock_id = lock_id
        self._undo: list[tuple[str, _Undo]] = []

    def step[E: LockLedgerError](
        self, result: Ok[object] | Err[E], label: str, undo: _Undo | None = None,
    ) -> Err[E] | None:
        """Record `undo` if `result` succeeded; otherwise unwind and return the error."""
        match result:
            case Err(error):
                return self.unwind(error)
            case Ok():
                if undo is not None:
                    self._undo.append((label, undo))
                return None

    def unwind[E: LockLedgerError](self, error: E) -> Err[E]:
        logger.warning(
            "%s on lock %d failed (%s), rolling back %d step(s)",
            self._operation, self._lock_id, error.code, len(self._undo),
        )
        while self._undo:
            label, undo = self._undo.pop()
            match undo():
                case Err(undo_error):
                    logger.error(
                        "Undo of %s for lock %d failed: %s",
                        label, self._lock_id, undo_error.message,
                    )
                case Ok():
                    pass
        return Err(error)


class _KeyedMutex:
    """One threading.Lock per key. Operations on different keys never contend.

    Entries live until discard(). The ledger discards a lock id once the lock
    is destroyed; pair entries stay, one per (owner, asset) ever locked.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._mutexes: dict[Hashable, threading.Lock] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            mutex = self._mutexes.setdefault(key, threading.Lock())
        with mutex:
            yield

    def discard(self, key: Hashable) -> None:
        with self._guard:
            self._mutexes.pop(key, None)

    def __len__(self) -> int:
        return len(self._mutexes)


@final
class ResourceLedger:
    """Single source of truth for escrowed funds.

    At most one active lock per (owner, asset). Mutexes are taken in the
    order lock id, then (owner, asset) pair.
    """

    def __init__(
        self,
        store: LockStore,
        custody: Custody,
        event_bus: EventBus | None = None,
        config: LedgerConfig | None = None,
        clock: Clock = UtcDatetime.now,
    ) -> None:
        self._store = store
        self._custody = custody
        self._bus = event_bus
        self._config = config if config is not None else LedgerConfig()
        self._clock = clock
        self._lock_mutex = _KeyedMutex()
        self._pair_mutex = _KeyedMutex()

    # -- mutations --

    def lock(self, owner: str, asset: str, amount: int) -> Ok[int] | Err[LockLedgerError]:
        """Escrow `amount` of `asset` from `owner` and return the new lock id.

        Input errors are reported before anything is touched. A pair that
        already has an active lock fails with LockAlreadyActive.
        """
        now = self._clock()
        source = f"{_SOURCE}.lock"
        match parse_owner(owner, now, source):
            case Err() as e:
                return e
            case Ok(owner):
                pass
        match parse_asset(asset, now, source):
            case Err() as e:
                return e
            case Ok(asset):
                pass
        match parse_amount(amount, "amount", now, source):
            case Err() as e:
                return e
            case Ok(amount):
                pass

        with self._pair_mutex.hold((owner, asset)):
            match self._store.get_index(owner, asset):
                case Err() as e:
                    return e
                case Ok(previous):
                    pass
            if previous is not None:
                match self._store.get_lock(previous):
                    case Err() as e:
                        return e
                    case Ok(existing) if existing is not None and existing.active:
                        return Err(LockAlreadyActive(
                            message=(
                                f"{owner} already has active lock {previous} on {asset}; "
                                "unlock it first"
                            ),
                            code="LOCK_ALREADY_ACTIVE",
                            timestamp=now, source=source,
                            owner=owner, asset=asset, lock_id=previous,
                        ))
                    case Ok():
                        pass
            match self._store.next_lock_id():
                case Err() as e:
                    return e
                case Ok(lock_id):
                    pass

            record = ResourceLock(
                lock_id=lock_id, owner=owner, asset=asset,
                total=amount, allocated=0, active=True, created_at=now,
            )
            log = _RollbackLog("lock", lock_id)
            steps = (
                (self._custody.deposit, (owner, asset, amount), "deposit",
                 lambda: self._custody.withdraw(owner, asset, amount)),
                (self._store.put_lock, (record,), "put_lock",
                 lambda: self._store.delete_lock(lock_id)),
                (self._store.put_index, (owner, asset, lock_id), "put_index",
                 lambda: self._store.put_index(owner, asset, previous)),
            )
            for action, args, label, undo in steps:
                if (err := log.step(action(*args), label, undo)) is not None:
                    return err
            published = self._publish(LockEventKind.LOCKED, record, amount, now)
            if (err := log.step(published, "publish")) is not None:
                return err

        logger.info("Locked %d %s for %s as lock %d", amount, asset, owner, lock_id)
        return Ok(lock_id)

    def allocate(
        self, lock_id: int, amount: int, *, claim_hash: str | None = None,
    ) -> Ok[ResourceLock] | Err[LockLedgerError]:
        """Commit `amount` of an active lock. Custody does not move.

        Over-allocation fails with InsufficientLockedBalance carrying the
        actual available amount. When `claim_hash` is given the change is
        published as CLAIM_PROCESSED instead of ALLOCATED.
        """
        now = self._clock()
        source = f"{_SOURCE}.allocate"
        match parse_amount(amount, "amount", now, source):
            case Err() as e:
                return e
            case Ok(amount):
                pass

        with self._lock_mutex.hold(lock_id):
            match self._active(lock_id, now, source):
                case Err() as e:
                    return e
                case Ok(current):
                    pass
            if amount > current.available:
                return insufficient(amount, current.available, now, source)
            updated = current.with_allocated(current.allocated + amount)
            kind = LockEventKind.ALLOCATED if claim_hash is None else LockEventKind.CLAIM_PROCESSED
            match self._replace(current, updated, kind, amount, now, claim_hash):
                case Err() as e:
                    return e
                case Ok():
                    pass

        logger.info(
            "Allocated %d on lock %d (%d/%d)",
            amount, lock_id, updated.allocated, updated.total,
        )
        return Ok(updated)

    def release(self, lock_id: int, amount: int) -> Ok[ResourceLock] | Err[LockLedgerError]:
        """Uncommit `amount` of an active lock; the inverse of allocate.

        Releasing more than is allocated fails with InsufficientLockedBalance,
        whose `available` is the currently allocated amount.
        """
        now = self._clock()
        source = f"{_SOURCE}.release"
        match parse_amount(amount, "amount", now, source):
            case Err() as e:
                return e
            case Ok(amount):
                pass

        with self._lock_mutex.hold(lock_id):
            match self._active(lock_id, now, source):
                case Err() as e:
                    return e
                case Ok(current):
                    pass
            if amount > current.allocated:
                return insufficient(amount, current.allocated, now, source)
            updated = current.with_allocated(current.allocated - amount)
            match self._replace(current, updated, LockEventKind.RELEASED, amount, now):
                case Err() as e:
                    return e
                case Ok():
                    pass

        logger.info(
            "Released %d on lock %d (%d/%d)",
            amount, lock_id, updated.allocated, updated.total,
        )
        return Ok(updated)

    def unlock(self, lock_id: int) -> Ok[int] | Err[LockLedgerError]:
        """Destroy a fully unallocated lock and return `total` to its owner.

        Returns the amount sent back. Outstanding allocation fails with
        InsufficientLockedBalance(requested=total, available=total - allocated).
        """
        now = self._clock()
        source = f"{_SOURCE}.unlock"
        with self._lock_mutex.hold(lock_id):
            match self._active(lock_id, now, source):
                case Err() as e:
                    return e
                case Ok(current):
                    pass
            if current.allocated != 0:
                return insufficient(current.total, current.available, now, source)

            owner, asset, total = current.owner, current.asset, current.total
            with self._pair_mutex.hold((owner, asset)):
                match self._store.get_index(owner, asset):
                    case Err() as e:
                        return e
                    case Ok(indexed):
                        pass
                destroyed = current.destroyed()
                log = _RollbackLog("unlock", lock_id)
                put = self._store.put_lock(destroyed)
                if (err := log.step(put, "put_lock",
                                    lambda: self._store.put_lock(current))) is not None:
                    return err
                if indexed == lock_id:
                    cleared = self._store.put_index(owner, asset, None)
                    if (err := log.step(cleared, "put_index",
                                        lambda: self._store.put_index(owner, asset, lock_id))) is not None:
                        return err
                returned = self._custody.withdraw(owner, asset, total)
                if (err := log.step(returned, "withdraw",
                                    lambda: self._custody.deposit(owner, asset, total))) is not None:
                    return err
                published = self._publish(LockEventKind.UNLOCKED, destroyed, total, now)
                if (err := log.step(published, "publish")) is not None:
                    return err

        self._lock_mutex.discard(lock_id)
        logger.info("Unlocked lock %d, returned %d %s to %s", lock_id, total, asset, owner)
        return Ok(total)

    # -- reads --

    def available_balance(self, owner: str, asset: str) -> Ok[int] | Err[LockLedgerError]:
        """Unallocated escrow of the pair's active lock; 0 when there is none."""
        match self._store.get_index(owner, asset):
            case Err() as e:
                return e
            case Ok(None):
                return Ok(0)
            case Ok(lock_id):
                pass
        match self._store.get_lock(lock_id):
            case Err() as e:
                return e
            case Ok(lock) if lock is not None and lock.active:
                return Ok(lock.available)
            case Ok():
                return Ok(0)

    def get_lock(self, lock_id: int) -> Ok[ResourceLock] | Err[LockLedgerError]:
        """Lock record by id. Destroyed locks come back with active=False."""
        match self._store.get_lock(lock_id):
            case Err() as e:
                return e
            case Ok(None):
                return not_found(lock_id, self._clock(), f"{_SOURCE}.get_lock")
            case Ok(lock):
                return Ok(lock)

    def locks_of(self, owner: str) -> Ok[tuple[ResourceLock, ...]] | Err[LockLedgerError]:
        """Active locks of `owner`, ordered by id."""
        return self._store.locks().map(
            lambda locks: tuple(lk for lk in locks if lk.owner == owner and lk.active)
        )

    def lock_count(self) -> Ok[int] | Err[LockLedgerError]:
        """Number of locks ever created, destroyed ones included."""
        return self._store.locks().map(len)

    # -- internals --

    def _active(
        self, lock_id: int, now: UtcDatetime, source: str,
    ) -> Ok[ResourceLock] | Err[LockLedgerError]:
        match self._store.get_lock(lock_id):
            case Err() as e:
                return e
            case Ok(lock) if lock is not None and lock.active:
                return Ok(lock)
            case Ok():
                return not_found(lock_id, now, source)

    def _replace(
        self,
        current: ResourceLock,
        updated: ResourceLock,
        kind: LockEventKind,
        amount: int,
        now: UtcDatetime,
        claim_hash: str | None = None,
    ) -> Ok[None] | Err[LockLedgerError]:
        """Write `updated` and publish its event, restoring `current` on failure."""
        log = _RollbackLog(kind.value, current.lock_id)
        put = self._store.put_lock(updated)
        if (err := log.step(put, "put_lock", lambda: self._store.put_lock(current))) is not None:
            return err
        published = self._publish(kind, updated, amount, now, claim_hash)
        if (err := log.step(published, "publish")) is not None:
            return err
        return Ok(None)

    def _publish(
        self,
        kind: LockEventKind,
        lock: ResourceLock,
        amount: int,
        now: UtcDatetime,
        claim_hash: str | None = None,
    ) -> Ok[None] | Err[LockLedgerError]:
        if self._bus is None or not self._config.emit_events:
            return Ok(None)
        event = LedgerEvent.of(kind, lock, amount, now, claim_hash)
        match canonical_bytes(event):
            case Err(detail):
                return persistence_err("serialize_event", detail, now, f"{_SOURCE}._publish")
            case Ok(payload):
                pass
        if kind is LockEventKind.CLAIM_PROCESSED and claim_hash is not None:
            return self._bus.publish(self._config.claims_topic, claim_hash, payload)
        return self._bus.publish(self._config.locks_topic, str(lock.lock_id), payload)
