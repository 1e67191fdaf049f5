"""lockledger.ledger — escrow lock lifecycle and its events."""

from lockledger.ledger.engine import ResourceLedger as ResourceLedger
from lockledger.ledger.types import LedgerEvent as LedgerEvent
from lockledger.ledger.types import LockEventKind as LockEventKind
from lockledger.ledger.types import ResourceLock as ResourceLock
