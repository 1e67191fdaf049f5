"""Signature-gated claim processing against the ResourceLedger.

process(claim):
    1. now <= expires_at              else ClaimExpired
    2. recovered signer == sponsor    else InvalidSignature
    3. ledger.allocate(lock, amount)  else ClaimProcessingFailed

Steps 1 and 2 read nothing but the claim and the clock, so a failure there
leaves the ledger untouched; step 3 is itself all-or-nothing. Ledger errors
are collapsed into ClaimProcessingFailed and only their detail is logged.
"""

from __future__ import annotations

import logging
from typing import final

from lockledger.claims.types import Claim, message_hash
from lockledger.claims.verifier import Verifier
from lockledger.core.errors import (
    ClaimExpired,
    ClaimProcessingFailed,
    InvalidSignature,
    LockLedgerError,
)
from lockledger.core.result import Err, Ok
from lockledger.core.types import Clock, UtcDatetime
from lockledger.ledger.engine import ResourceLedger
from lockledger.ledger.types import ResourceLock

logger = logging.getLogger(__name__)

_SOURCE = "claims.arbiter.ClaimArbiter"


@final
class ClaimArbiter:
    """Authorizes and executes allocations on behalf of signing sponsors."""

    def __init__(
        self,
        ledger: ResourceLedger,
        verifier: Verifier,
        clock: Clock = UtcDatetime.now,
    ) -> None:
        self._ledger = ledger
        self._verifier = verifier
        self._clock = clock

    def process(self, claim: Claim) -> Ok[ResourceLock] | Err[LockLedgerError]:
        """Check expiry and signature, then allocate. Returns the updated lock."""
        now = self._clock()
        source = f"{_SOURCE}.process"
        match self._authorize(claim, now, source):
            case Err() as e:
                logger.info("Claim %s rejected: %s", claim.claim_hash, e.error.code)
                return e
            case Ok():
                pass

        match self._ledger.allocate(claim.lock_id, claim.amount, claim_hash=claim.claim_hash):
            case Err(ledger_error):
                logger.warning(
                    "Claim %s could not allocate %r on lock %r: %s",
                    claim.claim_hash, claim.amount, claim.lock_id, ledger_error.message,
                )
                return Err(ClaimProcessingFailed(
                    message=f"Claim {claim.claim_hash} could not be processed",
                    code="CLAIM_PROCESSING_FAILED",
                    timestamp=now, source=source,
                    claim_hash=claim.claim_hash, lock_id=claim.lock_id,
                ))
            case Ok(lock):
                logger.info(
                    "Claim %s allocated %d on lock %d for %s",
                    claim.claim_hash, claim.amount, claim.lock_id, claim.sponsor,
                )
                return Ok(lock)

    def process_claim(
        self,
        claim_hash: str,
        sponsor: str,
        nonce: int,
        expires_at: UtcDatetime,
        lock_id: int,
        amount: int,
        signature: bytes,
    ) -> Ok[ResourceLock] | Err[LockLedgerError]:
        """Claim submission entry point for external signers."""
        return self.process(Claim(
            claim_hash=claim_hash, sponsor=sponsor, nonce=nonce,
            expires_at=expires_at, lock_id=lock_id, amount=amount,
            signature=signature,
        ))

    def verify(self, claim: Claim) -> bool:
        """Pre-flight twin of process: same checks plus a read of the lock. Never mutates."""
        now = self._clock()
        if not self._authorize(claim, now, f"{_SOURCE}.verify").is_ok:
            return False
        match self._ledger.get_lock(claim.lock_id):
            case Err():
                return False
            case Ok(lock):
                return (
                    lock.active
                    and isinstance(claim.amount, int)
                    and not isinstance(claim.amount, bool)
                    and 0 < claim.amount <= lock.available
                )

    def _authorize(
        self, claim: Claim, now: UtcDatetime, source: str,
    ) -> Ok[None] | Err[LockLedgerError]:
        if now.value > claim.expires_at.value:
            return Err(ClaimExpired(
                message=f"Claim {claim.claim_hash} expired at {claim.expires_at.value.isoformat()}",
                code="CLAIM_EXPIRED",
                timestamp=now, source=source,
                claim_hash=claim.claim_hash,
                expires_at=claim.expires_at.value.isoformat(),
            ))
        if not self._verifier.verify(message_hash(claim), claim.signature, claim.sponsor):
            return Err(InvalidSignature(
                message=f"Signature on claim {claim.claim_hash} is not from {claim.sponsor}",
                code="INVALID_SIGNATURE",
                timestamp=now, source=source,
                claim_hash=claim.claim_hash, sponsor=claim.sponsor,
            ))
        return Ok(None)
