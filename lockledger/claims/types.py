"""Claim value types and the message digest a sponsor signs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from lockledger.core.serialization import content_digest
from lockledger.core.types import UtcDatetime


@final
@dataclass(frozen=True, slots=True)
class Claim:
    """A signed, time-bounded authorization to allocate `amount` from lock `lock_id`.

    Consumed once by ClaimArbiter.process and never stored. Replay
    protection is the signer's job: claim_hash and nonce are not deduplicated.
    """

    claim_hash: str
    sponsor: str
    nonce: int
    expires_at: UtcDatetime
    lock_id: int
    amount: int
    signature: bytes


@final
@dataclass(frozen=True, slots=True)
class ClaimMessage:
    """The signed part of a Claim: every field except the signature."""

    claim_hash: str
    sponsor: str
    nonce: int
    expires_at: UtcDatetime
    lock_id: int
    amount: int

    @staticmethod
    def of(claim: Claim) -> ClaimMessage:
        return ClaimMessage(
            claim_hash=claim.claim_hash,
            sponsor=claim.sponsor.lower(),
            nonce=claim.nonce,
            expires_at=claim.expires_at,
            lock_id=claim.lock_id,
            amount=claim.amount,
        )


def message_hash(claim: Claim) -> bytes:
    """32-byte SHA-256 digest of the canonical JSON of ClaimMessage.of(claim).

    The sponsor is lowercased, so checksummed and plain spellings of the
    same address sign the same message.
    """
    return content_digest(ClaimMessage.of(claim)).unwrap()
