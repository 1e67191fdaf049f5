"""Workflow data types for trade settlement.

All types: @final @dataclass(frozen=True, slots=True). Activity outputs
carry either a result or an error, never both.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import final

from lockledger.claims.types import Claim
from lockledger.settlement.hooks import Trade

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class SettlementOutcome(Enum):
    """Terminal states of the settlement workflow."""

    SETTLED = "Settled"
    QUOTE_FAILED = "QuoteFailed"
    CLAIM_REJECTED = "ClaimRejected"
    HOOK_FAILED = "HookFailed"


# ---------------------------------------------------------------------------
# Workflow input / result
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class SettlementInput:
    """A trade plus the encoded amount request for its taking leg.

    trade.trade_id serves as Temporal Workflow ID for natural idempotency.
    """

    trade: Trade
    extra_data: bytes


@final
@dataclass(frozen=True, slots=True)
class SettlementResult:
    trade_id: str
    outcome: SettlementOutcome
    taking_amount: int | None = None
    lock_id: int | None = None
    reasons: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Activity I/O
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class QuoteInput:
    base_amount: int
    extra_data: bytes


@final
@dataclass(frozen=True, slots=True)
class QuoteOutput:
    amount: int | None = None
    error: str | None = None
    error_code: str | None = None

    def __post_init__(self) -> None:
        if (self.amount is None) == (self.error is None):
            raise TypeError("QuoteOutput must have exactly one of amount or error")


@final
@dataclass(frozen=True, slots=True)
class ClaimCheckInput:
    claim: Claim


@final
@dataclass(frozen=True, slots=True)
class ClaimCheckOutput:
    valid: bool


@final
@dataclass(frozen=True, slots=True)
class HookInput:
    trade: Trade


@final
@dataclass(frozen=True, slots=True)
class HookOutput:
    """lock_id is None for a trade that carried no claim."""

    lock_id: int | None = None
    error: str | None = None
    error_code: str | None = None
