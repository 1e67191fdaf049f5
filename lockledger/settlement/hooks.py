"""Callbacks the external settlement engine invokes on this core.

get_spreaded_amount is called once per trade leg and is side-effect free,
so the engine may call it speculatively. post_trade_hook runs after the
engine has moved the assets and processes the trade's claim, if any.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from lockledger.claims.arbiter import ClaimArbiter
from lockledger.claims.types import Claim
from lockledger.core.errors import LockLedgerError
from lockledger.core.result import Err, Ok
from lockledger.ledger.types import ResourceLock
from lockledger.oracle.calculator import OracleAmountCalculator


@final
@dataclass(frozen=True, slots=True)
class Trade:
    """One executed trade as the settlement engine reports it."""

    trade_id: str
    maker: str
    taker: str
    maker_asset: str
    taker_asset: str
    making_amount: int
    taking_amount: int
    claim: Claim | None = None


@final
class SettlementHooks:
    def __init__(self, calculator: OracleAmountCalculator, arbiter: ClaimArbiter) -> None:
        self._calculator = calculator
        self._arbiter = arbiter

    def get_spreaded_amount(
        self, base_amount: int, encoded_request: bytes,
    ) -> Ok[int] | Err[LockLedgerError]:
        return self._calculator.get_spreaded_amount(base_amount, encoded_request)

    def verify_claim(self, claim: Claim) -> bool:
        return self._arbiter.verify(claim)

    def post_trade_hook(self, trade: Trade) -> Ok[ResourceLock | None] | Err[LockLedgerError]:
        """Process the trade's claim. A trade without a claim succeeds with Ok(None)."""
        if trade.claim is None:
            return Ok(None)
        return self._arbiter.process(trade.claim)
