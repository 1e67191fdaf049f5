"""Activity implementations for the trade settlement workflow.

Activities are thin wrappers. All domain logic lives in SettlementHooks and
the ledger, calculator and arbiter behind it.

Each activity:
- Is a bound method of SettlementActivities decorated with @activity.defn
- Takes a single frozen-dataclass input
- Returns a frozen-dataclass output (with optional error field)
- Raises ApplicationError only for retryable errors (stale quotes,
  infrastructure); every other failure is returned as data
"""

from __future__ import annotations

from typing import final

from temporalio import activity
from temporalio.exceptions import ApplicationError

from lockledger.core.errors import LockLedgerError
from lockledger.core.result import Err, Ok
from lockledger.settlement.hooks import SettlementHooks
from lockledger.settlement.types import (
    ClaimCheckInput,
    ClaimCheckOutput,
    HookInput,
    HookOutput,
    QuoteInput,
    QuoteOutput,
)


def _retry(error: LockLedgerError) -> ApplicationError:
    """Retryable failure, typed by error class so retry policies can filter it."""
    return ApplicationError(error.message, error.to_dict(), type=type(error).__name__)


@final
class SettlementActivities:
    """Activities bound to one SettlementHooks instance."""

    def __init__(self, hooks: SettlementHooks) -> None:
        self._hooks = hooks

    @activity.defn(name="quote_amount")
    async def quote_amount(self, inp: QuoteInput) -> QuoteOutput:
        """Compute the counter-asset amount for one leg.

        Timeout: 10s | Retries: 3 on StaleQuote
        Idempotent: yes (reads quotes only)
        """
        activity.logger.info("Quoting amount for base %d", inp.base_amount)
        match self._hooks.get_spreaded_amount(inp.base_amount, inp.extra_data):
            case Ok(amount):
                return QuoteOutput(amount=amount)
            case Err(error) if error.retryable:
                activity.logger.warning("Quote attempt failed: %s", error.message)
                raise _retry(error)
            case Err(error):
                return QuoteOutput(error=error.message, error_code=error.code)

    @activity.defn(name="verify_claim")
    async def verify_claim(self, inp: ClaimCheckInput) -> ClaimCheckOutput:
        """Pre-flight the trade's claim without touching the ledger.

        Timeout: 10s | Retries: 1
        Idempotent: yes (read-only)
        """
        activity.logger.info("Verifying claim %s", inp.claim.claim_hash)
        return ClaimCheckOutput(valid=self._hooks.verify_claim(inp.claim))

    @activity.defn(name="run_post_trade_hook")
    async def run_post_trade_hook(self, inp: HookInput) -> HookOutput:
        """Allocate the claim against the ledger.

        Timeout: 30s | Retries: 1
        NOT idempotent: a repeated successful call allocates twice.
        """
        activity.logger.info("Running post-trade hook for trade %s", inp.trade.trade_id)
        match self._hooks.post_trade_hook(inp.trade):
            case Ok(lock):
                return HookOutput(lock_id=None if lock is None else lock.lock_id)
            case Err(error):
                return HookOutput(error=error.message, error_code=error.code)
