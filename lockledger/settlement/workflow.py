"""Durable workflow settling one trade leg.

Steps: quote -> verify claim (if any) -> post-trade hook.

Determinism contract: this module contains NO I/O, NO randomness,
NO system clock access, NO mutable globals. All external interaction is
delegated to Activities.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError

with workflow.unsafe.imports_passed_through():
    from lockledger.settlement.activities import SettlementActivities
    from lockledger.settlement.types import (
        ClaimCheckInput,
        HookInput,
        QuoteInput,
        SettlementInput,
        SettlementOutcome,
        SettlementResult,
    )

# -- Retry policies --

QUOTE_RETRY = RetryPolicy(
    initial_interval=timedelta(seconds=1),
    backoff_coefficient=2.0,
    maximum_interval=timedelta(seconds=30),
    maximum_attempts=3,
)

CLAIM_CHECK_RETRY = RetryPolicy(maximum_attempts=1)

HOOK_RETRY = RetryPolicy(maximum_attempts=1)


@workflow.defn(name="TradeSettlement")
class TradeSettlementWorkflow:
    """Settles one trade: every run reaches exactly one SettlementOutcome.

    Invariants maintained:
    - No ledger mutation unless the quote succeeded
    - No ledger mutation for a claim that failed pre-flight verification
    - The post-trade hook runs at most once
    """

    def __init__(self) -> None:
        self._status: str = "RECEIVED"

    @workflow.query
    def get_status(self) -> str:
        """Current workflow phase."""
        return self._status

    @workflow.run
    async def run(self, inp: SettlementInput) -> SettlementResult:
        trade = inp.trade

        # --- Step 1: Quote the taking amount ---
        self._status = "QUOTING"
        try:
            quote = await workflow.execute_activity_method(
                SettlementActivities.quote_amount,
                QuoteInput(base_amount=trade.making_amount, extra_data=inp.extra_data),
                start_to_close_timeout=timedelta(seconds=10),
                retry_policy=QUOTE_RETRY,
            )
        except ActivityError as exc:
            self._status = "QUOTE_FAILED"
            return SettlementResult(
                trade_id=trade.trade_id,
                outcome=SettlementOutcome.QUOTE_FAILED,
                reasons=(f"Quote retries exhausted: {exc.cause or exc}",),
            )
        if quote.error is not None:
            self._status = "QUOTE_FAILED"
            return SettlementResult(
                trade_id=trade.trade_id,
                outcome=SettlementOutcome.QUOTE_FAILED,
                reasons=(quote.error,),
            )
        assert quote.amount is not None  # guaranteed when error is None
        trade = replace(trade, taking_amount=quote.amount)

        # --- Step 2: Pre-flight the claim ---
        if trade.claim is not None:
            self._status = "VERIFYING_CLAIM"
            check = await workflow.execute_activity_method(
                SettlementActivities.verify_claim,
                ClaimCheckInput(claim=trade.claim),
                start_to_close_timeout=timedelta(seconds=10),
                retry_policy=CLAIM_CHECK_RETRY,
            )
            if not check.valid:
                self._status = "CLAIM_REJECTED"
                return SettlementResult(
                    trade_id=trade.trade_id,
                    outcome=SettlementOutcome.CLAIM_REJECTED,
                    taking_amount=quote.amount,
                    reasons=(f"Claim {trade.claim.claim_hash} failed verification",),
                )

        # --- Step 3: Post-trade hook ---
        self._status = "POST_TRADE"
        hook = await workflow.execute_activity_method(
            SettlementActivities.run_post_trade_hook,
            HookInput(trade=trade),
            start_to_close_timeout=timedelta(seconds=30),
            retry_policy=HOOK_RETRY,
        )
        if hook.error is not None:
            self._status = "HOOK_FAILED"
            return SettlementResult(
                trade_id=trade.trade_id,
                outcome=SettlementOutcome.HOOK_FAILED,
                taking_amount=quote.amount,
                reasons=(hook.error,),
            )

        self._status = "SETTLED"
        return SettlementResult(
            trade_id=trade.trade_id,
            outcome=SettlementOutcome.SETTLED,
            taking_amount=quote.amount,
            lock_id=hook.lock_id,
        )
