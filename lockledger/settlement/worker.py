"""Worker for the trade settlement workflow.

Starts a Temporal worker with the settlement workflow and the activities
bound to the given hooks.

Usage::

    import asyncio
    from lockledger.settlement.worker import run_worker

    asyncio.run(run_worker(hooks))
"""

from __future__ import annotations

from temporalio.client import Client
from temporalio.worker import Worker

from lockledger.infra.config import WorkerConfig
from lockledger.settlement.activities import SettlementActivities
from lockledger.settlement.converter import LOCKLEDGER_DATA_CONVERTER
from lockledger.settlement.hooks import SettlementHooks
from lockledger.settlement.workflow import TradeSettlementWorkflow


def build_worker(client: Client, hooks: SettlementHooks, task_queue: str) -> Worker:
    activities = SettlementActivities(hooks)
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[TradeSettlementWorkflow],
        activities=[
            activities.quote_amount,
            activities.verify_claim,
            activities.run_post_trade_hook,
        ],
    )


async def run_worker(hooks: SettlementHooks, config: WorkerConfig | None = None) -> None:
    """Connect to Temporal and run the worker until interrupted."""
    config = config if config is not None else WorkerConfig()
    client = await Client.connect(
        config.target_host, namespace=config.namespace,
        data_converter=LOCKLEDGER_DATA_CONVERTER,
    )
    await build_worker(client, hooks, config.task_queue).run()
