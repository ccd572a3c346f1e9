# portfolio/temporal/worker.py
from __future__ import annotations
import asyncio
import logging
import os
from concurrent.futures import ThreadPoolExecutor

from temporalio.client import Client
from temporalio.worker import Worker

from portfolio.temporal.config import SWEEP_TASK_QUEUE, TEMPORAL_ADDRESS, TEMPORAL_NAMESPACE
from portfolio.temporal.workflows import SweepWorkflow
from portfolio.temporal import activities as acts

log = logging.getLogger("portfolio")


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    client = await Client.connect(TEMPORAL_ADDRESS, namespace=TEMPORAL_NAMESPACE)

    max_workers = int(os.getenv("TEMPORAL_ACTIVITY_WORKERS", "4"))

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        worker = Worker(
            client,
            task_queue=SWEEP_TASK_QUEUE,
            workflows=[SweepWorkflow],
            activities=[acts.plan_sweep, acts.execute_sweep],
            activity_executor=executor,
            max_concurrent_activities=max_workers,
        )
        log.info("[worker] listening on task_queue=%s with max %d concurrent activities", SWEEP_TASK_QUEUE, max_workers)
        await worker.run()


if __name__ == "__main__":
    asyncio.run(main())
