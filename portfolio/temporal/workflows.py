# portfolio/temporal/workflows.py
from __future__ import annotations
from datetime import timedelta
from typing import Any, Dict

from temporalio import workflow
from temporalio.common import RetryPolicy

from portfolio.temporal.dtos import WFSweepIn, WFSweepOut, WFSweepPlan

with workflow.unsafe.imports_passed_through():
    from portfolio.temporal import activities as acts
    from portfolio.temporal.config import ACTIVITY_START_TO_CLOSE


@workflow.defn
class SweepWorkflow:
    """
    Durable orphan-blob sweep:
      run: plan (dry run) -> execute
      query: status
    """

    def __init__(self) -> None:
        self._stage: str = "init"
        self._planned: int = 0

    @workflow.query
    def status(self) -> Dict[str, Any]:
        return {"stage": self._stage, "planned_orphans": self._planned}

    @workflow.run
    async def run(self, payload: WFSweepIn) -> WFSweepOut:
        retry = RetryPolicy(
            initial_interval=timedelta(seconds=1),
            backoff_coefficient=2.0,
            maximum_interval=timedelta(seconds=10),
            maximum_attempts=5,
        )

        self._stage = "plan"
        plan = await workflow.execute_activity(
            acts.plan_sweep,
            payload,
            start_to_close_timeout=timedelta(seconds=ACTIVITY_START_TO_CLOSE),
            retry_policy=retry,
        )
        assert isinstance(plan, WFSweepPlan)
        self._planned = len(plan.orphans)

        if not plan.orphans:
            self._stage = "complete"
            return WFSweepOut(
                report={"dry_run": True, "scanned": plan.scanned, "orphans": [], "deleted": []},
                stage=self._stage,
            )

        self._stage = "sweep"
        report = await workflow.execute_activity(
            acts.execute_sweep,
            payload,
            start_to_close_timeout=timedelta(seconds=ACTIVITY_START_TO_CLOSE),
            retry_policy=retry,
        )

        self._stage = "complete"
        return WFSweepOut(report=report, stage=self._stage)
