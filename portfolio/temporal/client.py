# portfolio/temporal/client.py
from __future__ import annotations
import uuid
from typing import Any, Dict

from temporalio.client import Client
from temporalio.common import WorkflowIDReusePolicy

from portfolio.temporal.config import SWEEP_TASK_QUEUE, TEMPORAL_ADDRESS, TEMPORAL_NAMESPACE
from portfolio.temporal.dtos import WFSweepIn, WFSweepOut
from portfolio.temporal.workflows import SweepWorkflow


async def start_sweep_workflow(
    payload: WFSweepIn,
    wait: bool = False,
) -> WFSweepOut | tuple[str, str]:
    """
    Start SweepWorkflow. If wait=True, await result. Else return (workflow_id, run_id).
    """
    client = await Client.connect(TEMPORAL_ADDRESS, namespace=TEMPORAL_NAMESPACE)

    workflow_id = payload.request_id or f"sweep-{uuid.uuid4()}"
    handle = await client.start_workflow(
        SweepWorkflow.run,
        payload,
        id=workflow_id,
        task_queue=SWEEP_TASK_QUEUE,
        id_reuse_policy=WorkflowIDReusePolicy.ALLOW_DUPLICATE_FAILED_ONLY,
    )

    if wait:
        return await handle.result()
    return handle.id, handle.first_execution_run_id


async def sweep_status(workflow_id: str) -> Dict[str, Any]:
    client = await Client.connect(TEMPORAL_ADDRESS, namespace=TEMPORAL_NAMESPACE)
    handle = client.get_workflow_handle(workflow_id)
    return await handle.query(SweepWorkflow.status)
