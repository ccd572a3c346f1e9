# portfolio/api/admin.py
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, Query

from portfolio.api.deps import require_admin
from portfolio.config import settings
from portfolio.domain.dtos import SweepReport
from portfolio.persistence.store import DiskStore
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.files import FileStore
from portfolio.services.sweep import OrphanSweeper
from portfolio.singletons import get_files, get_repo, get_store
from portfolio.temporal.client import start_sweep_workflow, sweep_status
from portfolio.temporal.dtos import WFSweepIn

router = APIRouter(prefix="/v1/admin", tags=["admin"], dependencies=[Depends(require_admin)])

def get_sweeper(repo: InMemoryRepo = Depends(get_repo), files: FileStore = Depends(get_files)) -> OrphanSweeper:
    return OrphanSweeper(repo, files, min_age_s=settings.sweep_min_age_s)

@router.post("/snapshot")
def force_snapshot(repo: InMemoryRepo = Depends(get_repo), store: DiskStore = Depends(get_store)):
    store.write_snapshot(repo.dump_json())
    return {"status": "ok", "snapshot_bytes": store.stats()["snapshot_bytes"]}

@router.get("/storage")
def storage_stats(store: DiskStore = Depends(get_store), files: FileStore = Depends(get_files)):
    return {**store.stats(), **files.stats()}

@router.post("/files/sweep", response_model=SweepReport)
def sweep_files(
    dry_run: bool = Query(True),
    min_age_s: Optional[float] = Query(None, ge=0),
    sweeper: OrphanSweeper = Depends(get_sweeper),
):
    return sweeper.run(dry_run=dry_run, min_age_s=min_age_s)

@router.post("/files/sweep/temporal")
async def sweep_files_temporal(
    wait: bool = Query(False),
    min_age_s: Optional[float] = Query(None, ge=0),
    request_id: Optional[str] = Query(None),
):
    """
    Start the durable sweep via Temporal (dry run, then delete).
    ?wait=true waits for the report; otherwise returns workflow ids.
    """
    out = await start_sweep_workflow(WFSweepIn(min_age_s=min_age_s, request_id=request_id), wait=wait)
    if wait:
        return {"report": out.report, "stage": out.stage}  # type: ignore[union-attr]
    wf_id, run_id = out  # type: ignore[misc]
    return {"workflow_id": wf_id, "run_id": run_id}

@router.get("/files/sweep/temporal/{workflow_id}/status")
async def sweep_temporal_status(workflow_id: str):
    return await sweep_status(workflow_id)
