# portfolio/temporal/activities.py
from __future__ import annotations
from typing import Any, Dict, Optional

import httpx
from temporalio import activity

from portfolio.temporal.config import ADMIN_TOKEN, APP_BASE_URL
from portfolio.temporal.dtos import WFSweepIn, WFSweepPlan


def _call_sweep(dry_run: bool, min_age_s: Optional[float]) -> Dict[str, Any]:
    params: Dict[str, Any] = {"dry_run": str(dry_run).lower()}
    if min_age_s is not None:
        params["min_age_s"] = min_age_s
    headers = {"Authorization": f"Bearer {ADMIN_TOKEN}"} if ADMIN_TOKEN else {}
    with httpx.Client(timeout=30.0) as client:
        resp = client.post(f"{APP_BASE_URL}/v1/admin/files/sweep", params=params, headers=headers)
        resp.raise_for_status()
        return resp.json()

# ---------- Activity: plan (dry run) ----------

@activity.defn
def plan_sweep(payload: WFSweepIn) -> WFSweepPlan:
    """
    Dry run against the admin API. Nothing is deleted.
    """
    report = _call_sweep(True, payload.min_age_s)
    activity.logger.info("[sweep] planned %d orphans out of %d blobs", len(report["orphans"]), report["scanned"])
    return WFSweepPlan(orphans=list(report["orphans"]), scanned=int(report["scanned"]))

# ---------- Activity: execute ----------

@activity.defn
def execute_sweep(payload: WFSweepIn) -> Dict[str, Any]:
    """
    Real sweep. References are recomputed server-side, so a blob that became
    referenced after planning survives.
    """
    return _call_sweep(False, payload.min_age_s)
