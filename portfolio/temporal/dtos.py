# portfolio/temporal/dtos.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

@dataclass
class WFSweepIn:
    min_age_s: Optional[float] = None
    request_id: Optional[str] = None  # reused as workflow_id so a sweep is not started twice

@dataclass
class WFSweepPlan:
    orphans: List[str] = field(default_factory=list)
    scanned: int = 0

@dataclass
class WFSweepOut:
    report: Dict[str, Any]
    stage: str
