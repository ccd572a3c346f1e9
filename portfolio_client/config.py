# portfolio_client/config.py
from __future__ import annotations
from dataclasses import dataclass

DEFAULT_TIMEOUT_S = 20.0
DEFAULT_RETRIES = 2
DEFAULT_BACKOFF_S = 0.25

@dataclass(frozen=True)
class ClientConfig:
    base_url: str                 # e.g., "http://localhost:8000"
    api_key: str | None = None    # sent as "Authorization: Bearer <api_key>"
    timeout_s: float = DEFAULT_TIMEOUT_S
    retries: int = DEFAULT_RETRIES
    backoff_s: float = DEFAULT_BACKOFF_S
