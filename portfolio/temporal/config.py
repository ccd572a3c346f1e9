# portfolio/temporal/config.py
from __future__ import annotations
import os

from portfolio.config import settings

# Temporal connection
TEMPORAL_ADDRESS = settings.temporal_address
TEMPORAL_NAMESPACE = settings.temporal_namespace
SWEEP_TASK_QUEUE = settings.sweep_task_queue

# How activities reach the admin API (the same FastAPI you run)
APP_BASE_URL = settings.app_base_url.rstrip("/")
ADMIN_TOKEN = settings.admin_token

# Timeouts (seconds)
ACTIVITY_START_TO_CLOSE = int(os.getenv("ACTIVITY_START_TO_CLOSE", "60"))
