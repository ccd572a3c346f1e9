# portfolio/config.py
from __future__ import annotations
from pathlib import Path
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Storage ---
    data_dir: str = "./data"
    upload_dir: Optional[str] = None      # defaults to <data_dir>/uploads

    # --- Admin gate ---
    admin_token: Optional[str] = None     # unset = gate open (dev)

    # --- Caching / sweep ---
    public_cache_ttl_s: float = Field(default=60.0, ge=0)
    sweep_min_age_s: float = Field(default=3600.0, ge=0)

    # --- Temporal ---
    temporal_address: str = "localhost:7233"
    temporal_namespace: str = "default"
    sweep_task_queue: str = "sweep-tq"
    app_base_url: str = "http://localhost:8000"

    # --- Logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("LOG_LEVEL must be a standard logging level name")
        return v

    @property
    def upload_root(self) -> Path:
        return Path(self.upload_dir) if self.upload_dir else Path(self.data_dir) / "uploads"

# Singleton
settings = Settings()
