# portfolio/singletons.py
from __future__ import annotations
import logging

from portfolio.config import settings
from portfolio.persistence.store import DiskStore
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache
from portfolio.services.files import FileStore

log = logging.getLogger("portfolio")

# singletons
store_singleton = DiskStore(settings.data_dir)
repo_singleton = InMemoryRepo(store=store_singleton)
files_singleton = FileStore(settings.upload_root)
cache_singleton = ProjectionCache(ttl_s=settings.public_cache_ttl_s)

def get_repo() -> InMemoryRepo: return repo_singleton
def get_store() -> DiskStore: return store_singleton
def get_files() -> FileStore: return files_singleton
def get_cache() -> ProjectionCache: return cache_singleton


def bootstrap_from_disk() -> None:
    loaded = store_singleton.load()
    snap = loaded.get("snapshot")
    wal = loaded.get("wal", [])
    if snap:
        counts = {k: len(v) for k, v in (snap.get("records") or {}).items()}
        log.info("[persistence] loading snapshot %s", counts)
        repo_singleton.hydrate(snap)
    if wal:
        log.info("[persistence] replaying WAL entries: %d", len(wal))
        for e in wal:
            repo_singleton.apply_wal_entry(e)
    cache_singleton.clear()
