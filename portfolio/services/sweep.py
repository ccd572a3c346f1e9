from __future__ import annotations

import logging
import time

from portfolio.domain.dtos import SweepReport
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.files import FileStore

log = logging.getLogger("portfolio")


class OrphanSweeper:
    """
    Out-of-band cleanup for blobs that no live record references, e.g. a blob
    saved by a mutation whose commit then failed. Blobs younger than
    `min_age_s` are left alone so in-flight mutations are never raced.
    """
    def __init__(self, repo: InMemoryRepo, files: FileStore, min_age_s: float = 3600.0):
        self.repo = repo
        self.files = files
        self.min_age_s = min_age_s

    def run(self, dry_run: bool = True, min_age_s: float | None = None) -> SweepReport:
        min_age = self.min_age_s if min_age_s is None else min_age_s
        cutoff = time.time() - min_age
        referenced = self.repo.all_file_refs()

        scanned = 0
        skipped = 0
        orphans: list[str] = []
        for path, mtime in self.files.iter_blobs():
            scanned += 1
            if path in referenced:
                continue
            if mtime > cutoff:
                skipped += 1
                continue
            orphans.append(path)

        orphans.sort()
        deleted: list[str] = []
        if not dry_run:
            for path in orphans:
                self.files.delete(path)
                deleted.append(path)
        log.info("[sweep] scanned=%d referenced=%d orphans=%d deleted=%d skipped_recent=%d",
                 scanned, len(referenced), len(orphans), len(deleted), skipped)
        return SweepReport(
            dry_run=dry_run,
            scanned=scanned,
            referenced=len(referenced),
            orphans=orphans,
            deleted=deleted,
            skipped_recent=skipped,
        )
