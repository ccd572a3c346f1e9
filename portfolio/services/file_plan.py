from __future__ import annotations

import logging
from dataclasses import dataclass, field

from portfolio.domain.errors import ValidationError
from portfolio.domain.models import Bucket
from portfolio.services.files import FileStore

log = logging.getLogger("portfolio")


@dataclass(frozen=True)
class Upload:
    filename: str
    data: bytes
    content_type: str | None = None


@dataclass
class FilePlan:
    """
    File side of one mutation, run as a compensable sequence:

      1. save new blobs          (failure aborts the mutation)
      2. caller commits record   (failure leaves new blobs orphaned for the sweep)
      3. finish(): delete blobs retired by the plan, only after the commit

    Old blobs are never touched before step 3.
    """
    files: FileStore
    saved: list[str] = field(default_factory=list)
    retired: list[str] = field(default_factory=list)

    def save(self, upload: Upload, bucket: Bucket) -> str:
        path = self.files.save(upload.data, upload.filename, bucket)
        self.saved.append(path)
        return path

    def retire(self, path: str) -> None:
        if path and path not in self.retired:
            self.retired.append(path)

    def single(self, current: str, upload: Upload | None, clear: bool, bucket: Bucket) -> str:
        """keep / replace / clear for a single-file field. A new upload wins over the clear flag."""
        if upload is not None:
            new_path = self.save(upload, bucket)
            self.retire(current)
            return new_path
        if clear:
            self.retire(current)
            return ""
        return current

    @staticmethod
    def check_gallery(current: list[str], survivors: list[str] | None, removed: list[str]) -> None:
        owned = set(current)
        foreign = [p for p in (survivors or []) + removed if p not in owned]
        if foreign:
            raise ValidationError(f"Photo paths not owned by this record: {foreign}")

    def gallery(
        self,
        current: list[str],
        survivors: list[str] | None,
        removed: list[str],
        uploads: list[Upload],
        bucket: Bucket,
    ) -> list[str]:
        """
        Surviving originals in their stored order, then new uploads in upload order.
        `survivors=None` keeps every current path not listed in `removed`.
        """
        self.check_gallery(current, survivors, removed)
        keep = set(current if survivors is None else survivors) - set(removed)
        result: list[str] = []
        for p in current:
            if p not in keep:
                self.retire(p)
            elif p not in result:
                result.append(p)
        result.extend(self.save(u, bucket) for u in uploads)
        return result

    def finish(self) -> list[str]:
        """Delete retired blobs. Call only once the record commit is durable."""
        self.files.delete_many(self.retired)
        return list(self.retired)

    def abandon(self, exc: BaseException) -> None:
        if self.saved:
            log.warning("[files] commit failed (%s); leaving %d new blob(s) for the sweep: %s",
                        exc, len(self.saved), self.saved)
