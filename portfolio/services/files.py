# portfolio/services/files.py
from __future__ import annotations

import logging
import os
import re
import time
from pathlib import Path, PurePosixPath
from typing import Iterator

from portfolio.domain.errors import FileIOError
from portfolio.domain.models import Bucket

log = logging.getLogger("portfolio")

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_name(filename: str) -> str:
    # keep only the final path component of whatever the browser sent
    base = PurePosixPath(filename.replace("\\", "/")).name
    return _UNSAFE.sub("_", base).strip("._")


class FileStore:
    """
    Blob storage over a fixed set of buckets below one root directory.

    Paths handed out are `/<bucket>/<millis>-<name>`. The entity holding such a
    path does not own the bytes; nothing here counts references.
    """
    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    # -------- save (hard failure)
    def save(self, data: bytes, filename: str, bucket: Bucket | str) -> str:
        try:
            bucket = Bucket(bucket)
        except ValueError as exc:
            raise FileIOError(f"Unknown bucket: {bucket!r}") from exc
        name = _safe_name(filename or "")
        if not name:
            raise FileIOError(f"Invalid upload filename: {filename!r}")

        folder = self.root / bucket.value
        stamp = int(time.time() * 1000)
        target: Path | None = None
        try:
            folder.mkdir(parents=True, exist_ok=True)
            while True:
                target = folder / f"{stamp}-{name}"
                try:
                    f = open(target, "xb")
                except FileExistsError:
                    stamp += 1
                    continue
                break
            with f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
        except OSError as exc:
            if target is not None and target.exists():
                target.unlink(missing_ok=True)
            raise FileIOError(f"Failed to save {filename!r} to {bucket.value}: {exc}") from exc

        path = f"/{bucket.value}/{target.name}"
        log.info("[files] saved %s (%d bytes)", path, len(data))
        return path

    # -------- delete (idempotent, never raises)
    def delete(self, path: str) -> None:
        if not path:
            return
        full = self.resolve_path(path)
        if full is None:
            log.warning("[files] refusing to delete path outside buckets: %r", path)
            return
        try:
            full.unlink()
            log.info("[files] deleted %s", path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            log.warning("[files] failed to delete %s: %s", path, exc)

    def delete_many(self, paths: list[str]) -> None:
        for p in paths:
            self.delete(p)

    # -------- lookups
    def resolve_path(self, path: str) -> Path | None:
        """Map `/<bucket>/<name>` to a filesystem path, or None if it is not a blob path."""
        parts = PurePosixPath("/" + path.lstrip("/")).parts
        if len(parts) != 3:
            return None
        _, bucket, name = parts
        if bucket not in {b.value for b in Bucket} or name in ("", ".", ".."):
            return None
        return self.root / bucket / name

    def resolve(self, path: str) -> Path | None:
        full = self.resolve_path(path) if path else None
        return full if full is not None and full.is_file() else None

    def exists(self, path: str) -> bool:
        return self.resolve(path) is not None

    def iter_blobs(self) -> Iterator[tuple[str, float]]:
        """Yield (path, mtime) for every blob in every bucket."""
        for bucket in Bucket:
            folder = self.root / bucket.value
            if not folder.is_dir():
                continue
            for entry in folder.iterdir():
                if entry.is_file():
                    yield f"/{bucket.value}/{entry.name}", entry.stat().st_mtime

    def stats(self) -> dict:
        count = 0
        total = 0
        for bucket in Bucket:
            folder = self.root / bucket.value
            if folder.is_dir():
                for entry in folder.iterdir():
                    if entry.is_file():
                        count += 1
                        total += entry.stat().st_size
        return {"upload_root": str(self.root), "blob_count": count, "blob_bytes": total}
