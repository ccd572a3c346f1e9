# portfolio/persistence/store.py
from __future__ import annotations
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable
from uuid import UUID

from pydantic import BaseModel

from portfolio.domain.errors import FileIOError

log = logging.getLogger("portfolio")

SCHEMA_VERSION = 1


def _ts() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# -------- WAL entry shapes (one JSON object per line)

def record_entry(kind: str, op: str, record: BaseModel, links: dict[str, list[UUID]]) -> dict[str, Any]:
    """`<kind>.create` / `<kind>.update`: the full record plus full replacements of its link sets."""
    return {
        "ts": _ts(),
        "op": f"{kind}.{op}",
        "id": str(record.id),
        "data": record.model_dump(mode="json"),
        "links": {rel: [str(i) for i in ids] for rel, ids in links.items()},
    }


def delete_entry(kind: str, entity_id: UUID) -> dict[str, Any]:
    return {"ts": _ts(), "op": f"{kind}.delete", "id": str(entity_id)}


def links_entry(kind: str, owner_id: UUID, relation: str, ids: Iterable[UUID]) -> dict[str, Any]:
    return {
        "ts": _ts(),
        "op": "links.set",
        "kind": kind,
        "id": str(owner_id),
        "relation": relation,
        "ids": [str(i) for i in ids],
    }


class DiskStore:
    """
    Durability for the portfolio records: JSON-lines WAL + atomic snapshot.
      <data_dir>/records.snapshot.json
      <data_dir>/records.wal.jsonl
    A mutation is committed once its WAL line is fsynced. Any I/O failure
    surfaces as FileIOError so the mutation aborts before memory changes.
    """
    def __init__(self, data_dir: str | Path):
        self.root = Path(data_dir)
        self.root.mkdir(parents=True, exist_ok=True)
        self.snapshot_path = self.root / "records.snapshot.json"
        self.wal_path = self.root / "records.wal.jsonl"

    @staticmethod
    def _write_synced(path: Path, mode: str, text: str) -> None:
        with open(path, mode, encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())

    def append_wal(self, entry: dict) -> None:
        line = json.dumps(entry, separators=(",", ":"), ensure_ascii=False)
        try:
            self._write_synced(self.wal_path, "a", line + "\n")
        except OSError as exc:
            raise FileIOError(f"WAL append failed for {entry.get('op')} {entry.get('id')}: {exc}") from exc

    def write_snapshot(self, image: dict) -> None:
        """Replace the snapshot atomically, then start an empty WAL."""
        image = {**image, "schema_version": SCHEMA_VERSION}
        tmp = self.snapshot_path.with_suffix(".json.tmp")
        try:
            self._write_synced(tmp, "w", json.dumps(image, separators=(",", ":"), ensure_ascii=False))
            os.replace(tmp, self.snapshot_path)
            self._write_synced(self.wal_path, "w", "")
        except OSError as exc:
            raise FileIOError(f"snapshot write failed: {exc}") from exc
        log.info("[persistence] snapshot written (%d bytes)", self.snapshot_path.stat().st_size)

    def _read_wal(self) -> list[dict]:
        if not self.wal_path.exists():
            return []
        lines = [ln for ln in self.wal_path.read_text(encoding="utf-8").splitlines() if ln.strip()]
        wal: list[dict] = []
        for n, line in enumerate(lines):
            try:
                wal.append(json.loads(line))
            except json.JSONDecodeError:
                if n != len(lines) - 1:
                    raise
                # a crash mid-append leaves a torn last line; that mutation was never acknowledged
                log.warning("[persistence] dropping torn WAL tail (%d bytes)", len(line))
        return wal

    def load(self) -> dict[str, Any]:
        """Return {'snapshot': dict|None, 'wal': list[dict]}"""
        snap = None
        if self.snapshot_path.exists():
            text = self.snapshot_path.read_text(encoding="utf-8")
            if text.strip():
                snap = json.loads(text)
                version = snap.get("schema_version", SCHEMA_VERSION)
                if version != SCHEMA_VERSION:
                    raise ValueError(f"unsupported snapshot schema_version {version}")
        return {"snapshot": snap, "wal": self._read_wal()}

    def stats(self) -> dict:
        def size(p: Path) -> int:
            return p.stat().st_size if p.exists() else 0
        return {
            "snapshot_bytes": size(self.snapshot_path),
            "wal_bytes": size(self.wal_path),
            "snapshot_path": str(self.snapshot_path),
            "wal_path": str(self.wal_path),
        }
