from __future__ import annotations
from threading import RLock, Condition
from typing import Any, Dict, Iterable
from uuid import UUID

from pydantic import BaseModel

from portfolio.domain.errors import ConflictError, NotFoundError
from portfolio.domain.models import Kind, MODELS, RELATIONS, file_refs, relations_of
from portfolio.persistence.store import DiskStore, delete_entry, links_entry, record_entry

LinkKey = tuple[Kind, str]

# kinds that exist at most once per deployment
SINGLE_INSTANCE = frozenset({Kind.profile})


class RWLock:
    def __init__(self):
        self._lock = RLock()
        self._readers = 0
        self._cond = Condition(self._lock)

    def acquire_read(self):
        with self._lock:
            self._readers += 1

    def release_read(self):
        with self._lock:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        self._lock.acquire()
        while self._readers > 0:
            self._cond.wait()

    def release_write(self):
        self._lock.release()


def _label(kind: Kind) -> str:
    return kind.value.replace("_", " ").title()


class InMemoryRepo:
    """
    Record store for every entity kind plus the association rows of each
    relation in RELATIONS. Writes go to the WAL first (when a DiskStore is
    attached) and only then become visible in memory.
    """
    def __init__(self, store: DiskStore | None = None):
        self.store = store
        self.records: Dict[Kind, Dict[UUID, BaseModel]] = {k: {} for k in Kind}
        self.links: Dict[LinkKey, Dict[UUID, list[UUID]]] = {key: {} for key in RELATIONS}
        self.locks: Dict[UUID, RWLock] = {}
        self._locks_guard = RLock()
        self._single_guard = RLock()

    def get_lock(self, entity_id: UUID) -> RWLock:
        with self._locks_guard:
            if entity_id not in self.locks:
                self.locks[entity_id] = RWLock()
            return self.locks[entity_id]

    # ---------- reads ----------
    def find(self, kind: Kind, entity_id: UUID) -> BaseModel | None:
        return self.records[kind].get(entity_id)

    def get(self, kind: Kind, entity_id: UUID) -> BaseModel:
        rec = self.find(kind, entity_id)
        if rec is None:
            raise NotFoundError(f"{_label(kind)} {entity_id}")
        return rec

    def exists(self, kind: Kind, entity_id: UUID) -> bool:
        return entity_id in self.records[kind]

    def list(self, kind: Kind) -> list[BaseModel]:
        return list(self.records[kind].values())

    def related(self, kind: Kind, owner_id: UUID, relation: str) -> list[UUID]:
        return list(self.links[(kind, relation)].get(owner_id, []))

    def read(self, kind: Kind, entity_id: UUID) -> tuple[BaseModel, dict[str, list[UUID]]] | None:
        """Record plus its link sets, consistent with respect to concurrent commits."""
        lock = self.get_lock(entity_id)
        lock.acquire_read()
        try:
            rec = self.find(kind, entity_id)
            if rec is None:
                return None
            return rec, {rel: self.related(kind, entity_id, rel) for rel in relations_of(kind)}
        finally:
            lock.release_read()

    def all_file_refs(self) -> set[str]:
        refs: set[str] = set()
        for kind in Kind:
            for rec in list(self.records[kind].values()):
                refs.update(file_refs(rec))
        return refs

    # ---------- writes ----------
    def commit(
        self,
        kind: Kind,
        record: BaseModel,
        links: dict[str, list[UUID]] | None = None,
        op: str = "update",
    ) -> None:
        """
        Persist a record and (optionally) full replacements of its link sets as one unit.
        `op="update"` fails with NotFoundError if the record was removed meanwhile;
        a second create of a single-instance kind fails with ConflictError.
        """
        links = links or {}
        if op == "create" and kind in SINGLE_INSTANCE:
            with self._single_guard:
                if self.records[kind]:
                    raise ConflictError(f"A {_label(kind).lower()} already exists; update it instead")
                self._commit_locked(kind, record, links, op)
            return
        self._commit_locked(kind, record, links, op)

    def _commit_locked(self, kind: Kind, record: BaseModel, links: dict[str, list[UUID]], op: str) -> None:
        lock = self.get_lock(record.id)
        lock.acquire_write()
        try:
            if op == "update" and self.find(kind, record.id) is None:
                raise NotFoundError(f"{_label(kind)} {record.id}")
            self._wal(record_entry(kind.value, op, record, links))
            self._put(kind, record, links)
        finally:
            lock.release_write()

    def set_links(self, kind: Kind, owner_id: UUID, relation: str, ids: Iterable[UUID]) -> None:
        ids = list(ids)
        lock = self.get_lock(owner_id)
        lock.acquire_write()
        try:
            self._wal(links_entry(kind.value, owner_id, relation, ids))
            self._write_links(kind, owner_id, relation, ids)
        finally:
            lock.release_write()

    def remove(self, kind: Kind, entity_id: UUID) -> BaseModel | None:
        """Delete a record and every association row that mentions it. Idempotent."""
        lock = self.get_lock(entity_id)
        lock.acquire_write()
        try:
            rec = self.find(kind, entity_id)
            if rec is None:
                return None
            self._wal(delete_entry(kind.value, entity_id))
            self._drop(kind, entity_id)
            return rec
        finally:
            lock.release_write()
            with self._locks_guard:
                self.locks.pop(entity_id, None)

    # ---------- internals (no WAL) ----------
    def _wal(self, entry: dict) -> None:
        if self.store is not None:
            self.store.append_wal(entry)

    def _put(self, kind: Kind, record: BaseModel, links: dict[str, list[UUID]]) -> None:
        self.records[kind][record.id] = record
        for relation, ids in links.items():
            self._write_links(kind, record.id, relation, ids)

    def _write_links(self, kind: Kind, owner_id: UUID, relation: str, ids: list[UUID]) -> None:
        # full replacement, never a merge
        self.links[(kind, relation)][owner_id] = list(ids)

    def _drop(self, kind: Kind, entity_id: UUID) -> None:
        self.records[kind].pop(entity_id, None)
        for (owner, relation), target in RELATIONS.items():
            table = self.links[(owner, relation)]
            if owner == kind:
                table.pop(entity_id, None)
            if target == kind:
                for owner_id, ids in list(table.items()):
                    if entity_id in ids:
                        table[owner_id] = [i for i in ids if i != entity_id]

    # ---------- (A) serialization ----------
    def dump_json(self) -> dict[str, Any]:
        """Serialize full repo to a JSON-friendly snapshot image."""
        return {
            "schema_version": 1,
            "records": {
                kind.value: {str(k): v.model_dump(mode="json") for k, v in self.records[kind].items()}
                for kind in Kind
            },
            "links": {
                f"{owner.value}.{relation}": {str(k): [str(i) for i in ids] for k, ids in table.items()}
                for (owner, relation), table in self.links.items()
            },
        }

    # ---------- (B) hydrate from snapshot ----------
    def hydrate(self, image: dict[str, Any]) -> None:
        """Replace in-memory state with a snapshot image."""
        for table in self.records.values():
            table.clear()
        for table in self.links.values():
            table.clear()
        self.locks.clear()

        if not image:
            return

        for kind_name, rows in (image.get("records") or {}).items():
            kind = Kind(kind_name)
            model = MODELS[kind]
            for sid, data in rows.items():
                self.records[kind][UUID(sid)] = model(**data)

        for key, rows in (image.get("links") or {}).items():
            owner_name, relation = key.split(".", 1)
            table = self.links[(Kind(owner_name), relation)]
            for sid, ids in rows.items():
                table[UUID(sid)] = [UUID(i) for i in ids]

    # ---------- (C) WAL replay ----------
    def apply_wal_entry(self, entry: dict[str, Any]) -> None:
        """Apply one WAL op directly to in-memory structures (no WAL here!)."""
        op = entry.get("op", "")
        if op == "links.set":
            self._write_links(
                Kind(entry["kind"]), UUID(entry["id"]), entry["relation"],
                [UUID(i) for i in entry["ids"]],
            )
            return

        kind_name, _, action = op.partition(".")
        try:
            kind = Kind(kind_name)
        except ValueError:
            # unknown op; ignore safely
            return
        if action in ("create", "update"):
            record = MODELS[kind](**entry["data"])
            links = {rel: [UUID(i) for i in ids] for rel, ids in (entry.get("links") or {}).items()}
            self._put(kind, record, links)
        elif action == "delete":
            self._drop(kind, UUID(entry["id"]))
