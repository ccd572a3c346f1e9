# portfolio_client/store.py
"""
Optimistic client-side collections.

All state lives in an immutable CollectionState and changes only through
dispatch(action) -> reduce(state, action). Mutations apply locally first,
then reconcile with the server answer or revert to the pre-mutation snapshot.
"""
from __future__ import annotations
import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from pydantic import BaseModel

from .client import PortfolioClient
from .exceptions import Conflict, MalformedResponse, NotFound, PortfolioError
from .resources import (
    ProfileResource, ProjectResource, Resource, SkillResource, SocialLinkResource, WorkHistoryResource,
)

log = logging.getLogger("portfolio_client")

T = TypeVar("T", bound=BaseModel)

STABLE = "stable"
PENDING = "pending"
ROLLED_BACK = "rolled_back"


@dataclass(frozen=True)
class CollectionState(Generic[T]):
    items: tuple = ()
    status: str = STABLE
    pending: frozenset = frozenset()
    stale: bool = False
    error: Optional[str] = None

    def index_of(self, item_id: str) -> Optional[int]:
        for i, item in enumerate(self.items):
            if item.id == item_id:
                return i
        return None

    def get(self, item_id: str) -> Optional[T]:
        i = self.index_of(item_id)
        return None if i is None else self.items[i]

# -------- Actions --------

@dataclass(frozen=True)
class Replace:
    items: tuple

@dataclass(frozen=True)
class Insert:
    item: Any
    index: int = 0

@dataclass(frozen=True)
class Swap:
    target_id: str
    item: Any

@dataclass(frozen=True)
class Remove:
    item_id: str

@dataclass(frozen=True)
class Restore:
    item: Any
    index: int

@dataclass(frozen=True)
class Begin:
    item_id: str

@dataclass(frozen=True)
class Settle:
    item_id: str
    rolled_back: bool = False
    error: Optional[str] = None

@dataclass(frozen=True)
class MarkStale:
    error: Optional[str] = None

Action = Union[Replace, Insert, Swap, Remove, Restore, Begin, Settle, MarkStale]


def _status(pending: frozenset, rolled_back: bool = False) -> str:
    if pending:
        return PENDING
    return ROLLED_BACK if rolled_back else STABLE


def reduce(state: CollectionState, action: Action) -> CollectionState:
    """Pure transition. Unknown targets leave the items untouched."""
    items = state.items
    if isinstance(action, Replace):
        return replace(state, items=tuple(action.items), stale=False, error=None)
    if isinstance(action, (Insert, Restore)):
        at = max(0, min(action.index, len(items)))
        return replace(state, items=items[:at] + (action.item,) + items[at:])
    if isinstance(action, Swap):
        return replace(state, items=tuple(action.item if x.id == action.target_id else x for x in items))
    if isinstance(action, Remove):
        return replace(state, items=tuple(x for x in items if x.id != action.item_id))
    if isinstance(action, Begin):
        pending = state.pending | {action.item_id}
        return replace(state, pending=pending, status=_status(pending), error=None)
    if isinstance(action, Settle):
        pending = state.pending - {action.item_id}
        return replace(
            state,
            pending=pending,
            status=_status(pending, action.rolled_back),
            error=action.error if action.rolled_back else state.error,
        )
    if isinstance(action, MarkStale):
        return replace(state, stale=True, error=action.error or state.error)
    raise TypeError(f"unknown action {action!r}")


@dataclass
class _IdLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class OptimisticStore(Generic[T]):
    """One collection. One mutation per entity id is in flight at a time."""

    def __init__(self, resource: Resource):
        self.resource = resource
        self.state: CollectionState = CollectionState()
        self._subscribers: list[Callable[[CollectionState], None]] = []
        self._locks: dict[str, _IdLock] = {}
        self._creating: set[str] = set()

    # ------------ state plumbing ------------
    @property
    def items(self) -> tuple:
        return self.state.items

    def subscribe(self, fn: Callable[[CollectionState], None]) -> Callable[[], None]:
        self._subscribers.append(fn)
        return lambda: self._subscribers.remove(fn)

    def dispatch(self, action: Action) -> CollectionState:
        self.state = reduce(self.state, action)
        for fn in list(self._subscribers):
            fn(self.state)
        return self.state

    @asynccontextmanager
    async def _exclusive(self, item_id: str):
        """Per-id mutex; the entry is dropped once no caller holds or awaits it."""
        entry = self._locks.get(item_id)
        if entry is None:
            entry = self._locks[item_id] = _IdLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[item_id]

    def _reject_if_creating(self, item_id: str) -> None:
        if item_id in self._creating:
            raise Conflict(f"{self.resource.name} {item_id} is still being created")

    # ------------ reads ------------
    async def refresh(self) -> CollectionState:
        items = await self.resource.list()
        return self.dispatch(Replace(tuple(items)))

    async def _refetch_quietly(self, reason: str) -> None:
        self.dispatch(MarkStale(reason))
        try:
            await self.refresh()
        except PortfolioError as exc:
            log.warning("[store] %s refetch failed, collection stays stale: %s", self.resource.name, exc)

    # ------------ mutations ------------
    async def add(self, draft, **uploads) -> T:
        temp_id = f"temp-{uuid.uuid4()}"
        self._creating.add(temp_id)
        try:
            self.dispatch(Insert(self.resource.placeholder(temp_id, draft), 0))
            self.dispatch(Begin(temp_id))
            try:
                created = await self.resource.create(draft, **uploads)
            except MalformedResponse as exc:
                # created server-side but unreadable: keep the placeholder, reload the truth
                log.warning("[store] %s create returned a malformed body, refetching: %s", self.resource.name, exc)
                self.dispatch(Settle(temp_id))
                placeholder = self.state.get(temp_id)
                await self._refetch_quietly(str(exc))
                return placeholder
            except Exception as exc:
                self.dispatch(Remove(temp_id))
                self.dispatch(Settle(temp_id, rolled_back=True, error=str(exc)))
                raise
            self.dispatch(Swap(temp_id, created))
            self.dispatch(Settle(temp_id))
            return created
        finally:
            self._creating.discard(temp_id)

    async def update(self, item_id: str, draft, **uploads) -> T:
        self._reject_if_creating(item_id)
        async with self._exclusive(item_id):
            snapshot = self.state.get(item_id)
            if snapshot is None:
                raise NotFound(f"{self.resource.name} {item_id} is not in the local collection")
            self.dispatch(Swap(item_id, self.resource.patched(snapshot, draft)))
            self.dispatch(Begin(item_id))
            try:
                updated = await self.resource.update(item_id, draft, **uploads)
            except MalformedResponse as exc:
                log.warning("[store] %s update of %s returned a malformed body, keeping local copy: %s",
                            self.resource.name, item_id, exc)
                self.dispatch(Settle(item_id))
                return self.state.get(item_id)
            except Exception as exc:
                await self._rollback_update(item_id, snapshot, exc)
                raise
            self.dispatch(Swap(item_id, updated))
            self.dispatch(Settle(item_id))
            return updated

    async def delete(self, item_id: str) -> None:
        self._reject_if_creating(item_id)
        async with self._exclusive(item_id):
            index = self.state.index_of(item_id)
            if index is None:
                # nothing to show optimistically; delete is idempotent server-side
                await self.resource.delete(item_id)
                return
            snapshot = self.state.items[index]
            self.dispatch(Remove(item_id))
            self.dispatch(Begin(item_id))
            try:
                await self.resource.delete(item_id)
            except Exception as exc:
                await self._rollback_delete(snapshot, index, exc)
                raise
            self.dispatch(Settle(item_id))

    # ------------ rollback ------------
    async def _rollback_update(self, item_id: str, snapshot: T, exc: Exception) -> None:
        if self.state.index_of(item_id) is None:
            await self._degrade(item_id, exc)
            return
        self.dispatch(Swap(item_id, snapshot))
        self.dispatch(Settle(item_id, rolled_back=True, error=str(exc)))

    async def _rollback_delete(self, snapshot: T, index: int, exc: Exception) -> None:
        if self.state.index_of(snapshot.id) is not None:
            await self._degrade(snapshot.id, exc)
            return
        self.dispatch(Restore(snapshot, index))
        self.dispatch(Settle(snapshot.id, rolled_back=True, error=str(exc)))

    async def _degrade(self, item_id: str, exc: Exception) -> None:
        log.warning("[store] %s rollback of %s could not be applied, refetching", self.resource.name, item_id)
        self.dispatch(Settle(item_id, rolled_back=True, error=str(exc)))
        await self._refetch_quietly(str(exc))


@dataclass
class PortfolioStores:
    """The five collections behind the admin UI."""
    projects: OptimisticStore
    skills: OptimisticStore
    social_links: OptimisticStore
    work_history: OptimisticStore
    profile: OptimisticStore

    @property
    def all(self) -> list[OptimisticStore]:
        return [self.projects, self.skills, self.social_links, self.work_history, self.profile]

    @classmethod
    def for_client(cls, client: PortfolioClient) -> "PortfolioStores":
        return cls(
            projects=OptimisticStore(ProjectResource(client)),
            skills=OptimisticStore(SkillResource(client)),
            social_links=OptimisticStore(SocialLinkResource(client)),
            work_history=OptimisticStore(WorkHistoryResource(client)),
            profile=OptimisticStore(ProfileResource(client)),
        )

    async def refresh_all(self) -> None:
        await asyncio.gather(*(s.refresh() for s in self.all))
