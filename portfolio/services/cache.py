from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Iterable

from portfolio.domain.models import Kind

log = logging.getLogger("portfolio")


@dataclass
class _Entry:
    value: Any
    tags: frozenset[Kind]
    expires_at: float


class ProjectionCache:
    """
    Short-TTL cache for public read projections.

    Every entry is tagged with the entity kinds it was built from; a write to a
    kind drops every entry carrying that tag, so no projection outlives a
    committed mutation.
    """
    def __init__(self, ttl_s: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_s = ttl_s
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = RLock()
        # bumped on every invalidation; a load that straddles one is not stored
        self._generation = 0

    def get_or_load(self, key: str, tags: Iterable[Kind], loader: Callable[[], Any]) -> Any:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.expires_at > now:
                return entry.value
            generation = self._generation
        value = loader()
        if self.ttl_s > 0:
            with self._lock:
                if generation == self._generation:
                    self._entries[key] = _Entry(value, frozenset(tags), now + self.ttl_s)
        return value

    def invalidate(self, *kinds: Kind) -> int:
        with self._lock:
            self._generation += 1
            stale = [k for k, e in self._entries.items() if e.tags.intersection(kinds)]
            for k in stale:
                del self._entries[k]
        if stale:
            log.debug("[cache] invalidated %s for %s", stale, [k.value for k in kinds])
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
