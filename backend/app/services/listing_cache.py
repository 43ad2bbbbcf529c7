"""Bounded in-memory cache for single-listing lookups.

Entries are fresh for ``ttl_seconds`` after they are stored. Staleness is only
checked on read: a stale entry reads as absent and stays in place until the
next successful lookup overwrites it or LRU eviction drops it.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

V = TypeVar("V")

DEFAULT_TTL_SECONDS = 10 * 60
DEFAULT_CAPACITY = 1024


@dataclass
class CacheEntry(Generic[V]):
    value: V
    stored_at: float


class ListingCache(Generic[V]):
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.ttl_seconds = ttl_seconds
        self.capacity = capacity
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry[V]]" = OrderedDict()

    def _is_fresh(self, entry: CacheEntry[V]) -> bool:
        return self._clock() - entry.stored_at < self.ttl_seconds

    def get(self, key: str) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None or not self._is_fresh(entry):
            return None
        self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: V) -> None:
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and self._is_fresh(entry)

    def __len__(self) -> int:
        return len(self._entries)
