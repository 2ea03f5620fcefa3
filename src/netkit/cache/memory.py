# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Bounded in-memory cache."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from .base import CacheStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    data: bytes
    expires_at: float

    @property
    def cost(self) -> int:
        return len(self.data)


class MemoryCache(CacheStore):
    """LRU cache bounded by entry count and total byte cost.

    Capacity eviction (least recently used first) and TTL expiry are independent:
    an entry disappears on whichever comes first. Expired entries are dropped lazily
    when read.
    """

    def __init__(
        self,
        count_limit: int = 100,
        cost_limit: int = 50 * 1024 * 1024,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.count_limit = count_limit
        self.cost_limit = cost_limit
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._total_cost = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def total_cost(self) -> int:
        return self._total_cost

    def store(self, key: str, data: bytes, ttl: float) -> None:
        if ttl <= 0:
            return
        entry = _Entry(bytes(data), self._clock() + ttl)
        with self._lock:
            self._discard(key)
            if self.cost_limit > 0 and entry.cost > self.cost_limit:
                logger.debug("Entry %s (%d bytes) exceeds cost limit; not cached", key, entry.cost)
                return
            self._entries[key] = entry
            self._total_cost += entry.cost
            self._evict()

    def retrieve(self, key: str) -> bytes | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                self._discard(key)
                return None
            self._entries.move_to_end(key)
            return entry.data

    def remove(self, key: str) -> None:
        with self._lock:
            self._discard(key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._total_cost = 0

    def _discard(self, key: str) -> None:
        entry = self._entries.pop(key, None)
        if entry is not None:
            self._total_cost -= entry.cost

    def _evict(self) -> None:
        while self._entries and (
            (self.count_limit > 0 and len(self._entries) > self.count_limit)
            or (self.cost_limit > 0 and self._total_cost > self.cost_limit)
        ):
            key, entry = self._entries.popitem(last=False)
            self._total_cost -= entry.cost
            logger.debug("Evicted %s from memory cache", key)
