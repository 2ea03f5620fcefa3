# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Cache store protocol and cache policy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from ..config import NetkitSettings, load_settings


class CacheStore(Protocol):
    """Keyed byte storage with per-entry time-to-live.

    Expired entries are logically absent: `retrieve` never returns stale data.
    Implementations own their synchronization and are safe to share across tasks.
    """

    def store(self, key: str, data: bytes, ttl: float) -> None: ...

    def retrieve(self, key: str) -> bytes | None: ...

    def remove(self, key: str) -> None: ...

    def clear(self) -> None: ...


class CacheMode(str, Enum):
    NEVER = "never"
    MEMORY = "memory"
    DISK = "disk"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class CachePolicy:
    """Where responses are cached and for how long."""

    mode: CacheMode = CacheMode.NEVER
    ttl: float = 0.0

    @classmethod
    def never(cls) -> CachePolicy:
        return cls()

    @classmethod
    def memory(cls, ttl: float) -> CachePolicy:
        return cls(CacheMode.MEMORY, ttl)

    @classmethod
    def disk(cls, ttl: float) -> CachePolicy:
        return cls(CacheMode.DISK, ttl)

    @classmethod
    def hybrid(cls, ttl: float) -> CachePolicy:
        return cls(CacheMode.HYBRID, ttl)

    @property
    def enabled(self) -> bool:
        return self.mode is not CacheMode.NEVER

    @property
    def time_to_live(self) -> float:
        return 0.0 if self.mode is CacheMode.NEVER else self.ttl


def build_cache_store(policy: CachePolicy, settings: NetkitSettings | None = None) -> CacheStore | None:
    """Create the store matching `policy`, or None when caching is disabled."""
    from .durable import DurableCache
    from .layered import LayeredCache
    from .memory import MemoryCache

    if not policy.enabled:
        return None
    settings = settings or load_settings()
    if policy.mode is CacheMode.MEMORY:
        return MemoryCache(count_limit=settings.memory_count_limit, cost_limit=settings.memory_cost_limit)
    if policy.mode is CacheMode.DISK:
        return DurableCache(settings.resolved_cache_dir)
    return LayeredCache(
        memory=MemoryCache(count_limit=settings.memory_count_limit, cost_limit=settings.memory_cost_limit),
        durable=DurableCache(settings.resolved_cache_dir),
        promotion_ttl=settings.promotion_ttl,
    )
