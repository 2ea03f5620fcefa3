# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Cache stores backing the request pipeline."""

from .base import CacheMode, CachePolicy, CacheStore, build_cache_store
from .durable import DurableCache
from .layered import DEFAULT_PROMOTION_TTL, LayeredCache
from .memory import MemoryCache

__all__ = [
    "CacheMode",
    "CachePolicy",
    "CacheStore",
    "DEFAULT_PROMOTION_TTL",
    "DurableCache",
    "LayeredCache",
    "MemoryCache",
    "build_cache_store",
]
