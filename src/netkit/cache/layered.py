# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Memory-first cache backed by a durable layer."""

from __future__ import annotations

import logging

from .base import CacheStore

logger = logging.getLogger(__name__)

DEFAULT_PROMOTION_TTL = 300.0


class LayeredCache(CacheStore):
    """Reads memory first and falls back to the durable layer.

    A durable hit is promoted into memory for `promotion_ttl` seconds, independent of
    the TTL the entry was originally stored with. Writes, removals and clears go to
    both layers; a failing layer is logged and never stops the other.
    """

    def __init__(self, memory: CacheStore, durable: CacheStore, *, promotion_ttl: float = DEFAULT_PROMOTION_TTL) -> None:
        self.memory = memory
        self.durable = durable
        self.promotion_ttl = promotion_ttl

    def store(self, key: str, data: bytes, ttl: float) -> None:
        self._each("store", lambda layer: layer.store(key, data, ttl))

    def retrieve(self, key: str) -> bytes | None:
        data = self.memory.retrieve(key)
        if data is not None:
            return data

        try:
            data = self.durable.retrieve(key)
        except Exception:
            logger.warning("Durable cache read failed for %s", key, exc_info=True)
            return None
        if data is None:
            return None

        logger.debug("Promoting %s from durable cache to memory", key)
        try:
            self.memory.store(key, data, self.promotion_ttl)
        except Exception:
            logger.warning("Memory cache promotion failed for %s", key, exc_info=True)
        return data

    def remove(self, key: str) -> None:
        self._each("remove", lambda layer: layer.remove(key))

    def clear(self) -> None:
        self._each("clear", lambda layer: layer.clear())

    def _each(self, operation: str, action) -> None:
        for name, layer in (("memory", self.memory), ("durable", self.durable)):
            try:
                action(layer)
            except Exception:
                logger.warning("%s cache %s failed", name.capitalize(), operation, exc_info=True)
