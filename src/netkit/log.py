# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for netkit."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("NETKIT_LOG_LEVEL", "WARNING").upper()

# httpx and httpcore log every request at INFO/DEBUG.
_TRANSPORT_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: str | None = None, *, transport_level: str | None = None) -> None:
    """Configure standard logging for netkit and quiet the transport loggers.

    `transport_level` defaults to WARNING so pipeline logs are not drowned out by
    per-request httpx lines; pass "DEBUG" to see connection-level detail.
    """
    effective_level = (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    quiet = getattr(logging, (transport_level or "WARNING").upper(), logging.WARNING)
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(quiet)


__all__ = ["setup_logging"]
