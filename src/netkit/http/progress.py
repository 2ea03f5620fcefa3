# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Byte counting for streamed transfers."""

from __future__ import annotations

import logging

from .models import ProgressHandler, TransferProgress

logger = logging.getLogger(__name__)


class ProgressReporter:
    """Accumulates transferred bytes and forwards snapshots to a handler.

    Handler failures are logged and dropped; progress reporting never fails a transfer.
    """

    def __init__(self, handler: ProgressHandler | None, total_expected: int = 0) -> None:
        self._handler = handler
        self.total_expected = max(0, total_expected)
        self.total_transferred = 0

    def advance(self, chunk_size: int) -> None:
        self.total_transferred += chunk_size
        if self._handler is None:
            return
        progress = TransferProgress(
            bytes_transferred=chunk_size,
            total_bytes_transferred=self.total_transferred,
            total_bytes_expected=self.total_expected,
        )
        try:
            self._handler(progress)
        except Exception:
            logger.warning("Progress handler raised; ignoring", exc_info=True)
