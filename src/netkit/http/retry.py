# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Retry eligibility and backoff for the request pipeline."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from ..config import load_settings
from ..errors import ErrorKind, NetworkError
from .models import HttpRequest, RetryConfig

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[None]]

# Kinds that retry regardless of status code configuration.
_ALWAYS_RETRYABLE = frozenset({ErrorKind.TIMEOUT, ErrorKind.SERVER_ERROR, ErrorKind.CONNECTIVITY_LOST})


def build_default_retry_config() -> RetryConfig:
    """Create a RetryConfig from environment-backed NetkitSettings."""
    return RetryConfig.from_settings(load_settings())


@dataclass(frozen=True)
class ExponentialBackoff:
    """min(base_delay * 2**(attempt - 1), max_delay) for 1-based attempts."""

    base_delay: float = 1.0
    max_delay: float = 32.0

    def delay(self, attempt: int) -> float:
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)


class RetryPolicy(Protocol):
    def should_retry(self, request: HttpRequest, error: BaseException, attempt_count: int) -> bool: ...

    async def delay_before_retry(self, attempt_count: int) -> None: ...


class DefaultRetryPolicy(RetryPolicy):
    """Retries idempotent methods on transient failures.

    Eligibility is decided from the error kind, never from transport-specific
    exception types. `sleep` is injectable so callers can observe or skip the waits;
    cancellation raised inside it propagates to the pipeline call.
    """

    def __init__(self, config: RetryConfig | None = None, *, sleep: Sleeper | None = None) -> None:
        self.config = config or build_default_retry_config()
        self.backoff = ExponentialBackoff(base_delay=self.config.base_delay, max_delay=self.config.max_delay)
        self._sleep = sleep or asyncio.sleep

    def should_retry(self, request: HttpRequest, error: BaseException, attempt_count: int) -> bool:
        if attempt_count >= self.config.max_retries:
            return False
        if request.method not in self.config.retryable_methods:
            return False
        return self.is_retryable_error(error)

    def is_retryable_error(self, error: BaseException) -> bool:
        if not isinstance(error, NetworkError):
            return False
        if error.kind is ErrorKind.HTTP_STATUS:
            return error.status_code in self.config.retryable_status_codes
        return error.kind in _ALWAYS_RETRYABLE

    def delay_for(self, attempt_count: int) -> float:
        if self.config.exponential_backoff:
            return self.backoff.delay(attempt_count)
        return self.config.base_delay

    async def delay_before_retry(self, attempt_count: int) -> None:
        delay = self.delay_for(attempt_count)
        logger.debug("Backing off %.2fs before attempt %d", delay, attempt_count + 1)
        if delay > 0:
            await self._sleep(delay)
