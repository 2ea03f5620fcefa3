# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request interceptors and the ordered chain that runs them.

An interceptor may rewrite outgoing requests (`adapt`) and observe every finished
attempt (`observe`). Adapt failures abort the attempt; observe failures are logged
and swallowed.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from enum import Enum

from .headers import redact_headers
from .models import AttemptResult, HttpRequest

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[str | None] | str | None]


class RequestInterceptor:
    """Base interceptor: passes requests through and ignores results."""

    async def adapt(self, request: HttpRequest) -> HttpRequest:
        return request

    async def observe(self, result: AttemptResult, request: HttpRequest) -> None:
        return None


class InterceptorChain:
    """Immutable, ordered sequence of interceptors captured at construction."""

    def __init__(self, interceptors: Iterable[RequestInterceptor] = ()) -> None:
        self._interceptors = tuple(interceptors)

    def __iter__(self):
        return iter(self._interceptors)

    def __len__(self) -> int:
        return len(self._interceptors)

    async def adapt(self, request: HttpRequest) -> HttpRequest:
        adapted = request
        for interceptor in self._interceptors:
            adapted = await interceptor.adapt(adapted)
        return adapted

    async def notify(self, result: AttemptResult, request: HttpRequest) -> None:
        for interceptor in self._interceptors:
            try:
                await interceptor.observe(result, request)
            except Exception:
                logger.warning("Interceptor %s failed to observe result", type(interceptor).__name__, exc_info=True)


class HeaderInterceptor(RequestInterceptor):
    """Adds a fixed set of headers (API keys, Accept, etc.) to every request."""

    def __init__(self, headers: Mapping[str, str]) -> None:
        self.headers = dict(headers)

    async def adapt(self, request: HttpRequest) -> HttpRequest:
        return request.with_headers(self.headers)


class AuthenticationInterceptor(RequestInterceptor):
    """Sets `Authorization: Bearer <token>` from a sync or async token provider.

    A provider returning None leaves the request unauthenticated; a provider that
    raises aborts the attempt.
    """

    def __init__(self, token_provider: TokenProvider, *, scheme: str = "Bearer") -> None:
        self.token_provider = token_provider
        self.scheme = scheme

    async def adapt(self, request: HttpRequest) -> HttpRequest:
        token = self.token_provider()
        if inspect.isawaitable(token):
            token = await token
        if not token:
            return request
        return request.with_header("Authorization", f"{self.scheme} {token}")


class LogLevel(str, Enum):
    NONE = "none"
    BASIC = "basic"
    DETAILED = "detailed"


class LoggingInterceptor(RequestInterceptor):
    """Logs outgoing requests and attempt outcomes."""

    def __init__(self, level: LogLevel = LogLevel.BASIC, *, logger_name: str = "netkit.network") -> None:
        self.level = LogLevel(level)
        self.logger = logging.getLogger(logger_name)

    async def adapt(self, request: HttpRequest) -> HttpRequest:
        if self.level is LogLevel.NONE:
            return request
        self.logger.info("-> %s %s", request.method.value, request.url)
        if self.level is LogLevel.DETAILED:
            if request.headers:
                self.logger.debug("Headers: %s", redact_headers(request.headers))
            if request.body:
                self.logger.debug("Body: %s", request.body.decode("utf-8", errors="replace"))
        return request

    async def observe(self, result: AttemptResult, request: HttpRequest) -> None:
        if self.level is LogLevel.NONE:
            return
        if result.ok and result.response is not None:
            self.logger.info("<- %s %s", result.response.status_code, request.url)
            if self.level is LogLevel.DETAILED:
                self.logger.debug("Response: %s", result.response.text)
        else:
            self.logger.error("x %s: %s", request.url, result.error)


__all__ = [
    "AuthenticationInterceptor",
    "HeaderInterceptor",
    "InterceptorChain",
    "LogLevel",
    "LoggingInterceptor",
    "RequestInterceptor",
]
