# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request pipeline: cache lookup, interceptor adaptation, execution and retry.

Per call the pipeline moves through

    CacheCheck -> (hit) Done
               -> (miss) Attempting -> Adapting -> Sending -> (ok) CacheWrite -> Done
                                                           -> (error) Classifying -> Backoff -> Attempting
                                                                                  -> Failed

The cache is consulted once, before the first attempt. Uploads and downloads skip
both the cache and the retry loop.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, TypeVar

import httpx

from .cache import CachePolicy, CacheStore, build_cache_store
from .config import NetkitSettings, load_settings
from .errors import NetworkError
from .http.executor import RequestExecutor
from .http.interceptors import InterceptorChain, RequestInterceptor
from .http.models import AttemptResult, HttpMethod, HttpRequest, HttpResponse, ProgressHandler, RetryConfig
from .http.retry import DefaultRetryPolicy, RetryPolicy
from .http.transport import Transport, create_default_transport
from .http.validation import ResponseValidator
from .serialization import JsonSerializer, Serializer

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SUPPORTED_SCHEMES = frozenset({"http", "https"})


class Pipeline:
    """
    Resilient, cacheable HTTP calls over an injectable transport.

    Example:
        async with Pipeline(
            interceptors=[LoggingInterceptor(), AuthenticationInterceptor(get_token)],
            cache_policy=CachePolicy.hybrid(ttl=300),
        ) as pipeline:
            user = await pipeline.execute_decoded(HttpRequest("https://api.example.com/users/1"), into=User)
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        interceptors: Iterable[RequestInterceptor] = (),
        retry_policy: RetryPolicy | None = None,
        validator: ResponseValidator | None = None,
        cache: CacheStore | None = None,
        cache_policy: CachePolicy | None = None,
        serializer: Serializer | None = None,
        settings: NetkitSettings | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.transport = transport or create_default_transport(self.settings)
        self.interceptors = InterceptorChain(interceptors)
        self.retry_policy = retry_policy or DefaultRetryPolicy(RetryConfig.from_settings(self.settings))
        self.executor = RequestExecutor(self.transport, validator)
        self.cache_policy = cache_policy or CachePolicy.never()
        self.cache = cache if cache is not None else build_cache_store(self.cache_policy, self.settings)
        self.serializer = serializer or JsonSerializer()
        self.cacheable_methods = frozenset(
            HttpMethod(name) for name in self.settings.cacheable_methods if name in HttpMethod.__members__
        )

    async def __aenter__(self) -> Pipeline:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    # Public operations

    async def execute(self, request: HttpRequest) -> bytes:
        """Return the validated response body, from cache when possible."""
        cache_key = self._cache_key(request)
        if cache_key is not None:
            cached = self._cache_lookup(cache_key)
            if cached is not None:
                logger.debug("Cache hit for %s", cache_key)
                return cached
            logger.debug("Cache miss for %s", cache_key)

        response = await self._execute_with_retry(request)

        if cache_key is not None:
            self._cache_write(cache_key, response.content)
        return response.content

    async def execute_decoded(self, request: HttpRequest, into: Callable[..., T] | None = None) -> Any:
        """Execute `request` and decode the body; decoding failures are never retried."""
        data = await self.execute(request)
        return self.serializer.decode(data, into)

    async def upload(self, request: HttpRequest, data: bytes, progress: ProgressHandler | None = None) -> bytes:
        """Stream `data` as the request body in a single attempt and return the response body."""
        adapted = await self.interceptors.adapt(self._prepare(request))
        try:
            response = await self.executor.upload(adapted, data, progress)
        except NetworkError as error:
            await self.interceptors.notify(AttemptResult(error=error), adapted)
            raise
        await self.interceptors.notify(AttemptResult(response=response), adapted)
        return response.content

    async def download(
        self,
        request: HttpRequest,
        progress: ProgressHandler | None = None,
        *,
        destination: str | Path | None = None,
    ) -> Path:
        """Stream the response body to a new file and return its path (single attempt)."""
        directory = Path(destination) if destination is not None else self.settings.resolved_download_dir
        adapted = await self.interceptors.adapt(self._prepare(request))
        try:
            response, location = await self.executor.download(adapted, directory, progress)
        except NetworkError as error:
            await self.interceptors.notify(AttemptResult(error=error), adapted)
            raise
        await self.interceptors.notify(AttemptResult(response=response), adapted)
        return location

    # Internals

    async def _execute_with_retry(self, request: HttpRequest) -> HttpResponse:
        prepared = self._prepare(request)
        attempt = 0
        while True:
            attempt += 1
            adapted = await self.interceptors.adapt(prepared)
            try:
                response = await self.executor.run(adapted)
            except NetworkError as error:
                await self.interceptors.notify(AttemptResult(error=error), adapted)
                if not self.retry_policy.should_retry(request, error, attempt):
                    if attempt > 1:
                        logger.info("Giving up on %s %s after %d attempts: %s", request.method.value, request.url, attempt, error)
                    raise
                logger.info("Attempt %d for %s %s failed (%s); retrying", attempt, request.method.value, request.url, error)
                await self.retry_policy.delay_before_retry(attempt)
                continue
            await self.interceptors.notify(AttemptResult(response=response), adapted)
            return response

    def _prepare(self, request: HttpRequest) -> HttpRequest:
        try:
            url = httpx.URL(request.url)
        except (httpx.InvalidURL, TypeError) as exc:
            raise NetworkError.invalid_target(str(exc) or request.url) from exc
        if url.scheme not in _SUPPORTED_SCHEMES or not url.host:
            raise NetworkError.invalid_target(request.url)
        if request.body is not None and not request.has_header("Content-Type"):
            request = request.with_header("Content-Type", "application/json")
        return request

    def _cache_key(self, request: HttpRequest) -> str | None:
        if self.cache is None or not self.cache_policy.enabled:
            return None
        if request.method not in self.cacheable_methods:
            return None
        return request.cache_key

    def _cache_lookup(self, key: str) -> bytes | None:
        try:
            return self.cache.retrieve(key)
        except Exception:
            logger.warning("Cache lookup failed for %s; treating as miss", key, exc_info=True)
            return None

    def _cache_write(self, key: str, data: bytes) -> None:
        try:
            self.cache.store(key, data, self.cache_policy.time_to_live)
        except Exception:
            logger.warning("Cache write failed for %s", key, exc_info=True)


def create_default_pipeline(settings: NetkitSettings | None = None, **kwargs: Any) -> Pipeline:
    """Factory for a pipeline over the default httpx transport."""
    settings = settings or load_settings()
    return Pipeline(create_default_transport(settings), settings=settings, **kwargs)


__all__ = ["Pipeline", "create_default_pipeline"]
