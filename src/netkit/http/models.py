# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used across netkit."""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx

from ..config import NetkitSettings
from .headers import has_header, with_header

if TYPE_CHECKING:
    from ..errors import NetworkError
    from ..serialization import Serializer
    from .multipart import MultipartFormData

Headers = dict[str, str]


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


@dataclass(frozen=True)
class HttpRequest:
    """Immutable request description handed to the pipeline.

    Header keys keep the casing the caller supplied. `timeout=None` defers to the
    transport's configured default.
    """

    url: str
    method: HttpMethod = HttpMethod.GET
    headers: Headers = field(default_factory=dict)
    body: bytes | None = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        method = self.method if isinstance(self.method, HttpMethod) else HttpMethod(str(self.method).upper())
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "headers", dict(self.headers or {}))
        if isinstance(self.body, str):
            object.__setattr__(self, "body", self.body.encode("utf-8"))

    @property
    def cache_key(self) -> str:
        """Cache identity: method and URL, plus a body digest when a body is present."""
        key = f"{self.method.value} {self.url}"
        if self.body:
            key = f"{key}#{hashlib.sha256(self.body).hexdigest()}"
        return key

    def with_header(self, name: str, value: str) -> HttpRequest:
        return replace(self, headers=with_header(self.headers, name, value))

    def with_headers(self, headers: Mapping[str, str]) -> HttpRequest:
        merged = self.headers
        for name, value in headers.items():
            merged = with_header(merged, name, value)
        return replace(self, headers=merged)

    def with_body(self, body: bytes | None) -> HttpRequest:
        return replace(self, body=body)

    def with_json(self, value: Any, serializer: Serializer | None = None) -> HttpRequest:
        """Return a copy carrying `value` encoded as JSON."""
        if serializer is None:
            from ..serialization import JsonSerializer

            serializer = JsonSerializer()
        body = serializer.encode(value)
        request = replace(self, body=body)
        return request.with_header("Content-Type", serializer.content_type)

    def with_query(self, params: Mapping[str, Any]) -> HttpRequest:
        """Merge `params` into the URL query string, sorted by name.

        A URL that does not parse is left unchanged; the pipeline rejects it later.
        """
        if not params:
            return self
        try:
            url = httpx.URL(self.url).copy_merge_params(sorted(params.items()))
        except httpx.InvalidURL:
            return self
        return replace(self, url=str(url))

    def with_form(self, fields: Mapping[str, Any]) -> HttpRequest:
        """Return a copy with an application/x-www-form-urlencoded body."""
        body = str(httpx.QueryParams(sorted(fields.items()))).encode("utf-8")
        return replace(self, body=body).with_header("Content-Type", "application/x-www-form-urlencoded")

    def with_multipart(self, form: MultipartFormData) -> HttpRequest:
        return replace(self, body=form.build()).with_header("Content-Type", form.content_type)

    def has_header(self, name: str) -> bool:
        return has_header(self.headers, name)


@dataclass(frozen=True)
class HttpResponse:
    """Validated response produced by one transport attempt."""

    content: bytes
    status_code: int
    headers: Headers = field(default_factory=dict)
    url: str | None = None

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


@dataclass
class RawResponse:
    """Unvalidated transport output.

    `headers` may be any mapping or iterable of pairs; the executor normalizes it.
    Download transports set `location` to the file the body was streamed into.
    """

    status_code: int
    headers: Any = None
    content: bytes = b""
    url: str | None = None
    location: Path | None = None


@dataclass(frozen=True)
class AttemptResult:
    """Outcome of a single attempt, handed to interceptor observers."""

    response: HttpResponse | None = None
    error: NetworkError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.response is not None


@dataclass(frozen=True)
class TransferProgress:
    """Byte counters for a streamed upload or download."""

    bytes_transferred: int
    total_bytes_transferred: int
    total_bytes_expected: int

    @property
    def fraction_completed(self) -> float:
        if self.total_bytes_expected <= 0:
            return 0.0
        return min(1.0, self.total_bytes_transferred / self.total_bytes_expected)

    @property
    def percentage(self) -> int:
        return int(self.fraction_completed * 100)


ProgressHandler = Callable[[TransferProgress], None]


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy for HTTP requests derived from NetkitSettings."""

    max_retries: int = 3
    retryable_status_codes: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})
    retryable_methods: frozenset[HttpMethod] = frozenset({HttpMethod.GET, HttpMethod.DELETE, HttpMethod.HEAD})
    base_delay: float = 1.0
    max_delay: float = 32.0
    exponential_backoff: bool = True

    @classmethod
    def from_settings(cls, settings: NetkitSettings) -> RetryConfig:
        """Build a retry config from the shared NetkitSettings."""
        methods = frozenset(HttpMethod(name) for name in settings.retryable_methods if name in HttpMethod.__members__)
        return cls(
            max_retries=max(0, settings.max_retries),
            retryable_status_codes=frozenset(settings.retryable_status_codes),
            retryable_methods=methods,
            base_delay=settings.base_delay,
            max_delay=settings.max_delay,
            exponential_backoff=settings.exponential_backoff,
        )
