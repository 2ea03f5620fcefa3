# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
netkit package entrypoint.

netkit is a client-side HTTP request pipeline: requests are adapted by
interceptors, executed over an injectable transport, validated, retried with
exponential backoff and optionally served from a layered memory/disk cache.
The transport is abstracted behind a narrow protocol and all values are modeled
with typed dataclasses.
"""

from .cache import CacheMode, CachePolicy, CacheStore, DurableCache, LayeredCache, MemoryCache
from .config import NetkitSettings, load_settings
from .errors import ErrorKind, NetworkError
from .http import (
    AuthenticationInterceptor,
    DefaultRetryPolicy,
    HeaderInterceptor,
    HttpMethod,
    HttpRequest,
    HttpResponse,
    HttpxTransport,
    LoggingInterceptor,
    MultipartFormData,
    RequestInterceptor,
    RetryConfig,
    StatusCodeValidator,
    TransferProgress,
    Transport,
)
from .log import setup_logging
from .pipeline import Pipeline, create_default_pipeline
from .serialization import JsonSerializer, Serializer
from .version import __version__

__all__ = [
    "AuthenticationInterceptor",
    "CacheMode",
    "CachePolicy",
    "CacheStore",
    "DefaultRetryPolicy",
    "DurableCache",
    "ErrorKind",
    "HeaderInterceptor",
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "JsonSerializer",
    "LayeredCache",
    "LoggingInterceptor",
    "MemoryCache",
    "MultipartFormData",
    "NetkitSettings",
    "NetworkError",
    "Pipeline",
    "RequestInterceptor",
    "RetryConfig",
    "Serializer",
    "StatusCodeValidator",
    "TransferProgress",
    "Transport",
    "create_default_pipeline",
    "load_settings",
    "setup_logging",
    "__version__",
]
