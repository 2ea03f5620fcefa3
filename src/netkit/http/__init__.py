# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP layer exports."""

from .adapters import StubTransport
from .executor import RequestExecutor
from .headers import header_value, normalize_headers
from .httpx_transport import HttpxTransport
from .interceptors import (
    AuthenticationInterceptor,
    HeaderInterceptor,
    InterceptorChain,
    LoggingInterceptor,
    LogLevel,
    RequestInterceptor,
)
from .models import (
    AttemptResult,
    Headers,
    HttpMethod,
    HttpRequest,
    HttpResponse,
    ProgressHandler,
    RawResponse,
    RetryConfig,
    TransferProgress,
)
from .multipart import MultipartFormData
from .retry import DefaultRetryPolicy, ExponentialBackoff, RetryPolicy, build_default_retry_config
from .transport import Transport, create_default_transport
from .validation import ResponseValidator, StatusCodeValidator, error_for_status

__all__ = [
    "AttemptResult",
    "AuthenticationInterceptor",
    "DefaultRetryPolicy",
    "ExponentialBackoff",
    "HeaderInterceptor",
    "Headers",
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
    "HttpxTransport",
    "InterceptorChain",
    "LogLevel",
    "LoggingInterceptor",
    "MultipartFormData",
    "ProgressHandler",
    "RawResponse",
    "RequestExecutor",
    "RequestInterceptor",
    "ResponseValidator",
    "RetryConfig",
    "RetryPolicy",
    "StatusCodeValidator",
    "StubTransport",
    "Transport",
    "TransferProgress",
    "build_default_retry_config",
    "create_default_transport",
    "error_for_status",
    "header_value",
    "normalize_headers",
]
