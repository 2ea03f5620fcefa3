# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers.

Every failure that leaves the pipeline is a `NetworkError` tagged with an
`ErrorKind`. Transports raise whatever they natively raise; `categorize_exception`
translates those into the shared kinds so retry classification does not depend on
which transport produced the failure.
"""

from __future__ import annotations

import socket
from enum import Enum

import httpx


class ErrorKind(str, Enum):
    INVALID_TARGET = "INVALID_TARGET"
    NO_DATA = "NO_DATA"
    DECODING_FAILED = "DECODING_FAILED"
    ENCODING_FAILED = "ENCODING_FAILED"
    HTTP_STATUS = "HTTP_STATUS"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    SERVER_ERROR = "SERVER_ERROR"
    TIMEOUT = "TIMEOUT"
    CONNECTIVITY_LOST = "CONNECTIVITY_LOST"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"


_REASONS = {
    ErrorKind.INVALID_TARGET: "Invalid URL provided",
    ErrorKind.NO_DATA: "No data received from server",
    ErrorKind.DECODING_FAILED: "Failed to decode response",
    ErrorKind.ENCODING_FAILED: "Failed to encode request",
    ErrorKind.HTTP_STATUS: "HTTP error",
    ErrorKind.UNAUTHORIZED: "Unauthorized - authentication required",
    ErrorKind.FORBIDDEN: "Forbidden - access denied",
    ErrorKind.NOT_FOUND: "Resource not found",
    ErrorKind.SERVER_ERROR: "Internal server error",
    ErrorKind.TIMEOUT: "Request timed out",
    ErrorKind.CONNECTIVITY_LOST: "Network connectivity issue",
    ErrorKind.CANCELLED: "Request was cancelled",
    ErrorKind.UNKNOWN: "Unknown error",
}


def error_kind_to_reason(kind: ErrorKind | None) -> str:
    """User-facing reason string."""
    if kind is None:
        return ""
    return _REASONS.get(kind, "Request failed due to network error")


class NetworkError(Exception):
    """A pipeline failure classified by kind."""

    def __init__(self, kind: ErrorKind, *, status_code: int | None = None, detail: str | None = None) -> None:
        self.kind = kind
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.reason)

    @property
    def reason(self) -> str:
        message = error_kind_to_reason(self.kind)
        if self.status_code is not None:
            message = f"{message} (status {self.status_code})"
        if self.detail:
            message = f"{message}: {self.detail}"
        return message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NetworkError):
            return NotImplemented
        return (self.kind, self.status_code, self.detail) == (other.kind, other.status_code, other.detail)

    def __hash__(self) -> int:
        return hash((self.kind, self.status_code, self.detail))

    def __repr__(self) -> str:
        return f"NetworkError({self.kind.value}, status_code={self.status_code!r}, detail={self.detail!r})"

    @classmethod
    def invalid_target(cls, detail: str | None = None) -> NetworkError:
        return cls(ErrorKind.INVALID_TARGET, detail=detail)

    @classmethod
    def no_data(cls) -> NetworkError:
        return cls(ErrorKind.NO_DATA)

    @classmethod
    def decoding_failed(cls, detail: str) -> NetworkError:
        return cls(ErrorKind.DECODING_FAILED, detail=detail)

    @classmethod
    def encoding_failed(cls, detail: str) -> NetworkError:
        return cls(ErrorKind.ENCODING_FAILED, detail=detail)

    @classmethod
    def http_status(cls, status_code: int) -> NetworkError:
        return cls(ErrorKind.HTTP_STATUS, status_code=status_code)

    @classmethod
    def unauthorized(cls) -> NetworkError:
        return cls(ErrorKind.UNAUTHORIZED, status_code=401)

    @classmethod
    def forbidden(cls) -> NetworkError:
        return cls(ErrorKind.FORBIDDEN, status_code=403)

    @classmethod
    def not_found(cls) -> NetworkError:
        return cls(ErrorKind.NOT_FOUND, status_code=404)

    @classmethod
    def server_error(cls, status_code: int | None = None) -> NetworkError:
        return cls(ErrorKind.SERVER_ERROR, status_code=status_code)

    @classmethod
    def timeout(cls) -> NetworkError:
        return cls(ErrorKind.TIMEOUT)

    @classmethod
    def connectivity_lost(cls, detail: str | None = None) -> NetworkError:
        return cls(ErrorKind.CONNECTIVITY_LOST, detail=detail)

    @classmethod
    def cancelled(cls) -> NetworkError:
        return cls(ErrorKind.CANCELLED)

    @classmethod
    def unknown(cls, detail: str) -> NetworkError:
        return cls(ErrorKind.UNKNOWN, detail=detail)


def categorize_exception(exc: BaseException) -> NetworkError:
    """
    Map Python/httpx exceptions to a NetworkError.

    Existing NetworkErrors pass through untouched.
    """
    if isinstance(exc, NetworkError):
        return exc

    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return NetworkError.timeout()

    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return NetworkError.invalid_target(str(exc) or None)

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return NetworkError.connectivity_lost(str(exc) or None)

    if isinstance(exc, (socket.gaierror, socket.herror, ConnectionError)):
        return NetworkError.connectivity_lost(str(exc) or None)

    return NetworkError.unknown(str(exc) or type(exc).__name__)


__all__ = [
    "ErrorKind",
    "NetworkError",
    "categorize_exception",
    "error_kind_to_reason",
]
