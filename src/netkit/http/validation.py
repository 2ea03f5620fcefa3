# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Status code validation."""

from __future__ import annotations

from typing import Protocol

from ..errors import NetworkError


class ResponseValidator(Protocol):
    def validate(self, status_code: int, body: bytes | None = None) -> None: ...


def error_for_status(status_code: int) -> NetworkError:
    """Map a rejected status code onto its named error kind."""
    if status_code == 401:
        return NetworkError.unauthorized()
    if status_code == 403:
        return NetworkError.forbidden()
    if status_code == 404:
        return NetworkError.not_found()
    if 500 <= status_code < 600:
        return NetworkError.server_error(status_code)
    return NetworkError.http_status(status_code)


class StatusCodeValidator(ResponseValidator):
    """Accepts status codes inside `acceptable` (default 2xx) and raises otherwise."""

    def __init__(self, acceptable: range = range(200, 300)) -> None:
        self.acceptable = acceptable

    def validate(self, status_code: int, body: bytes | None = None) -> None:
        if status_code not in self.acceptable:
            raise error_for_status(status_code)


__all__ = ["ResponseValidator", "StatusCodeValidator", "error_for_status"]
