# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Single round-trip execution: send, validate, normalize."""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import NetworkError, categorize_exception
from .headers import normalize_headers
from .models import HttpRequest, HttpResponse, ProgressHandler, RawResponse
from .transport import Transport
from .validation import ResponseValidator, StatusCodeValidator

logger = logging.getLogger(__name__)


class RequestExecutor:
    """Issues one transport call and turns its output into a validated HttpResponse.

    This is where transport-native failures become `NetworkError`s, so every
    transport is classified identically by the retry policy.
    """

    def __init__(self, transport: Transport, validator: ResponseValidator | None = None) -> None:
        self.transport = transport
        self.validator = validator or StatusCodeValidator()

    async def run(self, request: HttpRequest) -> HttpResponse:
        try:
            raw = await self.transport.send(request)
        except Exception as exc:
            raise categorize_exception(exc) from exc
        return self._finish(request, raw)

    async def upload(self, request: HttpRequest, data: bytes, progress: ProgressHandler | None = None) -> HttpResponse:
        try:
            raw = await self.transport.upload(request, data, progress)
        except Exception as exc:
            raise categorize_exception(exc) from exc
        return self._finish(request, raw)

    async def download(
        self,
        request: HttpRequest,
        destination: Path,
        progress: ProgressHandler | None = None,
    ) -> tuple[HttpResponse, Path]:
        """Stream the body into `destination`; the returned response carries headers only."""
        try:
            raw = await self.transport.download(request, destination, progress)
        except Exception as exc:
            raise categorize_exception(exc) from exc
        try:
            response = self._finish(request, RawResponse(status_code=raw.status_code, headers=raw.headers, url=raw.url))
        except NetworkError:
            if raw.location is not None:
                raw.location.unlink(missing_ok=True)
            raise
        if raw.location is None:
            raise NetworkError.no_data()
        return response, raw.location

    def _finish(self, request: HttpRequest, raw: RawResponse) -> HttpResponse:
        self.validator.validate(raw.status_code, raw.content)
        response = HttpResponse(
            content=raw.content or b"",
            status_code=raw.status_code,
            headers=normalize_headers(raw.headers),
            url=raw.url or request.url,
        )
        logger.debug("%s %s -> %s (%d bytes)", request.method.value, request.url, response.status_code, len(response.content))
        return response


__all__ = ["RequestExecutor"]
