# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed Transport implementation."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from pathlib import Path

import httpx

from ..config import NetkitSettings, load_settings
from .headers import has_header
from .models import HttpRequest, ProgressHandler, RawResponse
from .progress import ProgressReporter
from .transport import Transport

UPLOAD_CHUNK_SIZE = 64 * 1024


class HttpxTransport(Transport):
    """Asynchronous httpx client wrapper.

    Native httpx exceptions propagate; the executor maps them onto error kinds.
    """

    def __init__(self, settings: NetkitSettings | None = None, client: httpx.AsyncClient | None = None):
        self.settings = settings or load_settings()
        self._client = client or httpx.AsyncClient(
            follow_redirects=self.settings.follow_redirects,
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    def _headers(self, request: HttpRequest) -> dict[str, str]:
        headers = dict(request.headers)
        if not has_header(headers, "User-Agent"):
            headers["User-Agent"] = self.settings.user_agent
        return headers

    def _timeout(self, request: HttpRequest) -> float:
        return request.timeout if request.timeout is not None else self.settings.timeout

    async def send(self, request: HttpRequest) -> RawResponse:
        resp = await self._client.request(
            request.method.value,
            request.url,
            headers=self._headers(request),
            content=request.body,
            timeout=self._timeout(request),
        )
        return RawResponse(
            status_code=resp.status_code,
            headers=resp.headers,
            content=resp.content,
            url=str(resp.url),
        )

    async def upload(self, request: HttpRequest, data: bytes, progress: ProgressHandler | None = None) -> RawResponse:
        reporter = ProgressReporter(progress, total_expected=len(data))

        async def body() -> AsyncIterator[bytes]:
            for offset in range(0, len(data), UPLOAD_CHUNK_SIZE):
                chunk = data[offset : offset + UPLOAD_CHUNK_SIZE]
                yield chunk
                reporter.advance(len(chunk))

        headers = self._headers(request)
        headers["Content-Length"] = str(len(data))
        resp = await self._client.request(
            request.method.value,
            request.url,
            headers=headers,
            content=body(),
            timeout=self._timeout(request),
        )
        return RawResponse(
            status_code=resp.status_code,
            headers=resp.headers,
            content=resp.content,
            url=str(resp.url),
        )

    async def download(
        self,
        request: HttpRequest,
        destination: Path,
        progress: ProgressHandler | None = None,
    ) -> RawResponse:
        destination.mkdir(parents=True, exist_ok=True)
        target = destination / uuid.uuid4().hex
        async with self._client.stream(
            request.method.value,
            request.url,
            headers=self._headers(request),
            content=request.body,
            timeout=self._timeout(request),
        ) as resp:
            try:
                expected = int(resp.headers.get("Content-Length", "0"))
            except ValueError:
                expected = 0
            reporter = ProgressReporter(progress, total_expected=expected)
            try:
                with target.open("wb") as handle:
                    # Content-Length counts wire bytes; report the raw count.
                    async for chunk in resp.aiter_bytes():
                        if chunk:
                            handle.write(chunk)
                        received = resp.num_bytes_downloaded - reporter.total_transferred
                        if received > 0:
                            reporter.advance(received)
            except BaseException:
                target.unlink(missing_ok=True)
                raise
        return RawResponse(
            status_code=resp.status_code,
            headers=resp.headers,
            url=str(resp.url),
            location=target,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
