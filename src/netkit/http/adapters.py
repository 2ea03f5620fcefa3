# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Programmable transport for tests and offline use."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from pathlib import Path

from .models import HttpRequest, ProgressHandler, RawResponse
from .progress import ProgressReporter
from .transport import Transport

Outcome = RawResponse | BaseException


class StubTransport(Transport):
    """Deterministic, programmable Transport.

    Outcomes are queued per URL and consumed in order; the last one repeats once the
    queue is down to a single entry. An outcome that is an exception is raised instead
    of returned.
    """

    def __init__(self, outcomes: dict[str, Iterable[Outcome]] | None = None, *, chunk_size: int = 4):
        self._outcomes: dict[str, list[Outcome]] = {url: list(items) for url, items in (outcomes or {}).items()}
        self.chunk_size = max(1, chunk_size)
        self.requests: list[HttpRequest] = []
        self.uploads: list[bytes] = []
        self.closed = False

    def add(self, url: str, *outcomes: Outcome) -> None:
        self._outcomes.setdefault(url, []).extend(outcomes)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def _next(self, request: HttpRequest) -> RawResponse:
        self.requests.append(request)
        queue = self._outcomes.get(request.url)
        if not queue:
            return RawResponse(status_code=404, content=b"No stubbed response configured", url=request.url)
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def send(self, request: HttpRequest) -> RawResponse:
        return self._next(request)

    async def upload(self, request: HttpRequest, data: bytes, progress: ProgressHandler | None = None) -> RawResponse:
        reporter = ProgressReporter(progress, total_expected=len(data))
        for offset in range(0, len(data), self.chunk_size):
            reporter.advance(len(data[offset : offset + self.chunk_size]))
        self.uploads.append(data)
        return self._next(request)

    async def download(
        self,
        request: HttpRequest,
        destination: Path,
        progress: ProgressHandler | None = None,
    ) -> RawResponse:
        raw = self._next(request)
        if raw.location is not None or not raw.content:
            return raw
        destination.mkdir(parents=True, exist_ok=True)
        target = destination / uuid.uuid4().hex
        reporter = ProgressReporter(progress, total_expected=len(raw.content))
        with target.open("wb") as handle:
            for offset in range(0, len(raw.content), self.chunk_size):
                chunk = raw.content[offset : offset + self.chunk_size]
                handle.write(chunk)
                reporter.advance(len(chunk))
        return RawResponse(status_code=raw.status_code, headers=raw.headers, url=raw.url, location=target)

    async def aclose(self) -> None:
        self.closed = True
