# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport abstraction and factory."""

from pathlib import Path
from typing import Protocol

from ..config import NetkitSettings, load_settings
from .models import HttpRequest, ProgressHandler, RawResponse


class Transport(Protocol):
    """Minimal protocol for issuing HTTP requests.

    Implementations may raise their native exceptions; the executor translates
    them with `categorize_exception`.
    """

    async def send(self, request: HttpRequest) -> RawResponse: ...

    async def upload(self, request: HttpRequest, data: bytes, progress: ProgressHandler | None = None) -> RawResponse: ...

    async def download(
        self,
        request: HttpRequest,
        destination: Path,
        progress: ProgressHandler | None = None,
    ) -> RawResponse: ...

    async def aclose(self) -> None:  # pragma: no cover - optional for adapters
        ...


def create_default_transport(settings: NetkitSettings | None = None) -> Transport:
    """Factory for the default httpx-backed transport."""
    from .httpx_transport import HttpxTransport

    return HttpxTransport(settings or load_settings())
