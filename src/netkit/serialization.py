# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Payload serializers used by the pipeline's typed operations."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Callable, Mapping
from typing import Any, Protocol, TypeVar

from .errors import NetworkError

T = TypeVar("T")


class Serializer(Protocol):
    """Encodes request payloads and decodes response bodies."""

    content_type: str

    def encode(self, value: Any) -> bytes: ...

    def decode(self, data: bytes, into: Callable[..., T] | None = None) -> Any: ...


def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonSerializer:
    """JSON serializer with optional dataclass/callable conversion on decode.

    `decode(data, into=User)` builds `User(**payload)` for dataclasses and calls
    `into(payload)` for any other callable.
    """

    content_type = "application/json"

    def __init__(self, *, ensure_ascii: bool = False) -> None:
        self.ensure_ascii = ensure_ascii

    def encode(self, value: Any) -> bytes:
        try:
            return json.dumps(value, default=_to_jsonable, ensure_ascii=self.ensure_ascii).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise NetworkError.encoding_failed(str(exc)) from exc

    def decode(self, data: bytes, into: Callable[..., T] | None = None) -> Any:
        try:
            payload = json.loads(data)
        except (UnicodeDecodeError, ValueError) as exc:
            raise NetworkError.decoding_failed(str(exc)) from exc
        if into is None:
            return payload
        try:
            if dataclasses.is_dataclass(into) and isinstance(payload, Mapping):
                return into(**payload)
            return into(payload)
        except (TypeError, ValueError, KeyError) as exc:
            raise NetworkError.decoding_failed(str(exc)) from exc


__all__ = ["JsonSerializer", "Serializer"]
