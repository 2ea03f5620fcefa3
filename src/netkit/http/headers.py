# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header normalization utilities.

HTTP header field names are case-insensitive (RFC 9110), but netkit keeps the casing
a caller or transport supplied. Lookups and replacements therefore match names
case-insensitively while leaving stored keys untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

REDACTED_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie", "set-cookie"})


def _coerce_header_items(headers: Any) -> list[tuple[object, object]]:
    """
    Best-effort coercion of "dict-like" header containers into (name, value) pairs.

    Accepts:
    - plain dicts
    - httpx.Headers (raw byte pairs are preferred so original casing survives)
    - iterable-of-pairs (e.g. list[tuple[str, str]])
    """
    if not headers:
        return []
    raw = getattr(headers, "raw", None)
    if isinstance(raw, list):
        return list(raw)
    if isinstance(headers, Mapping):
        return list(headers.items())
    items = getattr(headers, "items", None)
    if callable(items):
        return list(items())
    return [tuple(pair) for pair in headers]


def _as_text(value: object) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return "" if value is None else str(value)


def normalize_headers(headers: Any) -> dict[str, str]:
    """Return a str-keyed copy of a header container, preserving name casing.

    Repeated fields are folded into one comma-separated value.
    """
    out: dict[str, str] = {}
    for key, value in _coerce_header_items(headers):
        if key is None:
            continue
        name = _as_text(key).strip()
        if not name:
            continue
        text = _as_text(value)
        existing = find_header(out, name)
        if existing is not None:
            out[existing] = f"{out[existing]}, {text}"
        else:
            out[name] = text
    return out


def find_header(headers: Mapping[str, str] | None, name: str) -> str | None:
    """Return the stored key matching `name` case-insensitively, if any."""
    if not headers or not name:
        return None
    if name in headers:
        return name
    lower = name.lower()
    for key in headers:
        if key.lower() == lower:
            return key
    return None


def has_header(headers: Mapping[str, str] | None, name: str) -> bool:
    return find_header(headers, name) is not None


def header_value(headers: Mapping[str, str] | None, name: str, default: str = "") -> str:
    """Return a header value using case-insensitive key matching."""
    key = find_header(headers, name)
    if key is None or headers is None:
        return default
    return headers[key]


def with_header(headers: Mapping[str, str] | None, name: str, value: str) -> dict[str, str]:
    """Return a copy with `name` set to `value`, replacing any differently-cased entry."""
    updated = dict(headers or {})
    existing = find_header(updated, name)
    if existing is not None:
        del updated[existing]
    updated[name] = value
    return updated


def redact_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Copy of `headers` with credential-bearing values masked for logging."""
    return {key: ("<redacted>" if key.lower() in REDACTED_HEADERS else value) for key, value in (headers or {}).items()}


__all__ = [
    "find_header",
    "has_header",
    "header_value",
    "normalize_headers",
    "redact_headers",
    "with_header",
]
