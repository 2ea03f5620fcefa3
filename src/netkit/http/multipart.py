# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""multipart/form-data body builder."""

from __future__ import annotations

import uuid


class MultipartFormData:
    """
    Accumulates text and file parts and renders a multipart/form-data body.

    Example:
        form = (
            MultipartFormData()
            .add_text_field("user_id", "123")
            .add_data_field("file", pdf_bytes, mime_type="application/pdf", filename="report.pdf")
        )
        request = HttpRequest(url, method=HttpMethod.POST).with_multipart(form)
    """

    def __init__(self, boundary: str | None = None) -> None:
        self.boundary = boundary or f"Boundary-{uuid.uuid4().hex.upper()}"
        self._parts: list[bytes] = []

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def __len__(self) -> int:
        return len(self._parts)

    def add_text_field(self, name: str, value: str) -> MultipartFormData:
        part = (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
            f"{value}\r\n"
        )
        self._parts.append(part.encode("utf-8"))
        return self

    def add_data_field(self, name: str, data: bytes, *, mime_type: str, filename: str) -> MultipartFormData:
        head = (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
            f"Content-Type: {mime_type}\r\n\r\n"
        )
        self._parts.append(head.encode("utf-8") + bytes(data) + b"\r\n")
        return self

    def build(self) -> bytes:
        return b"".join(self._parts) + f"--{self.boundary}--\r\n".encode("utf-8")


__all__ = ["MultipartFormData"]
