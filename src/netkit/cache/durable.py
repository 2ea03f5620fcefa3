# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""File-backed cache that survives process restarts.

Each entry is one JSON file named by the SHA-256 of its key:

    {"payload": "<base64>", "expires_at": <unix seconds>}

Writes go to a temporary file in the same directory and are moved into place with
`os.replace`, so a concurrent reader sees either the old entry or the new one.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import logging
import os
import tempfile
import threading
import time
from collections.abc import Callable
from pathlib import Path

from .base import CacheStore

logger = logging.getLogger(__name__)

_SUFFIX = ".json"


class DurableCache(CacheStore):
    def __init__(self, directory: str | Path, *, clock: Callable[[], float] = time.time) -> None:
        self.directory = Path(directory)
        self._clock = clock
        self._write_lock = threading.Lock()
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}{_SUFFIX}"

    def store(self, key: str, data: bytes, ttl: float) -> None:
        if ttl <= 0:
            return
        record = {
            "payload": base64.b64encode(bytes(data)).decode("ascii"),
            "expires_at": self._clock() + ttl,
        }
        target = self.path_for(key)
        with self._write_lock:
            self._ensure_directory()
            fd, temp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(record, handle)
                os.replace(temp_name, target)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise

    def retrieve(self, key: str) -> bytes | None:
        path = self.path_for(key)
        try:
            record = json.loads(path.read_text(encoding="utf-8"))
            expires_at = float(record["expires_at"])
            payload = base64.b64decode(record["payload"], validate=True)
        except FileNotFoundError:
            return None
        except (KeyError, TypeError, ValueError, binascii.Error):
            logger.warning("Found a corrupt cache entry at %s; deleting it", path)
            self._unlink(path)
            return None
        if self._clock() >= expires_at:
            self._unlink_expired(path, expires_at)
            return None
        return payload

    def remove(self, key: str) -> None:
        self._unlink(self.path_for(key))

    def clear(self) -> None:
        with self._write_lock:
            if not self.directory.exists():
                self._ensure_directory()
                return
            for path in self.directory.iterdir():
                if path.is_file() and (path.suffix == _SUFFIX or path.name.startswith(".tmp-")):
                    path.unlink(missing_ok=True)

    def _unlink(self, path: Path) -> None:
        with self._write_lock:
            path.unlink(missing_ok=True)

    def _unlink_expired(self, path: Path, expires_at: float) -> None:
        # A concurrent store may have replaced the entry since it was read.
        with self._write_lock:
            try:
                current = float(json.loads(path.read_text(encoding="utf-8"))["expires_at"])
            except FileNotFoundError:
                return
            except (KeyError, TypeError, ValueError):
                current = expires_at
            if current == expires_at:
                path.unlink(missing_ok=True)
