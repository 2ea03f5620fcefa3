# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for netkit."""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from .version import __version__

DEFAULT_USER_AGENT = f"netkit/{__version__}"
DEFAULT_RETRYABLE_STATUS_CODES = (408, 429, 500, 502, 503, 504)
DEFAULT_RETRYABLE_METHODS = ("GET", "DELETE", "HEAD")
DEFAULT_CACHEABLE_METHODS = ("GET", "HEAD")


def _default_cache_dir() -> Path:
    base = os.getenv("XDG_CACHE_HOME") or os.path.join(os.path.expanduser("~"), ".cache")
    return Path(base) / "netkit"


def _default_download_dir() -> Path:
    return Path(tempfile.gettempdir()) / "netkit-downloads"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int_set_env(name: str, default: tuple[int, ...]) -> frozenset[int]:
    value = os.getenv(name)
    if value is None:
        return frozenset(default)
    try:
        return frozenset(int(part) for part in value.split(",") if part.strip())
    except ValueError:
        return frozenset(default)


def _word_set_env(name: str, default: tuple[str, ...]) -> frozenset[str]:
    value = os.getenv(name)
    if value is None:
        return frozenset(default)
    return frozenset(part.strip().upper() for part in value.split(",") if part.strip())


def _path_env(name: str, default: Path) -> Path:
    value = os.getenv(name)
    return Path(value).expanduser() if value else default


@dataclass(frozen=True)
class NetkitSettings:
    """Pipeline, transport and cache defaults."""

    timeout: float = 30.0
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 32.0
    exponential_backoff: bool = True
    retryable_status_codes: frozenset[int] = frozenset(DEFAULT_RETRYABLE_STATUS_CODES)
    retryable_methods: frozenset[str] = frozenset(DEFAULT_RETRYABLE_METHODS)
    cacheable_methods: frozenset[str] = frozenset(DEFAULT_CACHEABLE_METHODS)
    user_agent: str = DEFAULT_USER_AGENT
    follow_redirects: bool = True
    verify_ssl: bool = True
    cache_dir: Path | None = None
    memory_count_limit: int = 100
    memory_cost_limit: int = 50 * 1024 * 1024
    promotion_ttl: float = 300.0
    download_dir: Path | None = None

    @property
    def resolved_cache_dir(self) -> Path:
        return self.cache_dir or _default_cache_dir()

    @property
    def resolved_download_dir(self) -> Path:
        return self.download_dir or _default_download_dir()

    @classmethod
    def from_env(cls) -> "NetkitSettings":
        """Create settings from environment variables (evaluated at call time)."""
        timeout = _float_env("NETKIT_HTTP_TIMEOUT", cls.timeout)
        if timeout <= 0:
            timeout = cls.timeout
        return cls(
            timeout=timeout,
            max_retries=max(0, _int_env("NETKIT_HTTP_RETRIES", cls.max_retries)),
            base_delay=_float_env("NETKIT_RETRY_BASE_DELAY", cls.base_delay),
            max_delay=_float_env("NETKIT_RETRY_MAX_DELAY", cls.max_delay),
            exponential_backoff=_bool_env("NETKIT_RETRY_EXPONENTIAL", cls.exponential_backoff),
            retryable_status_codes=_int_set_env("NETKIT_RETRY_STATUS_CODES", DEFAULT_RETRYABLE_STATUS_CODES),
            retryable_methods=_word_set_env("NETKIT_RETRY_METHODS", DEFAULT_RETRYABLE_METHODS),
            cacheable_methods=_word_set_env("NETKIT_CACHE_METHODS", DEFAULT_CACHEABLE_METHODS),
            user_agent=os.getenv("NETKIT_USER_AGENT", cls.user_agent),
            follow_redirects=_bool_env("NETKIT_HTTP_REDIRECTS", cls.follow_redirects),
            verify_ssl=_bool_env("NETKIT_HTTP_VERIFY_SSL", cls.verify_ssl),
            cache_dir=_path_env("NETKIT_CACHE_DIR", _default_cache_dir()),
            memory_count_limit=_int_env("NETKIT_MEMORY_CACHE_COUNT", cls.memory_count_limit),
            memory_cost_limit=_int_env("NETKIT_MEMORY_CACHE_BYTES", cls.memory_cost_limit),
            promotion_ttl=_float_env("NETKIT_CACHE_PROMOTION_TTL", cls.promotion_ttl),
            download_dir=_path_env("NETKIT_DOWNLOAD_DIR", _default_download_dir()),
        )


def load_settings() -> NetkitSettings:
    """Load netkit settings from environment with sensible defaults."""
    return NetkitSettings.from_env()
