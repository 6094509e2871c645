"""Time-bounded in-memory cache shared by knowledge and analytics reads."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import Any

Clock = Callable[[], float]


@dataclass
class _Entry:
    value: Any
    stored_at: float


class TTLCache:
    """Keyed cache whose entries expire ``ttl_seconds`` after they are stored.

    The cache is never the writer of record. Writers that change the data
    behind a key call :meth:`invalidate` for that key only. Readers that load
    from the store take :meth:`version` first and pass it to :meth:`set`, so a
    value loaded before an invalidation is never stored after it.
    """

    def __init__(self, ttl_seconds: float, clock: Clock | None = None) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: dict[str, _Entry] = {}
        self._generations: dict[str, int] = {}
        self._epoch = 0
        self._lock = Lock()

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return entry.value

    def version(self, key: str) -> tuple[int, int]:
        with self._lock:
            return self._version_locked(key)

    def _version_locked(self, key: str) -> tuple[int, int]:
        return self._epoch, self._generations.get(key, 0)

    def set(self, key: str, value: Any, version: tuple[int, int] | None = None) -> bool:
        """Store ``value``; skipped when ``version`` is stale. Returns True when stored."""
        if not self.enabled:
            return False
        with self._lock:
            if version is not None and version != self._version_locked(key):
                return False
            self._entries[key] = _Entry(value=value, stored_at=self._clock())
            return True

    def invalidate(self, key: str) -> bool:
        """Drop one key. Returns True when an entry was removed."""
        with self._lock:
            self._generations[key] = self._generations.get(key, 0) + 1
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._epoch += 1
            self._generations.clear()
            self._entries.clear()
