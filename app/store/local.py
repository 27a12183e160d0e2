"""
Process-local store used when the shared store is not configured or is
unreachable. Entries live for the lifetime of the process only and are not
shared between instances of the service.
"""

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Optional

from .base import StoreClient

DEFAULT_PURGE_INTERVAL_SECONDS = 60


@dataclass
class _LocalEntry:
    value: Any
    expires_at: Optional[float] = None  # epoch seconds, None = no expiry

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class LocalStore(StoreClient):
    """
    In-memory store guarded by a single lock.

    The operations mirror the remote backend closely enough that the same
    counting algorithm runs unchanged against either one: an expiry set on a
    counter plays the role of the recorded window start.

    Rate-limit and usage counters share one map and are told apart by their
    key prefix (``rl:`` and ``usage:week:``), the same namespacing the remote
    store uses. Expired entries are dropped when read, and swept from the
    whole map at most once per ``purge_interval_seconds`` on writes, so keys
    that are never read again (one per client IP and window) do not
    accumulate.
    """

    shared = False

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        purge_interval_seconds: float = DEFAULT_PURGE_INTERVAL_SECONDS,
    ):
        self._entries: Dict[str, _LocalEntry] = {}
        self._lock = Lock()
        self._clock = clock
        self.purge_interval_seconds = purge_interval_seconds
        self._next_purge_at = clock() + purge_interval_seconds

    def _live_entry(self, key: str, now: float) -> Optional[_LocalEntry]:
        entry = self._entries.get(key)
        if entry is not None and entry.is_expired(now):
            del self._entries[key]
            return None
        return entry

    def _maybe_purge(self, now: float) -> None:
        if now >= self._next_purge_at:
            self._purge_locked(now)
            self._next_purge_at = now + self.purge_interval_seconds

    def _purge_locked(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def increment(self, key: str) -> int:
        with self._lock:
            now = self._clock()
            self._maybe_purge(now)
            entry = self._live_entry(key, now)
            if entry is None:
                self._entries[key] = _LocalEntry(value=1)
                return 1
            entry.value = int(entry.value) + 1
            return entry.value

    def expire(self, key: str, ttl_seconds: int) -> bool:
        with self._lock:
            now = self._clock()
            entry = self._live_entry(key, now)
            if entry is None:
                return False
            entry.expires_at = now + ttl_seconds
            return True

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._live_entry(key, self._clock())
            return entry.value if entry is not None else None

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        with self._lock:
            now = self._clock()
            self._maybe_purge(now)
            self._entries[key] = _LocalEntry(value=value, expires_at=now + ttl_seconds)
            return True

    def purge_expired(self) -> int:
        """Drop expired entries. Returns the number removed."""
        with self._lock:
            return self._purge_locked(self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
