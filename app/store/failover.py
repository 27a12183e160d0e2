"""
Fixed-window counting with fallback to the local store.
"""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Set

from .base import StoreClient, UNAVAILABLE
from .local import LocalStore

logger = logging.getLogger(__name__)


@dataclass
class CounterHit:
    """Result of a counter increment."""
    count: int
    degraded: bool = False  # True when the local store served the increment


class FailoverCounter:
    """
    Increments counters on the primary store, falling back to the local store
    for the whole increment+expire pair when the primary is unavailable.

    A counter created on the primary whose expiry could not be set is
    remembered, and the expiry is re-issued on each later hit until the
    primary accepts it. Otherwise the counter would never expire and its
    window would never end.
    """

    def __init__(self, primary: StoreClient, fallback: LocalStore):
        self.primary = primary
        self.fallback = fallback
        self._missing_expiry: Set[str] = set()
        self._lock = Lock()

    def hit(self, key: str, ttl_seconds: int) -> CounterHit:
        """
        Increment *key* and start its expiry on the first hit of a window.

        Args:
            key: Counter key
            ttl_seconds: Window length applied when the counter is created

        Returns:
            CounterHit with the post-increment count
        """
        count = self.primary.increment(key)
        if count is not UNAVAILABLE:
            with self._lock:
                needs_expiry = count == 1 or key in self._missing_expiry
            if needs_expiry:
                self._set_expiry(key, ttl_seconds, count)
            return CounterHit(count=count)

        logger.warning(f"Shared store unavailable, counting {key} locally")
        count = self.fallback.increment(key)
        if count == 1:
            self.fallback.expire(key, ttl_seconds)
        return CounterHit(count=count, degraded=True)

    def _set_expiry(self, key: str, ttl_seconds: int, count: int) -> None:
        expired = self.primary.expire(key, ttl_seconds)
        with self._lock:
            if expired is UNAVAILABLE or not expired:
                self._missing_expiry.add(key)
            else:
                self._missing_expiry.discard(key)
        if expired is UNAVAILABLE or not expired:
            logger.warning(f"Counter {key} has no expiry (count={count}), will retry on next hit")
        elif count > 1:
            logger.info(f"Restored expiry on counter {key} at count={count}")

    def read(self, key: str) -> int:
        """Read a counter without changing it. Missing counters read as 0."""
        value = self.primary.get(key)
        if value is UNAVAILABLE:
            value = self.fallback.get(key)
        try:
            return int(value) if value is not None else 0
        except (TypeError, ValueError):
            logger.warning(f"Counter {key} holds a non-integer value: {value!r}")
            return 0
