"""
Store client interface shared by the remote and local backends.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Union


class _Unavailable:
    """Sentinel returned by store operations that could not be completed."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = _Unavailable()


def is_unavailable(value: Any) -> bool:
    """Check whether a store result is the UNAVAILABLE sentinel."""
    return value is UNAVAILABLE


class StoreClient(ABC):
    """
    Best-effort key-value store with atomic counters and expiry.

    No operation raises on transport or protocol failure: it returns
    ``UNAVAILABLE`` instead so the caller can fall back deterministically.
    """

    #: True when entries are visible to every running instance of the service.
    shared = False

    @abstractmethod
    def increment(self, key: str) -> Union[int, _Unavailable]:
        """Atomically increment the counter at *key* and return the new value."""

    @abstractmethod
    def expire(self, key: str, ttl_seconds: int) -> Union[bool, _Unavailable]:
        """Set a time-to-live on *key*. Returns False if the key does not exist."""

    @abstractmethod
    def get(self, key: str) -> Union[Optional[Any], _Unavailable]:
        """Return the value at *key*, or None when absent."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: int) -> Union[bool, _Unavailable]:
        """Store *value* at *key* with a time-to-live."""
