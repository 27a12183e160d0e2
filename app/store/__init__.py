"""
Store layer: a uniform key-value interface over a shared remote service and a
process-local fallback.
"""

from .base import StoreClient, UNAVAILABLE, is_unavailable
from .local import LocalStore
from .remote import RemoteStore
from .failover import FailoverCounter, CounterHit
from .factory import create_store_module

__all__ = [
    "StoreClient",
    "UNAVAILABLE",
    "is_unavailable",
    "LocalStore",
    "RemoteStore",
    "FailoverCounter",
    "CounterHit",
    "create_store_module",
]
