"""
Factory for creating the store layer.
"""

import logging
from typing import Optional

from .base import StoreClient
from .failover import FailoverCounter
from .local import LocalStore
from .remote import RemoteStore

logger = logging.getLogger(__name__)


def create_store_module(store_config, shared_store: Optional[StoreClient] = None) -> dict:
    """
    Create the store layer. The primary backend is selected once, here.

    Args:
        store_config: StoreConfig with the remote endpoint and token
        shared_store: Pre-built shared store (overrides store_config)

    Returns:
        Dictionary with:
        - primary: Store used for counters
        - local: Process-local fallback store
        - shared: Store visible to all instances, or None when absent
        - counter: FailoverCounter over primary and local
    """
    local = LocalStore()

    if shared_store is None:
        remote = RemoteStore(
            url=store_config.url,
            token=store_config.token,
            timeout=store_config.timeout,
        )
        shared_store = remote if remote.is_configured else None

    if shared_store is not None:
        primary = shared_store
        logger.info(f"Using shared store: {type(shared_store).__name__}")
    else:
        primary = local
        logger.warning(
            "Shared store is not configured; counters are process-local and "
            "premium entitlement is disabled"
        )

    return {
        "primary": primary,
        "local": local,
        "shared": shared_store,
        "counter": FailoverCounter(primary=primary, fallback=local),
    }
