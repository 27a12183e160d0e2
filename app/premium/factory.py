"""
Factory for creating the premium entitlement module.
"""
from typing import Callable, Optional

from app.store.base import StoreClient
from .models import PremiumConfig
from .services import EntitlementService
from .routes import create_premium_routes


def create_premium_module(
    shared_store: Optional[StoreClient],
    premium_config: PremiumConfig,
    get_client_ip: Callable[[], str],
) -> dict:
    """Create premium entitlement module with service and routes.

    Args:
        shared_store: Store visible to all instances, or None when not configured
        premium_config: Secret, code allow-list and token lifetime
        get_client_ip: Callable resolving the current request's client IP

    Returns:
        Dictionary containing the service and blueprint
    """
    entitlement_service = EntitlementService(shared_store, premium_config)
    blueprint = create_premium_routes(entitlement_service, get_client_ip)

    return {
        "service": entitlement_service,
        "blueprint": blueprint
    }
