"""
Factory for creating quota management components.
"""

from app.premium.services import EntitlementService
from app.rate_limit.limiter import BurstRateLimiter
from app.store.failover import FailoverCounter
from .models import QuotaConfig
from .manager import QuotaManager
from .usage import WeeklyUsageTracker
from .routes import create_quota_routes


def create_quota_module(
    counter: FailoverCounter,
    entitlement_service: EntitlementService,
    config: QuotaConfig,
) -> dict:
    """
    Create quota management module.

    Args:
        counter: FailoverCounter over the primary and local stores
        entitlement_service: Premium token validation
        config: QuotaConfig with weekly and burst limits

    Returns:
        Dictionary with:
        - manager: QuotaManager instance
        - config: QuotaConfig instance
        - blueprint: Quota status routes
    """
    rate_limiter = BurstRateLimiter(
        counter,
        max_requests=config.burst_limit,
        window_seconds=config.burst_window_seconds,
    )
    usage_tracker = WeeklyUsageTracker(counter, config)

    manager = QuotaManager(
        rate_limiter=rate_limiter,
        usage_tracker=usage_tracker,
        entitlement_service=entitlement_service,
    )

    return {
        "manager": manager,
        "config": config,
        "blueprint": create_quota_routes(manager),
    }
