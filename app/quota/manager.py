"""
Quota manager composing burst limiting, premium entitlement and weekly usage
into a single decision per request.
"""

import logging
from typing import Optional

from flask import request

from app.premium.services import EntitlementService
from app.rate_limit.limiter import BurstRateLimiter
from .models import UserTier, QuotaDecision
from .usage import WeeklyUsageTracker

logger = logging.getLogger(__name__)


class QuotaManager:
    """
    Decides whether a generation request may proceed.

    Order of checks:
    - Burst limiter: cheapest, protects everything downstream
    - Premium entitlement: only a validated token elevates to PREMIUM
    - Weekly usage: for everyone not entitled

    Tier claims from the client are untrusted. A premium claim whose token
    does not validate (including when the shared store is down) is downgraded
    to ANONYMOUS, never granted.
    """

    def __init__(
        self,
        rate_limiter: BurstRateLimiter,
        usage_tracker: WeeklyUsageTracker,
        entitlement_service: EntitlementService,
    ):
        self.rate_limiter = rate_limiter
        self.usage_tracker = usage_tracker
        self.entitlement_service = entitlement_service

    def get_client_ip(self) -> str:
        """Get client IP address, handling proxy headers."""
        if request.headers.get('X-Forwarded-For'):
            return request.headers.get('X-Forwarded-For').split(',')[0].strip()
        elif request.headers.get('X-Real-IP'):
            return request.headers.get('X-Real-IP').strip()
        else:
            return request.remote_addr or "unknown"

    def resolve_tier(self, claimed_tier: Optional[str], premium_token: Optional[str]) -> UserTier:
        """
        Determine the effective tier for a request.

        Args:
            claimed_tier: Tier declared by the client (untrusted)
            premium_token: Token presented with a premium claim

        Returns:
            PREMIUM only when the token validates; otherwise the claimed
            non-premium tier, with premium claims downgraded to ANONYMOUS
        """
        tier = UserTier.from_claim(claimed_tier)
        if tier != UserTier.PREMIUM:
            return tier

        if premium_token and self.entitlement_service.validate(premium_token):
            return UserTier.PREMIUM

        logger.info("Premium claim without a valid token, applying anonymous limits")
        return UserTier.ANONYMOUS

    def check_and_consume(
        self,
        ip: str,
        claimed_tier: Optional[str],
        premium_token: Optional[str] = None,
        premium_only: bool = False,
    ) -> QuotaDecision:
        """
        Main entry point - check quota and consume if allowed.

        Args:
            ip: Client IP address
            claimed_tier: Tier header sent by the client
            premium_token: Premium token header, if any
            premium_only: Deny non-premium callers without charging weekly usage

        Returns:
            QuotaDecision with allowed status and remaining quota
        """
        if not self.rate_limiter.check_and_count(ip):
            return QuotaDecision(
                allowed=False,
                remaining=0,
                limit=self.rate_limiter.max_requests,
                tier=UserTier.from_claim(claimed_tier),
                reason="rate_limited",
                message="Too many requests. Try again in a minute.",
            )

        tier = self.resolve_tier(claimed_tier, premium_token)
        logger.info(f"Quota check: ip={ip}, claimed={claimed_tier}, tier={tier.value}")

        if tier == UserTier.PREMIUM:
            return QuotaDecision(allowed=True, tier=tier)

        if premium_only:
            return QuotaDecision(
                allowed=False,
                tier=tier,
                reason="premium_required",
                message="Premium access required",
            )

        return self.usage_tracker.check_and_increment(ip, tier)

    def get_quota_info(
        self,
        ip: str,
        claimed_tier: Optional[str],
        premium_token: Optional[str] = None,
    ) -> dict:
        """
        Get quota information for display. Nothing is charged.

        Returns dict with:
        - tier: Effective tier name
        - is_unlimited: True for verified premium
        - limit / used / remaining: Weekly figures (None when unlimited)
        - resets_in_days: Days until the weekly reset
        - activated_at: When the premium token was issued (premium only)
        """
        tier = self.resolve_tier(claimed_tier, premium_token)

        if tier == UserTier.PREMIUM:
            record = self.entitlement_service.get_record(premium_token)
            return {
                "tier": tier.value,
                "is_unlimited": True,
                "limit": None,
                "used": None,
                "remaining": None,
                "resets_in_days": None,
                "activated_at": record.activated_at if record else None,
            }

        usage = self.usage_tracker.peek(ip, tier)
        return {
            "tier": tier.value,
            "is_unlimited": False,
            "limit": usage["limit"],
            "used": usage["used"],
            "remaining": usage["remaining"],
            "resets_in_days": usage["resets_in_days"],
            "activated_at": None,
        }
