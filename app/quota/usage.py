"""
Weekly usage tracking keyed to the week starting Monday 00:00 local time.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable

from app.store.failover import FailoverCounter
from .models import UserTier, QuotaDecision, QuotaConfig

logger = logging.getLogger(__name__)

# Extra lifetime kept on a usage counter after its week ends
EXPIRY_BUFFER_SECONDS = 24 * 60 * 60


def week_start(now: datetime) -> datetime:
    """Most recent Monday at midnight. Sunday is six days past the prior Monday."""
    monday = now - timedelta(days=now.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def week_identifier(now: datetime) -> str:
    """Sortable identifier of the current week, e.g. ``2026-01-26``."""
    return week_start(now).date().isoformat()


def seconds_until_next_week(now: datetime) -> int:
    next_monday = week_start(now) + timedelta(days=7)
    return math.ceil((next_monday - now).total_seconds())


def days_until_reset(now: datetime) -> int:
    """Whole days until the next weekly reset, counting a partial day as one."""
    return math.ceil(seconds_until_next_week(now) / 86400)


class WeeklyUsageTracker:
    """
    Enforces tier-specific weekly quotas per client IP.

    Counters live in the shared store when it is reachable and in the local
    store otherwise; in both cases the week identifier is part of the key, so
    a new week always starts from zero.
    """

    def __init__(
        self,
        counter: FailoverCounter,
        config: QuotaConfig,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.counter = counter
        self.config = config
        self._clock = clock

    def usage_key(self, ip: str, now: datetime) -> str:
        return f"usage:week:{week_identifier(now)}:{ip}"

    def check_and_increment(self, ip: str, tier: UserTier) -> QuotaDecision:
        """
        Charge one use against the weekly quota of *ip*.

        Args:
            ip: Client IP address
            tier: Effective (already verified) tier

        Returns:
            QuotaDecision with allowed status, remaining uses and limit
        """
        now = self._clock()
        limit = self.config.weekly_limit_for(tier)
        ttl = seconds_until_next_week(now) + EXPIRY_BUFFER_SECONDS

        hit = self.counter.hit(self.usage_key(ip, now), ttl)

        if hit.count > limit:
            logger.info(f"Weekly limit reached: ip={ip}, tier={tier.value}, count={hit.count}, limit={limit}")
            return QuotaDecision(
                allowed=False,
                remaining=0,
                limit=limit,
                tier=tier,
                reason="weekly_limit",
                message="Weekly generation limit reached",
            )

        remaining = limit - hit.count
        logger.info(
            f"Weekly usage: ip={ip}, tier={tier.value}, count={hit.count}/{limit}"
            + (" (local)" if hit.degraded else "")
        )
        return QuotaDecision(
            allowed=True,
            remaining=remaining,
            limit=limit,
            tier=tier,
        )

    def peek(self, ip: str, tier: UserTier) -> dict:
        """Current weekly usage without charging."""
        now = self._clock()
        limit = self.config.weekly_limit_for(tier)
        used = self.counter.read(self.usage_key(ip, now))
        return {
            "limit": limit,
            "used": used,
            "remaining": max(0, limit - used),
            "week": week_identifier(now),
            "resets_in_days": days_until_reset(now),
        }
