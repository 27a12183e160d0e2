"""
Data models for the quota management system.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class UserTier(Enum):
    """Caller tiers for quota management."""
    ANONYMOUS = "anonymous"    # No account, IP-based weekly quota
    REGISTERED = "registered"  # Registered user, larger weekly quota
    PREMIUM = "premium"        # Verified premium token, unlimited

    @classmethod
    def from_claim(cls, claim: Optional[str]) -> "UserTier":
        """Parse a client-declared tier. Unknown values become ANONYMOUS."""
        try:
            return cls((claim or "").strip().lower())
        except ValueError:
            return cls.ANONYMOUS


@dataclass
class QuotaDecision:
    """Result of a quota check. ``None`` remaining/limit means unbounded."""
    allowed: bool
    remaining: Optional[int] = None
    limit: Optional[int] = None
    tier: UserTier = UserTier.ANONYMOUS
    reason: Optional[str] = None  # "rate_limited", "weekly_limit"
    message: Optional[str] = None  # User-facing message

    @property
    def is_unlimited(self) -> bool:
        return self.allowed and self.limit is None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "allowed": self.allowed,
            "remaining": self.remaining,
            "limit": self.limit,
            "tier": self.tier.value,
            "reason": self.reason,
            "message": self.message,
        }


@dataclass
class QuotaConfig:
    """Weekly and burst limits."""
    anonymous_weekly_limit: int = 10
    registered_weekly_limit: int = 15
    burst_limit: int = 10
    burst_window_seconds: int = 60

    def weekly_limit_for(self, tier: UserTier) -> int:
        """Weekly limit for a tier. Premium never gets a limit of its own here."""
        if tier == UserTier.REGISTERED:
            return self.registered_weekly_limit
        return self.anonymous_weekly_limit

    @classmethod
    def from_dict(cls, data: dict) -> "QuotaConfig":
        """Create QuotaConfig from dictionary."""
        return cls(
            anonymous_weekly_limit=data.get("anonymous_weekly_limit", 10),
            registered_weekly_limit=data.get("registered_weekly_limit", 15),
            burst_limit=data.get("burst_limit", 10),
            burst_window_seconds=data.get("burst_window_seconds", 60),
        )
