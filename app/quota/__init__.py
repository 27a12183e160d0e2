"""
Quota management module for tiered access control.
Supports Anonymous and Registered (IP-based weekly) and Premium (token-verified) tiers.
"""

from .models import UserTier, QuotaDecision, QuotaConfig
from .manager import QuotaManager
from .usage import WeeklyUsageTracker

__all__ = ["UserTier", "QuotaDecision", "QuotaConfig", "QuotaManager", "WeeklyUsageTracker"]
