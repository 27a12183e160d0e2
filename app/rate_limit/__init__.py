"""
Burst rate limiting.
"""

from .limiter import BurstRateLimiter

__all__ = ["BurstRateLimiter"]
