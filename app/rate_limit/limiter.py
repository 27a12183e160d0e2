"""
Per-IP burst protection over a short fixed window.
"""

import logging

from app.store.failover import FailoverCounter

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 10
DEFAULT_WINDOW_SECONDS = 60


class BurstRateLimiter:
    """
    Fixed-window request counter keyed by client IP.

    The request that crosses the ceiling is still counted; it is rejected
    because the post-increment count exceeds ``max_requests``.
    """

    def __init__(
        self,
        counter: FailoverCounter,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
    ):
        self.counter = counter
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    @staticmethod
    def key_for(ip: str) -> str:
        return f"rl:{ip}"

    def check_and_count(self, ip: str) -> bool:
        """Count a request from *ip*. Returns False when it must be rejected."""
        hit = self.counter.hit(self.key_for(ip), self.window_seconds)
        allowed = hit.count <= self.max_requests
        if not allowed:
            logger.warning(
                f"Burst limit exceeded: ip={ip}, count={hit.count}, "
                f"limit={self.max_requests}/{self.window_seconds}s"
            )
        return allowed
