"""
Premium entitlement: activation codes exchanged for server-issued tokens.
"""

from .models import PremiumToken, RedemptionResult, PremiumConfig
from .services import EntitlementService

__all__ = ["PremiumToken", "RedemptionResult", "PremiumConfig", "EntitlementService"]
