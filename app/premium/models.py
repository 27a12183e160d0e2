"""
Premium entitlement models.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, Field


class PremiumToken(BaseModel):
    """Activation record persisted under the token in the shared store."""
    token: str = Field(description="Opaque token handed to the client")
    code: str = Field(description="Normalized activation code that was redeemed")
    ip: str = Field(description="Client IP that redeemed the code")
    activated_at: str = Field(description="Activation time (ISO format)")


@dataclass
class RedemptionResult:
    """Outcome of an activation code redemption."""
    valid: bool
    message: str
    premium_token: Optional[str] = None

    def to_dict(self) -> dict:
        body = {"valid": self.valid, "message": self.message}
        if self.premium_token:
            body["premiumToken"] = self.premium_token
        return body


@dataclass
class PremiumConfig:
    """Premium activation settings."""
    token_secret: str = ""
    codes: List[str] = field(default_factory=list)
    code_prefix: str = "PL"
    token_ttl_days: int = 365

    @property
    def token_ttl_seconds(self) -> int:
        return self.token_ttl_days * 24 * 60 * 60
