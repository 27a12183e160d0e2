"""
Premium entitlement: activation code redemption and token validation.

Validation fails closed. Tokens are only ever looked up in the shared store;
when it cannot be reached the caller is treated as not entitled, unlike usage
counting which degrades to process-local state.
"""

import hashlib
import hmac
import logging
import re
import secrets
from datetime import datetime
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from app.errors import ConfigurationError, ServiceUnavailableError
from app.store.base import StoreClient, UNAVAILABLE
from .models import PremiumToken, RedemptionResult, PremiumConfig

logger = logging.getLogger(__name__)

INVALID_CODE_MESSAGE = "Invalid code"
MAX_TOKEN_LENGTH = 128


class EntitlementService:
    """Issues and validates premium tokens."""

    def __init__(
        self,
        shared_store: Optional[StoreClient],
        config: PremiumConfig,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.shared_store = shared_store
        self.config = config
        self._clock = clock
        self._code_pattern = re.compile(rf"^{re.escape(config.code_prefix.upper())}-[A-Z0-9]{{2,20}}$")

    @staticmethod
    def token_key(token: str) -> str:
        return f"premium:{token}"

    def normalize_code(self, code: str) -> Optional[str]:
        """Trim and upper-case *code*; None if it does not match the code format."""
        normalized = code.strip().upper()
        if not self._code_pattern.match(normalized):
            return None
        return normalized

    def allowed_codes(self) -> set:
        return {c.strip().upper() for c in self.config.codes if c and c.strip()}

    def issue_token(self, code: str, ip: str, activated_at: str) -> str:
        """Derive an opaque token bound to the code, IP, time and server secret."""
        nonce = secrets.token_hex(16)
        payload = f"{code}:{ip}:{activated_at}:{nonce}".encode("utf-8")
        return hmac.new(self.config.token_secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()

    def redeem(self, code: str, ip: str) -> RedemptionResult:
        """
        Redeem an activation code and persist the resulting token.

        Malformed, unknown and unconfigured codes get the same response.

        Raises:
            ConfigurationError: The token secret is not configured
            ServiceUnavailableError: The shared store could not persist the token
        """
        normalized = self.normalize_code(code)
        allowed = self.allowed_codes()

        if not allowed:
            logger.error("Premium code list is not configured")
        if normalized is None or normalized not in allowed:
            logger.info(f"Rejected activation code from ip={ip}")
            return RedemptionResult(valid=False, message=INVALID_CODE_MESSAGE)

        if not self.config.token_secret:
            logger.error("Premium token secret is not configured")
            raise ConfigurationError("Code activation is not available")

        if self.shared_store is None:
            logger.error("Cannot activate premium: shared store is not configured")
            raise ServiceUnavailableError("Code activation is temporarily unavailable")

        activated_at = self._clock().isoformat()
        record = PremiumToken(
            token=self.issue_token(normalized, ip, activated_at),
            code=normalized,
            ip=ip,
            activated_at=activated_at,
        )

        stored = self.shared_store.set(
            self.token_key(record.token),
            record.model_dump_json(),
            self.config.token_ttl_seconds,
        )
        if stored is UNAVAILABLE or not stored:
            logger.error(f"Failed to persist premium token for ip={ip}")
            raise ServiceUnavailableError("Code activation is temporarily unavailable")

        logger.info(f"Premium activated: ip={ip}")
        return RedemptionResult(valid=True, message="Valid code", premium_token=record.token)

    def validate(self, token: Optional[str]) -> bool:
        """True only if *token* is present and unexpired in the shared store."""
        if not token or len(token) > MAX_TOKEN_LENGTH:
            return False
        if self.shared_store is None:
            return False

        value = self.shared_store.get(self.token_key(token))
        if value is UNAVAILABLE:
            logger.warning("Shared store unavailable, premium token treated as invalid")
            return False
        return value is not None

    def get_record(self, token: str) -> Optional[PremiumToken]:
        """Load the activation record for *token*, if it is still valid."""
        if not token or len(token) > MAX_TOKEN_LENGTH or self.shared_store is None:
            return None
        value = self.shared_store.get(self.token_key(token))
        if value is UNAVAILABLE or value is None:
            return None
        try:
            return PremiumToken.model_validate_json(value)
        except PydanticValidationError as e:
            logger.warning(f"Malformed premium record: {e}")
            return None
