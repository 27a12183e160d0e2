"""
Remote store backend speaking the REST command protocol of a hosted Redis
service (Upstash-compatible).

Each logical operation is one command posted as a JSON array
``[COMMAND, *args]``; the service replies with ``{"result": ...}`` or
``{"error": ...}``.
"""

import logging
from typing import Any, List, Optional

import requests

from app.errors import StoreUnavailableError
from .base import StoreClient, UNAVAILABLE

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class RemoteStore(StoreClient):
    """Store client backed by a shared key-value service over HTTPS."""

    shared = True

    def __init__(
        self,
        url: Optional[str],
        token: Optional[str],
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.url = (url or "").strip()
        self.token = (token or "").strip()
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.token)

    def command(self, name: str, *args: Any) -> Any:
        """
        Send a single command and return its ``result`` field.

        Raises:
            StoreUnavailableError: On missing configuration, transport errors,
                non-success HTTP status or an error reply.
        """
        if not self.is_configured:
            raise StoreUnavailableError("remote store is not configured")

        body: List[Any] = [name, *[str(a) for a in args]]
        try:
            resp = self.session.post(
                self.url,
                json=body,
                headers={"Authorization": f"Bearer {self.token}"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise StoreUnavailableError(f"{name} failed: {e}") from e

        if not resp.ok:
            raise StoreUnavailableError(f"{name} failed with HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise StoreUnavailableError(f"{name} returned invalid JSON") from e

        if not isinstance(data, dict) or "error" in data:
            detail = data.get("error") if isinstance(data, dict) else data
            raise StoreUnavailableError(f"{name} returned an error: {detail}")

        return data.get("result")

    def _safe_command(self, name: str, *args: Any) -> Any:
        try:
            return self.command(name, *args)
        except StoreUnavailableError as e:
            logger.warning(f"Remote store unavailable: {e}")
            return UNAVAILABLE

    def increment(self, key: str):
        result = self._safe_command("INCR", key)
        if result is UNAVAILABLE:
            return UNAVAILABLE
        try:
            return int(result)
        except (TypeError, ValueError):
            logger.warning(f"Remote store returned non-integer INCR result for {key}: {result!r}")
            return UNAVAILABLE

    def expire(self, key: str, ttl_seconds: int):
        result = self._safe_command("EXPIRE", key, int(ttl_seconds))
        if result is UNAVAILABLE:
            return UNAVAILABLE
        return result in (1, "1", True)

    def get(self, key: str):
        return self._safe_command("GET", key)

    def set(self, key: str, value: Any, ttl_seconds: int):
        result = self._safe_command("SET", key, value, "EX", int(ttl_seconds))
        if result is UNAVAILABLE:
            return UNAVAILABLE
        return result == "OK"
