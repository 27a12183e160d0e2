"""
Generation proxy service: forwards validated messages to the chat model.
"""
import logging
from typing import Any, Dict, List

from app.errors import ConfigurationError, UpstreamError
from generation_service.llm_utils import LLMProvider, to_langchain_messages, extract_text
from .models import GenerationConfig, parse_messages

logger = logging.getLogger(__name__)


class GenerationService:
    """Calls the upstream text-generation service."""

    def __init__(self, llm_provider: LLMProvider, config: GenerationConfig):
        self.llm_provider = llm_provider
        self.config = config

    def ensure_configured(self) -> None:
        """Raise ConfigurationError when the upstream credential is missing."""
        if not self.llm_provider.is_configured:
            logger.error("Upstream API key is not configured")
            raise ConfigurationError("Service unavailable")

    def build_messages(self, body: Any) -> List[Dict[str, str]]:
        return parse_messages(body, self.config)

    def generate(self, messages: List[Dict[str, str]]) -> str:
        """
        Generate a reply for *messages*.

        Raises:
            UpstreamError: If the upstream call fails; details are only logged
        """
        try:
            reply = self.llm_provider.invoke(to_langchain_messages(messages))
        except Exception as e:
            logger.error(f"Upstream generation failed: {e}")
            raise UpstreamError("Error generating content") from e
        return extract_text(reply)
