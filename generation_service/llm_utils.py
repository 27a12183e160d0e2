"""
llm_utils.py - LLM utilities and provider management

This module provides chat-model invocation for the generation proxy with
support for Anthropic, DeepSeek and OpenAI-compatible providers.
"""

import logging
import os
from typing import Dict, List, Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage, AIMessage, BaseMessage
from langchain_deepseek import ChatDeepSeek
from langchain_openai import ChatOpenAI

_LOG = logging.getLogger("llm_utils")

# Default configuration
DEFAULT_LLM_PROVIDER = "anthropic"  # "anthropic", "deepseek", or "openai"
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_DEEPSEEK_MODEL = "deepseek-chat"
DEFAULT_MAX_TOKENS = 2000

_API_KEY_ENV = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
}


class LLMProvider:
    """LLM provider configuration and management."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        provider: str = DEFAULT_LLM_PROVIDER,
        model: str = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: int = 60,
        max_retries: int = 2,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.provider = provider.lower()
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.max_retries = max_retries

        # Set defaults based on provider
        self._configure_provider()

    def _configure_provider(self):
        """Configure provider-specific settings."""
        if not self.api_key:
            self.api_key = os.getenv(_API_KEY_ENV.get(self.provider, "ANTHROPIC_API_KEY"))

        if self.provider == "openai":
            if not self.base_url:
                self.base_url = os.getenv("OPENAI_API_BASE", "https://api.openai.com/v1")
            if not self.model:
                self.model = DEFAULT_OPENAI_MODEL
        elif self.provider == "deepseek":
            if not self.model:
                self.model = DEFAULT_DEEPSEEK_MODEL
        else:  # anthropic
            if not self.model:
                self.model = DEFAULT_ANTHROPIC_MODEL

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def get_llm(self):
        """Get the configured chat model instance."""
        if not self.api_key:
            raise ValueError(f"API key required for provider '{self.provider}'")

        if self.provider == "openai":
            _LOG.debug("Using OpenAI-compatible provider: %s at %s", self.model, self.base_url)
            return ChatOpenAI(
                model=self.model,
                api_key=self.api_key,
                base_url=self.base_url,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
        elif self.provider == "deepseek":
            _LOG.debug("Using DeepSeek provider: %s", self.model)
            kwargs = {}
            if self.base_url:
                kwargs["api_base"] = self.base_url
            return ChatDeepSeek(
                model=self.model,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
                max_retries=self.max_retries,
                api_key=self.api_key,
                **kwargs,
            )
        else:  # anthropic
            _LOG.debug("Using Anthropic provider: %s", self.model)
            kwargs = {}
            if self.base_url:
                kwargs["base_url"] = self.base_url
            return ChatAnthropic(
                model=self.model,
                api_key=self.api_key,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
                max_retries=self.max_retries,
                **kwargs,
            )

    def invoke(self, messages: List[BaseMessage]) -> AIMessage:
        """Invoke the chat model with the configured provider."""
        return self.get_llm().invoke(messages)


def to_langchain_messages(messages: List[Dict[str, str]]) -> List[BaseMessage]:
    """Convert ``{"role", "content"}`` dicts into langchain messages."""
    converted: List[BaseMessage] = []
    for msg in messages:
        if msg["role"] == "assistant":
            converted.append(AIMessage(content=msg["content"]))
        else:
            converted.append(HumanMessage(content=msg["content"]))
    return converted


def extract_text(message: AIMessage) -> str:
    """Return the text of a chat model reply, joining content blocks if needed."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)
