"""
Generation service package.

Provides the upstream chat-model client used by the generation proxy and the
process logging setup.
"""

from .llm_utils import LLMProvider, to_langchain_messages, extract_text
from .logging_config import setup_logging, stop_logging

__all__ = [
    "LLMProvider",
    "to_langchain_messages",
    "extract_text",
    "setup_logging",
    "stop_logging",
]
