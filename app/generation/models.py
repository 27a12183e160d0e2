"""
Generation request models and input validation.
"""
from dataclasses import dataclass
from typing import Any, Dict, List

from app.errors import ValidationError

ALLOWED_ROLES = ("user", "assistant")


@dataclass
class GenerationConfig:
    """Input limits for generation requests."""
    max_messages: int = 10
    max_content_chars: int = 5000
    require_premium: bool = False


def parse_messages(body: Any, config: GenerationConfig) -> List[Dict[str, str]]:
    """Validate a request body and return the chat messages to send upstream.

    The body carries either ``messages`` (a conversation) or ``prompt``
    (a single user turn); ``messages`` wins when both are present.

    Raises:
        ValidationError: If the body violates a format constraint
    """
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    messages = body.get("messages")
    prompt = body.get("prompt")

    if messages:
        return _validate_messages(messages, config)

    if prompt:
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValidationError("Invalid prompt")
        if len(prompt) > config.max_content_chars:
            raise ValidationError(f"Prompt too long (maximum {config.max_content_chars} characters)")
        return [{"role": "user", "content": prompt.strip()}]

    raise ValidationError("Either prompt or messages is required")


def _validate_messages(messages: Any, config: GenerationConfig) -> List[Dict[str, str]]:
    if not isinstance(messages, list) or not 0 < len(messages) <= config.max_messages:
        raise ValidationError(f"messages must be a list of 1 to {config.max_messages} items")

    validated = []
    for msg in messages:
        if not isinstance(msg, dict):
            raise ValidationError("Each message must be an object")
        role = msg.get("role")
        content = msg.get("content")
        if role not in ALLOWED_ROLES:
            raise ValidationError("Message role must be 'user' or 'assistant'")
        if not isinstance(content, str) or not content.strip():
            raise ValidationError("Message content must be a non-empty string")
        if len(content) > config.max_content_chars:
            raise ValidationError(f"Message content too long (maximum {config.max_content_chars} characters)")
        validated.append({"role": role, "content": content})
    return validated
