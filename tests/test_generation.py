"""
Tests for generation input validation, the upstream client and error mapping.
"""

from unittest.mock import MagicMock, patch

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from app.errors import ValidationError, UpstreamError, ConfigurationError, QuotaExceededError
from app.generation.models import GenerationConfig, parse_messages
from app.generation.services import GenerationService
from generation_service.llm_utils import LLMProvider, to_langchain_messages, extract_text


class TestParseMessages:
    """Test request body validation."""

    def setup_method(self):
        self.config = GenerationConfig()

    def test_prompt_is_trimmed_into_user_message(self):
        assert parse_messages({"prompt": "  hello  "}, self.config) == [{"role": "user", "content": "hello"}]

    def test_messages_win_over_prompt(self):
        body = {"prompt": "ignored", "messages": [{"role": "user", "content": "used"}]}
        assert parse_messages(body, self.config) == [{"role": "user", "content": "used"}]

    def test_prompt_at_length_limit(self):
        assert parse_messages({"prompt": "x" * 5000}, self.config)

    @pytest.mark.parametrize("body", [
        None,
        [],
        {},
        {"prompt": 42},
        {"prompt": "x" * 5001},
        {"messages": "hello"},
        {"messages": [{"role": "user", "content": "a"}] * 11},
        {"messages": ["hello"]},
        {"messages": [{"role": "system", "content": "a"}]},
        {"messages": [{"role": "user", "content": "   "}]},
        {"messages": [{"role": "user", "content": 5}]},
        {"messages": [{"role": "user", "content": "x" * 5001}]},
    ])
    def test_invalid_bodies(self, body):
        with pytest.raises(ValidationError) as exc_info:
            parse_messages(body, self.config)
        assert exc_info.value.status_code == 400

    def test_custom_limits(self):
        config = GenerationConfig(max_messages=2, max_content_chars=3)
        with pytest.raises(ValidationError):
            parse_messages({"messages": [{"role": "user", "content": "a"}] * 3}, config)
        with pytest.raises(ValidationError):
            parse_messages({"prompt": "abcd"}, config)


class TestGenerationService:
    """Test the upstream call wrapper."""

    def setup_method(self):
        self.provider = MagicMock()
        self.provider.is_configured = True
        self.service = GenerationService(self.provider, GenerationConfig())

    def test_generate_returns_text(self):
        self.provider.invoke.return_value = AIMessage(content="done")
        assert self.service.generate([{"role": "user", "content": "hi"}]) == "done"

    def test_upstream_exception_becomes_upstream_error(self):
        self.provider.invoke.side_effect = ConnectionError("boom: secret detail")

        with pytest.raises(UpstreamError) as exc_info:
            self.service.generate([{"role": "user", "content": "hi"}])

        assert exc_info.value.status_code == 502
        assert "secret detail" not in exc_info.value.message

    def test_ensure_configured(self):
        self.service.ensure_configured()

        self.provider.is_configured = False
        with pytest.raises(ConfigurationError):
            self.service.ensure_configured()


class TestLLMUtils:
    """Test provider configuration and message conversion."""

    def test_message_conversion(self):
        converted = to_langchain_messages([
            {"role": "user", "content": "a"},
            {"role": "assistant", "content": "b"},
        ])
        assert isinstance(converted[0], HumanMessage)
        assert isinstance(converted[1], AIMessage)
        assert [m.content for m in converted] == ["a", "b"]

    def test_extract_text_from_string(self):
        assert extract_text(AIMessage(content="plain")) == "plain"

    def test_extract_text_from_content_blocks(self):
        message = AIMessage(content=[
            {"type": "text", "text": "Hello "},
            {"type": "tool_use", "id": "x", "name": "t", "input": {}},
            {"type": "text", "text": "world"},
        ])
        assert extract_text(message) == "Hello world"

    def test_anthropic_defaults(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        provider = LLMProvider()

        assert provider.provider == "anthropic"
        assert provider.model == "claude-sonnet-4-20250514"
        assert provider.is_configured is False
        with pytest.raises(ValueError):
            provider.get_llm()

    def test_api_key_from_provider_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        provider = LLMProvider(provider="openai")

        assert provider.api_key == "sk-openai"
        assert provider.is_configured is True

    def test_invoke_uses_anthropic_chat_model(self):
        with patch("generation_service.llm_utils.ChatAnthropic") as chat_cls:
            chat_cls.return_value.invoke.return_value = AIMessage(content="ok")
            provider = LLMProvider(api_key="sk-ant", max_tokens=123)

            reply = provider.invoke([HumanMessage(content="hi")])

        assert reply.content == "ok"
        kwargs = chat_cls.call_args.kwargs
        assert kwargs["api_key"] == "sk-ant"
        assert kwargs["max_tokens"] == 123
        assert kwargs["model"] == "claude-sonnet-4-20250514"


class TestErrorPayloads:
    """Test error serialization."""

    def test_quota_exceeded_payload(self):
        error = QuotaExceededError("Weekly generation limit reached", limit=10)
        assert error.status_code == 429
        assert error.to_dict() == {
            "error": "Weekly generation limit reached",
            "remaining": 0,
            "limit": 10,
        }
