"""Tests for LLM factory and auto-detection."""

from unittest.mock import MagicMock, patch

import pytest

from llm import LLMError, create_cheap_provider, create_llm_provider
from llm.factory import _auto_detect_provider

_KEYS = ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GOOGLE_API_KEY")


@pytest.fixture
def no_keys(monkeypatch):
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestAutoDetection:
    def test_detects_anthropic_key(self, no_keys):
        no_keys.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        assert _auto_detect_provider() == "claude"

    def test_detects_openai_key(self, no_keys):
        no_keys.setenv("OPENAI_API_KEY", "sk-test")
        assert _auto_detect_provider() == "openai"

    def test_detects_google_key(self, no_keys):
        no_keys.setenv("GOOGLE_API_KEY", "AIza-test")
        assert _auto_detect_provider() == "gemini"

    def test_prefers_openai_when_multiple(self, no_keys):
        no_keys.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        no_keys.setenv("OPENAI_API_KEY", "sk-test")
        assert _auto_detect_provider() == "openai"

    def test_explicit_key_prefix_wins(self, no_keys):
        no_keys.setenv("OPENAI_API_KEY", "sk-test")
        assert _auto_detect_provider("sk-ant-explicit") == "claude"
        assert _auto_detect_provider("AIzaExplicit") == "gemini"

    def test_no_keys_raises(self, no_keys):
        with pytest.raises(LLMError, match="No LLM API key found"):
            _auto_detect_provider()


class TestCreateProvider:
    @pytest.mark.parametrize("name", ["claude", "openai", "gemini"])
    def test_explicit_with_client(self, name):
        mock_client = MagicMock()
        provider = create_llm_provider(provider=name, client=mock_client)
        assert provider.provider_name == name
        assert provider.client is mock_client

    def test_unknown_provider_raises(self):
        with pytest.raises(LLMError, match="Unknown provider"):
            create_llm_provider(provider="llama", client=MagicMock())

    def test_auto_with_openai_key(self, no_keys):
        no_keys.setenv("OPENAI_API_KEY", "sk-test")
        # Mock OpenAI client to avoid real init
        with patch("openai.OpenAI"):
            provider = create_llm_provider()
            assert provider.provider_name == "openai"

    def test_custom_model(self):
        provider = create_llm_provider(provider="openai", client=MagicMock(), model="gpt-4o")
        assert provider.model == "gpt-4o"

    def test_default_models(self):
        mock_client = MagicMock()
        assert create_llm_provider(provider="claude", client=mock_client).model == "claude-sonnet-4-5"
        assert create_llm_provider(provider="openai", client=mock_client).model == "gpt-4o-mini"
        assert (
            create_llm_provider(provider="gemini", client=mock_client).model_name
            == "gemini-2.5-flash"
        )


class TestCheapProvider:
    def test_cheap_models(self):
        mock_client = MagicMock()
        assert create_cheap_provider("claude", client=mock_client).model == "claude-haiku-4-5"
        assert create_cheap_provider("openai", client=mock_client).model == "gpt-4o-mini"
        assert create_cheap_provider("gemini", client=mock_client).model_name == "gemini-2.0-flash"

    def test_auto_resolves_first(self, no_keys):
        no_keys.setenv("GOOGLE_API_KEY", "AIza-test")
        provider = create_cheap_provider(client=MagicMock())
        assert provider.provider_name == "gemini"
        assert provider.model_name == "gemini-2.0-flash"

    def test_explicit_model_wins(self):
        provider = create_cheap_provider("openai", model="gpt-4.1-nano", client=MagicMock())
        assert provider.model == "gpt-4.1-nano"
