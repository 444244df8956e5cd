"""
Tests for the vision service clients.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from matchvision.config import Settings
from matchvision.core.errors import UpstreamError
from matchvision.services.prompts import ANALYSIS_PROMPT
from matchvision.services.vision_providers import (
    STUB_ANALYSIS,
    AnthropicVision,
    OpenAIVision,
    StubVision,
    first_text,
    get_vision,
)


@pytest.fixture
def anthropic_settings(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")
    monkeypatch.setenv("VISION_PROVIDER", "anthropic")
    return Settings()


@pytest.fixture
def openai_settings(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "test_key")
    monkeypatch.setenv("VISION_PROVIDER", "openai")
    return Settings()


@patch("anthropic.Anthropic")
def test_anthropic_request_shape(mock_anthropic, anthropic_settings):
    mock_client = MagicMock()
    mock_anthropic.return_value = mock_client
    mock_client.messages.create.return_value = SimpleNamespace(
        content=[SimpleNamespace(type="text", text="Teams: A vs B")]
    )

    blocks = AnthropicVision(anthropic_settings).analyze("QUJD")

    assert blocks == [{"type": "text", "text": "Teams: A vs B"}]
    mock_anthropic.assert_called_once_with(api_key="test_key", max_retries=0)

    kwargs = mock_client.messages.create.call_args.kwargs
    assert kwargs["model"] == "claude-3-7-sonnet-20250219"
    assert kwargs["max_tokens"] == 1024
    assert len(kwargs["messages"]) == 1

    message = kwargs["messages"][0]
    assert message["role"] == "user"
    text_block, image_block = message["content"]
    assert text_block == {"type": "text", "text": ANALYSIS_PROMPT}
    assert image_block["source"] == {"type": "base64", "media_type": "image/jpeg", "data": "QUJD"}


def test_anthropic_missing_key():
    with pytest.raises(UpstreamError) as exc:
        AnthropicVision(Settings()).analyze("QUJD")

    assert exc.value.message == "ANTHROPIC_API_KEY not set"


@patch("anthropic.Anthropic")
def test_anthropic_failure_carries_upstream_message(mock_anthropic, anthropic_settings):
    mock_anthropic.return_value.messages.create.side_effect = RuntimeError("rate limited")

    with pytest.raises(UpstreamError) as exc:
        AnthropicVision(anthropic_settings).analyze("QUJD")

    assert exc.value.message == "rate limited"
    assert exc.value.status_code == 500


@patch("anthropic.Anthropic")
def test_anthropic_failure_without_message(mock_anthropic, anthropic_settings):
    mock_anthropic.return_value.messages.create.side_effect = RuntimeError()

    with pytest.raises(UpstreamError) as exc:
        AnthropicVision(anthropic_settings).analyze("QUJD")

    assert exc.value.message == "Failed to analyze video"


@patch("anthropic.Anthropic")
def test_anthropic_empty_content(mock_anthropic, anthropic_settings):
    mock_anthropic.return_value.messages.create.return_value = SimpleNamespace(content=[])

    with pytest.raises(UpstreamError) as exc:
        AnthropicVision(anthropic_settings).analyze("QUJD")

    assert exc.value.message == "No analysis returned from the API"


@patch("openai.OpenAI")
def test_openai_request_shape(mock_openai, openai_settings):
    mock_client = MagicMock()
    mock_openai.return_value = mock_client
    mock_client.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="  score 1 - 0  "))]
    )

    blocks = OpenAIVision(openai_settings).analyze("QUJD")

    assert blocks == [{"type": "text", "text": "score 1 - 0"}]
    kwargs = mock_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    image_part = kwargs["messages"][0]["content"][1]
    assert image_part["image_url"]["url"] == "data:image/jpeg;base64,QUJD"


def test_openai_missing_key():
    with pytest.raises(UpstreamError) as exc:
        OpenAIVision(Settings()).analyze("QUJD")

    assert exc.value.message == "OPENAI_API_KEY not set"


def test_factory(monkeypatch):
    assert isinstance(get_vision(Settings()), StubVision)

    monkeypatch.setenv("VISION_PROVIDER", "anthropic")
    assert isinstance(get_vision(Settings()), AnthropicVision)

    monkeypatch.setenv("VISION_PROVIDER", "OpenAI")
    assert isinstance(get_vision(Settings()), OpenAIVision)

    monkeypatch.setenv("VISION_PROVIDER", "mystery")
    assert isinstance(get_vision(Settings()), StubVision)


def test_stub_returns_one_text_block():
    assert first_text(StubVision().analyze("QUJD")) == STUB_ANALYSIS


def test_first_text_errors():
    with pytest.raises(UpstreamError):
        first_text([])
    with pytest.raises(UpstreamError):
        first_text([{"type": "image"}])
