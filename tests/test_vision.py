"""AnalysisClient backend tests"""
import json

import anthropic
import httpx
import openai
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from promptlens.constants import PROMPT_SCHEMA_NAME
from promptlens.errors import (
    AnalysisError,
    ConfigurationError,
    EmptyResponseError,
    MalformedResponseError,
    ServiceError,
)
from promptlens.image.canonical import CanonicalImage, encode_payload
from promptlens.vision.claude import ClaudeAnalysisClient
from promptlens.vision.client import PromptResult, parse_prompt_payload, prompt_result_from_mapping
from promptlens.vision.openai import OpenAIAnalysisClient

IMAGE = CanonicalImage(payload=encode_payload(b"\x89PNG fake"), media_type="image/png")
GOOD = {"english": "A red fox at dawn, 35mm film", "arabic": "ثعلب أحمر عند الفجر"}


def tool_block(data: dict) -> MagicMock:
    block = MagicMock()
    block.type = "tool_use"
    block.input = data
    return block


def text_block(text: str) -> MagicMock:
    block = MagicMock()
    block.type = "text"
    block.text = text
    return block


def openai_response(content) -> MagicMock:
    choice = MagicMock()
    choice.message.content = content
    response = MagicMock()
    response.choices = [choice]
    return response


# ── shared response contract ──────────────────────────────────────────────────


def test_parse_prompt_payload_returns_result():
    result = parse_prompt_payload(json.dumps(GOOD))

    assert result == PromptResult(english=GOOD["english"], arabic=GOOD["arabic"])


def test_parse_prompt_payload_strips_values():
    result = parse_prompt_payload('{"english": "  cat  ", "arabic": " قطة\\n"}')

    assert result == PromptResult(english="cat", arabic="قطة")


@pytest.mark.parametrize("payload", [None, "", "   \n"])
def test_parse_prompt_payload_empty_raises(payload):
    with pytest.raises(EmptyResponseError):
        parse_prompt_payload(payload)


def test_parse_prompt_payload_invalid_json_raises():
    with pytest.raises(MalformedResponseError) as info:
        parse_prompt_payload("Here are your prompts: english=...")

    assert info.value.payload == "Here are your prompts: english=..."


def test_missing_arabic_is_malformed_not_partial():
    with pytest.raises(MalformedResponseError, match="arabic"):
        parse_prompt_payload('{"english": "a prompt"}')


@pytest.mark.parametrize(
    "data",
    [
        ["english", "arabic"],
        {"english": "a", "arabic": ""},
        {"english": "a", "arabic": 3},
        {"english": "a", "arabic": "b", "french": "c"},
    ],
)
def test_prompt_result_from_mapping_rejects_schema_violations(data):
    with pytest.raises(MalformedResponseError):
        prompt_result_from_mapping(data)


def test_error_kinds_are_analysis_errors():
    assert issubclass(ConfigurationError, AnalysisError)
    assert issubclass(EmptyResponseError, AnalysisError)
    assert issubclass(MalformedResponseError, AnalysisError)
    assert issubclass(ServiceError, AnalysisError)


# ── ClaudeAnalysisClient ──────────────────────────────────────────────────────


@pytest.mark.parametrize("key", ["", "   ", None])
def test_claude_client_requires_api_key(key):
    with pytest.raises(ConfigurationError):
        ClaudeAnalysisClient(api_key=key)


async def test_claude_analyze_sends_image_and_forced_schema():
    client = ClaudeAnalysisClient(api_key="test-key")
    mock_response = MagicMock()
    mock_response.content = [tool_block(GOOD)]

    with patch("promptlens.vision.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(return_value=mock_response)
        mock_cls.return_value = mock_anthropic
        mock_anthropic.__aenter__.return_value = mock_anthropic

        result = await client.analyze(IMAGE)

    assert result.english == GOOD["english"]
    assert result.arabic == GOOD["arabic"]
    mock_anthropic.messages.create.assert_called_once()
    call_kwargs = mock_anthropic.messages.create.call_args.kwargs
    content = call_kwargs["messages"][0]["content"]
    image_block = next(block for block in content if block["type"] == "image")
    assert image_block["source"]["media_type"] == "image/png"
    assert image_block["source"]["data"] == IMAGE.payload
    assert call_kwargs["tool_choice"] == {"type": "tool", "name": PROMPT_SCHEMA_NAME}
    assert call_kwargs["tools"][0]["input_schema"]["required"] == ["english", "arabic"]


async def test_claude_analyze_falls_back_to_text_blocks():
    client = ClaudeAnalysisClient(api_key="test-key")
    mock_response = MagicMock()
    mock_response.content = [text_block(json.dumps(GOOD))]

    with patch("promptlens.vision.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(return_value=mock_response)
        mock_cls.return_value = mock_anthropic
        mock_anthropic.__aenter__.return_value = mock_anthropic

        result = await client.analyze(IMAGE)

    assert result.arabic == GOOD["arabic"]


async def test_claude_analyze_empty_content_raises():
    client = ClaudeAnalysisClient(api_key="test-key")
    mock_response = MagicMock()
    mock_response.content = []

    with patch("promptlens.vision.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(return_value=mock_response)
        mock_cls.return_value = mock_anthropic
        mock_anthropic.__aenter__.return_value = mock_anthropic

        with pytest.raises(EmptyResponseError):
            await client.analyze(IMAGE)


async def test_claude_analyze_tool_input_missing_field_is_malformed():
    client = ClaudeAnalysisClient(api_key="test-key")
    mock_response = MagicMock()
    mock_response.content = [tool_block({"english": "only english"})]

    with patch("promptlens.vision.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(return_value=mock_response)
        mock_cls.return_value = mock_anthropic
        mock_anthropic.__aenter__.return_value = mock_anthropic

        with pytest.raises(MalformedResponseError):
            await client.analyze(IMAGE)


async def test_claude_analyze_wraps_sdk_errors():
    client = ClaudeAnalysisClient(api_key="test-key")
    error = anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com"))

    with patch("promptlens.vision.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(side_effect=error)
        mock_cls.return_value = mock_anthropic
        mock_anthropic.__aenter__.return_value = mock_anthropic

        with pytest.raises(ServiceError):
            await client.analyze(IMAGE)


async def test_claude_analyze_does_not_retry():
    client = ClaudeAnalysisClient(api_key="test-key")
    error = anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com"))

    with patch("promptlens.vision.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(side_effect=error)
        mock_cls.return_value = mock_anthropic
        mock_anthropic.__aenter__.return_value = mock_anthropic

        with pytest.raises(ServiceError):
            await client.analyze(IMAGE)

    assert mock_anthropic.messages.create.call_count == 1


# ── OpenAIAnalysisClient ──────────────────────────────────────────────────────


def test_openai_client_requires_api_key():
    with pytest.raises(ConfigurationError):
        OpenAIAnalysisClient(api_key="")


async def test_openai_analyze_sends_data_url_and_strict_schema():
    client = OpenAIAnalysisClient(api_key="test-key")

    with patch("promptlens.vision.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(
            return_value=openai_response(json.dumps(GOOD))
        )
        mock_cls.return_value = mock_openai
        mock_openai.__aenter__.return_value = mock_openai

        result = await client.analyze(IMAGE)

    assert result == PromptResult(english=GOOD["english"], arabic=GOOD["arabic"])
    call_kwargs = mock_openai.chat.completions.create.call_args.kwargs
    content = call_kwargs["messages"][1]["content"]
    image_block = next(block for block in content if block["type"] == "image_url")
    assert image_block["image_url"]["url"] == IMAGE.data_url
    assert call_kwargs["response_format"]["json_schema"]["strict"] is True


async def test_openai_analyze_empty_content_raises():
    client = OpenAIAnalysisClient(api_key="test-key")

    with patch("promptlens.vision.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(return_value=openai_response(None))
        mock_cls.return_value = mock_openai
        mock_openai.__aenter__.return_value = mock_openai

        with pytest.raises(EmptyResponseError):
            await client.analyze(IMAGE)


async def test_openai_analyze_no_choices_raises():
    client = OpenAIAnalysisClient(api_key="test-key")
    response = MagicMock()
    response.choices = []

    with patch("promptlens.vision.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(return_value=response)
        mock_cls.return_value = mock_openai
        mock_openai.__aenter__.return_value = mock_openai

        with pytest.raises(EmptyResponseError):
            await client.analyze(IMAGE)


async def test_openai_analyze_missing_arabic_is_malformed():
    client = OpenAIAnalysisClient(api_key="test-key")

    with patch("promptlens.vision.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(
            return_value=openai_response('{"english": "a prompt"}')
        )
        mock_cls.return_value = mock_openai
        mock_openai.__aenter__.return_value = mock_openai

        with pytest.raises(MalformedResponseError):
            await client.analyze(IMAGE)


async def test_openai_analyze_wraps_sdk_errors():
    client = OpenAIAnalysisClient(api_key="test-key")
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com"))

    with patch("promptlens.vision.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(side_effect=error)
        mock_cls.return_value = mock_openai
        mock_openai.__aenter__.return_value = mock_openai

        with pytest.raises(ServiceError):
            await client.analyze(IMAGE)


async def test_openai_analyze_propagates_unexpected_errors():
    client = OpenAIAnalysisClient(api_key="test-key")

    with patch("promptlens.vision.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(side_effect=RuntimeError("API down"))
        mock_cls.return_value = mock_openai
        mock_openai.__aenter__.return_value = mock_openai

        with pytest.raises(RuntimeError):
            await client.analyze(IMAGE)


async def test_claude_analyze_closes_sdk_client():
    client = ClaudeAnalysisClient(api_key="test-key")
    mock_response = MagicMock()
    mock_response.content = [tool_block(GOOD)]

    with patch("promptlens.vision.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(return_value=mock_response)
        mock_cls.return_value = mock_anthropic
        mock_anthropic.__aenter__.return_value = mock_anthropic

        await client.analyze(IMAGE)

    mock_anthropic.__aexit__.assert_awaited_once()


async def test_openai_analyze_closes_sdk_client_on_error():
    client = OpenAIAnalysisClient(api_key="test-key")
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com"))

    with patch("promptlens.vision.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(side_effect=error)
        mock_cls.return_value = mock_openai
        mock_openai.__aenter__.return_value = mock_openai
        mock_openai.__aexit__.return_value = False

        with pytest.raises(ServiceError):
            await client.analyze(IMAGE)

    mock_openai.__aexit__.assert_awaited_once()
