"""Tests for completion providers.

All tests are deterministic and do not make real network calls.
"""

import json
import uuid
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from backend.docchat.config import Settings
from backend.docchat.errors import CompletionError
from backend.docchat.llm.client import (
    MODEL_REGISTRY,
    AnthropicProvider,
    MockProvider,
    OpenAIProvider,
    get_completion_provider,
    parse_completion_text,
    resolve_model,
)
from backend.docchat.models.docs import Source


@pytest.fixture
def sources() -> list[Source]:
    return [
        Source(id=uuid.uuid4(), title="Q3 results", snippet="Revenue grew 12%"),
        Source(id=uuid.uuid4(), title="Budget", snippet="Costs flat"),
    ]


def _openai_response(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


class TestParseCompletionText:
    """parse_completion_text behaviour."""

    def test_valid_json(self) -> None:
        raw = json.dumps(
            {"content": "## Answer", "citations": [{"id": 7, "title": "Doc"}, "junk", {"x": 1}]}
        )

        result = parse_completion_text(raw)

        assert result.content == "## Answer"
        assert [(c.id, c.title) for c in result.citations] == [("7", "Doc")]

    def test_invalid_json_wraps_raw_text(self) -> None:
        result = parse_completion_text("plain markdown answer")

        assert result.content == "plain markdown answer"
        assert result.citations == []

    def test_json_without_string_content_wraps_raw_text(self) -> None:
        raw = '{"answer": "x"}'

        result = parse_completion_text(raw)

        assert result.content == raw
        assert result.citations == []

    def test_missing_citations_defaults_to_empty(self) -> None:
        assert parse_completion_text('{"content": "hi"}').citations == []


class TestModelRegistry:
    """MODEL_REGISTRY lookups."""

    def test_known_models(self) -> None:
        assert resolve_model("claude-3-haiku").provider == "anthropic"
        assert resolve_model("claude-3.5-sonnet").model == "claude-3-5-sonnet-20241022"
        assert resolve_model("gpt-4o").model == "gpt-4o"

    def test_unknown_and_missing_fall_back_to_auto(self) -> None:
        assert resolve_model("does-not-exist") == MODEL_REGISTRY["auto"]
        assert resolve_model(None) == MODEL_REGISTRY["auto"]
        assert MODEL_REGISTRY["auto"].model == "gpt-4o-mini"


class TestProviderFactory:
    """get_completion_provider credential handling."""

    def test_missing_keys_resolve_to_mock(self) -> None:
        settings = Settings(_env_file=None, openai_api_key="", anthropic_api_key=None)

        openai_provider = get_completion_provider("gpt-4o", settings)
        anthropic_provider = get_completion_provider("claude-3-haiku", settings)

        assert isinstance(openai_provider, MockProvider)
        assert openai_provider.model == "gpt-4o"
        assert isinstance(anthropic_provider, MockProvider)
        assert anthropic_provider.model == "claude-3-haiku-20240307"

    def test_keys_select_real_providers(self) -> None:
        settings = Settings(_env_file=None, openai_api_key="sk-test", anthropic_api_key="ak-test")

        assert isinstance(get_completion_provider("auto", settings), OpenAIProvider)
        assert isinstance(get_completion_provider("claude-3-haiku", settings), AnthropicProvider)


@pytest.mark.asyncio
async def test_mock_provider_echoes_and_cites_sources(sources: list[Source]) -> None:
    provider = MockProvider(model="gpt-4o-mini")

    result = await provider.complete(
        message="What was revenue?", system_prompt="s", user_prompt="u", sources=sources
    )

    assert result.content == "Mock response (gpt-4o-mini): What was revenue?"
    assert [c.id for c in result.citations] == [str(s.id) for s in sources]
    assert [c.title for c in result.citations] == ["Q3 results", "Budget"]


@pytest.mark.asyncio
async def test_openai_provider_parses_json(sources: list[Source]) -> None:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=_openai_response('{"content": "**Revenue** grew", "citations": []}')
    )
    provider = OpenAIProvider(api_key="sk-test", model="gpt-4o", client=client)

    result = await provider.complete(
        message="q", system_prompt="sys", user_prompt="user", sources=sources
    )

    assert result.content == "**Revenue** grew"
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o"
    assert kwargs["temperature"] == 0.7
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "user"},
    ]


@pytest.mark.asyncio
async def test_openai_provider_wraps_errors(sources: list[Source]) -> None:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=RuntimeError("timeout"))
    provider = OpenAIProvider(api_key="sk-test", client=client)

    with pytest.raises(CompletionError) as exc_info:
        await provider.complete(message="q", system_prompt="s", user_prompt="u", sources=sources)

    assert exc_info.value.provider == "openai"
    assert exc_info.value.message == "openai: timeout"


@pytest.mark.asyncio
async def test_anthropic_provider_joins_text_blocks(sources: list[Source]) -> None:
    captured: dict[str, httpx.Request] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(
            200,
            json={
                "content": [
                    {"type": "text", "text": '{"content": "Hello'},
                    {"type": "tool_use", "id": "x"},
                    {"type": "text", "text": ' there", "citations": []}'},
                ]
            },
        )

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    provider = AnthropicProvider(
        api_key="ak-test",
        model="claude-3-haiku-20240307",
        base_url="https://anthropic.test/",
        client=client,
    )

    result = await provider.complete(
        message="q", system_prompt="sys", user_prompt="user", sources=sources
    )

    assert result.content == "Hello there"
    request = captured["request"]
    assert str(request.url) == "https://anthropic.test/v1/messages"
    assert request.headers["x-api-key"] == "ak-test"
    assert request.headers["anthropic-version"] == "2023-06-01"
    body = json.loads(request.content)
    assert body["model"] == "claude-3-haiku-20240307"
    assert body["max_tokens"] == 4000
    assert body["temperature"] == 0.7
    assert body["system"] == "sys"
    assert body["messages"] == [{"role": "user", "content": "user"}]


@pytest.mark.asyncio
async def test_anthropic_provider_http_error(sources: list[Source]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(529, json={"error": {"type": "overloaded_error"}})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    provider = AnthropicProvider(api_key="ak-test", model="m", client=client)

    with pytest.raises(CompletionError) as exc_info:
        await provider.complete(message="q", system_prompt="s", user_prompt="u", sources=sources)

    assert exc_info.value.provider == "anthropic"


@pytest.mark.asyncio
async def test_openai_provider_empty_choices_is_completion_error(sources: list[Source]) -> None:
    response = MagicMock()
    response.choices = []
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response)
    provider = OpenAIProvider(api_key="sk-test", client=client)

    with pytest.raises(CompletionError) as exc_info:
        await provider.complete(message="q", system_prompt="s", user_prompt="u", sources=sources)

    assert exc_info.value.provider == "openai"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [["not", "an", "object"], {"content": "plain"}, {}])
async def test_anthropic_provider_unexpected_body(
    sources: list[Source], payload: object
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    provider = AnthropicProvider(api_key="ak-test", model="m", client=client)

    with pytest.raises(CompletionError) as exc_info:
        await provider.complete(message="q", system_prompt="s", user_prompt="u", sources=sources)

    assert exc_info.value.message == "anthropic: unexpected response body"
