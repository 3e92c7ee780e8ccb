"""Completion providers for chat answers.

Security: API keys are read from settings/environment only, never hardcoded.
A provider whose key is missing resolves to MockProvider, so chat keeps
working (with an echo answer) in development and tests.
"""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from openai import AsyncOpenAI

from backend.docchat.config import Settings, secret_value
from backend.docchat.errors import CompletionError
from backend.docchat.models.completion import Citation, CompletionResult
from backend.docchat.models.docs import Source

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True)
class ModelSpec:
    """Provider and concrete model behind a logical model id."""

    provider: str
    model: str


DEFAULT_MODEL_ID = "auto"

MODEL_REGISTRY: dict[str, ModelSpec] = {
    "auto": ModelSpec("openai", "gpt-4o-mini"),
    "gpt-4o": ModelSpec("openai", "gpt-4o"),
    "gpt-4o-mini": ModelSpec("openai", "gpt-4o-mini"),
    "claude-3.5-sonnet": ModelSpec("anthropic", "claude-3-5-sonnet-20241022"),
    "claude-3-haiku": ModelSpec("anthropic", "claude-3-haiku-20240307"),
}


def resolve_model(model_id: str | None) -> ModelSpec:
    """Look up a logical model id; unknown or missing ids use the default."""
    if model_id and model_id in MODEL_REGISTRY:
        return MODEL_REGISTRY[model_id]
    return MODEL_REGISTRY[DEFAULT_MODEL_ID]


def citations_for(sources: Sequence[Source]) -> list[Citation]:
    return [Citation(id=str(source.id), title=source.title) for source in sources]


def parse_completion_text(raw: str) -> CompletionResult:
    """Parse provider text as {content, citations}.

    Anything that is not a JSON object with string `content` is wrapped
    as {content: raw, citations: []}. Malformed citation entries are dropped.
    """
    try:
        parsed: Any = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return CompletionResult(content=raw, citations=[])

    if not isinstance(parsed, dict) or not isinstance(parsed.get("content"), str):
        return CompletionResult(content=raw, citations=[])

    citations: list[Citation] = []
    raw_citations = parsed.get("citations")
    if isinstance(raw_citations, list):
        for item in raw_citations:
            if isinstance(item, dict) and item.get("id") is not None:
                citations.append(Citation(id=str(item["id"]), title=str(item.get("title", ""))))

    return CompletionResult(content=parsed["content"], citations=citations)


class CompletionProvider(Protocol):
    """Protocol for completion provider implementations."""

    name: str
    model: str

    async def complete(
        self,
        *,
        message: str,
        system_prompt: str,
        user_prompt: str,
        sources: Sequence[Source],
    ) -> CompletionResult:
        """Generate an answer.

        Args:
            message: Raw user question
            system_prompt: Fixed instructions
            user_prompt: Question with serialized sources
            sources: Retrieved sources (used by the mock for citations)

        Returns:
            CompletionResult with markdown content and citations

        Raises:
            CompletionError: If the provider call fails
        """
        ...


class MockProvider:
    """Deterministic provider used when the selected provider has no key."""

    name = "mock"

    def __init__(self, model: str) -> None:
        self.model = model

    async def complete(
        self,
        *,
        message: str,
        system_prompt: str,
        user_prompt: str,
        sources: Sequence[Source],
    ) -> CompletionResult:
        """Echo the question and cite every retrieved source."""
        return CompletionResult(
            content=f"Mock response ({self.model}): {message}",
            citations=citations_for(sources),
        )


class OpenAIProvider:
    """OpenAI chat completions provider."""

    name = "openai"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", client: AsyncOpenAI | None = None):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Concrete model name
            client: Optional preconstructed client (for testing)
        """
        self.client = client or AsyncOpenAI(api_key=api_key)
        self.model = model

    async def complete(
        self,
        *,
        message: str,
        system_prompt: str,
        user_prompt: str,
        sources: Sequence[Source],
    ) -> CompletionResult:
        """Generate answer using the OpenAI API with JSON output."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=0.7,
                response_format={"type": "json_object"},
            )
            content = response.choices[0].message.content
        except Exception as e:
            logger.error(f"OpenAI API call failed: {e}")
            raise CompletionError(self.name, str(e)) from e

        content = content or '{"content": "", "citations": []}'
        return parse_completion_text(content)


class AnthropicProvider:
    """Anthropic Messages API provider (plain HTTP via httpx)."""

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.anthropic.com",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key (read from environment)
            model: Concrete model name
            base_url: API base URL
            client: Optional httpx client (for testing with mocks)
        """
        self._api_key = api_key
        self.model = model
        self._base_url = base_url.rstrip("/")
        self._client = client

    async def complete(
        self,
        *,
        message: str,
        system_prompt: str,
        user_prompt: str,
        sources: Sequence[Source],
    ) -> CompletionResult:
        """Generate answer using the Messages API; text blocks are concatenated."""
        body = {
            "model": self.model,
            "max_tokens": 4000,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
            "temperature": 0.7,
        }
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=None)
            close_client = True

        try:
            response = await client.post(f"{self._base_url}/v1/messages", json=body, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Anthropic API call failed: {e}")
            raise CompletionError(self.name, str(e)) from e
        finally:
            if close_client:
                await client.aclose()

        blocks = payload.get("content") if isinstance(payload, dict) else None
        if not isinstance(blocks, list):
            logger.error("Anthropic response has no content block list")
            raise CompletionError(self.name, "unexpected response body")

        text = "".join(
            str(block.get("text", ""))
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        )
        return parse_completion_text(text)


def get_completion_provider(model_id: str | None, settings: Settings) -> CompletionProvider:
    """Factory function to get the provider for a logical model id.

    Returns:
        OpenAIProvider/AnthropicProvider when the matching key is configured,
        MockProvider otherwise
    """
    spec = resolve_model(model_id)

    if spec.provider == "anthropic":
        api_key = secret_value(settings.anthropic_api_key)
        if api_key:
            return AnthropicProvider(
                api_key=api_key, model=spec.model, base_url=settings.anthropic_base_url
            )
    else:
        api_key = secret_value(settings.openai_api_key)
        if api_key:
            return OpenAIProvider(api_key=api_key, model=spec.model)

    logger.warning(f"No {spec.provider} API key configured, using mock provider")
    return MockProvider(model=spec.model)
