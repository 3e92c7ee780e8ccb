"""Unit tests for ChatCompletionService."""

from collections.abc import Sequence

import pytest

from backend.docchat.db.inmemory import InMemoryDocumentRepository
from backend.docchat.docs.retriever import Retriever
from backend.docchat.errors import CompletionError
from backend.docchat.llm.client import MockProvider
from backend.docchat.llm.completion import ChatCompletionService
from backend.docchat.llm.prompts import SYSTEM_PROMPT
from backend.docchat.models.completion import CompletionResult
from backend.docchat.models.docs import Section, Source, StandardizedDocument


class RecordingProvider:
    """Provider that records its inputs."""

    name = "recording"
    model = "test-model"

    def __init__(self) -> None:
        self.calls: list[dict] = []

    async def complete(
        self, *, message: str, system_prompt: str, user_prompt: str, sources: Sequence[Source]
    ) -> CompletionResult:
        self.calls.append(
            {"message": message, "system": system_prompt, "user": user_prompt, "sources": sources}
        )
        return CompletionResult(content="answer")


class FailingProvider:
    name = "failing"
    model = "test-model"

    async def complete(self, **kwargs) -> CompletionResult:
        raise CompletionError(self.name, "unavailable")


async def _retriever_with_revenue_doc() -> Retriever:
    repo = InMemoryDocumentRepository()
    await repo.create(
        "q3.txt",
        StandardizedDocument(
            title="Q3 results", sections=[Section(heading="Revenue", body="Revenue grew 12%")]
        ),
    )
    return Retriever(repo)


@pytest.mark.asyncio
async def test_complete_builds_prompts_from_retrieved_sources() -> None:
    provider = RecordingProvider()
    requested: list[str | None] = []

    def factory(model_id: str | None) -> RecordingProvider:
        requested.append(model_id)
        return provider

    service = ChatCompletionService(await _retriever_with_revenue_doc(), factory)

    result = await service.complete("What was revenue?", "claude-3-haiku")

    assert result.content == "answer"
    assert requested == ["claude-3-haiku"]
    call = provider.calls[0]
    assert call["system"] == SYSTEM_PROMPT
    assert "Revenue grew 12%" in call["user"]
    assert [s.title for s in call["sources"]] == ["Q3 results"]


@pytest.mark.asyncio
async def test_mock_provider_cites_retrieved_sources() -> None:
    service = ChatCompletionService(
        await _retriever_with_revenue_doc(), lambda model_id: MockProvider("gpt-4o-mini")
    )

    result = await service.complete("revenue")

    assert result.content == "Mock response (gpt-4o-mini): revenue"
    assert [c.title for c in result.citations] == ["Q3 results"]


@pytest.mark.asyncio
async def test_provider_errors_propagate() -> None:
    service = ChatCompletionService(
        await _retriever_with_revenue_doc(), lambda model_id: FailingProvider()
    )

    with pytest.raises(CompletionError):
        await service.complete("revenue")
