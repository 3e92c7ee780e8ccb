"""Chat completion service - retrieval plus provider dispatch."""

import time
from collections.abc import Callable

from backend.docchat.config import Settings
from backend.docchat.docs.retriever import Retriever
from backend.docchat.errors import CompletionError
from backend.docchat.llm.client import CompletionProvider, get_completion_provider
from backend.docchat.llm.prompts import SYSTEM_PROMPT, build_user_prompt
from backend.docchat.models.completion import CompletionResult
from backend.docchat.utils.logging import PipelineLogger
from backend.docchat.utils.metrics import PrometheusPipelineMetrics

ProviderFactory = Callable[[str | None], CompletionProvider]


class ChatCompletionService:
    """Answers a question from retrieved document snippets.

    Stateless per call: the only side effect is the outbound provider call.
    """

    def __init__(self, retriever: Retriever, provider_factory: ProviderFactory) -> None:
        self._retriever = retriever
        self._provider_factory = provider_factory
        self._logger = PipelineLogger()
        self._metrics = PrometheusPipelineMetrics()

    @classmethod
    def from_settings(cls, retriever: Retriever, settings: Settings) -> "ChatCompletionService":
        return cls(retriever, lambda model_id: get_completion_provider(model_id, settings))

    async def complete(self, message: str, model: str | None = None) -> CompletionResult:
        """Retrieve sources, build prompts and ask the selected provider.

        Args:
            message: User question
            model: Logical model id (unknown ids use the default entry)

        Returns:
            CompletionResult with content and citations

        Raises:
            CompletionError: If the provider call fails
        """
        provider = self._provider_factory(model)
        sources = await self._retriever.retrieve(message)
        user_prompt = build_user_prompt(message, sources)

        start = time.perf_counter()
        try:
            result = await provider.complete(
                message=message,
                system_prompt=SYSTEM_PROMPT,
                user_prompt=user_prompt,
                sources=sources,
            )
        except CompletionError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            self._metrics.record_completion(provider.name, "error", latency_ms)
            self._logger.log_completion(
                provider.name, provider.model, "error", latency_ms, len(sources), error=e.message
            )
            raise

        latency_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_completion(provider.name, "success", latency_ms)
        self._logger.log_completion(
            provider.name, provider.model, "success", latency_ms, len(sources)
        )
        return result
