"""Standardizer - convert extracted text into {title, sections, metadata}.

Uses OpenAI when a key is configured. Model output is untrusted: it is
validated against StandardizedDocument and replaced by a deterministic
truncation fallback on any failure, so callers always get a storable
document.
"""

import json
import logging
from typing import Protocol

from openai import AsyncOpenAI
from pydantic import ValidationError

from backend.docchat.config import Settings, secret_value
from backend.docchat.errors import StandardizationError
from backend.docchat.models.docs import Section, StandardizedDocument
from backend.docchat.utils.metrics import PrometheusPipelineMetrics

logger = logging.getLogger(__name__)

MOCK_NOTE = "OpenAI API key not set - mock output"
FAILURE_NOTE = "OpenAI processing failed - using raw content"

SYSTEM_PROMPT = (
    "You convert arbitrary unstructured document text into a concise standardized JSON "
    "schema: {title:string, sections:[{heading, body}], metadata?:object}. "
    "Keep it short but faithful."
)


def fallback_document(
    text: str,
    filename: str,
    *,
    note: str,
    error: str | None = None,
    body_chars: int = 4000,
) -> StandardizedDocument:
    """Deterministic document: filename title, one truncated "Content" section."""
    metadata: dict[str, str] = {"note": note}
    if error:
        metadata["error"] = error
    return StandardizedDocument(
        title=filename,
        sections=[Section(heading="Content", body=text[:body_chars])],
        metadata=metadata,
    )


class Standardizer(Protocol):
    """Protocol for standardizer implementations."""

    async def standardize(self, text: str, filename: str) -> StandardizedDocument:
        """Normalize extracted text.

        Args:
            text: Extracted document text
            filename: Original upload filename

        Returns:
            Validated StandardizedDocument (never raises)
        """
        ...


class MockStandardizer:
    """Standardizer used when no OpenAI key is configured."""

    def __init__(self, body_chars: int = 4000) -> None:
        self.body_chars = body_chars

    async def standardize(self, text: str, filename: str) -> StandardizedDocument:
        """Return the truncation fallback with a mock-output note."""
        return fallback_document(text, filename, note=MOCK_NOTE, body_chars=self.body_chars)


class OpenAIStandardizer:
    """OpenAI-backed standardizer."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        input_chars: int = 120_000,
        body_chars: int = 4000,
        client: AsyncOpenAI | None = None,
    ):
        """Initialize OpenAI standardizer.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Chat model name
            input_chars: Maximum characters of document text sent to the model
            body_chars: Fallback section size when the model output is unusable
            client: Optional preconstructed client (for testing)
        """
        self.client = client or AsyncOpenAI(api_key=api_key)
        self.model = model
        self.input_chars = input_chars
        self.body_chars = body_chars
        self._metrics = PrometheusPipelineMetrics()

    def build_user_prompt(self, text: str, filename: str) -> str:
        return f"Filename: {filename}\n\nContent:\n{text[: self.input_chars]}"

    @staticmethod
    def parse_output(content: str) -> StandardizedDocument:
        """Validate raw model output.

        Raises:
            StandardizationError: If the output is not a valid document
        """
        try:
            return StandardizedDocument.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as e:
            raise StandardizationError(f"Invalid standardized document: {e}") from e

    async def standardize(self, text: str, filename: str) -> StandardizedDocument:
        """Standardize via the chat completions API with JSON output."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": self.build_user_prompt(text, filename)},
                ],
                temperature=0.2,
                response_format={"type": "json_object"},
            )
            document = self.parse_output(response.choices[0].message.content or "{}")
            logger.info(f"OpenAI standardized {filename}: {len(document.sections)} section(s)")
            return document

        except StandardizationError as e:
            logger.warning(f"OpenAI returned an invalid document for {filename}: {e}")
            self._metrics.inc_fallback("invalid_output")
            return fallback_document(
                text, filename, note=FAILURE_NOTE, error=e.message, body_chars=self.body_chars
            )
        except Exception as e:
            logger.error(f"OpenAI API call failed for {filename}: {e}")
            self._metrics.inc_fallback("api_error")
            return fallback_document(
                text, filename, note=FAILURE_NOTE, error=str(e), body_chars=self.body_chars
            )


def get_standardizer(settings: Settings) -> Standardizer:
    """Factory function to get the standardizer for the current config.

    Returns:
        OpenAIStandardizer if an API key is configured, MockStandardizer otherwise
    """
    api_key = secret_value(settings.openai_api_key)

    if api_key:
        logger.info("Using OpenAI standardizer")
        return OpenAIStandardizer(
            api_key=api_key,
            model=settings.openai_model,
            input_chars=settings.standardize_input_chars,
            body_chars=settings.fallback_body_chars,
        )

    logger.warning("No OpenAI API key configured, using mock standardizer")
    return MockStandardizer(body_chars=settings.fallback_body_chars)
