"""Document domain models."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class Section(BaseModel):
    """One headed block of a standardized document."""

    heading: str = ""
    body: str = ""

    @field_validator("heading", "body", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class StandardizedDocument(BaseModel):
    """Normalized {title, sections, metadata} form of an uploaded file.

    LLM output is untrusted: title must be non-blank and at least one
    section must be present before anything is stored.
    """

    title: str = Field(..., min_length=1)
    sections: list[Section] = Field(..., min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value.strip()

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_none_to_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class Document(BaseModel):
    """Stored document with identity and content."""

    id: UUID
    filename: str
    title: str
    sections: list[Section]
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @property
    def tags(self) -> list[str]:
        raw = self.metadata.get("tags")
        if isinstance(raw, list):
            return [str(tag) for tag in raw]
        return []

    def body_text(self) -> str:
        """Sections rendered as heading/body blocks separated by blank lines."""
        return "\n\n".join(section_text(section) for section in self.sections)


def section_text(section: Section) -> str:
    """Render a section as `heading\\nbody`."""
    return f"{section.heading}\n{section.body}"


class DocumentSummary(BaseModel):
    """Document listing entry (no section content)."""

    id: UUID
    title: str
    filename: str
    status: Literal["Embedded"] = "Embedded"
    uploaded_at: datetime
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentSummary":
        return cls(
            id=doc.id,
            title=doc.title,
            filename=doc.filename,
            uploaded_at=doc.created_at,
            tags=doc.tags,
        )


class Source(BaseModel):
    """Retrieved snippet handed to the completion prompt."""

    id: UUID
    title: str
    snippet: str


class ScoredSource(Source):
    """Source with its keyword-overlap score (never persisted)."""

    score: int

    def to_source(self) -> Source:
        return Source(id=self.id, title=self.title, snippet=self.snippet)


class UploadResult(BaseModel):
    """Per-file outcome of an upload batch."""

    id: UUID | None = None
    name: str
    status: Literal["success", "error"]
    error: str | None = None


class DocumentDetail(DocumentSummary):
    """Single-document view including standardized content."""

    sections: list[Section]
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentDetail":
        return cls(
            id=doc.id,
            title=doc.title,
            filename=doc.filename,
            uploaded_at=doc.created_at,
            tags=doc.tags,
            sections=doc.sections,
            metadata=doc.metadata,
        )
