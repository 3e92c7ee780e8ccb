"""Chat completion request/response contract."""

from uuid import UUID

from pydantic import BaseModel, Field


class Citation(BaseModel):
    """Reference to a source document used for an answer."""

    id: str
    title: str


class CompletionResult(BaseModel):
    """Answer returned by a completion provider."""

    content: str
    citations: list[Citation] = Field(default_factory=list)


class CompletionRequest(BaseModel):
    """Request body for POST /chat/complete."""

    message: str = Field(..., description="User question")
    model: str | None = Field(None, description="Logical model id (see MODEL_REGISTRY)")
    chat_id: UUID | None = Field(None, description="Persist the turn to this chat when set")
