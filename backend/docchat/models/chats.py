"""Chat and message models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class Sender(str, Enum):
    """Author of a chat message."""

    user = "user"
    assistant = "assistant"


class Chat(BaseModel):
    """Chat session owned by a user."""

    id: UUID
    user_id: UUID
    title: str | None = None
    created_at: datetime
    updated_at: datetime


class Message(BaseModel):
    """Single append-only chat message."""

    id: UUID
    chat_id: UUID
    sender: Sender
    content: str
    created_at: datetime
