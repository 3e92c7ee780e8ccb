"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from backend.docchat.models.auth import OrgSettings, OrgSettingsUpdate, Role
from backend.docchat.models.chats import Chat, Message, Sender
from backend.docchat.models.docs import Document, StandardizedDocument


@dataclass
class UserRecord:
    """User account data record."""

    user_id: UUID
    email: str
    username: str
    role: Role
    password_hash: str
    created_at: datetime


@dataclass
class SessionRecord:
    """Server-side session data record (token stored hashed)."""

    token_hash: str
    user_id: UUID
    created_at: datetime
    expires_at: datetime


class DocumentRepository(Protocol):
    """Repository for standardized documents."""

    async def create(self, filename: str, standardized: StandardizedDocument) -> Document:
        """Persist a standardized document under a new id.

        Args:
            filename: Original upload filename
            standardized: Validated standardizer output

        Returns:
            Stored document
        """
        ...

    async def get(self, doc_id: UUID) -> Document | None:
        """Get document by ID."""
        ...

    async def list_page(self, page: int, limit: int) -> tuple[list[Document], int]:
        """List documents newest first.

        Args:
            page: 1-based page number
            limit: Page size

        Returns:
            (documents on the page, total document count)
        """
        ...

    async def list_recent(self, limit: int) -> list[Document]:
        """List the most recently created documents, newest first."""
        ...

    async def update_metadata(
        self,
        doc_id: UUID,
        *,
        title: str | None = None,
        tags: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Document | None:
        """Update editable fields; section content is immutable.

        Args:
            doc_id: Document ID
            title: New title
            tags: Replacement tag list (stored under metadata["tags"])
            metadata: Keys merged into existing metadata

        Returns:
            Updated document or None if not found
        """
        ...

    async def delete(self, doc_id: UUID) -> bool:
        """Delete document. Returns False if it did not exist."""
        ...

    async def count(self) -> int:
        """Total number of documents."""
        ...

    async def created_since(self, since: datetime) -> list[datetime]:
        """Creation timestamps of documents created at or after `since`."""
        ...


class ChatRepository(Protocol):
    """Repository for chats and their messages."""

    async def create_chat(self, user_id: UUID, title: str | None = None) -> Chat:
        """Create a chat owned by user_id."""
        ...

    async def get_chat(self, chat_id: UUID, user_id: UUID) -> Chat | None:
        """Get chat by ID (owner-scoped)."""
        ...

    async def list_chats(self, user_id: UUID) -> list[Chat]:
        """List the user's chats, most recently updated first."""
        ...

    async def rename_chat(self, chat_id: UUID, user_id: UUID, title: str | None) -> Chat | None:
        """Rename chat and bump updated_at. Returns None if not found."""
        ...

    async def delete_chat(self, chat_id: UUID, user_id: UUID) -> bool:
        """Delete chat's messages, then the chat. Returns False if not found."""
        ...

    async def add_message(self, chat_id: UUID, sender: Sender, content: str) -> Message | None:
        """Append a message and bump the chat's updated_at.

        Returns:
            Created message, or None if the chat does not exist
        """
        ...

    async def list_messages(self, chat_id: UUID) -> list[Message]:
        """List messages in creation order."""
        ...

    async def count_chats(self) -> int:
        """Total number of chats across all users."""
        ...

    async def list_recent_chats(self, limit: int) -> list[Chat]:
        """Most recently updated chats across all users."""
        ...

    async def user_message_times_since(self, since: datetime) -> list[datetime]:
        """Creation timestamps of user-sent messages at or after `since`."""
        ...


class UserRepository(Protocol):
    """Repository for user accounts."""

    async def create_user(
        self, *, email: str, username: str, password_hash: str, role: Role
    ) -> UserRecord:
        """Create a user account.

        Raises:
            DuplicateUserError: If the username or email is already taken
        """
        ...

    async def get_by_id(self, user_id: UUID) -> UserRecord | None:
        """Get user by ID."""
        ...

    async def get_by_username(self, username: str) -> UserRecord | None:
        """Get user by username."""
        ...

    async def exists(self, *, username: str, email: str) -> bool:
        """True if the username or email is already taken."""
        ...


class SessionRepository(Protocol):
    """Repository for login sessions."""

    async def create_session(
        self, token_hash: str, user_id: UUID, expires_at: datetime
    ) -> SessionRecord:
        """Store a new session."""
        ...

    async def get_session(self, token_hash: str) -> SessionRecord | None:
        """Look up a session by token hash."""
        ...

    async def delete_session(self, token_hash: str) -> None:
        """Remove a session (no-op if absent)."""
        ...


class SettingsRepository(Protocol):
    """Repository for organization settings."""

    async def get_settings(self) -> OrgSettings:
        """Current settings (defaults if never saved)."""
        ...

    async def update_settings(self, patch: OrgSettingsUpdate) -> OrgSettings:
        """Apply a partial update and return the result."""
        ...


@dataclass
class Stores:
    """Bundle of repositories handed to request handlers."""

    documents: DocumentRepository
    chats: ChatRepository
    users: UserRepository
    sessions: SessionRepository
    settings: SettingsRepository
