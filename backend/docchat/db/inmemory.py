"""In-memory implementations of repository interfaces.

Used when no DATABASE_URL is configured. Each application instance builds
its own stores; nothing here is shared at module level. Access is not
synchronized, so this path is for development and demos only.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from backend.docchat.db.repositories import SessionRecord, Stores, UserRecord
from backend.docchat.errors import DuplicateUserError
from backend.docchat.models.auth import OrgSettings, OrgSettingsUpdate, Role
from backend.docchat.models.chats import Chat, Message, Sender
from backend.docchat.models.docs import Document, StandardizedDocument


def _now() -> datetime:
    return datetime.now(UTC)


class InMemoryDocumentRepository:
    """In-memory implementation of DocumentRepository."""

    def __init__(self) -> None:
        # Insertion order doubles as creation order.
        self._docs: dict[uuid.UUID, Document] = {}

    async def create(self, filename: str, standardized: StandardizedDocument) -> Document:
        """Persist a standardized document under a new id."""
        doc = Document(
            id=uuid.uuid4(),
            filename=filename,
            title=standardized.title,
            sections=standardized.sections,
            metadata=dict(standardized.metadata),
            created_at=_now(),
        )
        self._docs[doc.id] = doc
        return doc

    async def get(self, doc_id: uuid.UUID) -> Document | None:
        """Get document by ID."""
        return self._docs.get(doc_id)

    def _newest_first(self) -> list[Document]:
        return list(reversed(self._docs.values()))

    async def list_page(self, page: int, limit: int) -> tuple[list[Document], int]:
        """List documents newest first."""
        docs = self._newest_first()
        start = (page - 1) * limit
        return docs[start : start + limit], len(docs)

    async def list_recent(self, limit: int) -> list[Document]:
        """List the most recently created documents."""
        return self._newest_first()[:limit]

    async def update_metadata(
        self,
        doc_id: uuid.UUID,
        *,
        title: str | None = None,
        tags: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Document | None:
        """Update editable fields."""
        doc = self._docs.get(doc_id)
        if doc is None:
            return None

        new_metadata = dict(doc.metadata)
        if metadata:
            new_metadata.update(metadata)
        if tags is not None:
            new_metadata["tags"] = list(tags)

        updated = doc.model_copy(
            update={
                "title": title if title is not None else doc.title,
                "metadata": new_metadata,
            }
        )
        self._docs[doc_id] = updated
        return updated

    async def delete(self, doc_id: uuid.UUID) -> bool:
        """Delete document."""
        return self._docs.pop(doc_id, None) is not None

    async def count(self) -> int:
        """Total number of documents."""
        return len(self._docs)

    async def created_since(self, since: datetime) -> list[datetime]:
        """Creation timestamps at or after `since`."""
        return [doc.created_at for doc in self._docs.values() if doc.created_at >= since]


class InMemoryChatRepository:
    """In-memory implementation of ChatRepository."""

    def __init__(self) -> None:
        self._chats: dict[uuid.UUID, Chat] = {}
        self._messages: list[Message] = []

    async def create_chat(self, user_id: uuid.UUID, title: str | None = None) -> Chat:
        """Create a chat owned by user_id."""
        now = _now()
        chat = Chat(id=uuid.uuid4(), user_id=user_id, title=title, created_at=now, updated_at=now)
        self._chats[chat.id] = chat
        return chat

    async def get_chat(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> Chat | None:
        """Get chat by ID."""
        chat = self._chats.get(chat_id)

        # Enforce ownership
        if chat is None or chat.user_id != user_id:
            return None

        return chat

    async def list_chats(self, user_id: uuid.UUID) -> list[Chat]:
        """List the user's chats, most recently updated first."""
        chats = [chat for chat in self._chats.values() if chat.user_id == user_id]
        chats.sort(key=lambda c: c.updated_at, reverse=True)
        return chats

    async def rename_chat(
        self, chat_id: uuid.UUID, user_id: uuid.UUID, title: str | None
    ) -> Chat | None:
        """Rename chat."""
        chat = await self.get_chat(chat_id, user_id)
        if chat is None:
            return None

        updated = chat.model_copy(update={"title": title, "updated_at": max(chat.updated_at, _now())})
        self._chats[chat_id] = updated
        return updated

    async def delete_chat(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Delete chat's messages, then the chat."""
        if await self.get_chat(chat_id, user_id) is None:
            return False

        self._messages = [m for m in self._messages if m.chat_id != chat_id]
        del self._chats[chat_id]
        return True

    async def add_message(self, chat_id: uuid.UUID, sender: Sender, content: str) -> Message | None:
        """Append a message and bump the chat's updated_at."""
        chat = self._chats.get(chat_id)
        if chat is None:
            return None

        message = Message(
            id=uuid.uuid4(),
            chat_id=chat_id,
            sender=sender,
            content=content,
            created_at=_now(),
        )
        self._messages.append(message)
        self._chats[chat_id] = chat.model_copy(
            update={"updated_at": max(chat.updated_at, message.created_at)}
        )
        return message

    async def list_messages(self, chat_id: uuid.UUID) -> list[Message]:
        """List messages in creation order (stable for equal timestamps)."""
        messages = [m for m in self._messages if m.chat_id == chat_id]
        messages.sort(key=lambda m: m.created_at)
        return messages

    async def count_chats(self) -> int:
        """Total number of chats."""
        return len(self._chats)

    async def list_recent_chats(self, limit: int) -> list[Chat]:
        """Most recently updated chats across all users."""
        chats = sorted(self._chats.values(), key=lambda c: c.updated_at, reverse=True)
        return chats[:limit]

    async def user_message_times_since(self, since: datetime) -> list[datetime]:
        """Creation timestamps of user-sent messages at or after `since`."""
        return [
            m.created_at
            for m in self._messages
            if m.sender is Sender.user and m.created_at >= since
        ]


class InMemoryUserRepository:
    """In-memory implementation of UserRepository."""

    def __init__(self) -> None:
        self._users: dict[uuid.UUID, UserRecord] = {}

    async def create_user(
        self, *, email: str, username: str, password_hash: str, role: Role
    ) -> UserRecord:
        """Create a user account."""
        if self._taken(username, email):
            raise DuplicateUserError()
        record = UserRecord(
            user_id=uuid.uuid4(),
            email=email,
            username=username,
            role=role,
            password_hash=password_hash,
            created_at=_now(),
        )
        self._users[record.user_id] = record
        return record

    async def get_by_id(self, user_id: uuid.UUID) -> UserRecord | None:
        """Get user by ID."""
        return self._users.get(user_id)

    async def get_by_username(self, username: str) -> UserRecord | None:
        """Get user by username."""
        for record in self._users.values():
            if record.username == username:
                return record
        return None

    async def exists(self, *, username: str, email: str) -> bool:
        """True if the username or email is taken."""
        return self._taken(username, email)

    def _taken(self, username: str, email: str) -> bool:
        return any(u.username == username or u.email == email for u in self._users.values())


class InMemorySessionRepository:
    """In-memory implementation of SessionRepository."""

    def __init__(self) -> None:
        self._sessions: dict[str, SessionRecord] = {}

    async def create_session(
        self, token_hash: str, user_id: uuid.UUID, expires_at: datetime
    ) -> SessionRecord:
        """Store a new session."""
        record = SessionRecord(
            token_hash=token_hash,
            user_id=user_id,
            created_at=_now(),
            expires_at=expires_at,
        )
        self._sessions[token_hash] = record
        return record

    async def get_session(self, token_hash: str) -> SessionRecord | None:
        """Look up a session by token hash."""
        return self._sessions.get(token_hash)

    async def delete_session(self, token_hash: str) -> None:
        """Remove a session."""
        self._sessions.pop(token_hash, None)


class InMemorySettingsRepository:
    """In-memory implementation of SettingsRepository."""

    def __init__(self) -> None:
        self._settings = OrgSettings()

    async def get_settings(self) -> OrgSettings:
        """Current settings."""
        return self._settings

    async def update_settings(self, patch: OrgSettingsUpdate) -> OrgSettings:
        """Apply a partial update."""
        self._settings = self._settings.model_copy(update=patch.model_dump(exclude_none=True))
        return self._settings


def build_in_memory_stores() -> Stores:
    """Create a fresh, empty set of in-memory repositories."""
    return Stores(
        documents=InMemoryDocumentRepository(),
        chats=InMemoryChatRepository(),
        users=InMemoryUserRepository(),
        sessions=InMemorySessionRepository(),
        settings=InMemorySettingsRepository(),
    )
