"""SQL implementations of repository interfaces (async SQLAlchemy)."""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.docchat.db.models import (
    AppUser,
    ChatRow,
    DocumentRow,
    MessageRow,
    OrgSettingsRow,
    UserSession,
    as_utc,
    utcnow,
)
from backend.docchat.db.repositories import SessionRecord, Stores, UserRecord
from backend.docchat.errors import DuplicateUserError, StoreError
from backend.docchat.models.auth import OrgSettings, OrgSettingsUpdate, Role
from backend.docchat.models.chats import Chat, Message, Sender
from backend.docchat.models.docs import Document, Section, StandardizedDocument


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as StoreError."""
    try:
        yield
    except SQLAlchemyError as e:
        raise StoreError(f"{operation} failed: {e}") from e


def _to_document(row: DocumentRow) -> Document:
    content = row.content_json or {}
    return Document(
        id=row.doc_id,
        filename=row.filename,
        title=row.title,
        sections=[Section.model_validate(s) for s in content.get("sections", [])],
        metadata=content.get("metadata") or {},
        created_at=row.created_at,
    )


def _to_chat(row: ChatRow) -> Chat:
    return Chat(
        id=row.chat_id,
        user_id=row.user_id,
        title=row.title,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_message(row: MessageRow) -> Message:
    return Message(
        id=row.message_id,
        chat_id=row.chat_id,
        sender=Sender(row.sender),
        content=row.content,
        created_at=row.created_at,
    )


def _to_user(row: AppUser) -> UserRecord:
    return UserRecord(
        user_id=row.user_id,
        email=row.email,
        username=row.username,
        role=Role(row.role),
        password_hash=row.password_hash,
        created_at=row.created_at,
    )


class SqlDocumentRepository:
    """SQL implementation of DocumentRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, filename: str, standardized: StandardizedDocument) -> Document:
        """Persist a standardized document under a new id."""
        row = DocumentRow(
            doc_id=uuid.uuid4(),
            filename=filename,
            title=standardized.title,
            content_json=standardized.model_dump(mode="json"),
            created_at=utcnow(),
        )
        with translate_errors("create document"):
            self._session.add(row)
            await self._session.commit()
        return _to_document(row)

    async def get(self, doc_id: uuid.UUID) -> Document | None:
        """Get document by ID."""
        with translate_errors("get document"):
            row = await self._session.get(DocumentRow, doc_id)
        return _to_document(row) if row else None

    async def list_page(self, page: int, limit: int) -> tuple[list[Document], int]:
        """List documents newest first."""
        stmt = (
            select(DocumentRow)
            .order_by(DocumentRow.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        with translate_errors("list documents"):
            total = await self._session.scalar(select(func.count()).select_from(DocumentRow))
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_to_document(row) for row in rows], int(total or 0)

    async def list_recent(self, limit: int) -> list[Document]:
        """List the most recently created documents."""
        stmt = select(DocumentRow).order_by(DocumentRow.created_at.desc()).limit(limit)
        with translate_errors("list recent documents"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_to_document(row) for row in rows]

    async def update_metadata(
        self,
        doc_id: uuid.UUID,
        *,
        title: str | None = None,
        tags: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Document | None:
        """Update editable fields."""
        with translate_errors("update document"):
            row = await self._session.get(DocumentRow, doc_id)
            if row is None:
                return None

            content = dict(row.content_json or {})
            new_metadata = dict(content.get("metadata") or {})
            if metadata:
                new_metadata.update(metadata)
            if tags is not None:
                new_metadata["tags"] = list(tags)
            content["metadata"] = new_metadata

            if title is not None:
                row.title = title
                content["title"] = title
            # Reassign so the JSON column is flagged dirty
            row.content_json = content

            await self._session.commit()
        return _to_document(row)

    async def delete(self, doc_id: uuid.UUID) -> bool:
        """Delete document."""
        with translate_errors("delete document"):
            result = await self._session.execute(
                delete(DocumentRow).where(DocumentRow.doc_id == doc_id)
            )
            await self._session.commit()
        return bool(result.rowcount)

    async def count(self) -> int:
        """Total number of documents."""
        with translate_errors("count documents"):
            total = await self._session.scalar(select(func.count()).select_from(DocumentRow))
        return int(total or 0)

    async def created_since(self, since: datetime) -> list[datetime]:
        """Creation timestamps at or after `since`."""
        stmt = select(DocumentRow.created_at).where(DocumentRow.created_at >= since)
        with translate_errors("list document timestamps"):
            return list((await self._session.execute(stmt)).scalars().all())


class SqlChatRepository:
    """SQL implementation of ChatRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _owned_row(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> ChatRow | None:
        stmt = select(ChatRow).where(ChatRow.chat_id == chat_id, ChatRow.user_id == user_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def create_chat(self, user_id: uuid.UUID, title: str | None = None) -> Chat:
        """Create a chat owned by user_id."""
        now = utcnow()
        row = ChatRow(
            chat_id=uuid.uuid4(), user_id=user_id, title=title, created_at=now, updated_at=now
        )
        with translate_errors("create chat"):
            self._session.add(row)
            await self._session.commit()
        return _to_chat(row)

    async def get_chat(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> Chat | None:
        """Get chat by ID (owner-scoped)."""
        with translate_errors("get chat"):
            row = await self._owned_row(chat_id, user_id)
        return _to_chat(row) if row else None

    async def list_chats(self, user_id: uuid.UUID) -> list[Chat]:
        """List the user's chats, most recently updated first."""
        stmt = (
            select(ChatRow)
            .where(ChatRow.user_id == user_id)
            .order_by(ChatRow.updated_at.desc())
        )
        with translate_errors("list chats"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_to_chat(row) for row in rows]

    async def rename_chat(
        self, chat_id: uuid.UUID, user_id: uuid.UUID, title: str | None
    ) -> Chat | None:
        """Rename chat and bump updated_at."""
        with translate_errors("rename chat"):
            row = await self._owned_row(chat_id, user_id)
            if row is None:
                return None
            row.title = title
            row.updated_at = utcnow()
            await self._session.commit()
        return _to_chat(row)

    async def delete_chat(self, chat_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Delete messages then the chat, committed as one transaction."""
        with translate_errors("delete chat"):
            row = await self._owned_row(chat_id, user_id)
            if row is None:
                return False
            await self._session.execute(delete(MessageRow).where(MessageRow.chat_id == chat_id))
            await self._session.execute(delete(ChatRow).where(ChatRow.chat_id == chat_id))
            await self._session.commit()
        return True

    async def add_message(self, chat_id: uuid.UUID, sender: Sender, content: str) -> Message | None:
        """Append a message and bump the chat's updated_at."""
        with translate_errors("add message"):
            chat = await self._session.get(ChatRow, chat_id)
            if chat is None:
                return None

            last_seq = await self._session.scalar(
                select(func.max(MessageRow.seq)).where(MessageRow.chat_id == chat_id)
            )
            row = MessageRow(
                message_id=uuid.uuid4(),
                chat_id=chat_id,
                seq=(last_seq or 0) + 1,
                sender=sender.value,
                content=content,
                created_at=utcnow(),
            )
            self._session.add(row)
            chat.updated_at = max(as_utc(chat.updated_at), row.created_at)
            await self._session.commit()
        return _to_message(row)

    async def list_messages(self, chat_id: uuid.UUID) -> list[Message]:
        """List messages in creation order."""
        stmt = (
            select(MessageRow)
            .where(MessageRow.chat_id == chat_id)
            .order_by(MessageRow.created_at, MessageRow.seq)
        )
        with translate_errors("list messages"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_to_message(row) for row in rows]

    async def count_chats(self) -> int:
        """Total number of chats."""
        with translate_errors("count chats"):
            total = await self._session.scalar(select(func.count()).select_from(ChatRow))
        return int(total or 0)

    async def list_recent_chats(self, limit: int) -> list[Chat]:
        """Most recently updated chats across all users."""
        stmt = select(ChatRow).order_by(ChatRow.updated_at.desc()).limit(limit)
        with translate_errors("list recent chats"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_to_chat(row) for row in rows]

    async def user_message_times_since(self, since: datetime) -> list[datetime]:
        """Creation timestamps of user-sent messages at or after `since`."""
        stmt = select(MessageRow.created_at).where(
            MessageRow.sender == Sender.user.value, MessageRow.created_at >= since
        )
        with translate_errors("list message timestamps"):
            return list((await self._session.execute(stmt)).scalars().all())


class SqlUserRepository:
    """SQL implementation of UserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_user(
        self, *, email: str, username: str, password_hash: str, role: Role
    ) -> UserRecord:
        """Create a user account."""
        row = AppUser(
            user_id=uuid.uuid4(),
            email=email,
            username=username,
            role=role.value,
            password_hash=password_hash,
            created_at=utcnow(),
        )
        with translate_errors("create user"):
            self._session.add(row)
            try:
                await self._session.commit()
            except IntegrityError as e:
                await self._session.rollback()
                raise DuplicateUserError() from e
        return _to_user(row)

    async def get_by_id(self, user_id: uuid.UUID) -> UserRecord | None:
        """Get user by ID."""
        with translate_errors("get user"):
            row = await self._session.get(AppUser, user_id)
        return _to_user(row) if row else None

    async def get_by_username(self, username: str) -> UserRecord | None:
        """Get user by username."""
        with translate_errors("get user"):
            row = (
                await self._session.execute(select(AppUser).where(AppUser.username == username))
            ).scalar_one_or_none()
        return _to_user(row) if row else None

    async def exists(self, *, username: str, email: str) -> bool:
        """True if the username or email is taken."""
        stmt = select(func.count()).where(
            (AppUser.username == username) | (AppUser.email == email)
        )
        with translate_errors("check user"):
            total = await self._session.scalar(stmt)
        return bool(total)


class SqlSessionRepository:
    """SQL implementation of SessionRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_session(
        self, token_hash: str, user_id: uuid.UUID, expires_at: datetime
    ) -> SessionRecord:
        """Store a new session."""
        row = UserSession(
            token_hash=token_hash, user_id=user_id, created_at=utcnow(), expires_at=expires_at
        )
        with translate_errors("create session"):
            self._session.add(row)
            await self._session.commit()
        return SessionRecord(
            token_hash=row.token_hash,
            user_id=row.user_id,
            created_at=row.created_at,
            expires_at=row.expires_at,
        )

    async def get_session(self, token_hash: str) -> SessionRecord | None:
        """Look up a session by token hash."""
        with translate_errors("get session"):
            row = await self._session.get(UserSession, token_hash)
        if row is None:
            return None
        return SessionRecord(
            token_hash=row.token_hash,
            user_id=row.user_id,
            created_at=row.created_at,
            expires_at=row.expires_at,
        )

    async def delete_session(self, token_hash: str) -> None:
        """Remove a session."""
        with translate_errors("delete session"):
            await self._session.execute(
                delete(UserSession).where(UserSession.token_hash == token_hash)
            )
            await self._session.commit()


class SqlSettingsRepository:
    """SQL implementation of SettingsRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_settings(self) -> OrgSettings:
        """Current settings (defaults if never saved)."""
        with translate_errors("get settings"):
            row = await self._session.get(OrgSettingsRow, 1)
        return OrgSettings.model_validate(row.data) if row else OrgSettings()

    async def update_settings(self, patch: OrgSettingsUpdate) -> OrgSettings:
        """Apply a partial update."""
        with translate_errors("update settings"):
            row = await self._session.get(OrgSettingsRow, 1)
            current = OrgSettings.model_validate(row.data) if row else OrgSettings()
            updated = current.model_copy(update=patch.model_dump(exclude_none=True))

            if row is None:
                self._session.add(OrgSettingsRow(settings_id=1, data=updated.model_dump()))
            else:
                row.data = updated.model_dump()
            await self._session.commit()
        return updated


def build_sql_stores(session: AsyncSession) -> Stores:
    """Bind all SQL repositories to one request-scoped session."""
    return Stores(
        documents=SqlDocumentRepository(session),
        chats=SqlChatRepository(session),
        users=SqlUserRepository(session),
        sessions=SqlSessionRepository(session),
        settings=SqlSettingsRepository(session),
    )
