"""Unit tests for the in-memory stores."""

import uuid
from datetime import UTC, datetime, timedelta

import pytest

from backend.docchat.db.inmemory import build_in_memory_stores
from backend.docchat.errors import DuplicateUserError
from backend.docchat.models.auth import OrgSettingsUpdate, Role
from backend.docchat.models.chats import Sender
from backend.docchat.models.docs import Section, StandardizedDocument


def _doc(title: str) -> StandardizedDocument:
    return StandardizedDocument(title=title, sections=[Section(heading="h", body="b")])


@pytest.mark.asyncio
async def test_stores_are_independent_per_instance() -> None:
    first = build_in_memory_stores()
    second = build_in_memory_stores()

    await first.documents.create("a.txt", _doc("A"))

    assert await first.documents.count() == 1
    assert await second.documents.count() == 0


@pytest.mark.asyncio
async def test_documents_paginate_newest_first() -> None:
    stores = build_in_memory_stores()
    created = [await stores.documents.create(f"{i}.txt", _doc(f"Doc {i}")) for i in range(5)]

    page_one, total = await stores.documents.list_page(1, 2)
    page_three, _ = await stores.documents.list_page(3, 2)

    assert total == 5
    assert [d.id for d in page_one] == [created[4].id, created[3].id]
    assert [d.id for d in page_three] == [created[0].id]


@pytest.mark.asyncio
async def test_update_metadata_keeps_sections() -> None:
    stores = build_in_memory_stores()
    doc = await stores.documents.create("a.txt", _doc("A"))

    updated = await stores.documents.update_metadata(
        doc.id, title="Renamed", tags=["finance"], metadata={"owner": "ops"}
    )

    assert updated is not None
    assert updated.title == "Renamed"
    assert updated.tags == ["finance"]
    assert updated.metadata["owner"] == "ops"
    assert updated.sections == doc.sections
    assert await stores.documents.update_metadata(uuid.uuid4(), title="x") is None


@pytest.mark.asyncio
async def test_delete_document() -> None:
    stores = build_in_memory_stores()
    doc = await stores.documents.create("a.txt", _doc("A"))

    assert await stores.documents.delete(doc.id)
    assert not await stores.documents.delete(doc.id)
    assert await stores.documents.get(doc.id) is None


@pytest.mark.asyncio
async def test_chats_are_owner_scoped() -> None:
    stores = build_in_memory_stores()
    owner, other = uuid.uuid4(), uuid.uuid4()
    chat = await stores.chats.create_chat(owner, "Mine")

    assert await stores.chats.get_chat(chat.id, other) is None
    assert await stores.chats.list_chats(other) == []
    assert await stores.chats.rename_chat(chat.id, other, "Stolen") is None
    assert not await stores.chats.delete_chat(chat.id, other)
    assert (await stores.chats.get_chat(chat.id, owner)) is not None


@pytest.mark.asyncio
async def test_add_message_bumps_updated_at_monotonically() -> None:
    stores = build_in_memory_stores()
    chat = await stores.chats.create_chat(uuid.uuid4())
    previous = chat.updated_at

    for i in range(3):
        message = await stores.chats.add_message(chat.id, Sender.user, f"m{i}")
        assert message is not None
        current = (await stores.chats.get_chat(chat.id, chat.user_id)).updated_at
        assert current >= previous
        assert current >= message.created_at
        previous = current

    contents = [m.content for m in await stores.chats.list_messages(chat.id)]
    assert contents == ["m0", "m1", "m2"]


@pytest.mark.asyncio
async def test_add_message_to_missing_chat_returns_none() -> None:
    stores = build_in_memory_stores()

    assert await stores.chats.add_message(uuid.uuid4(), Sender.user, "hi") is None


@pytest.mark.asyncio
async def test_delete_chat_removes_messages() -> None:
    stores = build_in_memory_stores()
    user_id = uuid.uuid4()
    chat = await stores.chats.create_chat(user_id)
    keep = await stores.chats.create_chat(user_id)
    await stores.chats.add_message(chat.id, Sender.user, "bye")
    await stores.chats.add_message(keep.id, Sender.user, "stay")

    assert await stores.chats.delete_chat(chat.id, user_id)

    assert await stores.chats.list_messages(chat.id) == []
    assert [m.content for m in await stores.chats.list_messages(keep.id)] == ["stay"]


@pytest.mark.asyncio
async def test_user_message_times_since_ignores_assistant() -> None:
    stores = build_in_memory_stores()
    chat = await stores.chats.create_chat(uuid.uuid4())
    await stores.chats.add_message(chat.id, Sender.user, "q")
    await stores.chats.add_message(chat.id, Sender.assistant, "a")

    since = datetime.now(UTC) - timedelta(days=1)

    assert len(await stores.chats.user_message_times_since(since)) == 1


@pytest.mark.asyncio
async def test_users_and_sessions() -> None:
    stores = build_in_memory_stores()
    user = await stores.users.create_user(
        email="a@example.com", username="alice", password_hash="h", role=Role.user
    )

    assert await stores.users.exists(username="alice", email="other@example.com")
    assert await stores.users.exists(username="bob", email="a@example.com")
    assert not await stores.users.exists(username="bob", email="b@example.com")
    assert (await stores.users.get_by_username("alice")).user_id == user.user_id
    with pytest.raises(DuplicateUserError):
        await stores.users.create_user(
            email="A2@example.com", username="alice", password_hash="h", role=Role.user
        )

    expires = datetime.now(UTC) + timedelta(hours=1)
    await stores.sessions.create_session("hash", user.user_id, expires)
    assert (await stores.sessions.get_session("hash")).user_id == user.user_id
    await stores.sessions.delete_session("hash")
    assert await stores.sessions.get_session("hash") is None


@pytest.mark.asyncio
async def test_settings_partial_update() -> None:
    stores = build_in_memory_stores()

    updated = await stores.settings.update_settings(OrgSettingsUpdate(organization_name="Globex"))

    assert updated.organization_name == "Globex"
    assert updated.primary_color == "#3b82f6"
    assert (await stores.settings.get_settings()).organization_name == "Globex"
