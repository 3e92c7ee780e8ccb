"""Chat endpoints - owner-scoped chat CRUD and message history."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from backend.docchat.api.auth import get_current_user
from backend.docchat.api.dependencies import get_stores
from backend.docchat.db.context import RequestContext
from backend.docchat.db.repositories import Stores
from backend.docchat.models.chats import Chat, Message, Sender

router = APIRouter(prefix="/chats", tags=["chats"])


class CreateChatRequest(BaseModel):
    """Request body for POST /chats (optional)."""

    title: str | None = Field(None, max_length=200)


class RenameChatRequest(BaseModel):
    """Request body for PATCH /chats/{chat_id}."""

    title: str | None = Field(None, max_length=200)


class PostMessageRequest(BaseModel):
    """Request body for POST /chats/{chat_id}/messages."""

    sender: Sender
    content: str = Field(..., min_length=1)


class ChatListResponse(BaseModel):
    """Response for GET /chats."""

    items: list[Chat]


class MessageListResponse(BaseModel):
    """Response for GET /chats/{chat_id}/messages."""

    items: list[Message]


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")


@router.get("", response_model=ChatListResponse)
async def list_chats(
    ctx: Annotated[RequestContext, Depends(get_current_user)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> ChatListResponse:
    """List the caller's chats, most recently updated first."""
    return ChatListResponse(items=await stores.chats.list_chats(ctx.user_id))


@router.post("", response_model=Chat, status_code=status.HTTP_201_CREATED)
async def create_chat(
    ctx: Annotated[RequestContext, Depends(get_current_user)],
    stores: Annotated[Stores, Depends(get_stores)],
    body: CreateChatRequest | None = None,
) -> Chat:
    """Create an empty chat owned by the caller."""
    title = body.title if body else None
    return await stores.chats.create_chat(ctx.user_id, title)


@router.patch("/{chat_id}", response_model=Chat)
async def rename_chat(
    chat_id: UUID,
    body: RenameChatRequest,
    ctx: Annotated[RequestContext, Depends(get_current_user)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> Chat:
    """Rename a chat."""
    chat = await stores.chats.rename_chat(chat_id, ctx.user_id, body.title)
    if chat is None:
        raise _not_found()
    return chat


@router.delete("/{chat_id}")
async def delete_chat(
    chat_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_user)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> dict[str, bool]:
    """Delete a chat and all of its messages."""
    if not await stores.chats.delete_chat(chat_id, ctx.user_id):
        raise _not_found()
    return {"success": True}


@router.get("/{chat_id}/messages", response_model=MessageListResponse)
async def list_messages(
    chat_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_user)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> MessageListResponse:
    """List a chat's messages in creation order."""
    if await stores.chats.get_chat(chat_id, ctx.user_id) is None:
        raise _not_found()
    return MessageListResponse(items=await stores.chats.list_messages(chat_id))


@router.post("/{chat_id}/messages", response_model=Message, status_code=status.HTTP_201_CREATED)
async def post_message(
    chat_id: UUID,
    body: PostMessageRequest,
    ctx: Annotated[RequestContext, Depends(get_current_user)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> Message:
    """Append a message to one of the caller's chats."""
    if await stores.chats.get_chat(chat_id, ctx.user_id) is None:
        raise _not_found()

    message = await stores.chats.add_message(chat_id, body.sender, body.content)
    if message is None:
        raise _not_found()
    return message
