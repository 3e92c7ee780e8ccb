"""Chat completion endpoint - POST /chat/complete."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from backend.docchat.api.auth import get_current_user
from backend.docchat.api.dependencies import get_completion_service, get_stores
from backend.docchat.db.context import RequestContext
from backend.docchat.db.repositories import Stores
from backend.docchat.llm.completion import ChatCompletionService
from backend.docchat.models.chats import Sender
from backend.docchat.models.completion import CompletionRequest, CompletionResult

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/complete", response_model=CompletionResult)
async def complete(
    body: CompletionRequest,
    ctx: Annotated[RequestContext, Depends(get_current_user)],
    stores: Annotated[Stores, Depends(get_stores)],
    service: Annotated[ChatCompletionService, Depends(get_completion_service)],
) -> CompletionResult:
    """Answer a question from the most relevant stored documents.

    When chat_id is given, the question and answer are appended to that
    chat after the provider succeeds.

    Raises:
        HTTPException: 400 on empty message, 404 if chat_id is not the caller's chat
        CompletionError: Provider failure (rendered as 502)
    """
    message = body.message.strip()
    if not message:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty message")

    if body.chat_id is not None:
        chat = await stores.chats.get_chat(body.chat_id, ctx.user_id)
        if chat is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")

    result = await service.complete(message, body.model)

    if body.chat_id is not None:
        await stores.chats.add_message(body.chat_id, Sender.user, message)
        await stores.chats.add_message(body.chat_id, Sender.assistant, result.content)

    return result
