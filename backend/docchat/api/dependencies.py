"""FastAPI dependencies wiring settings, stores and services per request."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request

from backend.docchat.config import Settings, secret_value
from backend.docchat.db.repositories import Stores
from backend.docchat.db.sql_repositories import build_sql_stores
from backend.docchat.docs.extract import OcrClient
from backend.docchat.docs.ocr import OcrSpaceClient
from backend.docchat.docs.retriever import Retriever
from backend.docchat.docs.standardize import Standardizer, get_standardizer
from backend.docchat.llm.completion import ChatCompletionService


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    settings: Settings = request.app.state.settings
    return settings


async def get_stores(request: Request) -> AsyncGenerator[Stores, None]:
    """Yield the store bundle for this request.

    With a database configured, repositories share one request-scoped
    session that is closed afterwards. Otherwise the application's
    in-memory stores are returned.
    """
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        yield request.app.state.stores
        return

    async with session_factory() as session:
        yield build_sql_stores(session)


def get_standardizer_dep(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Standardizer:
    return get_standardizer(settings)


def get_ocr_client(settings: Annotated[Settings, Depends(get_app_settings)]) -> OcrClient | None:
    """OCR client when OCR_SPACE_API_KEY is configured, else None."""
    api_key = secret_value(settings.ocr_space_api_key)
    if not api_key:
        return None
    return OcrSpaceClient(api_key=api_key, url=settings.ocr_space_url)


def get_retriever(
    stores: Annotated[Stores, Depends(get_stores)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Retriever:
    return Retriever(
        stores.documents,
        candidate_limit=settings.retrieval_candidate_limit,
        top_k=settings.retrieval_top_k,
        min_score=settings.retrieval_min_score,
    )


def get_completion_service(
    retriever: Annotated[Retriever, Depends(get_retriever)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> ChatCompletionService:
    return ChatCompletionService.from_settings(retriever, settings)
