"""Document endpoints - listing, detail, metadata edits, deletion and search."""

import math
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field

from backend.docchat.api.auth import get_current_user, require_admin
from backend.docchat.api.dependencies import get_retriever, get_stores
from backend.docchat.db.context import RequestContext
from backend.docchat.db.repositories import Stores
from backend.docchat.docs.retriever import Retriever
from backend.docchat.models.docs import DocumentDetail, DocumentSummary, ScoredSource

router = APIRouter(prefix="/documents", tags=["documents"])


class DocumentListResponse(BaseModel):
    """Response for GET /documents."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[DocumentSummary]
    total_pages: int = Field(..., serialization_alias="totalPages")


class UpdateDocumentRequest(BaseModel):
    """Request body for PUT /documents/{doc_id}. Section content is not editable."""

    title: str | None = Field(None, min_length=1, max_length=500)
    tags: list[str] | None = None
    metadata: dict[str, Any] | None = None


class DocumentSearchResponse(BaseModel):
    """Response for GET /documents/search."""

    matches: list[ScoredSource]
    query: str


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")


@router.get("", response_model=DocumentListResponse, response_model_by_alias=True)
async def list_documents(
    ctx: Annotated[RequestContext, Depends(get_current_user)],
    stores: Annotated[Stores, Depends(get_stores)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> DocumentListResponse:
    """List documents newest first.

    Args:
        ctx: Authenticated caller
        stores: Store bundle
        page: 1-based page number
        limit: Page size

    Returns:
        Page items and total page count (at least 1)
    """
    docs, total = await stores.documents.list_page(page, limit)
    return DocumentListResponse(
        items=[DocumentSummary.from_document(doc) for doc in docs],
        total_pages=max(1, math.ceil(total / limit)),
    )


@router.get("/search", response_model=DocumentSearchResponse)
async def search_documents(
    ctx: Annotated[RequestContext, Depends(get_current_user)],
    retriever: Annotated[Retriever, Depends(get_retriever)],
    query: Annotated[str, Query(min_length=1, max_length=200)],
    limit: Annotated[int, Query(ge=1, le=20)] = 8,
) -> DocumentSearchResponse:
    """Rank recent documents against a query, with scores."""
    matches = await retriever.search(query, top_k=limit)
    return DocumentSearchResponse(matches=matches, query=query)


@router.get("/{doc_id}", response_model=DocumentDetail)
async def get_document(
    doc_id: UUID,
    ctx: Annotated[RequestContext, Depends(get_current_user)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> DocumentDetail:
    """Get one document including its sections."""
    doc = await stores.documents.get(doc_id)
    if doc is None:
        raise _not_found()
    return DocumentDetail.from_document(doc)


@router.put("/{doc_id}", response_model=DocumentDetail)
async def update_document(
    doc_id: UUID,
    body: UpdateDocumentRequest,
    ctx: Annotated[RequestContext, Depends(require_admin)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> DocumentDetail:
    """Edit title, tags or metadata (admin only)."""
    doc = await stores.documents.update_metadata(
        doc_id, title=body.title, tags=body.tags, metadata=body.metadata
    )
    if doc is None:
        raise _not_found()
    return DocumentDetail.from_document(doc)


@router.delete("/{doc_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    doc_id: UUID,
    ctx: Annotated[RequestContext, Depends(require_admin)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> Response:
    """Delete a document (admin only)."""
    if not await stores.documents.delete(doc_id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
