"""Upload endpoint - POST /upload (multipart, one or more files)."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic import BaseModel

from backend.docchat.api.auth import get_current_user
from backend.docchat.api.dependencies import get_ocr_client, get_standardizer_dep, get_stores
from backend.docchat.db.context import RequestContext
from backend.docchat.db.repositories import Stores
from backend.docchat.docs.extract import OcrClient
from backend.docchat.docs.ingest import UploadedFile, ingest_batch
from backend.docchat.docs.standardize import Standardizer
from backend.docchat.models.docs import UploadResult

router = APIRouter(tags=["upload"])


class UploadResponse(BaseModel):
    """Response for POST /upload."""

    results: list[UploadResult]


@router.post("/upload", response_model=UploadResponse, response_model_exclude_none=True)
async def upload(
    ctx: Annotated[RequestContext, Depends(get_current_user)],
    stores: Annotated[Stores, Depends(get_stores)],
    standardizer: Annotated[Standardizer, Depends(get_standardizer_dep)],
    ocr: Annotated[OcrClient | None, Depends(get_ocr_client)],
    files: Annotated[list[UploadFile] | None, File()] = None,
) -> UploadResponse:
    """Extract, standardize and store each uploaded file.

    Args:
        ctx: Authenticated caller
        stores: Store bundle
        standardizer: OpenAI or mock standardizer
        ocr: Optional OCR client for image-only PDFs
        files: Multipart `files` field

    Returns:
        One result per file, in upload order

    Raises:
        HTTPException: 400 if no files were sent
    """
    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files uploaded")

    uploads = [
        UploadedFile(name=upload_file.filename or "unknown", data=await upload_file.read())
        for upload_file in files
    ]

    results = await ingest_batch(
        uploads, documents=stores.documents, standardizer=standardizer, ocr=ocr
    )
    return UploadResponse(results=results)
