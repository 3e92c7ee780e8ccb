"""Document ingestion - extract, standardize and persist uploaded files."""

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

from backend.docchat.db.repositories import DocumentRepository
from backend.docchat.docs.extract import OcrClient, extract_text
from backend.docchat.docs.standardize import Standardizer
from backend.docchat.errors import StoreError, UnsupportedFormatError
from backend.docchat.models.docs import Document, UploadResult
from backend.docchat.utils.logging import PipelineLogger
from backend.docchat.utils.metrics import PrometheusPipelineMetrics

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    """Raw upload as received from the multipart form."""

    name: str
    data: bytes


async def ingest_document(
    *,
    filename: str,
    data: bytes,
    documents: DocumentRepository,
    standardizer: Standardizer,
    ocr: OcrClient | None = None,
) -> Document:
    """Ingest one file: extract text, standardize it and persist it.

    Args:
        filename: Original filename (extension selects the extractor)
        data: Raw file bytes
        documents: Document repository
        standardizer: Standardizer (OpenAI or mock)
        ocr: Optional OCR client for image-only PDFs

    Returns:
        Stored Document

    Raises:
        UnsupportedFormatError: If the extension is not supported
        StoreError: If the document could not be persisted
    """
    text = await extract_text(filename, data, ocr)
    logger.debug(f"Extracted {len(text)} chars from {filename}")

    standardized = await standardizer.standardize(text, filename)

    return await documents.create(filename, standardized)


async def ingest_batch(
    files: Sequence[UploadedFile],
    *,
    documents: DocumentRepository,
    standardizer: Standardizer,
    ocr: OcrClient | None = None,
) -> list[UploadResult]:
    """Ingest files independently, reporting a result per file.

    Content problems (unsupported type, unreadable file) become per-file
    error entries and the rest of the batch continues. StoreError
    propagates so the whole request fails.
    """
    pipeline_logger = PipelineLogger()
    metrics = PrometheusPipelineMetrics()
    results: list[UploadResult] = []

    for upload in files:
        start = time.perf_counter()
        try:
            doc = await ingest_document(
                filename=upload.name,
                data=upload.data,
                documents=documents,
                standardizer=standardizer,
                ocr=ocr,
            )
        except StoreError:
            metrics.inc_ingested("store_error")
            raise
        except UnsupportedFormatError as e:
            error = e.message
        except Exception as e:
            logger.exception(f"Unexpected error processing {upload.name}")
            error = str(e) or type(e).__name__
        else:
            latency_ms = (time.perf_counter() - start) * 1000
            pipeline_logger.log_ingest(upload.name, "success", latency_ms, doc_id=str(doc.id))
            metrics.inc_ingested("success")
            results.append(UploadResult(id=doc.id, name=upload.name, status="success"))
            continue

        latency_ms = (time.perf_counter() - start) * 1000
        pipeline_logger.log_ingest(upload.name, "error", latency_ms, error=error)
        metrics.inc_ingested("error")
        results.append(UploadResult(name=upload.name, status="error", error=error))

    return results
