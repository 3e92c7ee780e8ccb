"""Unit tests for upload ingestion."""

import pytest

from backend.docchat.db.inmemory import InMemoryDocumentRepository
from backend.docchat.docs.ingest import UploadedFile, ingest_batch, ingest_document
from backend.docchat.docs.standardize import MOCK_NOTE, MockStandardizer
from backend.docchat.errors import StoreError
from backend.docchat.models.docs import Document, StandardizedDocument


class FailingRepository(InMemoryDocumentRepository):
    async def create(self, filename: str, standardized: StandardizedDocument) -> Document:
        raise StoreError("database unreachable")


class ExplodingStandardizer:
    async def standardize(self, text: str, filename: str) -> StandardizedDocument:
        raise RuntimeError("unexpected")


@pytest.mark.asyncio
async def test_ingest_notes_txt_without_credentials() -> None:
    repo = InMemoryDocumentRepository()
    text = "Team notes\nShip the retriever on Friday."

    doc = await ingest_document(
        filename="notes.txt", data=text.encode(), documents=repo, standardizer=MockStandardizer()
    )

    assert doc.title == "notes.txt"
    assert len(doc.sections) == 1
    assert doc.sections[0].heading == "Content"
    assert doc.sections[0].body == text
    assert doc.metadata["note"] == MOCK_NOTE
    assert await repo.get(doc.id) == doc


@pytest.mark.asyncio
async def test_batch_reports_each_file_independently() -> None:
    repo = InMemoryDocumentRepository()
    files = [
        UploadedFile(name="a.txt", data=b"alpha"),
        UploadedFile(name="image.png", data=b"\x89PNG"),
        UploadedFile(name="b.txt", data=b"beta"),
    ]

    results = await ingest_batch(files, documents=repo, standardizer=MockStandardizer())

    assert [r.status for r in results] == ["success", "error", "success"]
    assert results[1].error == "Unsupported file type: image.png"
    assert results[1].id is None
    assert results[0].id != results[2].id
    assert await repo.count() == 2


@pytest.mark.asyncio
async def test_batch_turns_unexpected_errors_into_entries() -> None:
    repo = InMemoryDocumentRepository()

    results = await ingest_batch(
        [UploadedFile(name="a.txt", data=b"alpha")],
        documents=repo,
        standardizer=ExplodingStandardizer(),
    )

    assert results[0].status == "error"
    assert results[0].error == "unexpected"


@pytest.mark.asyncio
async def test_store_error_fails_the_batch() -> None:
    with pytest.raises(StoreError):
        await ingest_batch(
            [UploadedFile(name="a.txt", data=b"alpha")],
            documents=FailingRepository(),
            standardizer=MockStandardizer(),
        )
