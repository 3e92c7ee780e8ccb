"""Text extraction from uploaded files, dispatched by extension."""

import html
import io
import logging
import re
import zipfile
import zlib
from typing import Protocol

from docx import Document as DocxDocument
from pypdf import PdfReader

from backend.docchat.errors import UnsupportedFormatError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".txt", ".pdf", ".docx", ".pptx")

_WHITESPACE = re.compile(r"\s+")
_XML_TAG = re.compile(r"<[^>]+>")
_SLIDE_PATH = re.compile(r"^ppt/slides/slide(\d+)\.xml$")


class OcrClient(Protocol):
    """OCR fallback for PDFs without a text layer."""

    async def extract_pdf_text(self, filename: str, data: bytes) -> str:
        """Return recognized text, or "" when nothing could be recognized."""
        ...


def file_extension(filename: str) -> str:
    """Lowercase extension including the dot ("" if none)."""
    lower = filename.lower()
    dot = lower.rfind(".")
    return lower[dot:] if dot != -1 else ""


def is_supported(filename: str) -> bool:
    return file_extension(filename) in SUPPORTED_EXTENSIONS


def extract_pdf_text(data: bytes) -> str:
    """Concatenate per-page text; pages separated by blank lines.

    Returns "" when the PDF cannot be parsed or has no text layer.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        pages: list[str] = []
        for page in reader.pages:
            page_text = _WHITESPACE.sub(" ", page.extract_text() or "").strip()
            if page_text:
                pages.append(page_text)
        return "\n\n".join(pages)
    except Exception as e:
        logger.error(f"PDF text extraction failed: {e}")
        return ""


def extract_docx_text(data: bytes) -> str:
    """Paragraph text of a .docx file, one paragraph per line."""
    try:
        document = DocxDocument(io.BytesIO(data))
    except Exception as e:
        logger.error(f"DOCX parsing failed: {e}")
        return ""
    return "\n".join(p.text for p in document.paragraphs if p.text.strip())


def extract_pptx_text(data: bytes) -> str:
    """Slide text of a .pptx file.

    Unpacks the zip container, reads slides in slide-number order, turns
    <a:t> text runs into line breaks and strips the remaining markup.
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        logger.error(f"PPTX unpacking failed: {e}")
        return ""

    with archive:
        slides: list[tuple[int, str]] = []
        for name in archive.namelist():
            match = _SLIDE_PATH.match(name)
            if match:
                slides.append((int(match.group(1)), name))
        slides.sort()

        slide_texts: list[str] = []
        try:
            for _number, name in slides:
                xml = archive.read(name).decode("utf-8", errors="replace")
                text = xml.replace("<a:t>", "\n")
                text = _XML_TAG.sub(" ", text)
                text = _WHITESPACE.sub(" ", html.unescape(text)).strip()
                if text:
                    slide_texts.append(text)
        except (zipfile.BadZipFile, zlib.error, EOFError, OSError) as e:
            logger.error(f"PPTX slide read failed: {e}")
            return ""

    return "\n\n".join(slide_texts)


def extract_raw_text(filename: str, data: bytes) -> str:
    """Extract plain text by file extension without any fallback.

    Raises:
        UnsupportedFormatError: If the extension is not txt/pdf/docx/pptx
    """
    ext = file_extension(filename)

    if ext == ".txt":
        return data.decode("utf-8", errors="replace")
    if ext == ".pdf":
        return extract_pdf_text(data)
    if ext == ".docx":
        return extract_docx_text(data)
    if ext == ".pptx":
        return extract_pptx_text(data)

    raise UnsupportedFormatError(filename)


def placeholder_text(filename: str) -> str:
    """Stand-in text for files that yielded nothing, so standardization has input."""
    ext = file_extension(filename)
    if ext == ".pdf":
        return f"PDF Document: {filename}\n\nThis PDF appears to be image-based (no selectable text)."
    return f"{ext.lstrip('.').upper()} Document: {filename}\n\nNo extractable text was found."


async def extract_text(filename: str, data: bytes, ocr: OcrClient | None = None) -> str:
    """Extract text, falling back to OCR (PDF only) and then a placeholder.

    Never raises for a supported extension and never returns an empty string.

    Args:
        filename: Original filename (extension selects the extractor)
        data: Raw file bytes
        ocr: Optional OCR client tried when a PDF has no text layer

    Raises:
        UnsupportedFormatError: If the extension is not supported
    """
    text = extract_raw_text(filename, data)
    if text.strip():
        return text

    if ocr is not None and file_extension(filename) == ".pdf":
        logger.info(f"No text layer in {filename}; trying OCR fallback")
        text = await ocr.extract_pdf_text(filename, data)
        if text.strip():
            return text
        logger.warning(f"OCR fallback returned no text for {filename}")

    return placeholder_text(filename)
