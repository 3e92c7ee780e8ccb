"""OCR.space client used for image-only PDFs."""

import base64
import logging

import httpx

logger = logging.getLogger(__name__)


class OcrSpaceClient:
    """Sends a base64-encoded PDF to the OCR.space parse/image API."""

    def __init__(
        self,
        api_key: str,
        url: str = "https://api.ocr.space/parse/image",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize OCR client.

        Args:
            api_key: OCR.space API key (read from environment)
            url: parse/image endpoint
            client: Optional httpx client (for testing with mocks)
        """
        self._api_key = api_key
        self._url = url
        self._client = client

    async def extract_pdf_text(self, filename: str, data: bytes) -> str:
        """Return ParsedResults[0].ParsedText, or "" on any failure."""
        form = {
            "language": "eng",
            "isOverlayRequired": "false",
            "OCREngine": "2",
            "base64Image": "data:application/pdf;base64," + base64.b64encode(data).decode("ascii"),
        }

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=60.0)
            close_client = True

        try:
            response = await client.post(self._url, data=form, headers={"apikey": self._api_key})
            response.raise_for_status()
            payload = response.json()
            results = payload.get("ParsedResults") or []
            text = results[0].get("ParsedText", "") if results else ""
            if text.strip():
                logger.info(f"OCR extracted {len(text)} chars from {filename}")
            return text or ""
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"OCR request failed for {filename}: {e}")
            return ""
        finally:
            if close_client:
                await client.aclose()
