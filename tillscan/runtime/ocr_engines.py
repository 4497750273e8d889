"""OCR engine adapters.

An engine turns a preprocessed receipt image into one newline-delimited text
blob. Nothing positional is returned; the parser only ever sees text.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Protocol

import httpx

from tillscan.receipt.image_preprocessing import image_to_png_bytes
from tillscan.runtime.logging import get_logger

if TYPE_CHECKING:
    from PIL.Image import Image

logger = get_logger(__name__)

DEFAULT_LANG = "eng"
DEFAULT_OCR_SERVICE_URL = "http://localhost:8001"
# Tesseract page segmentation: assume a single uniform block of text
DEFAULT_PAGE_SEG_MODE = 6


class OCREngineFailure(RuntimeError):
    """Raised when the OCR engine fails, times out, or cannot be reached."""


class OCREngine(Protocol):
    def recognize(self, image: Image, *, lang: str = DEFAULT_LANG) -> str: ...


class TesseractOCREngine:
    """Local OCR through the tesseract binary (pytesseract)."""

    def __init__(self, page_seg_mode: int = DEFAULT_PAGE_SEG_MODE, timeout: float = 60.0) -> None:
        self.page_seg_mode = page_seg_mode
        self.timeout = timeout

    def recognize(self, image: Image, *, lang: str = DEFAULT_LANG) -> str:
        import pytesseract

        config = f"--psm {self.page_seg_mode}"
        start_time = time.time()
        try:
            text = pytesseract.image_to_string(image, lang=lang, config=config, timeout=self.timeout)
        except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError, OSError) as e:
            logger.error("Tesseract failed: %s", e)
            raise OCREngineFailure(f"Tesseract failed: {e}") from e
        except RuntimeError as e:
            # pytesseract signals its timeout with a bare RuntimeError
            logger.error("Tesseract timed out after %.0f seconds", self.timeout)
            raise OCREngineFailure(f"Tesseract timed out: {e}") from e

        logger.info("Tesseract returned in %.2f seconds", time.time() - start_time)
        return str(text)


class OCRServiceEngine:
    """Remote OCR service that accepts an image upload at ``<url>/ocr``."""

    def __init__(
        self,
        base_url: str = DEFAULT_OCR_SERVICE_URL,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def recognize(self, image: Image, *, lang: str = DEFAULT_LANG) -> str:
        logger.info("Sending receipt to OCR service at %s...", self.base_url)
        payload = image_to_png_bytes(image)

        start_time = time.time()
        try:
            if self._client is not None:
                response = self._post(self._client, payload, lang)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = self._post(client, payload, lang)
        except httpx.HTTPError as e:
            logger.error("Failed to reach OCR service: %s", e)
            raise OCREngineFailure(f"Failed to reach OCR service: {e}") from e
        logger.info("OCR service returned in %.2f seconds", time.time() - start_time)

        if response.status_code != 200:
            # Response body may echo receipt text; keep it out of the logs
            logger.error("OCR service error: %s", response.status_code)
            raise OCREngineFailure(f"OCR service error: {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise OCREngineFailure("OCR service returned invalid JSON") from e

        text = body.get("text", body.get("full_text")) if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise OCREngineFailure("OCR service response has no text")
        return text

    def _post(self, client: httpx.Client, payload: bytes, lang: str) -> httpx.Response:
        return client.post(
            f"{self.base_url}/ocr",
            files={"file": ("receipt.png", payload, "image/png")},
            data={"lang": lang},
            timeout=self.timeout,
        )


def create_ocr_engine(name: str, ocr_url: str = DEFAULT_OCR_SERVICE_URL) -> OCREngine:
    """Build an engine by CLI/config name: "tesseract" or "service"."""
    if name == "tesseract":
        return TesseractOCREngine()
    if name == "service":
        return OCRServiceEngine(ocr_url)
    raise ValueError(f"Unknown OCR engine: {name}")
