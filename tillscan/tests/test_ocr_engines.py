from typing import Any

import httpx
import pytesseract
import pytest
from PIL import Image

from tillscan.runtime.ocr_engines import (
    OCREngineFailure,
    OCRServiceEngine,
    TesseractOCREngine,
    create_ocr_engine,
)


def _image() -> Image.Image:
    return Image.new("L", (20, 10), 255)


def _service(handler: Any) -> OCRServiceEngine:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return OCRServiceEngine("http://ocr.test/", client=client)


def test_service_engine_posts_png_and_reads_text() -> None:
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(200, json={"text": "WALMART\nMilk 3.99\n"})

    text = _service(handler).recognize(_image(), lang="fra")

    assert text == "WALMART\nMilk 3.99\n"
    assert seen["url"] == "http://ocr.test/ocr"
    assert b"\x89PNG" in seen["body"]
    assert b"fra" in seen["body"]


def test_service_engine_accepts_full_text_key() -> None:
    engine = _service(lambda request: httpx.Response(200, json={"full_text": "Milk 3.99"}))

    assert engine.recognize(_image()) == "Milk 3.99"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"lines": []}),
        httpx.Response(200, json=["Milk 3.99"]),
    ],
)
def test_service_engine_bad_responses_raise(response: httpx.Response) -> None:
    engine = _service(lambda request: response)

    with pytest.raises(OCREngineFailure):
        engine.recognize(_image())


def test_service_engine_connection_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(OCREngineFailure, match="Failed to reach"):
        _service(handler).recognize(_image())


def test_service_engine_timeout_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(OCREngineFailure):
        _service(handler).recognize(_image())


def test_tesseract_engine_passes_page_seg_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: dict[str, Any] = {}

    def fake_image_to_string(image: Image.Image, lang: str, config: str, timeout: float) -> str:
        calls.update(lang=lang, config=config, timeout=timeout)
        return "Milk 3.99\n"

    monkeypatch.setattr(pytesseract, "image_to_string", fake_image_to_string)

    text = TesseractOCREngine(timeout=5).recognize(_image(), lang="eng")

    assert text == "Milk 3.99\n"
    assert calls == {"lang": "eng", "config": "--psm 6", "timeout": 5}


@pytest.mark.parametrize(
    "error",
    [
        pytesseract.TesseractNotFoundError(),
        pytesseract.TesseractError(1, "bad input"),
        RuntimeError("Tesseract process timeout"),
    ],
)
def test_tesseract_engine_failures_raise(monkeypatch: pytest.MonkeyPatch, error: Exception) -> None:
    def fake_image_to_string(*args: Any, **kwargs: Any) -> str:
        raise error

    monkeypatch.setattr(pytesseract, "image_to_string", fake_image_to_string)

    with pytest.raises(OCREngineFailure):
        TesseractOCREngine().recognize(_image())


def test_create_ocr_engine() -> None:
    assert isinstance(create_ocr_engine("tesseract"), TesseractOCREngine)
    service = create_ocr_engine("service", "http://ocr.test")
    assert isinstance(service, OCRServiceEngine)
    assert service.base_url == "http://ocr.test"
    with pytest.raises(ValueError):
        create_ocr_engine("cloud")
