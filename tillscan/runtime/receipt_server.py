"""FastAPI server that scans uploaded receipt photos."""

from __future__ import annotations

import os
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from tillscan.domain.receipt import Receipt, build_receipt_record
from tillscan.receipt.image_preprocessing import DecodeError
from tillscan.receipt.ocr_result_parser import parse_receipt
from tillscan.runtime.logging import get_logger
from tillscan.runtime.ocr_engines import DEFAULT_LANG, OCREngine, OCREngineFailure, create_ocr_engine
from tillscan.runtime.receipt_pipeline import scan_receipt_bytes
from tillscan.runtime.store_rules import load_known_stores

logger = get_logger(__name__)

OCR_ENGINE_NAME = os.environ.get("TILLSCAN_OCR_ENGINE", "tesseract")
OCR_SERVICE_URL = os.environ.get("OCR_SERVICE_URL", "http://localhost:8001")

app = FastAPI(title="Receipt Scanner")


def get_ocr_engine() -> OCREngine:
    return create_ocr_engine(OCR_ENGINE_NAME, OCR_SERVICE_URL)


def _receipt_response(receipt: Receipt) -> dict[str, Any]:
    return {
        "status": "success",
        "receipt": build_receipt_record(receipt).to_dict(),
        "date_is_placeholder": receipt.date_is_placeholder,
        "warnings": [{"field": w.field, "message": w.message} for w in receipt.warnings],
    }


@app.post("/scan")
async def scan_receipt(request: Request, engine: OCREngine = Depends(get_ocr_engine)) -> JSONResponse:
    """Receive a receipt image and return the parsed receipt record."""
    form = await request.form()

    file = None
    for value in form.values():
        if hasattr(value, "read"):
            file = value
            break

    if file is None:
        return JSONResponse({"status": "error", "message": "No file found in request"}, status_code=400)

    contents = await file.read()
    lang = str(form.get("lang") or DEFAULT_LANG)

    try:
        # OCR is slow and blocking; keep it off the event loop
        receipt = await run_in_threadpool(scan_receipt_bytes, contents, engine, load_known_stores(), lang)
    except DecodeError as e:
        logger.warning("Rejected upload: %s", e)
        return JSONResponse({"status": "error", "message": "Could not read image"}, status_code=400)
    except OCREngineFailure as e:
        logger.error("OCR failed: %s", e)
        return JSONResponse(
            {"status": "error", "message": "OCR failed; enter the receipt manually"},
            status_code=502,
        )

    return JSONResponse(_receipt_response(receipt))


@app.post("/parse")
async def parse_text(request: Request) -> JSONResponse:
    """Parse already-recognized receipt text."""
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    text = payload.get("text") if isinstance(payload, dict) else None
    if not isinstance(text, str):
        return JSONResponse({"status": "error", "message": 'Expected JSON body {"text": ...}'}, status_code=400)

    receipt = parse_receipt(text, load_known_stores())
    return JSONResponse(_receipt_response(receipt))


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
