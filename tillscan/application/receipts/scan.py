"""Receipt scan workflow orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from tillscan.domain.receipt import ReceiptRecord, build_receipt_record
from tillscan.receipt.image_preprocessing import DecodeError
from tillscan.runtime import load_known_stores
from tillscan.runtime.ocr_engines import DEFAULT_LANG, OCREngine, OCREngineFailure
from tillscan.runtime.receipt_pipeline import scan_receipt_bytes

if TYPE_CHECKING:
    from tillscan.domain.receipt import Receipt

ScanStatus = Literal[
    "file_not_found",
    "decode_failed",
    "ocr_unavailable",
    "parsed",
]


@dataclass(frozen=True)
class ReceiptScanRequest:
    """Inputs for running receipt scan workflow."""

    image_path: Path
    engine: OCREngine
    lang: str = DEFAULT_LANG
    debug_image_path: Path | None = None


@dataclass(frozen=True)
class ReceiptScanResult:
    """Outcome from receipt scan workflow."""

    status: ScanStatus
    receipt: Receipt | None = None
    record: ReceiptRecord | None = None
    error: str | None = None


def run_receipt_scan(request: ReceiptScanRequest) -> ReceiptScanResult:
    """Run scan flow: read image -> preprocess -> OCR -> parse -> record."""
    if not request.image_path.exists():
        return ReceiptScanResult(
            status="file_not_found",
            error=f"Receipt file not found: {request.image_path}",
        )

    try:
        receipt = scan_receipt_bytes(
            request.image_path.read_bytes(),
            request.engine,
            load_known_stores(),
            lang=request.lang,
            debug_image_path=request.debug_image_path,
        )
    except DecodeError as exc:
        return ReceiptScanResult(status="decode_failed", error=str(exc))
    except OCREngineFailure as exc:
        return ReceiptScanResult(status="ocr_unavailable", error=str(exc))

    return ReceiptScanResult(
        status="parsed",
        receipt=receipt,
        record=build_receipt_record(receipt),
    )
