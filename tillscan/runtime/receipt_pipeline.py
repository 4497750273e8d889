"""Receipt OCR pipeline: image bytes -> preprocess -> OCR -> parse."""

from __future__ import annotations

import time
from pathlib import Path

from tillscan.domain.receipt import Receipt
from tillscan.receipt.image_preprocessing import preprocess_image_bytes
from tillscan.receipt.known_stores import KnownStoreDictionary
from tillscan.receipt.ocr_result_parser import parse_receipt
from tillscan.runtime.logging import get_logger
from tillscan.runtime.ocr_engines import DEFAULT_LANG, OCREngine
from tillscan.runtime.store_rules import load_known_stores

logger = get_logger(__name__)


def scan_receipt_bytes(
    image_bytes: bytes,
    engine: OCREngine,
    known_stores: KnownStoreDictionary | None = None,
    lang: str = DEFAULT_LANG,
    debug_image_path: Path | None = None,
) -> Receipt:
    """
    Turn one receipt photo into a Receipt.

    Raises:
        DecodeError: image_bytes is not a readable image
        OCREngineFailure: the OCR engine failed or timed out

    Every other uncertainty ends up as a default value plus a warning on the
    returned Receipt.
    """
    if known_stores is None:
        known_stores = load_known_stores()

    start_time = time.time()
    image = preprocess_image_bytes(image_bytes)
    logger.debug("Preprocessed image to %dx%d in %.2f seconds", *image.size, time.time() - start_time)

    if debug_image_path is not None:
        image.save(debug_image_path)
        logger.info("Preprocessed image saved to: %s", debug_image_path)

    raw_text = engine.recognize(image, lang=lang)
    receipt = parse_receipt(raw_text, known_stores)

    logger.info(
        "Parsed receipt: %s, %s, %.2f, %d items",
        receipt.store_name,
        receipt.date,
        receipt.total,
        len(receipt.items),
    )
    for warning in receipt.warnings:
        logger.debug("%s: %s", warning.field, warning.message)
    return receipt
