"""Parse raw OCR text into structured Receipt data."""

from __future__ import annotations

from datetime import date

from tillscan.domain.receipt import Receipt, ReceiptItem, ReceiptWarning, placeholder_item

from .known_stores import KnownStoreDictionary
from .ocr_parser import extract_date, extract_items, extract_store, extract_total, normalize_lines


def parse_receipt(
    raw_text: str,
    known_stores: KnownStoreDictionary | None = None,
    *,
    today: date | None = None,
    stop_at_footer: bool = True,
) -> Receipt:
    """
    Parse OCR text into a Receipt object.

    This is a best-effort parser - results should be manually reviewed. Every
    field has a default (today's date, "Unknown Store", 0.00, one blank item),
    so a Receipt is always returned; the defaults used are listed in
    ``Receipt.warnings``.

    Args:
        raw_text: Newline-delimited text from the OCR engine
        known_stores: Merchant dictionary loaded by runtime components
        today: Date used when the receipt shows none (defaults to the current date)
        stop_at_footer: Passed through to item extraction

    Returns:
        Receipt with at least one item
    """
    lines = normalize_lines(raw_text)
    warnings: list[ReceiptWarning] = []

    store_name = extract_store(lines, known_stores, warning_sink=warnings)
    receipt_date, date_is_placeholder = extract_date(lines, today=today, warning_sink=warnings)
    total = extract_total(lines, warning_sink=warnings)

    items: list[ReceiptItem] = extract_items(
        lines,
        known_stores,
        warning_sink=warnings,
        stop_at_footer=stop_at_footer,
    )
    if not items:
        warnings.append(ReceiptWarning(field="items", message="no items recognized; added a blank row"))
        items = [placeholder_item()]

    return Receipt(
        store_name=store_name,
        date=receipt_date,
        total=total,
        items=items,
        raw_text=raw_text,
        date_is_placeholder=date_is_placeholder,
        warnings=warnings,
    )
