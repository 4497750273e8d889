"""Composable OCR receipt parser components."""

from .fields_parser import extract_date, extract_store, extract_total
from .items_text_parser import LINE_RULES, classify_line, extract_items
from .lines import normalize_lines

__all__ = [
    "LINE_RULES",
    "classify_line",
    "extract_date",
    "extract_items",
    "extract_store",
    "extract_total",
    "normalize_lines",
]
