"""Core domain models for tillscan.

This module provides the data models shared by the parser, pipeline and
outer surfaces:
- Receipt, ReceiptItem, ReceiptWarning: parsed receipt data
- ReceiptRecord, ItemRecord: storage boundary records

Usage:
    from tillscan.domain import Receipt, ReceiptItem
"""

from tillscan.domain.receipt import (
    UNKNOWN_STORE,
    ItemRecord,
    Receipt,
    ReceiptItem,
    ReceiptRecord,
    ReceiptWarning,
    build_receipt_record,
    manual_entry_receipt,
    placeholder_item,
)

__all__ = [
    "UNKNOWN_STORE",
    "ItemRecord",
    "Receipt",
    "ReceiptItem",
    "ReceiptRecord",
    "ReceiptWarning",
    "build_receipt_record",
    "manual_entry_receipt",
    "placeholder_item",
]
