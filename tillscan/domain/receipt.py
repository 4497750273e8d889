"""Data models for receipt scanning."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

UNKNOWN_STORE = "Unknown Store"


@dataclass
class ReceiptItem:
    """A single line item on a receipt."""

    description: str
    price: Decimal  # Unit price once quantity/deal modifiers are reconciled
    quantity: int = 1

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


def placeholder_item() -> ReceiptItem:
    """Return the editable empty row used when no items were recognized."""
    return ReceiptItem(description="", price=Decimal("0"), quantity=1)


@dataclass
class ReceiptWarning:
    """A field extractor fell back to its default value."""

    field: str
    message: str


@dataclass
class Receipt:
    """Parsed receipt data."""

    store_name: str
    date: str  # ISO-8601 when parseable, otherwise the raw matched text
    total: Decimal
    items: list[ReceiptItem] = field(default_factory=list)
    raw_text: str = ""  # Original OCR text for reference
    date_is_placeholder: bool = False
    warnings: list[ReceiptWarning] = field(default_factory=list)

    @property
    def items_total(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))


def manual_entry_receipt(today: date | None = None) -> Receipt:
    """Blank receipt for manual entry when scanning is abandoned."""
    today = today or date.today()
    return Receipt(
        store_name=UNKNOWN_STORE,
        date=today.isoformat(),
        total=Decimal("0"),
        items=[placeholder_item()],
        date_is_placeholder=True,
    )


@dataclass(frozen=True)
class ItemRecord:
    id: str
    name: str
    price: Decimal
    quantity: int


@dataclass(frozen=True)
class ReceiptRecord:
    """Receipt as handed to the storage collaborator."""

    id: str
    created_at: int  # epoch milliseconds
    store_name: str
    date: str
    total_amount: Decimal
    items: tuple[ItemRecord, ...]
    raw_text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "createdAt": self.created_at,
            "storeName": self.store_name,
            "date": self.date,
            "totalAmount": float(self.total_amount),
            "items": [
                {
                    "id": item.id,
                    "name": item.name,
                    "price": float(item.price),
                    "quantity": item.quantity,
                }
                for item in self.items
            ],
        }
        if self.raw_text is not None:
            data["rawText"] = self.raw_text
        return data


def _new_id() -> str:
    return str(uuid.uuid4())


def build_receipt_record(
    receipt: Receipt,
    *,
    created_at: int | None = None,
    record_id: str | None = None,
    include_raw_text: bool = True,
) -> ReceiptRecord:
    """
    Convert a parsed receipt into the storage record shape.

    Ids are assigned here rather than in the parser so that parsing the same
    text twice yields identical receipts.
    """
    if created_at is None:
        created_at = int(time.time() * 1000)
    return ReceiptRecord(
        id=record_id or _new_id(),
        created_at=created_at,
        store_name=receipt.store_name,
        date=receipt.date,
        total_amount=receipt.total,
        items=tuple(
            ItemRecord(id=_new_id(), name=item.description, price=item.price, quantity=item.quantity)
            for item in receipt.items
        ),
        raw_text=receipt.raw_text if include_raw_text else None,
    )
