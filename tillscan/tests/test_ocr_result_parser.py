from datetime import date
from decimal import Decimal

import pytest

from tillscan.domain.receipt import UNKNOWN_STORE, ReceiptItem, placeholder_item
from tillscan.receipt.known_stores import KnownStoreDictionary
from tillscan.receipt.ocr_result_parser import parse_receipt

GROCERY_RECEIPT = """\
WALMART SUPERCENTER
1234 Main St
Phone: 555-123-4567
03/15/2024 14:22
Organic
Bananas 2.00
Cookies
2/5.00
3 @ 1.99
APPLES 5.97
SUBTOTAL 12.97
HST 1.69
TOTAL 14.66
VISA 14.66
Thank you
"""


def test_parse_receipt_full_grocery_receipt(known_stores: KnownStoreDictionary, today: date) -> None:
    receipt = parse_receipt(GROCERY_RECEIPT, known_stores, today=today)

    assert receipt.store_name == "Walmart"
    assert receipt.date == "2024-03-15"
    assert receipt.date_is_placeholder is False
    assert receipt.total == Decimal("14.66")
    assert receipt.items == [
        ReceiptItem(description="Organic Bananas", price=Decimal("2.00")),
        ReceiptItem(description="Cookies", price=Decimal("2.50"), quantity=2),
        ReceiptItem(description="APPLES", price=Decimal("1.99"), quantity=3),
    ]
    assert receipt.items_total == Decimal("12.97")
    assert receipt.raw_text == GROCERY_RECEIPT
    assert receipt.warnings == []


def test_parse_receipt_empty_text_uses_every_default(today: date) -> None:
    receipt = parse_receipt("", today=today)

    assert receipt.store_name == UNKNOWN_STORE
    assert receipt.date == "2024-06-01"
    assert receipt.date_is_placeholder is True
    assert receipt.total == Decimal("0.00")
    assert receipt.items == [placeholder_item()]
    assert {w.field for w in receipt.warnings} == {"store_name", "date", "total", "items"}


def test_parse_receipt_is_idempotent(known_stores: KnownStoreDictionary, today: date) -> None:
    first = parse_receipt(GROCERY_RECEIPT, known_stores, today=today)
    second = parse_receipt(GROCERY_RECEIPT, known_stores, today=today)

    assert first == second


def test_parse_receipt_nothing_after_total_is_an_item(today: date) -> None:
    text = "Milk 3.99\nTOTAL 3.99\nBread 2.50\nEggs 4.10\n"

    receipt = parse_receipt(text, today=today)

    assert [item.description for item in receipt.items] == ["Milk"]


def test_parse_receipt_footer_skip_mode(today: date) -> None:
    text = "Milk 3.99\nSUBTOTAL 3.99\nBread 2.50\nTOTAL 6.49\n"

    receipt = parse_receipt(text, today=today, stop_at_footer=False)

    assert [item.description for item in receipt.items] == ["Milk", "Bread"]
    assert receipt.total == Decimal("6.49")


@pytest.mark.parametrize(
    "text",
    [
        "",
        "|||\n###\n",
        "GIFT CARD 950.00\nTOTAL 950.00\n",
        "2/5.00\n3 @ 1.99\n4.99\n",
        "Milk 3.99\nBag 0.00\n2 for $5\nTOTAL 5.00\n",
        "Milk 3.99\nCookies\n2/1900.00\n",
        "062843 020 PEANUT BUTTER 4.99 H\n12345 6.78\nBALANCE DUE\n4.99\n",
    ],
)
def test_parse_receipt_items_always_valid(text: str, today: date) -> None:
    receipt = parse_receipt(text, today=today)

    assert receipt.items
    for item in receipt.items:
        assert item.quantity >= 1
        assert Decimal("0") <= item.price < Decimal("900")
