from datetime import date
from decimal import Decimal

from tillscan.domain.receipt import (
    UNKNOWN_STORE,
    Receipt,
    ReceiptItem,
    build_receipt_record,
    manual_entry_receipt,
    placeholder_item,
)


def _receipt() -> Receipt:
    return Receipt(
        store_name="Costco",
        date="2024-03-15",
        total=Decimal("9.49"),
        items=[
            ReceiptItem(description="Milk", price=Decimal("3.99")),
            ReceiptItem(description="Cookies", price=Decimal("2.75"), quantity=2),
        ],
        raw_text="COSTCO\nMilk 3.99\n",
    )


def test_line_total_and_items_total() -> None:
    receipt = _receipt()

    assert receipt.items[1].line_total == Decimal("5.50")
    assert receipt.items_total == Decimal("9.49")


def test_build_receipt_record_assigns_unique_ids() -> None:
    record = build_receipt_record(_receipt())

    ids = [record.id, *(item.id for item in record.items)]
    assert len(set(ids)) == len(ids)
    assert all(ids)


def test_build_receipt_record_uses_given_id_and_timestamp() -> None:
    record = build_receipt_record(_receipt(), created_at=1710460800000, record_id="receipt-1")

    assert record.id == "receipt-1"
    assert record.created_at == 1710460800000


def test_record_to_dict_matches_storage_shape() -> None:
    record = build_receipt_record(_receipt(), created_at=1, record_id="r1")

    data = record.to_dict()

    assert data["id"] == "r1"
    assert data["createdAt"] == 1
    assert data["storeName"] == "Costco"
    assert data["date"] == "2024-03-15"
    assert data["totalAmount"] == 9.49
    assert [(item["name"], item["price"], item["quantity"]) for item in data["items"]] == [
        ("Milk", 3.99, 1),
        ("Cookies", 2.75, 2),
    ]
    assert data["rawText"] == "COSTCO\nMilk 3.99\n"


def test_record_to_dict_omits_raw_text_when_excluded() -> None:
    data = build_receipt_record(_receipt(), include_raw_text=False).to_dict()

    assert "rawText" not in data


def test_manual_entry_receipt_has_one_editable_row() -> None:
    receipt = manual_entry_receipt(today=date(2024, 6, 1))

    assert receipt.store_name == UNKNOWN_STORE
    assert receipt.date == "2024-06-01"
    assert receipt.date_is_placeholder is True
    assert receipt.total == Decimal("0")
    assert receipt.items == [placeholder_item()]
    assert placeholder_item() == ReceiptItem(description="", price=Decimal("0"), quantity=1)
