"""Store/date/total extraction helpers."""

import re
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from tillscan.domain.receipt import UNKNOWN_STORE, ReceiptWarning

from ..date_utils import default_receipt_date, expand_two_digit_year, month_from_name
from ..known_stores import KnownStoreDictionary
from .common import (
    BOILERPLATE_PATTERNS,
    DATE_PATTERNS,
    PRICE_TOKEN,
    STANDALONE_PRICE,
    STREET_ADDRESS,
    is_noisy_line,
    parse_amount,
)

STORE_DICTIONARY_SCAN_LINES = 15
STORE_HEURISTIC_SCAN_LINES = 8

# Keywords that identify the amount actually paid
STRONG_TOTAL_PATTERN = re.compile(r"\b(?:GRAND\s+TOTAL|TOTAL|BALANCE\s+DUE|AMOUNT\s+DUE|FINAL)\b", re.IGNORECASE)

# Amounts near "total" that are not the total
AVOID_TOTAL_PATTERN = re.compile(
    r"\b(?:SUB\s*-?\s*TOTAL|TAX|HST|GST|PST|CHANGE|CASH|VISA|DEBIT|"
    r"TOTAL\s+(?:SAVINGS?|SAVED|DISCOUNTS?|NUMBER|ITEMS?))\b",
    re.IGNORECASE,
)

STORE_SKIP_PATTERN = re.compile(
    r"^\d|\b(?:PHONE|TEL|FAX|WELCOME|RECEIPT|WWW|HTTPS?)\b|\.com\b|"
    r"\b(?:GST|HST|TAX|VAT)\s*(?:#|NO|ID|REG)|\bABN\b",
    re.IGNORECASE,
)


def _date_from_match(match: re.Match[str], kind: str) -> date:
    """Build a calendar date from a DATE_PATTERNS match. Raises ValueError if invalid."""
    groups = match.groupdict()
    if kind == "ymd":
        return date(int(groups["year"]), int(groups["month"]), int(groups["day"]))
    if kind == "month_name":
        return date(int(groups["year"]), month_from_name(groups["month"]), int(groups["day"]))

    # Day-first unless that reading is impossible (e.g. "03/15/24")
    first = int(groups["first"])
    second = int(groups["second"])
    year = expand_two_digit_year(int(groups["year"]))
    try:
        return date(year, second, first)
    except ValueError:
        return date(year, first, second)


def extract_date(
    lines: Sequence[str],
    today: date | None = None,
    warning_sink: list[ReceiptWarning] | None = None,
) -> tuple[str, bool]:
    """
    Extract the purchase date as an ISO-8601 string.

    The first match anywhere in the document wins. A match that is not a
    real calendar date is returned verbatim.

    Returns:
        Tuple of (date string, is_placeholder). is_placeholder is True when no
        line matched and the current date was used.
    """
    for line in lines:
        for pattern, kind in DATE_PATTERNS:
            match = pattern.search(line)
            if not match:
                continue
            try:
                return _date_from_match(match, kind).isoformat(), False
            except ValueError:
                if warning_sink is not None:
                    warning_sink.append(
                        ReceiptWarning(field="date", message=f'"{match.group(0)}" is not a calendar date; kept as-is')
                    )
                return match.group(0), False

    fallback = default_receipt_date(today)
    if warning_sink is not None:
        warning_sink.append(ReceiptWarning(field="date", message="no date found; using today's date"))
    return fallback.isoformat(), True


def extract_total(lines: Sequence[str], warning_sink: list[ReceiptWarning] | None = None) -> Decimal:
    """
    Extract the total amount, scanning from the bottom of the receipt.

    A line with a strong total keyword (and no subtotal/tax/tender keyword)
    wins immediately. Otherwise the largest amount seen anywhere is used.
    """
    largest: Decimal | None = None
    for idx in range(len(lines) - 1, -1, -1):
        line = lines[idx]
        amount = parse_amount(line)
        is_strong = STRONG_TOTAL_PATTERN.search(line) is not None and AVOID_TOTAL_PATTERN.search(line) is None

        if is_strong and amount is None and idx + 1 < len(lines):
            # Label on one line, amount on the next
            below = lines[idx + 1]
            if STANDALONE_PRICE.match(below) and AVOID_TOTAL_PATTERN.search(below) is None:
                amount = parse_amount(below)

        if amount is None:
            continue
        if is_strong:
            return amount
        if largest is None or amount > largest:
            largest = amount

    if largest is not None:
        if warning_sink is not None:
            warning_sink.append(
                ReceiptWarning(field="total", message=f"no total keyword; using largest amount {largest:.2f}")
            )
        return largest

    if warning_sink is not None:
        warning_sink.append(ReceiptWarning(field="total", message="no amounts found"))
    return Decimal("0.00")


def _title_case(text: str) -> str:
    # str.title() would turn "JOE'S" into "Joe'S"
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())


def _is_store_candidate(line: str) -> bool:
    if is_noisy_line(line):
        return False
    if STORE_SKIP_PATTERN.search(line) or BOILERPLATE_PATTERNS.search(line):
        return False
    if STREET_ADDRESS.match(line) or PRICE_TOKEN.search(line):
        return False
    return True


def extract_store(
    lines: Sequence[str],
    known_stores: KnownStoreDictionary | None = None,
    warning_sink: list[ReceiptWarning] | None = None,
) -> str:
    """
    Extract the merchant name.

    Strategy order:
    1. Known-store dictionary match in the first lines (returns the dictionary's display name)
    2. First clean header line, title-cased
    3. "Unknown Store"
    """
    if known_stores is not None:
        for line in lines[:STORE_DICTIONARY_SCAN_LINES]:
            name = known_stores.match(line)
            if name:
                return name

    for line in lines[:STORE_HEURISTIC_SCAN_LINES]:
        if _is_store_candidate(line):
            return _title_case(line)

    if warning_sink is not None:
        warning_sink.append(ReceiptWarning(field="store_name", message="store name not recognized"))
    return UNKNOWN_STORE
