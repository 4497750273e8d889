"""Shared constants and helpers for OCR receipt parsing."""

import re
from decimal import Decimal, InvalidOperation

# Lines whose share of symbol characters exceeds this are OCR noise
NOISE_RATIO = 0.3

# Prices at or above this are SKU/phone fragments misread as amounts
MAX_ITEM_PRICE = Decimal("900")

# Decimal amount with optional "$" and thousands separators: "$1,234.56", "4.99"
PRICE_TOKEN = re.compile(r"\$?\s*(\d{1,3}(?:,\d{3})+|\d+)\.(\d{2})(?!\d)")

# A line that is nothing but an amount, optionally followed by a tax code ("5.00 H")
STANDALONE_PRICE = re.compile(r"^\$?\s*(\d{1,3}(?:,\d{3})+|\d+)\.(\d{2})\s*([A-Za-z]{1,2})?$")

# Free text followed by an amount and an optional 1-2 letter tax code
TRAILING_PRICE = re.compile(
    r"^(?P<name>.*?\S)\s+\$?\s*(?P<price>(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2})\s*(?:[A-Za-z]{1,2})?$"
)

# "3 @ 1.99", "2 x $0.99 ea", optionally followed by the line total
QUANTITY_LINE = re.compile(
    r"^(?P<qty>\d{1,3})\s*(?:@|[xX×])\s*\$?\s*(?P<unit>\d+\.\d{2})"
    r"(?:\s*(?:/\s*)?(?:ea|each)\b\.?)?"
    r"(?:\s+\$?\s*(?P<total>\d+\.\d{2})\s*[A-Za-z]?)?$",
    re.IGNORECASE,
)

# "2/5.00", "2 for $5", "(2 /for $3.00)"
DEAL_LINE = re.compile(
    r"^\(?\s*(?P<qty>\d{1,2})\s*(?:/\s*for|/|for)\s*(?P<total>\$\s*\d+(?:\.\d{2})?|\d+\.\d{2})\s*\)?$",
    re.IGNORECASE,
)

# Keywords that mark the end of the merchandise section
FOOTER_PATTERN = re.compile(
    r"\b(?:SUB\s*-?\s*TOTAL|TOTAL|TAX|HST|GST|PST|BALANCE|VISA|DEBIT|MASTER\s*CARD|"
    r"AUTH(?:ORIZATION|ORIZED)?|CHANGE|DUE|CASH|SAVINGS?|DISCOUNTS?|ITEMS?\s+SOLD|ACCOUNT)\b",
    re.IGNORECASE,
)

MONTH_NAMES = r"Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec"

# Tried in order on every line; the separator must repeat so "2/5.00" is not a date
DATE_PATTERNS = [
    # YYYY-MM-DD, YYYY/MM/DD, YYYY.MM.DD
    (re.compile(r"\b(?P<year>\d{4})(?P<sep>[-/.])(?P<month>\d{1,2})(?P=sep)(?P<day>\d{1,2})\b"), "ymd"),
    # D-M-YY or D/M/YYYY
    (re.compile(r"\b(?P<first>\d{1,2})(?P<sep>[-/.])(?P<second>\d{1,2})(?P=sep)(?P<year>\d{4}|\d{2})\b"), "dmy"),
    # Jan 1, 2024 / January 1st 2024
    (
        re.compile(
            rf"\b(?P<month>{MONTH_NAMES})[a-z]*\.?\s+(?P<day>\d{{1,2}})(?:st|nd|rd|th)?,?\s+(?P<year>\d{{4}})\b",
            re.IGNORECASE,
        ),
        "month_name",
    ),
    # 1 Jan 2024 / 01-Jan-2024
    (
        re.compile(
            rf"\b(?P<day>\d{{1,2}})[\s-]+(?P<month>{MONTH_NAMES})[a-z]*\.?[\s-]+(?P<year>\d{{4}})\b",
            re.IGNORECASE,
        ),
        "month_name",
    ),
]

TIME_PATTERN = re.compile(r"\b\d{1,2}:\d{2}(?::\d{2})?\s*(?:AM|PM)?\b", re.IGNORECASE)

PHONE_NUMBER = re.compile(r"\(\d{3}\)\s*\d{3}-\d{4}|\b\d{3}[-.\s]\d{3}[-.\s]\d{4}\b")

# Header/metadata lines that are never merchandise and never part of an item name
BOILERPLATE_PATTERNS = re.compile(
    r"\b(?:PHONE|TEL|FAX|WELCOME|THANK\s*YOU|RECEIPT|CASHIER|REGISTER|TILL|TRANS(?:ACTION)?|"
    r"STORE\s*#|STORE\s+NO|OPERATOR|SERVED\s+BY|CUSTOMER\s+COPY|MEMBER(?:SHIP)?\s*(?:#|NO|ID)|"
    r"GST\s*(?:#|NO|REG)|HST\s*(?:#|NO|REG)|TAX\s*(?:ID|#|NO|REG)|VAT\s*(?:#|NO|REG)|ABN)\b|"
    r"www\.|https?://|\.com\b|@\w+\.\w+|" + PHONE_NUMBER.pattern,
    re.IGNORECASE,
)

STREET_ADDRESS = re.compile(
    r"^\d{1,5}\s+.*\b(?:AVE|AVENUE|ST|STREET|RD|ROAD|BLVD|BOULEVARD|DR|DRIVE|HWY|HIGHWAY|LANE|LN|WAY|PKWY|PLAZA)\b\.?",
    re.IGNORECASE,
)

# Discount/adjustment rows like "COUPON 1.00-" or "9.00- H"
NEGATIVE_AMOUNT = re.compile(r"\d+\.\d{2}\s*-\s*[A-Za-z]?\s*$")

# Section headers to skip (not actual items)
SECTION_HEADERS = {"MEAT", "SEAFOOD", "PRODUCE", "DELI", "GROCERY", "BAKERY", "FROZEN", "DAIRY"}
SECTION_HEADER_WITH_AISLE = re.compile(r"^\d{1,2}\s*[-:]\s*[A-Z]{3,}$")
SECTION_AISLE_PREFIX = re.compile(r"^\d{1,2}\s*[-:]")

SKU_PREFIX = re.compile(r"^(?=(?:[\s-]*\d){3})[\d\s-]+")


def parse_amount(text: str) -> Decimal | None:
    """Return the last decimal amount on a line, or None."""
    matches = list(PRICE_TOKEN.finditer(text))
    if not matches:
        return None
    whole, cents = matches[-1].groups()
    try:
        return Decimal(f"{whole.replace(',', '')}.{cents}")
    except InvalidOperation:
        return None


def to_decimal(token: str) -> Decimal:
    """Convert a matched price token like "$1,234.50" into a Decimal."""
    return Decimal(token.replace("$", "").replace(",", "").strip())


def noise_ratio(text: str) -> float:
    """Fraction of characters that are neither alphanumeric nor whitespace."""
    if not text:
        return 1.0
    symbols = sum(1 for c in text if not c.isalnum() and not c.isspace())
    return symbols / len(text)


def is_noisy_line(text: str) -> bool:
    """Return True if the line is dominated by OCR artifacts or has no letters."""
    if noise_ratio(text) > NOISE_RATIO:
        return True
    return sum(1 for c in text if c.isalpha()) < 2


def contains_date(text: str) -> bool:
    return any(pattern.search(text) for pattern, _kind in DATE_PATTERNS)


def is_section_header_text(text: str) -> bool:
    """Return True if text looks like a section/aisle header, not an item."""
    if not text:
        return False
    normalized = re.sub(r"\s+", " ", text.strip().upper())
    if normalized in SECTION_HEADERS:
        return True
    # Headers like "21-GROCERY" or "22-DAIRY"
    if SECTION_HEADER_WITH_AISLE.match(normalized):
        return True
    # Aisle-prefixed variants with suffix words, e.g. "33-BAKERY INSTORE"
    if SECTION_AISLE_PREFIX.match(normalized):
        tokens = set(re.findall(r"[A-Z]+", normalized))
        if tokens & SECTION_HEADERS:
            return True
    return False


def is_boilerplate_line(text: str) -> bool:
    """
    Return True for header metadata: dates, times, contact details, addresses, aisle headers.

    A line ending in a price is merchandise unless it carries a date, a time,
    a phone number or a negative amount; header keywords alone do not drop it.
    """
    if TRAILING_PRICE.match(text):
        return bool(
            contains_date(text)
            or TIME_PATTERN.search(text)
            or PHONE_NUMBER.search(text)
            or NEGATIVE_AMOUNT.search(text)
        )
    if BOILERPLATE_PATTERNS.search(text):
        return True
    if contains_date(text) or TIME_PATTERN.search(text):
        return True
    if STREET_ADDRESS.match(text):
        return True
    if NEGATIVE_AMOUNT.search(text):
        return True
    return is_section_header_text(text)


def clean_item_name(text: str) -> str:
    """Strip SKU prefixes and OCR debris from an item description."""
    cleaned = text.strip()
    # Long leading SKU codes like "062843 020" or "4011-"
    cleaned = SKU_PREFIX.sub("", cleaned)
    # Leading symbols are usually OCR artifacts ("* BANANAS", "|MILK")
    cleaned = re.sub(r"^[^A-Za-z0-9]+", "", cleaned)
    cleaned = re.sub(r"[^A-Za-z0-9)%]+$", "", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned.strip()


def is_valid_item_name(name: str) -> bool:
    """Names need at least two characters and cannot be purely numeric."""
    if len(name) < 2:
        return False
    return re.fullmatch(r"[\d\s.,/-]+", name) is None
