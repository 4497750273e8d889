"""Text-line based receipt item extraction.

Each line is classified once by walking ``LINE_RULES`` top-down; the first
rule that produces a value decides what the line is:

    store line       a known merchant name, never part of an item
    footer           total/tax/tender keywords; items end here
    deal             "2/5.00" re-prices the item it follows
    quantity         "3 @ 1.99" context for the next priced line
    boilerplate      dates, phone numbers, addresses, aisle headers
    item             "NAME 4.99 H"
    standalone price "4.99" whose name sits in the lines above
    free text        anything else; kept in a small lookback buffer

The item walk is a single left-to-right fold that carries the items found so
far and a bounded buffer of unattributed lines.
"""

from __future__ import annotations

import re
from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from tillscan.domain.receipt import ReceiptItem, ReceiptWarning

from ..known_stores import KnownStoreDictionary, normalize_store_text
from .common import (
    DEAL_LINE,
    FOOTER_PATTERN,
    MAX_ITEM_PRICE,
    PRICE_TOKEN,
    QUANTITY_LINE,
    STANDALONE_PRICE,
    TRAILING_PRICE,
    clean_item_name,
    is_boilerplate_line,
    is_noisy_line,
    is_valid_item_name,
    to_decimal,
)

LINE_BUFFER_SIZE = 3
CENTS = Decimal("0.01")


@dataclass(frozen=True)
class StoreLine:
    store_name: str


@dataclass(frozen=True)
class FooterMarker:
    text: str


@dataclass(frozen=True)
class Boilerplate:
    text: str


@dataclass(frozen=True)
class DealModifier:
    quantity: int
    deal_total: Decimal


@dataclass(frozen=True)
class QuantityLine:
    quantity: int
    unit_price: Decimal
    line_total: Decimal | None = None


@dataclass(frozen=True)
class ItemLine:
    name: str  # Already cleaned of SKU prefixes and symbols
    price: Decimal


@dataclass(frozen=True)
class StandalonePrice:
    price: Decimal


@dataclass(frozen=True)
class FreeText:
    text: str


LineClass = (
    StoreLine | FooterMarker | Boilerplate | DealModifier | QuantityLine | ItemLine | StandalonePrice | FreeText
)
BufferEntry = FreeText | QuantityLine


@dataclass(frozen=True)
class LineRule:
    """One row of the classification table: test the line, then build its variant."""

    name: str
    matcher: Callable[[str], Any]
    build: Callable[[str, Any], LineClass | None]


def _build_deal(_line: str, match: re.Match[str]) -> DealModifier | None:
    quantity = int(match.group("qty"))
    if quantity < 1:
        return None
    return DealModifier(quantity=quantity, deal_total=to_decimal(match.group("total")))


def _build_quantity(_line: str, match: re.Match[str]) -> QuantityLine | None:
    quantity = int(match.group("qty"))
    if quantity < 1:
        return None
    total = match.group("total")
    return QuantityLine(
        quantity=quantity,
        unit_price=to_decimal(match.group("unit")),
        line_total=to_decimal(total) if total else None,
    )


def _build_item(_line: str, match: re.Match[str]) -> ItemLine | None:
    raw_name = match.group("name")
    # "$ 4.99" has no name at all; let the standalone-price rule take it
    if not re.search(r"[A-Za-z0-9]", raw_name):
        return None
    return ItemLine(name=clean_item_name(raw_name), price=to_decimal(match.group("price")))


def _build_standalone(_line: str, match: re.Match[str]) -> StandalonePrice:
    whole, cents = match.group(1), match.group(2)
    return StandalonePrice(price=to_decimal(f"{whole}.{cents}"))


LINE_RULES: tuple[LineRule, ...] = (
    LineRule("footer", FOOTER_PATTERN.search, lambda line, _m: FooterMarker(line)),
    LineRule("deal", DEAL_LINE.match, _build_deal),
    LineRule("quantity", QUANTITY_LINE.match, _build_quantity),
    LineRule("boilerplate", is_boilerplate_line, lambda line, _m: Boilerplate(line)),
    LineRule("item", TRAILING_PRICE.match, _build_item),
    LineRule("standalone_price", STANDALONE_PRICE.match, _build_standalone),
)


def _footer_outside_store_name(line: str, store_name: str) -> bool:
    """True when a footer keyword on the line is not part of the merchant's own name ("Total Wine")."""
    store_keywords = {normalize_store_text(m) for m in FOOTER_PATTERN.findall(store_name)}
    return any(normalize_store_text(m) not in store_keywords for m in FOOTER_PATTERN.findall(line))


def classify_line(line: str, known_stores: KnownStoreDictionary | None = None) -> LineClass:
    """Classify one normalized line. Unpriced known store names are checked before the rule table."""
    if known_stores is not None and not PRICE_TOKEN.search(line):
        store_name = known_stores.match(line)
        if store_name and not _footer_outside_store_name(line, store_name):
            return StoreLine(store_name)

    for rule in LINE_RULES:
        matched = rule.matcher(line)
        if not matched:
            continue
        outcome = rule.build(line, matched)
        if outcome is not None:
            return outcome
    return FreeText(line)


def _is_plausible_price(price: Decimal) -> bool:
    return Decimal("0") < price < MAX_ITEM_PRICE


def _buffered_name(buffer: Sequence[BufferEntry]) -> str:
    """Join buffered text fragments (oldest first) into one candidate name."""
    parts = []
    for entry in buffer:
        if not isinstance(entry, FreeText) or is_noisy_line(entry.text):
            continue
        cleaned = clean_item_name(entry.text)
        if cleaned:
            parts.append(cleaned)
    return " ".join(parts)


def _latest_quantity(buffer: Sequence[BufferEntry]) -> QuantityLine | None:
    for entry in reversed(buffer):
        if isinstance(entry, QuantityLine):
            return entry
    return None


def _apply_quantity(price: Decimal, quantity_line: QuantityLine | None) -> tuple[Decimal, int]:
    """Buffered "N @ unit" wins over the printed price when it is plausible."""
    if quantity_line is None:
        return price, 1
    if _is_plausible_price(quantity_line.unit_price):
        return quantity_line.unit_price, quantity_line.quantity
    return price, quantity_line.quantity


def _deal_unit_price(deal: DealModifier) -> Decimal:
    return (deal.deal_total / deal.quantity).quantize(CENTS, rounding=ROUND_HALF_UP)


def _warn(warning_sink: list[ReceiptWarning] | None, message: str) -> None:
    if warning_sink is not None:
        warning_sink.append(ReceiptWarning(field="items", message=message))


def extract_items(
    lines: Sequence[str],
    known_stores: KnownStoreDictionary | None = None,
    warning_sink: list[ReceiptWarning] | None = None,
    *,
    stop_at_footer: bool = True,
    buffer_size: int = LINE_BUFFER_SIZE,
) -> list[ReceiptItem]:
    """
    Extract line items from receipt lines.

    This is heuristic-based and will likely need manual correction.

    Args:
        lines: Normalized receipt lines in reading order
        known_stores: Merchant dictionary; matching lines are never item text
        warning_sink: Collects notes about lines that looked priced but were dropped
        stop_at_footer: End the scan at the first footer keyword. When False the
            footer line is skipped and scanning continues.
        buffer_size: Number of unattributed lines kept for lookback

    Returns:
        Items in receipt order; price is the unit price
    """
    items: list[ReceiptItem] = []
    buffer: deque[BufferEntry] = deque(maxlen=buffer_size)

    for line in lines:
        outcome = classify_line(line, known_stores)

        if isinstance(outcome, FooterMarker):
            if stop_at_footer:
                break
            continue

        if isinstance(outcome, (StoreLine, Boilerplate)):
            continue

        if isinstance(outcome, DealModifier):
            unit_price = _deal_unit_price(outcome)
            if not _is_plausible_price(unit_price):
                _warn(warning_sink, f'ignored deal "{line}" with implausible unit price {unit_price}')
                buffer.clear()
                continue
            name = _buffered_name(buffer)
            if is_valid_item_name(name):
                # Name printed above the deal with no price line of its own
                items.append(ReceiptItem(description=name, price=unit_price))
                buffer.clear()
            elif not items:
                _warn(warning_sink, f'deal "{line}" has no item to apply to')
                continue
            items[-1].quantity = outcome.quantity
            items[-1].price = unit_price
            continue

        if isinstance(outcome, QuantityLine):
            if outcome.line_total is None:
                buffer.append(outcome)
                continue
            # "3 @ 0.50 1.50" carries its own total, so it closes an item
            name = _buffered_name(buffer)
            if is_valid_item_name(name) and _is_plausible_price(outcome.unit_price):
                items.append(ReceiptItem(description=name, price=outcome.unit_price, quantity=outcome.quantity))
                buffer.clear()
            elif items and _is_plausible_price(outcome.unit_price):
                items[-1].price = outcome.unit_price
                items[-1].quantity = outcome.quantity
            continue

        if isinstance(outcome, ItemLine):
            if not _is_plausible_price(outcome.price) or not is_valid_item_name(outcome.name):
                if outcome.price >= MAX_ITEM_PRICE:
                    _warn(warning_sink, f'ignored implausible price {outcome.price} (context: "{line[:80]}")')
                continue

            name = outcome.name
            latest = buffer[-1] if buffer else None
            quantity_line = latest if isinstance(latest, QuantityLine) else None
            price, quantity = _apply_quantity(outcome.price, quantity_line)
            if isinstance(latest, FreeText) and not is_noisy_line(latest.text):
                prefix = clean_item_name(latest.text)
                if prefix:
                    name = f"{prefix} {name}"

            items.append(ReceiptItem(description=name, price=price, quantity=quantity))
            buffer.clear()
            continue

        if isinstance(outcome, StandalonePrice):
            name = _buffered_name(buffer)
            price, quantity = _apply_quantity(outcome.price, _latest_quantity(buffer))
            buffer.clear()
            if is_valid_item_name(name) and _is_plausible_price(price):
                items.append(ReceiptItem(description=name, price=price, quantity=quantity))
            elif outcome.price > 0:
                _warn(warning_sink, f"maybe missed item near price {outcome.price:.2f}")
            continue

        buffer.append(outcome)

    # Keep duplicates: two cartons of the same milk are two rows on the receipt
    return items
