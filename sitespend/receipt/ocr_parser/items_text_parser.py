"""Text-line based receipt item extraction.

Receipts come in a handful of layouts, each handled by one strategy. The
strategies are tried in ITEM_STRATEGIES order and the first one that returns
items wins; results from different strategies are never merged.
"""

import re
from collections.abc import Callable, Sequence
from dataclasses import replace
from decimal import Decimal

from sitespend.domain.receipt import ExtractionTrace, LineItem
from sitespend.runtime import get_logger

from .common import (
    STANDALONE_PRICE,
    clean_description,
    is_skip_text,
    parse_amount,
    parse_grouped_price,
    round_money,
    strip_tax_code,
)
from .line_normalizer import normalize_lines

logger = get_logger(__name__)

# Standalone prices at or above this are not item prices in a column layout
MAX_COLUMN_PRICE = Decimal("1000")
# Same-line prices at or above this are more likely phone or account numbers
MAX_INLINE_PRICE = Decimal("10000")

# Inline quantity layout (Target-style):
#   "081060853 BBL CUSH WRP" / "2 @ $14.99 ea" / "$29.98"
INLINE_QTY_LINE = re.compile(r"^(\d+)\s*@\s*\$?([\d.]+)\s*ea", re.IGNORECASE)
SKU_DESCRIPTION = re.compile(r"^(\d{6,})\s+(.+)$")
QTY_AT_PREFIX = re.compile(r"^\d+\s*@")
BARE_NUMBER = re.compile(r"^\$?[\d.]+$")

# Column layout (H-E-B-style), descriptions first and prices in a later block:
#   "1 WATERLOO TROPICAL FRUIT TF" / "2 Ea. @ 1/ 6.68" / ... / "6.48"
COLUMN_QTY_LINE = re.compile(r"^(\d+)\s*Ea\.?\s*@\s*(?:\d+/)?\s*(\d+\.?\d*)", re.IGNORECASE)
NUMBERED_DESCRIPTION = re.compile(r"^(\d{1,2})\s+([A-Z][A-Z0-9\s\-./]+)")

# Same-line layouts
DESCRIPTION_QTY_PRICE_TOTAL = re.compile(
    r"^(.+?)\s+(\d+)\s*[@x]\s*\$?([\d,]+\.\d{2})\s+\$?([\d,]+\.\d{2})$", re.IGNORECASE
)
QTY_DESCRIPTION_PRICE = re.compile(r"^(\d+)\s+(.+?)\s+\$?([\d,]+\.\d{2})\s*$")
DESCRIPTION_PRICE = re.compile(r"^(.+?)\s+\$?([\d,]+\.\d{2})\s*$")

# SKU line with the price on the next line (Micro-Center-style):
#   "1 903435 DELL-ADV 5420 17-116567 32/1/P1" / "399.99"
SKU_ITEM_LINE = re.compile(r"^(\d+)\s+(\d{5,6})\s+(.+)$")
MODEL_NUMBER_SUFFIX = re.compile(r"\s+\d+/\d+/[A-Z]\d*$")

ItemStrategy = Callable[[list[str]], list[LineItem] | None]


def _unit_price(amount: Decimal, quantity: int) -> Decimal:
    return round_money(amount / quantity) if quantity > 1 else amount


def _find_description_above(lines: list[str], idx: int, max_lookback: int = 3) -> str:
    """Find the item description printed above a quantity line."""
    for j in range(idx - 1, max(idx - max_lookback - 1, -1), -1):
        prev_line = lines[j].strip()
        sku_match = SKU_DESCRIPTION.match(prev_line)
        if sku_match:
            return sku_match.group(2).strip()
        if (
            len(prev_line) > 2
            and not is_skip_text(prev_line)
            and not QTY_AT_PREFIX.match(prev_line)
            and not BARE_NUMBER.match(prev_line)
        ):
            return prev_line
    return ""


def _find_price_below(lines: list[str], idx: int, max_lookahead: int = 2) -> Decimal | None:
    """Find a standalone line total printed below a quantity line."""
    for j in range(idx + 1, min(idx + max_lookahead + 1, len(lines))):
        match = STANDALONE_PRICE.match(lines[j].strip())
        if match:
            return parse_amount(match.group(1))
    return None


def _extract_inline_quantity_items(lines: list[str]) -> list[LineItem] | None:
    """Items laid out as description, "QTY @ $PRICE ea", then the line total."""
    items: list[LineItem] = []
    for i, line in enumerate(lines):
        match = INLINE_QTY_LINE.match(line.strip())
        if not match:
            continue
        quantity = int(match.group(1))
        unit_price = parse_amount(match.group(2))
        if unit_price is None:
            continue

        description = _find_description_above(lines, i)
        amount = _find_price_below(lines, i)
        if amount is None:
            amount = round_money(quantity * unit_price)

        if description and amount > 0:
            items.append(LineItem(description, amount, quantity, unit_price))
    return items or None


def _extract_columnar_items(lines: list[str]) -> list[LineItem] | None:
    """
    Items whose descriptions and prices OCR read as separate blocks.

    First pass collects numbered descriptions, quantity annotations (attached
    to the description just before them) and standalone prices. The two lists
    are then paired by position. Fewer than two pairs is not trusted.
    """
    descriptions: list[str] = []
    quantities: dict[int, int] = {}
    prices: list[Decimal] = []

    for line in lines:
        trimmed = line.strip()
        if not trimmed or is_skip_text(trimmed):
            continue

        qty_match = COLUMN_QTY_LINE.match(trimmed)
        if qty_match:
            if descriptions:
                quantities[len(descriptions) - 1] = int(qty_match.group(1))
            continue

        numbered_match = NUMBERED_DESCRIPTION.match(trimmed)
        if numbered_match:
            description = strip_tax_code(numbered_match.group(2))
            if len(description) > 2 and not is_skip_text(description):
                descriptions.append(description)
            continue

        price_match = STANDALONE_PRICE.match(trimmed)
        if price_match:
            price = parse_amount(price_match.group(1))
            if price is not None and 0 < price < MAX_COLUMN_PRICE:
                prices.append(price)

    if not descriptions or not prices:
        return None

    items: list[LineItem] = []
    for idx, (description, amount) in enumerate(zip(descriptions, prices)):
        quantity = quantities.get(idx, 1)
        items.append(LineItem(description, amount, quantity, _unit_price(amount, quantity)))
    return items if len(items) >= 2 else None


def _parse_same_line_item(line: str, items: list[LineItem]) -> LineItem | None:
    """Parse one line carrying both the description and its price."""
    # "BIG DISH MOP 2 @ $14.99 29.98"
    match = DESCRIPTION_QTY_PRICE_TOTAL.match(line)
    if match:
        description = match.group(1).strip()
        quantity = int(match.group(2))
        unit_price = parse_amount(match.group(3))
        amount = parse_amount(match.group(4))
        if len(description) > 1 and not is_skip_text(description) and amount:
            return LineItem(description, amount, quantity, unit_price)

    # "2 BIG DISH MOP 29.98"
    match = QTY_DESCRIPTION_PRICE.match(line)
    if match:
        quantity = int(match.group(1))
        description = strip_tax_code(match.group(2))
        amount = parse_amount(match.group(3))
        if 0 < quantity < 100 and len(description) > 1 and not is_skip_text(description) and amount:
            return LineItem(description, amount, quantity, _unit_price(amount, quantity))

    # "DELL-ADV 5420 399.99"
    match = DESCRIPTION_PRICE.match(line)
    if match:
        description = strip_tax_code(re.sub(r"^\d+\s+", "", match.group(1).strip()))
        amount = parse_amount(match.group(2))
        if (
            len(description) > 1
            and amount is not None
            and 0 < amount < MAX_INLINE_PRICE
            and not is_skip_text(description)
        ):
            is_duplicate = any(item.description == description and item.amount == amount for item in items)
            if not is_duplicate:
                return LineItem(description, amount, 1, amount)
    return None


def _extract_same_line_items(lines: list[str]) -> list[LineItem] | None:
    """Items with description and price on one line, optionally with a quantity."""
    items: list[LineItem] = []
    for line in lines:
        line = line.strip()
        if len(line) < 3 or is_skip_text(line):
            continue
        item = _parse_same_line_item(line, items)
        if item is not None:
            items.append(item)
    return items or None


def _extract_sku_next_line_items(lines: list[str]) -> list[LineItem] | None:
    """Items on a "QTY SKU DESCRIPTION" line with the price on the next line."""
    items: list[LineItem] = []
    for i, line in enumerate(lines[:-1]):
        match = SKU_ITEM_LINE.match(line.strip())
        if not match:
            continue
        quantity = int(match.group(1))
        description = MODEL_NUMBER_SUFFIX.sub("", match.group(3).strip()).strip()
        amount = parse_grouped_price(lines[i + 1])
        if amount is None or amount <= 0:
            continue
        if len(description) > 2 and not is_skip_text(description):
            # Repeated SKU+price lines are separate purchases; keep all of them.
            items.append(LineItem(description, amount, quantity, amount))
    return items or None


# Ordered from most to least specific layout.
ITEM_STRATEGIES: tuple[tuple[str, ItemStrategy], ...] = (
    ("inline_quantity", _extract_inline_quantity_items),
    ("columnar", _extract_columnar_items),
    ("same_line", _extract_same_line_items),
    ("sku_next_line", _extract_sku_next_line_items),
)


def _finalize_items(items: list[LineItem]) -> list[LineItem]:
    """Clean descriptions and drop anything that is not a positive, named item."""
    valid: list[LineItem] = []
    for item in items:
        item = replace(item, description=clean_description(item.description))
        if item.amount <= 0 or not re.search(r"[A-Za-z]", item.description):
            continue
        if is_skip_text(item.description):
            continue
        valid.append(item)
    return valid


def extract_items(
    lines: list[str],
    raw_text: str = "",
    trace_sink: list[ExtractionTrace] | None = None,
    strategies: Sequence[tuple[str, ItemStrategy]] = ITEM_STRATEGIES,
) -> list[LineItem]:
    """
    Extract line items from receipt lines.

    This is heuristic-based and will likely need manual correction. A strategy
    that raises is treated as not matching; the next strategy is tried.

    Args:
        lines: Normalized receipt lines; derived from raw_text when empty
        raw_text: Raw recognized text
        trace_sink: Optional list that receives the strategy decisions
        strategies: (name, strategy) pairs in priority order

    Returns:
        Items from the first strategy that produced any, else an empty list
    """
    if not lines and raw_text:
        lines = normalize_lines(raw_text)

    for name, strategy in strategies:
        try:
            found = strategy(lines)
        except (ValueError, ArithmeticError, IndexError) as exc:
            logger.warning("Item strategy %s failed; trying the next one", name, exc_info=True)
            if trace_sink is not None:
                trace_sink.append(ExtractionTrace("items", f"{name} failed: {exc!r}"))
            continue

        items = _finalize_items(found or [])
        if items:
            logger.debug("Extracted %d items with %s strategy", len(items), name)
            if trace_sink is not None:
                trace_sink.append(ExtractionTrace("items", f"{name} matched {len(items)} items"))
            return items

    if trace_sink is not None:
        trace_sink.append(ExtractionTrace("items", "no strategy matched"))
    return []
