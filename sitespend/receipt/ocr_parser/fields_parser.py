"""Date token and summary amount (subtotal/tax/total) extraction."""

import re
from dataclasses import dataclass
from decimal import Decimal

from sitespend.domain.receipt import ExtractionTrace
from sitespend.runtime import get_logger

from .common import STANDALONE_NUMBER, parse_positive_amount, round_money
from .line_normalizer import normalize_lines

logger = get_logger(__name__)

# Tax above this share of the subtotal is treated as a misread line.
# Heuristic threshold, not a statutory rate.
MAX_TAX_RATIO = Decimal("0.20")

SUBTOTAL_LABEL = re.compile(r"sub\s*-?\s*total", re.IGNORECASE)
TAX_LABEL = re.compile(r"tax", re.IGNORECASE)
# "T = FL TAX 7.00000 on $29.98" states a rate and a base, not the tax amount
TAX_RATE_LINE = re.compile(r"tax\s+[\d.]+\s+on", re.IGNORECASE)
# Category headers and total labels that mention tax without being the tax line
TAX_LABEL_EXCLUSIONS = re.compile(r"tax(?:able|ed)|(?:after|before|incl\.?|including)\s+tax", re.IGNORECASE)
TAX_SAME_LINE = re.compile(r"tax\s*[:\s]*\$?([\d,.]+)\s*$", re.IGNORECASE)
GRAND_TOTAL_LABEL = re.compile(r"total\s*sale|grand\s*total", re.IGNORECASE)
TOTAL_LABEL = re.compile(r"^total(?:[:\s]|$)", re.IGNORECASE)
TOTAL_SAME_LINE = re.compile(r"total\s*[:\s]*\$?([\d,.]+)", re.IGNORECASE)
# Counters and savings lines that start with TOTAL but are not the amount due
TOTAL_LABEL_EXCLUSIONS = re.compile(r"total\s+(?:discounts?|savings?|saved|number|items?)", re.IGNORECASE)

# Price patterns tried in order when reading an amount next to a label
LINE_AMOUNT_PATTERNS = (
    re.compile(r"\$?\s*(\d[\d,.]*\.\d{2})\s*$"),  # Price at end of line
    re.compile(r"\$?\s*(\d[\d,.]*\.\d{2})"),  # Price anywhere
    re.compile(r"\$?(\d[\d,.]*)"),  # Any number, e.g. handwritten "38.9"
)

DATE_PATTERNS = (
    # MM/DD/YYYY or MM-DD-YYYY
    re.compile(r"(\d{1,2}[/\-]\d{1,2}[/\-]\d{4})"),
    # MM/DD/YY
    re.compile(r"(\d{1,2}[/\-]\d{1,2}[/\-]\d{2})"),
    # 12 Mar 2024
    re.compile(r"(\d{1,2}\s+(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\s+\d{4})", re.IGNORECASE),
    # March 12, 2024
    re.compile(r"((?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\s+\d{1,2},?\s+\d{4})", re.IGNORECASE),
)


@dataclass(frozen=True)
class ReceiptAmounts:
    """Summary amounts found on a receipt."""

    total: Decimal | None = None
    subtotal: Decimal | None = None
    tax: Decimal | None = None


def find_date(full_text: str) -> str | None:
    """Return the first date-like token in the text, unparsed."""
    for pattern in DATE_PATTERNS:
        match = pattern.search(full_text)
        if match:
            return match.group(1)
    return None


def _amount_on_line(line: str) -> Decimal | None:
    """Read the amount printed on a label line."""
    for pattern in LINE_AMOUNT_PATTERNS:
        match = pattern.search(line)
        if match:
            amount = parse_positive_amount(match.group(1))
            if amount is not None:
                return amount
    return None


def _next_line_amount(lines: list[str], idx: int) -> Decimal | None:
    """Read a standalone amount from the line after a label."""
    if idx + 1 >= len(lines):
        return None
    match = STANDALONE_NUMBER.match(lines[idx + 1])
    if not match:
        return None
    return parse_positive_amount(match.group(1))


def _is_tax_amount_line(line: str) -> bool:
    return (
        TAX_LABEL.search(line) is not None
        and TAX_RATE_LINE.search(line) is None
        and TAX_LABEL_EXCLUSIONS.search(line) is None
    )


def _is_total_line(line: str) -> bool:
    return (
        TOTAL_LABEL.match(line) is not None
        and TOTAL_LABEL_EXCLUSIONS.search(line) is None
        and not _is_tax_amount_line(line)
    )


def _accepts_total(amount: Decimal | None, subtotal: Decimal | None) -> bool:
    # A "total" below the subtotal is usually the subtotal printed again.
    return amount is not None and (subtotal is None or amount >= subtotal)


def reconcile_amounts(
    total: Decimal | None,
    subtotal: Decimal | None,
    tax: Decimal | None,
    max_tax_ratio: Decimal = MAX_TAX_RATIO,
) -> ReceiptAmounts:
    """
    Fill in and sanity-check summary amounts with receipt arithmetic.

    Applied in order:
    1. total missing -> total = subtotal + tax
    2. tax missing and total > subtotal -> tax = total - subtotal
    3. tax above max_tax_ratio of subtotal and total > subtotal -> tax = total - subtotal
    """
    if total is None and subtotal is not None and tax is not None:
        total = round_money(subtotal + tax)

    if total is not None and subtotal is not None and tax is None and total > subtotal:
        tax = round_money(total - subtotal)

    if tax is not None and subtotal is not None and tax > subtotal * max_tax_ratio:
        if total is not None and total > subtotal:
            logger.debug("Tax %s exceeds %s of subtotal %s; using total - subtotal", tax, max_tax_ratio, subtotal)
            tax = round_money(total - subtotal)

    return ReceiptAmounts(total=total, subtotal=subtotal, tax=tax)


def resolve_amounts(
    lines: list[str],
    full_text: str = "",
    trace_sink: list[ExtractionTrace] | None = None,
) -> ReceiptAmounts:
    """
    Extract subtotal, tax and total from receipt lines.

    Labels are matched case-insensitively in a single forward pass. Amounts
    are read from the label line first, then from a standalone amount on the
    following line.

    Args:
        lines: Normalized receipt lines; derived from full_text when empty
        full_text: Raw recognized text
        trace_sink: Optional list that receives the raw and reconciled amounts
    """
    if not lines and full_text:
        lines = normalize_lines(full_text)

    total: Decimal | None = None
    subtotal: Decimal | None = None
    tax: Decimal | None = None

    for i, line in enumerate(lines):
        if SUBTOTAL_LABEL.search(line):
            if subtotal is None:
                subtotal = _amount_on_line(line) or _next_line_amount(lines, i)
            continue

        if tax is None and _is_tax_amount_line(line):
            match = TAX_SAME_LINE.search(line)
            # A lone digit after TAX is usually a tax code, not an amount
            if match and len(match.group(1)) > 1:
                tax = parse_positive_amount(match.group(1))
            else:
                tax = _next_line_amount(lines, i)

        # Rate line followed by the amount line:
        # "T = FL TAX 7.00000 on $29.98" / "$2.10"
        if tax is None and TAX_RATE_LINE.search(line):
            tax = _next_line_amount(lines, i)

        grand_total = GRAND_TOTAL_LABEL.search(line)
        if grand_total:
            amount = _amount_on_line(line[grand_total.end() :]) or _next_line_amount(lines, i)
            if _accepts_total(amount, subtotal):
                total = amount
            continue

        if total is None and _is_total_line(line):
            match = TOTAL_SAME_LINE.search(line)
            amount = parse_positive_amount(match.group(1)) if match else None
            if amount is None:
                amount = _next_line_amount(lines, i)
            if _accepts_total(amount, subtotal):
                total = amount

    if trace_sink is not None:
        trace_sink.append(
            ExtractionTrace("amounts", f"scanned total={total} subtotal={subtotal} tax={tax}")
        )

    amounts = reconcile_amounts(total, subtotal, tax)
    logger.debug("Amount extraction: %s", amounts)
    if trace_sink is not None and amounts != ReceiptAmounts(total, subtotal, tax):
        trace_sink.append(
            ExtractionTrace(
                "amounts",
                f"reconciled total={amounts.total} subtotal={amounts.subtotal} tax={amounts.tax}",
            )
        )
    return amounts
