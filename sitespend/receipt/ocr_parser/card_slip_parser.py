"""Synthesize items for non-itemized card slips (restaurant tip slips)."""

import re
from dataclasses import dataclass
from decimal import Decimal

from sitespend.domain.receipt import LineItem
from sitespend.runtime import get_logger

from .common import parse_amount, round_money

logger = get_logger(__name__)

# Tips at or above this are misreads (card numbers, check numbers).
MAX_TIP = Decimal("500")

CARD_SLIP_SIGNATURE = re.compile(r"purchase\s+usd|authorized|tip:|gratuity", re.IGNORECASE)

# "PURCHASE USD$32.42", "PURCHASE USD 32.42", "Authorized: 32.42", "Purchase: $32.42"
PURCHASE_AMOUNT_PATTERNS = (
    re.compile(r"purchase\s+usd\s*\$?([\d,]+\.\d{2})", re.IGNORECASE),
    re.compile(r"authorized[:\s]+\$?([\d,]+\.\d{2})", re.IGNORECASE),
    re.compile(r"purchase(?:\s+amount)?:\s*\$?([\d,]+\.\d{2})", re.IGNORECASE),
)
AUTHORIZED_LABEL = re.compile(r"authorized", re.IGNORECASE)
STANDALONE_AMOUNT = re.compile(r"^\$?([\d,]+\.\d{2})$")

TIP_AMOUNT = re.compile(r"\btip[:\s]*\$?([\d,]+\.\d{2})", re.IGNORECASE)
# Handwritten tips are often read without cents or on the line after "TIP:"
TIP_LOOSE_AMOUNT = re.compile(r"\btip[:\s]*[\r\n]*\$?(\d+\.?\d*)", re.IGNORECASE)
# Handwritten totals may lose a trailing digit: "38.9"
SLIP_TOTAL = re.compile(r"(?<!sub)total[:\s]*[\r\n]*\$?([\d,]+\.\d{1,2})", re.IGNORECASE)

DEFAULT_PURCHASE_DESCRIPTION = "Restaurant"
TIP_DESCRIPTION = "Tip"


@dataclass(frozen=True)
class CardSlipAmounts:
    """Amounts read from a card authorization slip."""

    purchase: Decimal
    tip: Decimal = Decimal("0")

    @property
    def total(self) -> Decimal:
        return round_money(self.purchase + self.tip)


def is_card_slip(full_text: str) -> bool:
    """Return True if the text looks like a card authorization / tip slip."""
    return CARD_SLIP_SIGNATURE.search(full_text) is not None


def _find_purchase_amount(full_text: str, lines: list[str]) -> Decimal | None:
    for pattern in PURCHASE_AMOUNT_PATTERNS:
        match = pattern.search(full_text)
        if match:
            amount = parse_amount(match.group(1))
            if amount:
                return amount

    # "Authorized:" with the amount a line or two below
    for i, line in enumerate(lines):
        if not AUTHORIZED_LABEL.search(line):
            continue
        for next_line in lines[i + 1 : i + 3]:
            match = STANDALONE_AMOUNT.match(next_line.strip())
            if match:
                return parse_amount(match.group(1))
        break
    return None


def _find_tip(combined_text: str) -> Decimal:
    for pattern in (TIP_AMOUNT, TIP_LOOSE_AMOUNT):
        match = pattern.search(combined_text)
        if not match:
            continue
        tip = parse_amount(match.group(1))
        if tip is not None and 0 < tip < MAX_TIP:
            return tip
    return Decimal("0")


def read_card_slip(full_text: str, lines: list[str], alternate_text: str = "") -> CardSlipAmounts | None:
    """
    Read purchase and tip amounts from a card slip.

    The tip is looked up in both transcriptions since handwriting is often
    only legible in the alternate pass. A TOTAL line cross-checks the tip:
    when the written total exceeds purchase + tip, or the tip is missing or
    implausible, the tip becomes total - purchase.

    Returns:
        CardSlipAmounts, or None if no purchase amount was found
    """
    purchase = _find_purchase_amount(full_text, lines)
    if purchase is None:
        return None

    combined_text = f"{full_text}\n{alternate_text}"
    tip = _find_tip(combined_text)

    total_match = SLIP_TOTAL.search(combined_text)
    if total_match:
        slip_total = parse_amount(total_match.group(1))
        if slip_total is not None and slip_total > purchase:
            if tip == 0 or tip >= purchase or slip_total > purchase + tip:
                tip = round_money(slip_total - purchase)

    if tip >= purchase:
        tip = Decimal("0")

    logger.debug("Card slip amounts: purchase=%s tip=%s", purchase, tip)
    return CardSlipAmounts(purchase=purchase, tip=tip)


def extract_card_slip_items(
    full_text: str,
    lines: list[str],
    alternate_text: str = "",
    vendor_name: str | None = None,
) -> tuple[list[LineItem], CardSlipAmounts | None]:
    """
    Build items for a slip that states only a purchase amount and a tip.

    Returns:
        (items, amounts); items is empty when no purchase amount was found
    """
    amounts = read_card_slip(full_text, lines, alternate_text)
    if amounts is None:
        return [], None

    items = [LineItem(vendor_name or DEFAULT_PURCHASE_DESCRIPTION, amounts.purchase, 1, amounts.purchase)]
    if amounts.tip > 0:
        items.append(LineItem(TIP_DESCRIPTION, amounts.tip, 1, amounts.tip))
    return items, amounts
