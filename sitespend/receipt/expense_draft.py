"""Map an ExtractedReceipt onto a draft expense for the expense form."""

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sitespend.domain.receipt import ExpenseCategory, ExtractedReceipt

SALES_TAX_DESCRIPTION = "Sales Tax"
DEFAULT_EXPENSE_DESCRIPTION = "Expense"

MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}


@dataclass(frozen=True)
class DraftLineItem:
    """One prefilled line on the expense form."""

    description: str
    amount: Decimal
    quantity: int = 1
    unit_price: Decimal | None = None


@dataclass(frozen=True)
class ExpenseDraft:
    """Prefilled expense form values suggested by a scanned receipt."""

    title: str
    category: ExpenseCategory
    expense_date: date | None = None
    items: tuple[DraftLineItem, ...] = field(default_factory=tuple)

    @property
    def total(self) -> Decimal:
        return sum((item.amount for item in self.items), Decimal("0"))


def _expand_year(year: str) -> int:
    # Two-digit years: 51-99 -> 1900s, 00-50 -> 2000s
    if len(year) == 2:
        return 1900 + int(year) if int(year) > 50 else 2000 + int(year)
    return int(year)


def parse_receipt_date(token: str | None) -> date | None:
    """
    Parse a receipt date token into a calendar date.

    Handles "MM/DD/YY(YY)", "MM-DD-YY(YY)" (North American order) and
    "Mon DD, YYYY". Returns None for anything else or an impossible date.
    """
    if not token:
        return None

    patterns = [
        r"(\d{1,2})/(\d{1,2})/(\d{2,4})",
        r"(\d{1,2})-(\d{1,2})-(\d{2,4})",
    ]
    for pattern in patterns:
        match = re.search(pattern, token)
        if match:
            try:
                return date(_expand_year(match.group(3)), int(match.group(1)), int(match.group(2)))
            except ValueError:
                return None

    match = re.search(r"([A-Za-z]{3})[A-Za-z]*\s+(\d{1,2}),?\s+(\d{4})", token)
    if match:
        month = MONTHS.get(match.group(1).lower())
        if month is None:
            return None
        try:
            return date(int(match.group(3)), month, int(match.group(2)))
        except ValueError:
            return None
    return None


def _tax_already_itemized(receipt: ExtractedReceipt) -> bool:
    return any(
        item.amount == receipt.tax and re.search(r"\btax\b", item.description, re.IGNORECASE)
        for item in receipt.items
    )


def build_expense_draft(receipt: ExtractedReceipt) -> ExpenseDraft:
    """
    Build expense form values from an extracted receipt.

    Items are copied with quantity defaulting to 1 and unit price to the
    amount. A "Sales Tax" line is appended for a non-zero tax that no item
    already carries. A receipt with no items but a total becomes one line.
    """
    items = [
        DraftLineItem(
            description=item.description,
            amount=item.amount,
            quantity=item.quantity or 1,
            unit_price=item.unit_price or item.amount,
        )
        for item in receipt.items
    ]

    if items:
        if receipt.tax and receipt.tax > 0 and not _tax_already_itemized(receipt):
            items.append(DraftLineItem(SALES_TAX_DESCRIPTION, receipt.tax, 1, receipt.tax))
    elif receipt.total_amount:
        description = receipt.vendor_name or DEFAULT_EXPENSE_DESCRIPTION
        items.append(DraftLineItem(description, receipt.total_amount, 1, receipt.total_amount))

    return ExpenseDraft(
        title=receipt.vendor_name or "",
        category=receipt.category,
        expense_date=parse_receipt_date(receipt.date),
        items=tuple(items),
    )
