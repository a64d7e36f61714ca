"""Format extracted receipts for review output."""

from decimal import Decimal
from typing import Any

from sitespend.domain.receipt import ExtractedReceipt, ExtractionTrace

from .expense_draft import ExpenseDraft


def _money(value: Decimal | None) -> str | None:
    return None if value is None else f"{value:.2f}"


def _format_rows_aligned(
    rows: list[tuple[str, str, str | None]],
    indent: str = "  ",
) -> list[str]:
    """
    Format item rows with aligned amounts and comments.

    Args:
        rows: List of (description, amount, comment_or_none) tuples
        indent: Indentation prefix for each line

    Returns:
        List of formatted lines with aligned amounts and comments
    """
    if not rows:
        return []

    max_desc_len = max(len(desc) for desc, _, _ in rows)
    max_amount_len = max(len(amount) for _, amount, _ in rows)

    lines = []
    for desc, amount, comment in rows:
        base = f"{indent}{desc.ljust(max_desc_len)}  {amount.rjust(max_amount_len)}"
        if comment:
            lines.append(f"{base}  ; {comment}")
        else:
            lines.append(base)
    return lines


def receipt_to_dict(receipt: ExtractedReceipt) -> dict[str, Any]:
    """Convert a receipt to JSON-safe primitives; amounts become 2-decimal strings."""
    return {
        "vendor_name": receipt.vendor_name,
        "date": receipt.date,
        "category": receipt.category.value,
        "total_amount": _money(receipt.total_amount),
        "subtotal": _money(receipt.subtotal),
        "tax": _money(receipt.tax),
        "items": [
            {
                "description": item.description,
                "amount": _money(item.amount),
                "quantity": item.quantity,
                "unit_price": _money(item.unit_price),
            }
            for item in receipt.items
        ],
        "confidence_score": str(receipt.confidence_score),
        "raw_text": receipt.raw_text,
    }


def draft_to_dict(draft: ExpenseDraft) -> dict[str, Any]:
    """Convert an expense draft to JSON-safe primitives."""
    return {
        "title": draft.title,
        "category": draft.category.value,
        "date": draft.expense_date.isoformat() if draft.expense_date else None,
        "items": [
            {
                "description": item.description,
                "amount": _money(item.amount),
                "quantity": item.quantity,
                "unit_price": _money(item.unit_price),
            }
            for item in draft.items
        ],
        "total": _money(draft.total),
    }


def format_extracted_receipt(
    receipt: ExtractedReceipt,
    trace: tuple[ExtractionTrace, ...] | list[ExtractionTrace] = (),
) -> str:
    """
    Format a receipt as a plain-text review summary.

    Header fields come first, then one aligned row per item, then the
    summary amounts. Missing fields print as "?" so they stand out.
    """
    lines = [
        f"Vendor:     {receipt.vendor_name or '?'}",
        f"Date:       {receipt.date or '?'}",
        f"Category:   {receipt.category.value}",
        f"Confidence: {receipt.confidence_score}",
        "",
        f"Items ({len(receipt.items)}):",
    ]

    rows: list[tuple[str, str, str | None]] = []
    for item in receipt.items:
        comment = None
        if item.quantity and item.quantity > 1:
            comment = f"qty {item.quantity} @ {_money(item.unit_price)}"
        rows.append((item.description, f"{item.amount:.2f}", comment))
    lines.extend(_format_rows_aligned(rows))

    lines.append("")
    summary = [
        ("Subtotal", _money(receipt.subtotal) or "?", None),
        ("Tax", _money(receipt.tax) or "?", None),
        ("Total", _money(receipt.total_amount) or "?", None),
    ]
    lines.extend(_format_rows_aligned(summary, indent=""))

    if trace:
        lines.append("")
        lines.append("Trace:")
        lines.extend(f"  [{entry.stage}] {entry.message}" for entry in trace)

    return "\n".join(lines)
