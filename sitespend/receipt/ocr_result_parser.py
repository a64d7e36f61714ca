"""Parse recognized receipt text into structured ExtractedReceipt data."""

import math
from collections.abc import Callable, Mapping, Sequence
from decimal import Decimal
from typing import TypeVar

from sitespend.domain.receipt import (
    ExpenseCategory,
    ExtractedReceipt,
    ExtractionTrace,
    LineItem,
    RecognizedDocument,
)
from sitespend.runtime import get_logger

from .classifier import VendorRule, detect_category, find_vendor_name
from .ocr_parser import (
    ReceiptAmounts,
    extract_card_slip_items,
    extract_items,
    find_date,
    is_card_slip,
    normalize_lines,
    resolve_amounts,
)

logger = get_logger(__name__)

T = TypeVar("T")


def _run_stage(
    stage: str,
    func: Callable[[], T],
    default: T,
    trace_sink: list[ExtractionTrace] | None,
) -> T:
    """Run one extraction stage; a defect in it leaves that field unset."""
    try:
        return func()
    except (ValueError, ArithmeticError, IndexError) as exc:
        logger.warning("Receipt %s extraction failed", stage, exc_info=True)
        if trace_sink is not None:
            trace_sink.append(ExtractionTrace(stage, f"failed: {exc!r}"))
        return default


def confidence_score(confidence: float) -> Decimal:
    """Scale OCR confidence (0..1) to a whole-number score in 0..100; NaN or infinity scores 0."""
    if not math.isfinite(confidence):
        return Decimal("0")
    return Decimal(min(100, max(0, round(confidence * 100))))


def parse_receipt(
    document: RecognizedDocument,
    known_vendors: Sequence[VendorRule] | None = None,
    category_keywords: Mapping[ExpenseCategory, Sequence[str]] | None = None,
    trace_sink: list[ExtractionTrace] | None = None,
) -> ExtractedReceipt:
    """
    Parse OCR output into an ExtractedReceipt.

    This is a best-effort parser - results should be manually reviewed. It
    never raises for poor OCR quality; fields that cannot be read are left
    unset and items may be empty.

    Args:
        document: OCR output for one receipt image
        known_vendors: Optional vendor rules loaded by runtime components
        category_keywords: Optional extra category keywords loaded by runtime components
        trace_sink: Optional list that receives parser decisions for debugging

    Returns:
        ExtractedReceipt with parsed data
    """
    full_text = document.full_text
    lines = normalize_lines(full_text)

    vendor_name = _run_stage("vendor", lambda: find_vendor_name(lines, known_vendors), None, trace_sink)
    receipt_date = _run_stage("date", lambda: find_date(full_text), None, trace_sink)
    amounts = _run_stage(
        "amounts", lambda: resolve_amounts(lines, full_text, trace_sink=trace_sink), ReceiptAmounts(), trace_sink
    )
    items: list[LineItem] = _run_stage(
        "items", lambda: extract_items(lines, full_text, trace_sink=trace_sink), [], trace_sink
    )
    total = amounts.total

    # Tip slips carry no items; synthesize them from the purchase and tip.
    if not items and is_card_slip(full_text):
        items, slip = _run_stage(
            "card_slip",
            lambda: extract_card_slip_items(full_text, lines, document.alternate_text, vendor_name),
            ([], None),
            trace_sink,
        )
        if slip is not None:
            if trace_sink is not None:
                trace_sink.append(
                    ExtractionTrace("card_slip", f"purchase={slip.purchase} tip={slip.tip}")
                )
            if total is None:
                total = slip.total

    category = _run_stage(
        "category",
        lambda: detect_category(full_text, vendor_name, category_keywords),
        ExpenseCategory.OTHER,
        trace_sink,
    )

    return ExtractedReceipt(
        raw_text=full_text,
        category=category,
        vendor_name=vendor_name,
        date=receipt_date,
        total_amount=total,
        subtotal=amounts.subtotal,
        tax=amounts.tax,
        items=items,
        confidence_score=confidence_score(document.confidence),
    )
