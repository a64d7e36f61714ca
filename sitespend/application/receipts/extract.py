"""Receipt extraction workflow orchestration."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from sitespend.receipt.expense_draft import build_expense_draft
from sitespend.receipt.ocr_helpers import InvalidOCRResult, document_from_ocr_json
from sitespend.receipt.ocr_result_parser import parse_receipt
from sitespend.runtime import get_logger, load_category_keywords, load_vendor_rules

if TYPE_CHECKING:
    from sitespend.domain.receipt import ExtractedReceipt, ExtractionTrace
    from sitespend.receipt.expense_draft import ExpenseDraft

logger = get_logger(__name__)

ExtractStatus = Literal[
    "file_not_found",
    "invalid_ocr_result",
    "invalid_rules",
    "extracted",
]


@dataclass(frozen=True)
class ReceiptExtractRequest:
    """Inputs for running the receipt extraction workflow."""

    ocr_json_path: Path
    vendor_rules_path: str | None = None
    category_rules_path: str | None = None
    collect_trace: bool = False


@dataclass(frozen=True)
class ReceiptExtractResult:
    """Outcome from the receipt extraction workflow."""

    status: ExtractStatus
    receipt: ExtractedReceipt | None = None
    draft: ExpenseDraft | None = None
    error: str | None = None
    trace: tuple[ExtractionTrace, ...] = field(default_factory=tuple)


def run_receipt_extract(request: ReceiptExtractRequest) -> ReceiptExtractResult:
    """Run extraction flow: cached OCR JSON -> document -> receipt -> expense draft."""
    if not request.ocr_json_path.exists():
        return ReceiptExtractResult(
            status="file_not_found",
            error=f"OCR result file not found: {request.ocr_json_path}",
        )

    try:
        payload = json.loads(request.ocr_json_path.read_text())
        document = document_from_ocr_json(payload)
    except (json.JSONDecodeError, InvalidOCRResult) as exc:
        logger.error("Unusable OCR result %s: %s", request.ocr_json_path, exc)
        return ReceiptExtractResult(status="invalid_ocr_result", error=str(exc))

    try:
        known_vendors = load_vendor_rules(request.vendor_rules_path)
        category_keywords = load_category_keywords(request.category_rules_path)
    except ValueError as exc:
        logger.error("Invalid rule configuration: %s", exc)
        return ReceiptExtractResult(status="invalid_rules", error=str(exc))

    trace: list[ExtractionTrace] | None = [] if request.collect_trace else None
    receipt = parse_receipt(
        document,
        known_vendors=known_vendors,
        category_keywords=category_keywords,
        trace_sink=trace,
    )
    logger.info(
        "Extracted %s: %d items, total=%s",
        request.ocr_json_path.name,
        len(receipt.items),
        receipt.total_amount,
    )

    return ReceiptExtractResult(
        status="extracted",
        receipt=receipt,
        draft=build_expense_draft(receipt),
        trace=tuple(trace or ()),
    )
