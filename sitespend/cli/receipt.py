"""Receipt command handlers used by the unified CLI."""

import argparse
import json
import logging
import sys
from pathlib import Path

from sitespend.runtime import get_logger, get_paths, set_log_level

logger = get_logger(__name__)


def _resolve_ocr_json(raw: str) -> Path:
    """Accept a path, or a file name inside receipts/ocr_json/."""
    path = Path(raw)
    if path.exists():
        return path
    cached = get_paths().receipts_ocr_json / raw
    if cached.exists():
        logger.debug("Using cached OCR result %s", cached)
        return cached
    return path


def cmd_extract(args: argparse.Namespace) -> None:
    """Extract structured data from a cached OCR result and print it."""
    from sitespend.application.receipts.extract import ReceiptExtractRequest, run_receipt_extract
    from sitespend.receipt.formatter import draft_to_dict, format_extracted_receipt, receipt_to_dict

    if args.debug:
        set_log_level(logging.DEBUG)

    result = run_receipt_extract(
        ReceiptExtractRequest(
            ocr_json_path=_resolve_ocr_json(args.ocr_json),
            vendor_rules_path=args.vendor_rules,
            category_rules_path=args.category_rules,
            collect_trace=args.debug,
        )
    )

    if result.status == "file_not_found":
        print(f"Error: {result.error}")
        sys.exit(1)

    if result.status in ("invalid_ocr_result", "invalid_rules"):
        print(f"Error: {result.error}")
        sys.exit(2)

    receipt = result.receipt
    if receipt is None or result.draft is None:
        print("Extraction failed: missing receipt output.")
        sys.exit(1)

    if args.format == "text":
        print(format_extracted_receipt(receipt, result.trace))
        return

    output = receipt_to_dict(receipt)
    if args.draft:
        output = {"receipt": output, "draft": draft_to_dict(result.draft)}
    if args.debug:
        output["trace"] = [{"stage": t.stage, "message": t.message} for t in result.trace]
    print(json.dumps(output, indent=2))
