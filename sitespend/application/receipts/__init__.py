"""Receipt workflows."""

from sitespend.application.receipts.extract import (
    ReceiptExtractRequest,
    ReceiptExtractResult,
    run_receipt_extract,
)

__all__ = [
    "ReceiptExtractRequest",
    "ReceiptExtractResult",
    "run_receipt_extract",
]
