"""Receipt OCR text parsing, classification and expense-draft mapping."""
