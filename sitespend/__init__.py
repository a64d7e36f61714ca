"""Receipt OCR extraction for construction expense tracking."""
