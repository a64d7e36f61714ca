"""Core domain models for the sitespend project.

This module provides the core data models used throughout the project:
- RecognizedDocument, TextAnnotation: OCR output consumed by the parser
- ExtractedReceipt, LineItem, ExpenseCategory: structured receipt data
- ExtractionTrace: parser decisions collected by an optional trace sink

Usage:
    from sitespend.domain import ExtractedReceipt, LineItem
"""

from sitespend.domain.receipt import (
    ExpenseCategory,
    ExtractedReceipt,
    ExtractionTrace,
    LineItem,
    RecognizedDocument,
    TextAnnotation,
)

__all__ = [
    "ExpenseCategory",
    "ExtractedReceipt",
    "ExtractionTrace",
    "LineItem",
    "RecognizedDocument",
    "TextAnnotation",
]
