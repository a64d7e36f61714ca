"""Composable OCR receipt parser components."""

from .card_slip_parser import CardSlipAmounts, extract_card_slip_items, is_card_slip
from .common import is_skip_text, parse_amount
from .fields_parser import ReceiptAmounts, find_date, reconcile_amounts, resolve_amounts
from .items_text_parser import ITEM_STRATEGIES, extract_items
from .line_normalizer import normalize_lines

__all__ = [
    "ITEM_STRATEGIES",
    "CardSlipAmounts",
    "ReceiptAmounts",
    "extract_card_slip_items",
    "extract_items",
    "find_date",
    "is_card_slip",
    "is_skip_text",
    "normalize_lines",
    "parse_amount",
    "reconcile_amounts",
    "resolve_amounts",
]
