"""Split OCR text into candidate lines, repairing merged item columns."""

import re

from sitespend.runtime import get_logger

from .common import PRICE_TOKEN

logger = get_logger(__name__)

# Fewer lines than this suggests OCR flattened several items onto one line.
MIN_LINES_BEFORE_REPAIR = 5

# Split after a price when the next token starts a new capitalized description,
# e.g. "Milk 3.99 Bread 2.50" -> "Milk 3.99" | "Bread 2.50"
MERGED_ITEM_BOUNDARY = re.compile(r"(?<=\d\.\d{2})\s+(?=[A-Z])")


def _split_lines(full_text: str) -> list[str]:
    return [line.strip() for line in full_text.splitlines() if line.strip()]


def _split_merged_line(line: str) -> list[str]:
    """Split a line carrying several prices into one segment per item."""
    if len(PRICE_TOKEN.findall(line)) < 2:
        return [line]
    return MERGED_ITEM_BOUNDARY.split(line)


def normalize_lines(full_text: str, min_lines: int = MIN_LINES_BEFORE_REPAIR) -> list[str]:
    """
    Split recognized text into trimmed, non-blank lines.

    Short transcriptions are checked for merged columns: any line with two or
    more price tokens is re-split at price/description boundaries, and the
    repaired split is kept only if it yields more lines than the naive one.
    """
    lines = _split_lines(full_text)
    if len(lines) >= min_lines:
        return lines

    repaired: list[str] = []
    for line in full_text.splitlines():
        repaired.extend(segment.strip() for segment in _split_merged_line(line) if segment.strip())

    if len(repaired) > len(lines):
        logger.debug("Repaired merged receipt lines: %d -> %d", len(lines), len(repaired))
        return repaired
    return lines
