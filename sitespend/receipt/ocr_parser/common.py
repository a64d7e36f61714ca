"""Shared constants and helpers for OCR receipt parsing."""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENTS = Decimal("0.01")

# Price-like token used to spot merged columns, e.g. "$3.99" or "12.50"
PRICE_TOKEN = re.compile(r"\$?\d+\.\d{2}")

# A line that is nothing but an amount, e.g. "6.48", "$1,149.97"
STANDALONE_PRICE = re.compile(r"^\$?([\d,]+\.\d{2})$")

# A line that is nothing but a loosely formatted number, e.g. "$2.10", "38.9"
STANDALONE_NUMBER = re.compile(r"^\s*\$?([\d,.]+)\s*$")

# European thousands dots with a dot decimal: "1.149.97"
EUROPEAN_GROUPED = re.compile(r"^\d{1,3}(\.\d{3})+\.\d{2}$")

# Register tax-code flags printed after a description, e.g. "MILK T", "BREAD TF"
TAX_CODE_SUFFIX = re.compile(r"\s+[TF]{1,2}$")

# Skip words mark metadata lines (summary, payment, terminal) rather than items.
# Prefix words only count at the start of the text and must end there as a
# word, so "CHIPS" and "RECYCLED" are not read as "chip" and "rec".
SKIP_PREFIX_WORDS: tuple[str, ...] = (
    r"total",
    r"subtotal",
    r"tax",
    r"tip",
    r"change",
    r"balance",
    r"cash",
    r"credit",
    r"debit",
    r"visa",
    r"mastercard",
    r"amex",
    r"american\s*express",
    r"payment",
    r"items\s*purchased",
    r"you\s*saved",
    r"sale",
    r"savings",
    r"eps",
    r"on\s*sale",
    r"authorized",
    r"purchase",
    r"merch",
    r"auth",
    r"entry",
    r"chip",
    r"mode",
    r"tvr",
    r"iad",
    r"tsi",
    r"arc",
    r"server",
    r"rec",
    r"term",
    r"reference",
    r"customer",
    r"csr",
    r"date",
    r"number",
    r"s/n",
    r"sales\s*id",
    r"when you",
    r"return",
    r"rec#",
    r"help make",
    r"aid:",
    r"auth code",
)

# Keywords that disqualify a description wherever they appear.
SKIP_ANYWHERE_WORDS: tuple[str, ...] = (
    r"sub\s*total",
    r"total",
    r"tax",
    r"tip",
    r"gratuity",
    r"balance\s+due",
    r"change\s+due",
    r"visa",
    r"mastercard",
    r"amex",
    r"american\s+express",
    r"auth(?:orization)?\s+code",
    r"approval\s+code",
    r"tvr",
    r"tsi",
)

SKIP_WORDS_REGEX = re.compile(
    r"^(?:" + "|".join(SKIP_PREFIX_WORDS) + r")(?![a-z])" + r"|\b(?:" + "|".join(SKIP_ANYWHERE_WORDS) + r")\b",
    re.IGNORECASE,
)


def is_skip_text(text: str) -> bool:
    """Return True if text is receipt metadata rather than a purchasable item."""
    return SKIP_WORDS_REGEX.search(text.strip()) is not None


def round_money(value: Decimal) -> Decimal:
    """Round to cents, halves away from zero."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_amount(text: str) -> Decimal | None:
    """
    Parse a receipt amount that may carry currency symbols or grouping.

    Handles:
    - "$1,149.97" (comma thousands)
    - "1.149.97" (dot thousands, last dot is the decimal point)
    - "12.34." (trailing OCR junk, leading number wins)

    Returns:
        The parsed amount, or None if no number could be read.
    """
    if not text:
        return None
    cleaned = text.replace("$", "").strip()

    if EUROPEAN_GROUPED.match(cleaned):
        whole, _, cents = cleaned.rpartition(".")
        cleaned = whole.replace(".", "") + "." + cents

    cleaned = cleaned.replace(",", "")

    match = re.match(r"\d+(?:\.\d+)?|\.\d+", cleaned)
    if not match:
        return None
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return None


def parse_positive_amount(text: str) -> Decimal | None:
    """Parse an amount, treating zero as absent."""
    amount = parse_amount(text)
    if amount is None or amount <= 0:
        return None
    return amount


def parse_grouped_price(text: str) -> Decimal | None:
    """
    Parse a standalone price that may use either grouping convention.

    "399.99", "1,149.97" and "1.149.97" read as dot-decimal; "1.149,97"
    reads as a comma decimal.
    """
    text = text.strip().lstrip("$")
    if re.match(r"^\d{1,3}(?:\.\d{3})*,\d{2}$", text):
        return parse_amount(text.replace(".", "").replace(",", "."))
    if EUROPEAN_GROUPED.match(text) or re.match(r"^\d+(?:,\d{3})*(?:\.\d{2})?$", text):
        return parse_amount(text)
    return None


def strip_tax_code(description: str) -> str:
    """Remove a trailing register tax flag such as " T" or " TF"."""
    return TAX_CODE_SUFFIX.sub("", description.strip()).strip()


def clean_description(desc: str) -> str:
    """Clean up item description from OCR artifacts."""
    # Remove unit price fragments like "@ $2.99" left next to the description
    desc = re.sub(r"@\s*\$?\d+\.\d{2}\s*(?:ea)?", "", desc, flags=re.IGNORECASE)
    # Remove leading/trailing special chars and extra spaces
    desc = re.sub(r"^[^A-Za-z0-9]+", "", desc)
    desc = re.sub(r"[^A-Za-z0-9)'.]+$", "", desc)
    desc = re.sub(r"\s+", " ", desc)
    return desc.strip()
