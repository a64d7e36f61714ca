"""Vendor identification and expense category detection.

Both are driven by declarative tables so they can be extended from runtime
configuration (see sitespend.runtime.vendor_rules) and tested entry by entry.

To add a vendor or keyword:
1. Add a (pattern, name) pair to KNOWN_VENDORS, or a keyword to CATEGORY_KEYWORDS
2. Vendor patterns are regexes tested against the lowercased receipt text
3. Category keywords match whole words, allowing a trailing "s" or "'s"
"""

import re
from collections.abc import Mapping, Sequence

from sitespend.domain.receipt import ExpenseCategory
from sitespend.runtime import get_logger

logger = get_logger(__name__)

VendorRule = tuple[str, str]

# (regex, canonical name); first match wins, so order longer brands first
KNOWN_VENDORS: tuple[VendorRule, ...] = (
    (r"\btarget\b", "Target"),
    (r"walmart", "Walmart"),
    (r"costco", "Costco"),
    (r"\bh-?e-?b\b", "H-E-B"),
    (r"kroger", "Kroger"),
    (r"safeway", "Safeway"),
    (r"whole\s*foods", "Whole Foods"),
    (r"trader\s*joe", "Trader Joe's"),
    (r"starbucks", "Starbucks"),
    (r"mcdonald", "McDonald's"),
    (r"chipotle", "Chipotle"),
    (r"chick-?fil-?a", "Chick-fil-A"),
    (r"pappasito", "Pappasito's"),
    (r"pappadeaux", "Pappadeaux"),
    (r"micro\s*center", "Micro Center"),
    (r"best\s*buy", "Best Buy"),
    (r"home\s*depot", "Home Depot"),
    (r"\blowe'?s\b", "Lowe's"),
    (r"\bcvs\b", "CVS"),
    (r"walgreen", "Walgreens"),
    (r"amazon", "Amazon"),
    (r"uber\s*eats", "Uber Eats"),
    (r"doordash", "DoorDash"),
    (r"grubhub", "Grubhub"),
    (r"marriott", "Marriott"),
    (r"hilton", "Hilton"),
    (r"hyatt", "Hyatt"),
    (r"holiday\s*inn", "Holiday Inn"),
    (r"\bshell\b", "Shell"),
    (r"exxon", "Exxon"),
    (r"chevron", "Chevron"),
    (r"american\s*airlines", "American Airlines"),
    (r"united\s*airlines", "United Airlines"),
    (r"\bdelta\b", "Delta"),
    (r"southwest", "Southwest Airlines"),
)

# Checked in insertion order; the first category with a hit wins.
CATEGORY_KEYWORDS: dict[ExpenseCategory, tuple[str, ...]] = {
    ExpenseCategory.MEALS: (
        "restaurant", "cafe", "grill", "diner", "kitchen", "bistro", "bar", "pub",
        "pizza", "burger", "taco", "sushi", "steakhouse", "bbq", "bakery", "coffee",
        "starbucks", "mcdonald", "chipotle", "subway", "panera", "chick-fil-a", "wendy",
        "pappasito", "pappadeaux", "chili", "applebee", "olive garden", "red lobster",
        "server:", "tip:", "gratuity", "dine in", "table",
    ),
    ExpenseCategory.LODGING: (
        "hotel", "inn", "suites", "resort", "motel", "lodge", "marriott",
        "hilton", "hyatt", "sheraton", "westin", "holiday inn", "hampton", "courtyard",
        "room rate", "check-in", "check-out", "night stay", "accommodation",
    ),
    ExpenseCategory.TRAVEL: (
        "airline", "airways", "flight", "airport", "boarding", "american airlines",
        "united", "delta", "southwest", "jetblue", "spirit", "frontier", "alaska air",
        "baggage", "carry-on", "departure", "arrival", "passenger",
    ),
    ExpenseCategory.TRANSPORTATION: (
        "uber", "lyft", "taxi", "cab", "parking", "gas", "fuel", "shell",
        "exxon", "chevron", "bp", "texaco", "speedway", "wawa", "quiktrip", "racetrac",
        "toll", "metro", "transit", "bus", "train", "rental car", "hertz", "enterprise", "avis",
    ),
}

# How many leading lines may hold the vendor name when no known vendor matches
VENDOR_SCAN_LINES = 8

# Lines that cannot be a vendor name: totals, register chatter, payment slips
VENDOR_REJECT_KEYWORDS = re.compile(
    r"total|subtotal|tax|date|receipt|store|register|thank|welcome|"
    r"\b(?:purchase|authorized|approved|tip|gratuity)\b",
    re.IGNORECASE,
)
VENDOR_REJECT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\d+[\s\-]"),  # Street number: "1234 Main St"
    re.compile(r"^\d{1,2}[/\-]\d{1,2}"),  # Date
    re.compile(r"\(?\d{3}\)?[-.\s]*\d{3}[-.]\d{4}"),  # Phone number
    re.compile(r"\d{5}(-\d{4})?"),  # Zip code
    re.compile(r"street|road|ave|blvd|drive|lane|way|plaza|center", re.IGNORECASE),
    re.compile(r"^[A-Z]{2}\s*\d{5}"),  # State + zip
    re.compile(r"^\d+\.\d{2}$"),  # Bare price
    re.compile(r"^[\d\s$.,/:\-]+$"),  # Numbers and punctuation only, e.g. handwritten "38.9"
    re.compile(r"^(mon|tue|wed|thu|fri|sat|sun)", re.IGNORECASE),
)


def _looks_like_vendor_line(line: str) -> bool:
    if not 3 < len(line) < 50:
        return False
    if VENDOR_REJECT_KEYWORDS.search(line):
        return False
    return not any(pattern.search(line) for pattern in VENDOR_REJECT_PATTERNS)


def find_vendor_name(
    lines: list[str],
    known_vendors: Sequence[VendorRule] | None = None,
) -> str | None:
    """
    Identify the vendor on a receipt.

    Strategy order:
    1. Runtime-provided vendor rules, then KNOWN_VENDORS, against the whole text
    2. First of the leading lines that does not look like an address, phone,
       date, price or register/summary line

    Args:
        lines: Normalized receipt lines
        known_vendors: Extra (pattern, name) rules checked before the built-ins

    Returns:
        Vendor name, or None if nothing plausible was found
    """
    joined = " ".join(lines).lower()
    for pattern, name in (*(known_vendors or ()), *KNOWN_VENDORS):
        if re.search(pattern, joined, re.IGNORECASE):
            logger.debug("Vendor matched known pattern %r -> %s", pattern, name)
            return name

    for line in lines[:VENDOR_SCAN_LINES]:
        cleaned = line.strip()
        if _looks_like_vendor_line(cleaned):
            return cleaned
    return None


def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    # Whole word with optional plural/possessive, so "bar" misses "barcode"
    return re.compile(r"(?<!\w)" + re.escape(keyword.lower()) + r"(?:'?s)?(?!\w)")


def detect_category(
    full_text: str,
    vendor_name: str | None = None,
    extra_keywords: Mapping[ExpenseCategory, Sequence[str]] | None = None,
) -> ExpenseCategory:
    """
    Pick an expense category from the vendor name and receipt text.

    Categories are checked in order MEALS, LODGING, TRAVEL, TRANSPORTATION;
    the first with a keyword hit wins. No hit means OTHER.
    """
    combined = f"{(vendor_name or '').lower()} {full_text.lower()}"
    extra_keywords = extra_keywords or {}

    for category, keywords in CATEGORY_KEYWORDS.items():
        for keyword in (*extra_keywords.get(category, ()), *keywords):
            if _keyword_pattern(keyword).search(combined):
                logger.debug("Category %s from keyword %r", category.value, keyword)
                return category
    return ExpenseCategory.OTHER
