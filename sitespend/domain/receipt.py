"""Data models for receipt extraction."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class ExpenseCategory(str, Enum):
    """Expense category assigned to a scanned receipt."""

    MEALS = "MEALS"
    LODGING = "LODGING"
    TRAVEL = "TRAVEL"
    TRANSPORTATION = "TRANSPORTATION"
    OTHER = "OTHER"


@dataclass(frozen=True)
class TextAnnotation:
    """A single recognized text fragment with its bounding box."""

    text: str
    # [[x_min, y_min], [x_max, y_max]] in image pixels. Empty when unknown.
    bbox: tuple[tuple[float, float], ...] = ()


@dataclass(frozen=True)
class RecognizedDocument:
    """OCR output for one receipt image."""

    full_text: str
    # Second transcription pass; often better at handwritten tips and totals.
    alternate_text: str = ""
    annotations: tuple[TextAnnotation, ...] = ()
    # Page-level confidence reported by the OCR service, 0..1.
    confidence: float = 0.0


@dataclass
class LineItem:
    """A single purchased entry on a receipt."""

    description: str
    amount: Decimal
    quantity: int | None = None
    unit_price: Decimal | None = None

    def __post_init__(self) -> None:
        if self.quantity is None:
            self.quantity = 1
        if self.unit_price is None and self.quantity == 1:
            self.unit_price = self.amount


@dataclass
class ExtractedReceipt:
    """Structured receipt data reconstructed from OCR text."""

    raw_text: str
    category: ExpenseCategory = ExpenseCategory.OTHER
    vendor_name: str | None = None
    # Date token exactly as found on the receipt; see expense_draft.parse_receipt_date.
    date: str | None = None
    total_amount: Decimal | None = None
    subtotal: Decimal | None = None
    tax: Decimal | None = None
    items: list[LineItem] = field(default_factory=list)
    confidence_score: Decimal = Decimal("0")


@dataclass(frozen=True)
class ExtractionTrace:
    """A parser decision recorded for debugging a single extraction."""

    stage: str
    message: str
