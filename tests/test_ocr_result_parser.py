from decimal import Decimal

import pytest

from sitespend.domain.receipt import ExpenseCategory, ExtractionTrace, RecognizedDocument
from sitespend.receipt import ocr_result_parser
from sitespend.receipt.ocr_parser.common import is_skip_text
from sitespend.receipt.ocr_result_parser import confidence_score, parse_receipt

HOME_DEPOT_LINES = [
    "Home Depot",
    "Oak boards  1440.00",
    "Wood screws  180.00",
    "Subtotal 1620.00",
    "Tax 130.00",
    "Total 1750.00",
]

TIP_SLIP_TEXT = "PURCHASE USD$32.42\nTIP:\n6.50\nTOTAL\n38.9"

SAMPLE_TEXTS = [
    "\n".join(HOME_DEPOT_LINES),
    TIP_SLIP_TEXT,
    "Milk 3.99 Bread 2.50",
    "PUBLIX\nCLEANING SPRAY 29.98\nSubtotal $29.98\nT = FL TAX 7.00000 on $29.98\n$2.10\nTOTAL $32.08",
    "H-E-B\n1 WATERLOO TROPICAL FRUIT TF\n2 Ea. @ 1/ 6.68\n2 HEB ORGANIC BANANAS F\n13.36\n0.89\nSUBTOTAL 14.25",
    "Joe's Diner\nBURGER 12.00\nFREE REFILL 0.00\nTip: 2.00\nVisa 14.00\nChange Due 0.00",
    "",
    "????",
]


def _parse(text: str, **kwargs) -> tuple:
    receipt = parse_receipt(RecognizedDocument(full_text=text), **kwargs)
    return receipt, [(item.description, item.amount) for item in receipt.items]


def test_standard_single_column_receipt() -> None:
    receipt, items = _parse("\n".join(HOME_DEPOT_LINES))

    assert receipt.vendor_name == "Home Depot"
    assert receipt.category == ExpenseCategory.OTHER
    assert receipt.subtotal == Decimal("1620.00")
    assert receipt.tax == Decimal("130.00")
    assert receipt.total_amount == Decimal("1750.00")
    assert items == [("Oak boards", Decimal("1440.00")), ("Wood screws", Decimal("180.00"))]
    assert sum(amount for _, amount in items) == Decimal("1620.00")


def test_restaurant_card_slip_without_items() -> None:
    receipt, items = _parse(TIP_SLIP_TEXT)

    assert items == [("Restaurant", Decimal("32.42")), ("Tip", Decimal("6.50"))]
    assert receipt.total_amount is not None
    assert Decimal("38.90") <= receipt.total_amount <= Decimal("38.92")
    assert receipt.category == ExpenseCategory.MEALS
    assert receipt.vendor_name is None


def test_card_slip_total_comes_from_slip_when_not_printed() -> None:
    receipt, _ = _parse("PURCHASE USD 45.00\nTIP: 9.00")

    assert receipt.total_amount == Decimal("54.00")


def test_merged_columns_are_split_into_items() -> None:
    _, items = _parse("Milk 3.99 Bread 2.50")

    assert items == [("Milk", Decimal("3.99")), ("Bread", Decimal("2.50"))]


def test_tax_rate_line_is_not_the_tax_amount() -> None:
    receipt, items = _parse(SAMPLE_TEXTS[3])

    assert receipt.tax == Decimal("2.10")
    assert receipt.total_amount == Decimal("32.08")
    assert items == [("CLEANING SPRAY", Decimal("29.98"))]


def test_vendor_fallback_to_first_plausible_line() -> None:
    text = "123 Main Street\n(555) 123-4567\nJoe's Hardware\nHammer 12.99\nTotal 12.99"

    receipt, _ = _parse(text)

    assert receipt.vendor_name == "Joe's Hardware"


def test_date_token_is_kept_as_printed() -> None:
    receipt, _ = _parse("ACE HARDWARE\n03/14/2024 10:22\nTape 3.00\nTOTAL 3.00")

    assert receipt.date == "03/14/2024"


def test_runtime_rules_are_applied() -> None:
    receipt, _ = _parse(
        "ACME LUMBER #12\nCrew housing deposit 300.00",
        known_vendors=[(r"acme\s*lumber", "Acme Lumber")],
        category_keywords={ExpenseCategory.LODGING: ("crew housing",)},
    )

    assert receipt.vendor_name == "Acme Lumber"
    assert receipt.category == ExpenseCategory.LODGING


def test_empty_text_yields_empty_receipt() -> None:
    receipt = parse_receipt(RecognizedDocument(full_text=""))

    assert receipt.vendor_name is None
    assert receipt.date is None
    assert receipt.total_amount is None
    assert receipt.items == []
    assert receipt.category == ExpenseCategory.OTHER
    assert receipt.confidence_score == Decimal("0")


@pytest.mark.parametrize("text", SAMPLE_TEXTS)
def test_parse_receipt_is_deterministic(text: str) -> None:
    document = RecognizedDocument(full_text=text, alternate_text="TIP: 1.00")

    assert parse_receipt(document) == parse_receipt(document)


@pytest.mark.parametrize("text", SAMPLE_TEXTS)
def test_emitted_items_are_positive_and_not_metadata(text: str) -> None:
    receipt, _ = _parse(text)

    for item in receipt.items:
        assert item.amount > 0
        if item.description != "Tip":
            assert not is_skip_text(item.description)


def test_derived_total_without_total_line() -> None:
    receipt, _ = _parse("Lumber Barn\n2x4 stud 8ft 45.00\nSubtotal 45.00\nTax 3.71")

    assert receipt.total_amount == Decimal("48.71")


def test_trace_records_stage_decisions() -> None:
    trace: list[ExtractionTrace] = []

    parse_receipt(RecognizedDocument(full_text=TIP_SLIP_TEXT), trace_sink=trace)

    stages = [entry.stage for entry in trace]
    assert "amounts" in stages
    assert "items" in stages
    assert ExtractionTrace("card_slip", "purchase=32.42 tip=6.50") in trace


def test_failing_stage_leaves_field_unset(monkeypatch) -> None:
    def broken_vendor(lines, known_vendors=None):
        raise ValueError("vendor table defect")

    monkeypatch.setattr(ocr_result_parser, "find_vendor_name", broken_vendor)
    trace: list[ExtractionTrace] = []

    receipt = parse_receipt(RecognizedDocument(full_text="\n".join(HOME_DEPOT_LINES)), trace_sink=trace)

    assert receipt.vendor_name is None
    assert receipt.total_amount == Decimal("1750.00")
    assert len(receipt.items) == 2
    assert trace[0].stage == "vendor"
    assert trace[0].message.startswith("failed:")


@pytest.mark.parametrize(
    ("confidence", "expected"),
    [
        (0.0, Decimal("0")),
        (0.874, Decimal("87")),
        (0.999, Decimal("100")),
        (1.2, Decimal("100")),
        (-0.5, Decimal("0")),
        (float("nan"), Decimal("0")),
        (float("inf"), Decimal("0")),
    ],
)
def test_confidence_score(confidence: float, expected: Decimal) -> None:
    assert confidence_score(confidence) == expected


def test_confidence_score_on_receipt() -> None:
    receipt = parse_receipt(RecognizedDocument(full_text="Tape 3.00", confidence=0.91))

    assert receipt.confidence_score == Decimal("91")


def test_nan_confidence_does_not_break_parsing() -> None:
    receipt = parse_receipt(RecognizedDocument(full_text="Tape 3.00", confidence=float("nan")))

    assert receipt.confidence_score == Decimal("0")
    assert [item.description for item in receipt.items] == ["Tape"]
