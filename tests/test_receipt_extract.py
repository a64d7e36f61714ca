from __future__ import annotations

import json
from datetime import date
from decimal import Decimal

from sitespend.application.receipts import ReceiptExtractRequest, run_receipt_extract
from sitespend.domain.receipt import ExpenseCategory

HOME_DEPOT_OCR = {
    "full_text": "Home Depot\n03/14/2024\nOak boards  1440.00\nWood screws  180.00\n"
    "Subtotal 1620.00\nTax 130.00\nTotal 1750.00",
    "confidence": 0.91,
}


def _write_json(path, payload) -> None:
    path.write_text(json.dumps(payload))


def test_run_receipt_extract_builds_receipt_and_draft(tmp_path) -> None:
    ocr_path = tmp_path / "receipt.json"
    _write_json(ocr_path, HOME_DEPOT_OCR)

    result = run_receipt_extract(ReceiptExtractRequest(ocr_json_path=ocr_path))

    assert result.status == "extracted"
    assert result.error is None
    assert result.receipt is not None
    assert result.receipt.vendor_name == "Home Depot"
    assert result.receipt.total_amount == Decimal("1750.00")
    assert result.receipt.confidence_score == Decimal("91")
    assert result.draft is not None
    assert result.draft.expense_date == date(2024, 3, 14)
    assert [item.description for item in result.draft.items] == ["Oak boards", "Wood screws", "Sales Tax"]
    assert result.trace == ()


def test_run_receipt_extract_collects_trace(tmp_path) -> None:
    ocr_path = tmp_path / "receipt.json"
    _write_json(ocr_path, HOME_DEPOT_OCR)

    result = run_receipt_extract(ReceiptExtractRequest(ocr_json_path=ocr_path, collect_trace=True))

    assert {entry.stage for entry in result.trace} >= {"amounts", "items"}


def test_run_receipt_extract_missing_file(tmp_path) -> None:
    result = run_receipt_extract(ReceiptExtractRequest(ocr_json_path=tmp_path / "missing.json"))

    assert result.status == "file_not_found"
    assert result.receipt is None
    assert "missing.json" in (result.error or "")


def test_run_receipt_extract_malformed_json(tmp_path) -> None:
    ocr_path = tmp_path / "receipt.json"
    ocr_path.write_text("{not json")

    result = run_receipt_extract(ReceiptExtractRequest(ocr_json_path=ocr_path))

    assert result.status == "invalid_ocr_result"
    assert result.receipt is None


def test_run_receipt_extract_empty_transcription(tmp_path) -> None:
    ocr_path = tmp_path / "receipt.json"
    _write_json(ocr_path, {"full_text": "  "})

    result = run_receipt_extract(ReceiptExtractRequest(ocr_json_path=ocr_path))

    assert result.status == "invalid_ocr_result"
    assert result.error == "OCR result contains no recognized text"


def test_run_receipt_extract_uses_rule_files(tmp_path) -> None:
    ocr_path = tmp_path / "receipt.json"
    _write_json(ocr_path, {"full_text": "ACME LUMBER #12\nCrew housing deposit 300.00"})
    vendor_rules = tmp_path / "vendors.toml"
    vendor_rules.write_text('[[vendors]]\npattern = "acme"\nname = "Acme Lumber"\n')
    category_rules = tmp_path / "categories.toml"
    category_rules.write_text('[categories]\nLODGING = ["crew housing"]\n')

    result = run_receipt_extract(
        ReceiptExtractRequest(
            ocr_json_path=ocr_path,
            vendor_rules_path=str(vendor_rules),
            category_rules_path=str(category_rules),
        )
    )

    assert result.receipt is not None
    assert result.receipt.vendor_name == "Acme Lumber"
    assert result.receipt.category == ExpenseCategory.LODGING


def test_run_receipt_extract_invalid_rules(tmp_path) -> None:
    ocr_path = tmp_path / "receipt.json"
    _write_json(ocr_path, HOME_DEPOT_OCR)
    category_rules = tmp_path / "categories.toml"
    category_rules.write_text('[categories]\nFUEL = ["diesel"]\n')

    result = run_receipt_extract(
        ReceiptExtractRequest(ocr_json_path=ocr_path, category_rules_path=str(category_rules))
    )

    assert result.status == "invalid_rules"
    assert "FUEL" in (result.error or "")


def test_run_receipt_extract_wrong_field_types(tmp_path) -> None:
    ocr_path = tmp_path / "receipt.json"
    payloads = [
        {"full_text": None},
        {"full_text": "Tape 3.00", "confidence": "high"},
        {"document": "x"},
    ]

    for payload in payloads:
        _write_json(ocr_path, payload)
        result = run_receipt_extract(ReceiptExtractRequest(ocr_json_path=ocr_path))

        assert result.status == "invalid_ocr_result", payload
        assert result.receipt is None


def test_run_receipt_extract_nan_confidence(tmp_path) -> None:
    ocr_path = tmp_path / "receipt.json"
    ocr_path.write_text('{"full_text": "Tape 3.00", "confidence": NaN}')

    result = run_receipt_extract(ReceiptExtractRequest(ocr_json_path=ocr_path))

    assert result.status == "extracted"
    assert result.receipt is not None
    assert result.receipt.confidence_score == Decimal("0")
