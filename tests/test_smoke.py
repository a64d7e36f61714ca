"""Public smoke tests for basic module wiring.

Keep these minimal and free of any real-world data.
"""

from __future__ import annotations


def test_imports() -> None:
    import sitespend
    import sitespend.application.receipts
    import sitespend.cli.main
    import sitespend.receipt.ocr_parser
    import sitespend.receipt.ocr_result_parser
    import sitespend.runtime

    assert sitespend is not None
    assert sitespend.application.receipts is not None
    assert sitespend.cli.main is not None
    assert sitespend.receipt.ocr_parser is not None
    assert sitespend.receipt.ocr_result_parser is not None
    assert sitespend.runtime is not None
