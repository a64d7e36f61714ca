#!/usr/bin/env python3

import argparse
from collections.abc import Callable, Sequence


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Normalize command handlers that call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Construction expense receipt utilities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  extract <ocr_json>         Extract vendor, amounts and items from a cached OCR result

Notes:
  OCR results are JSON with either full_text/alternate_text/annotations
  or a Vision-style fullTextAnnotation/textAnnotations response.
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser("extract", help="Extract receipt data from a cached OCR result")
    extract_parser.add_argument("ocr_json", help="Path to OCR result JSON")
    extract_parser.add_argument(
        "--format", choices=["json", "text"], default="json", help="Output format (default: json)"
    )
    extract_parser.add_argument("--draft", action="store_true", help="Include the prefilled expense draft (json)")
    extract_parser.add_argument("--vendor-rules", default=None, help="Vendor rules TOML (default: config/vendor_rules.toml)")
    extract_parser.add_argument(
        "--category-rules", default=None, help="Category keyword TOML (default: config/category_rules.toml)"
    )
    extract_parser.add_argument("--debug", action="store_true", help="Log parser decisions and print the trace")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "extract":
        from sitespend.cli.receipt import cmd_extract

        return _run_command(cmd_extract, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
