#!/usr/bin/env python3

import argparse
import os
from collections.abc import Callable, Sequence

from tillscan.runtime import configure_logging
from tillscan.runtime.ocr_engines import DEFAULT_LANG, DEFAULT_OCR_SERVICE_URL


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_legacy_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
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
        description="Receipt scanning CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  scan <image>               Scan a receipt image
  parse <text_file|->        Parse already-recognized receipt text
  serve [--host] [--port]    Start receipt upload server

Exit codes:
  0 = parsed, 1 = bad input, 2 = OCR unavailable (enter manually)
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # scan command
    scan_parser = subparsers.add_parser("scan", help="Scan a receipt image")
    scan_parser.add_argument("image", help="Path to receipt image")
    scan_parser.add_argument(
        "--engine",
        choices=["tesseract", "service"],
        default=os.environ.get("TILLSCAN_OCR_ENGINE", "tesseract"),
        help="OCR engine (default: tesseract)",
    )
    scan_parser.add_argument(
        "--ocr-url",
        default=os.environ.get("OCR_SERVICE_URL", DEFAULT_OCR_SERVICE_URL),
        help=f"OCR service URL for --engine service (default: {DEFAULT_OCR_SERVICE_URL})",
    )
    scan_parser.add_argument("--lang", default=DEFAULT_LANG, help=f"OCR language (default: {DEFAULT_LANG})")
    scan_parser.add_argument("--debug-image", help="Save the preprocessed image to this path")
    scan_parser.add_argument("--json", action="store_true", help="Print the receipt record as JSON")

    # parse command
    parse_parser = subparsers.add_parser("parse", help="Parse already-recognized receipt text")
    parse_parser.add_argument("text_file", help="Path to OCR text, or - for stdin")
    parse_parser.add_argument(
        "--keep-footer",
        action="store_true",
        help="Skip footer lines instead of stopping at the first one",
    )
    parse_parser.add_argument("--json", action="store_true", help="Print the receipt record as JSON")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start receipt upload server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8080, help="Port to bind to (default: 8080)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    configure_logging()

    if args.command == "scan":
        from tillscan.cli.receipt import cmd_scan

        return _run_legacy_command(cmd_scan, args)
    elif args.command == "parse":
        from tillscan.cli.receipt import cmd_parse

        return _run_legacy_command(cmd_parse, args)
    elif args.command == "serve":
        from tillscan.cli.receipt import cmd_serve

        return _run_legacy_command(cmd_serve, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
