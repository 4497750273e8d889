"""Receipt command handlers used by the unified CLI."""

import argparse
import json
import sys
from pathlib import Path

from tillscan.domain.receipt import Receipt, build_receipt_record, manual_entry_receipt
from tillscan.runtime import get_logger

logger = get_logger(__name__)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI server for receiving receipt uploads."""
    import uvicorn

    from tillscan.runtime import receipt_server as server

    print(f"Starting receipt server on {args.host}:{args.port}")
    print(f"Endpoints: http://{args.host}:{args.port}/scan | /parse | /health")
    print("Press Ctrl+C to stop")

    uvicorn.run(server.app, host=args.host, port=args.port)


def cmd_scan(args: argparse.Namespace) -> None:
    """Scan a receipt image and print the parsed receipt."""
    from tillscan.application.receipts.scan import ReceiptScanRequest, run_receipt_scan
    from tillscan.runtime.ocr_engines import create_ocr_engine

    result = run_receipt_scan(
        ReceiptScanRequest(
            image_path=Path(args.image),
            engine=create_ocr_engine(args.engine, args.ocr_url),
            lang=args.lang,
            debug_image_path=Path(args.debug_image) if args.debug_image else None,
        )
    )

    if result.status == "file_not_found":
        logger.error("%s", result.error)
        print(f"Error: {result.error}")
        sys.exit(1)

    if result.status == "decode_failed":
        logger.error("%s", result.error)
        print(f"Could not read image: {result.error}")
        sys.exit(1)

    if result.status == "ocr_unavailable":
        logger.error("%s", result.error)
        print(f"OCR unavailable: {result.error}")
        if args.json:
            # Hand back a blank receipt so the caller can fall through to manual entry
            print(json.dumps(build_receipt_record(manual_entry_receipt()).to_dict(), indent=2))
        else:
            print("Enter the receipt manually, or retry once the OCR engine is available.")
        sys.exit(2)

    receipt = result.receipt
    if receipt is None or result.record is None:
        print("Scan failed: missing receipt output.")
        sys.exit(1)

    if args.json:
        print(json.dumps(result.record.to_dict(), indent=2))
        return
    _print_receipt(receipt)


def cmd_parse(args: argparse.Namespace) -> None:
    """Parse previously recognized receipt text from a file or stdin."""
    from tillscan.receipt.ocr_result_parser import parse_receipt
    from tillscan.runtime import load_known_stores

    if args.text_file == "-":
        raw_text = sys.stdin.read()
    else:
        text_path = Path(args.text_file)
        if not text_path.exists():
            print(f"Error: Text file not found: {text_path}")
            sys.exit(1)
        raw_text = text_path.read_text(encoding="utf-8")

    receipt = parse_receipt(raw_text, load_known_stores(), stop_at_footer=not args.keep_footer)
    if args.json:
        print(json.dumps(build_receipt_record(receipt).to_dict(), indent=2))
        return
    _print_receipt(receipt)


def _print_receipt(receipt: Receipt) -> None:
    print("\n" + "=" * 60)
    print("PARSED RECEIPT")
    print("=" * 60)
    print(f"Store: {receipt.store_name}")
    date_str = f"{receipt.date} (not found on receipt)" if receipt.date_is_placeholder else receipt.date
    print(f"Date: {date_str}")
    print(f"Total: ${receipt.total:.2f}")
    print(f"\nItems ({len(receipt.items)}):")
    for i, item in enumerate(receipt.items, 1):
        qty_str = f" x{item.quantity}" if item.quantity > 1 else ""
        print(f"  {i}. {item.description or '(blank)'}{qty_str} - ${item.price:.2f}")
    if receipt.items_total != receipt.total:
        print(f"\nItems sum to ${receipt.items_total:.2f}; check against the total.")
    if receipt.warnings:
        print("\nWarnings:")
        for warning in receipt.warnings:
            print(f"  {warning.field}: {warning.message}")
    print("=" * 60)


def main() -> int:
    """Compatibility entrypoint; delegates to the unified CLI parser."""
    from tillscan.cli.main import main as unified_main

    return unified_main()


if __name__ == "__main__":
    raise SystemExit(main())
