"""Build the per-product order sheet from a chat transcript and export it."""

from __future__ import annotations

import argparse
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional

from order_sheet import NoOrdersFound, ProductRef
from order_sheet.catalog import fetch_products, load_products_file
from order_sheet.config import Settings, configure_logging, get_settings
from order_sheet.schema import VARIANT_EXCEL, VARIANT_SHEETS, VARIANTS
from order_sheet.service import read_transcript, run_pipeline
from order_sheet.sheets_export import export_sheet
from order_sheet.workbook_export import export_workbook


def today_label() -> str:
    return date.today().strftime("%y%m%d")


def load_catalog(args: argparse.Namespace, settings: Settings) -> List[ProductRef]:
    if args.products:
        return load_products_file(args.products)
    return fetch_products(settings)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export chat-log orders to a workbook and/or Google Sheet.")
    parser.add_argument("transcript", type=Path, help="Exported chat transcript (.txt).")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--products", type=Path, help="Product catalog as a JSON list.")
    source.add_argument(
        "--supabase",
        action="store_true",
        help="Fetch the product catalog from Supabase (SUPABASE_URL / SUPABASE_SERVICE_KEY).",
    )
    parser.add_argument(
        "--date",
        dest="label",
        default=None,
        help="Sheet name; '(1)', '(2)' ... is appended when taken (default: today as YYMMDD).",
    )
    parser.add_argument(
        "--variant",
        choices=VARIANTS,
        default=None,
        help=f"Grid layout (default: {VARIANT_EXCEL} with --xlsx, otherwise {VARIANT_SHEETS}).",
    )
    parser.add_argument("--xlsx", type=Path, help="Write the sheet to this .xlsx file.")
    parser.add_argument(
        "--merge-into",
        type=Path,
        help="Existing workbook whose sheets are copied after the order sheet (needs --xlsx).",
    )
    parser.add_argument("--google-sheet", action="store_true", help="Add the sheet as a tab of SPREADSHEET_ID.")
    parser.add_argument("--shop-marker", help="Nicknames containing this text are the shop's own messages.")
    parser.add_argument("--encoding", help="Transcript encoding (default: try utf-8, cp949 and euc-kr).")
    parser.add_argument(
        "--no-reorder",
        action="store_true",
        help="Keep catalog order instead of sorting product columns by ordered quantity.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log matching and layout details.")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    settings = get_settings()

    if not args.xlsx and not args.google_sheet:
        parser.error("Choose at least one destination: --xlsx and/or --google-sheet.")
    if args.merge_into and not args.xlsx:
        parser.error("--merge-into needs --xlsx.")

    label = args.label or today_label()
    variant = args.variant or (VARIANT_EXCEL if args.xlsx else VARIANT_SHEETS)
    products = load_catalog(args, settings)
    transcript = read_transcript(args.transcript, args.encoding)

    try:
        grid = run_pipeline(
            transcript,
            products,
            variant=variant,
            shop_marker=args.shop_marker or settings.shop_marker,
            min_score=settings.match_min_score,
            reorder=not args.no_reorder,
        )
    except NoOrdersFound as exc:
        print(exc)
        return 0

    failures = 0
    if args.xlsx:
        try:
            title = export_workbook(grid, label, args.xlsx, args.merge_into, settings.column_width_max)
            print(f"Workbook saved: {args.xlsx} [{title}]")
        except Exception as exc:  # noqa: BLE001
            failures += 1
            logging.error("Failed to write workbook %s: %s", args.xlsx, exc)

    if args.google_sheet:
        try:
            title = export_sheet(grid, label, settings=settings)
            print(f"Google Sheet tab created: {title}")
        except Exception as exc:  # noqa: BLE001
            failures += 1
            logging.error("Failed to export to Google Sheets: %s", exc)

    print(
        f"Export complete. Orders: {grid.data_row_count}. "
        f"Products: {grid.width - grid.fixed_columns}. Failures: {failures}."
    )
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
