"""Publish a finished grid as a new tab of a Google spreadsheet."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import gspread
from google.oauth2.service_account import Credentials

from .config import Settings
from .hints import column_widths, frozen_rows, merge_ranges, number_format_hints, unique_sheet_name
from .schema import SheetGrid

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def open_spreadsheet(settings: Settings) -> gspread.Spreadsheet:
    if not settings.service_account_file or not settings.spreadsheet_id:
        raise SystemExit("GOOGLE_SERVICE_ACCOUNT_FILE and SPREADSHEET_ID are required for Google Sheets.")
    creds = Credentials.from_service_account_file(settings.service_account_file, scopes=SCOPES)
    client = gspread.authorize(creds)
    return client.open_by_key(settings.spreadsheet_id)


def _grid_range(sheet_id: int, start_row: int, end_row: int, start_col: int, end_col: int) -> Dict:
    return {
        "sheetId": sheet_id,
        "startRowIndex": start_row,
        "endRowIndex": end_row,
        "startColumnIndex": start_col,
        "endColumnIndex": end_col,
    }


def format_requests(grid: SheetGrid, sheet_id: int, max_width: int = 300) -> List[Dict]:
    """batchUpdate requests: wrapping, header style, number formats, widths, merges, frozen rows."""
    height = len(grid.rows)
    width = grid.width
    requests: List[Dict] = [
        {
            "repeatCell": {
                "range": _grid_range(sheet_id, 0, height, 0, width),
                "cell": {"userEnteredFormat": {"wrapStrategy": "WRAP"}},
                "fields": "userEnteredFormat.wrapStrategy",
            }
        },
        {
            "repeatCell": {
                "range": _grid_range(sheet_id, 0, grid.header_rows, 0, width),
                "cell": {
                    "userEnteredFormat": {
                        "horizontalAlignment": "CENTER",
                        "verticalAlignment": "MIDDLE",
                        "textFormat": {"bold": True},
                    }
                },
                "fields": "userEnteredFormat.horizontalAlignment,userEnteredFormat.verticalAlignment,userEnteredFormat.textFormat.bold",
            }
        },
        {
            "repeatCell": {
                "range": _grid_range(sheet_id, grid.header_rows, height, 0, 1),
                "cell": {
                    "userEnteredFormat": {
                        "horizontalAlignment": "LEFT",
                        "verticalAlignment": "MIDDLE",
                        "textFormat": {"bold": True},
                    }
                },
                "fields": "userEnteredFormat.horizontalAlignment,userEnteredFormat.verticalAlignment,userEnteredFormat.textFormat.bold",
            }
        },
    ]

    for hint in number_format_hints(grid):
        requests.append(
            {
                "repeatCell": {
                    "range": _grid_range(sheet_id, hint.start_row, hint.end_row, hint.start_column, hint.end_column),
                    "cell": {
                        "userEnteredFormat": {
                            "horizontalAlignment": "RIGHT",
                            "verticalAlignment": "MIDDLE",
                            "numberFormat": {"type": "NUMBER", "pattern": hint.pattern},
                        }
                    },
                    "fields": "userEnteredFormat.horizontalAlignment,userEnteredFormat.verticalAlignment,userEnteredFormat.numberFormat",
                }
            }
        )

    for index, pixels in enumerate(column_widths(grid, max_width)):
        requests.append(
            {
                "updateDimensionProperties": {
                    "range": {"sheetId": sheet_id, "dimension": "COLUMNS", "startIndex": index, "endIndex": index + 1},
                    "properties": {"pixelSize": pixels},
                    "fields": "pixelSize",
                }
            }
        )

    requests.append({"autoResizeDimensions": {"dimensions": {"sheetId": sheet_id, "dimension": "ROWS"}}})

    for merge in merge_ranges(grid):
        requests.append(
            {
                "mergeCells": {
                    "range": _grid_range(sheet_id, merge.start_row, merge.end_row, merge.column, merge.column + 1),
                    "mergeType": "MERGE_ROWS",
                }
            }
        )

    requests.append(
        {
            "updateSheetProperties": {
                "properties": {"sheetId": sheet_id, "gridProperties": {"frozenRowCount": frozen_rows(grid)}},
                "fields": "gridProperties.frozenRowCount",
            }
        }
    )
    return requests


def export_sheet(
    grid: SheetGrid,
    sheet_name: str,
    spreadsheet: Optional[gspread.Spreadsheet] = None,
    settings: Optional[Settings] = None,
) -> str:
    """Add a uniquely named tab, fill it and format it. Returns the tab title."""
    grid.validate()
    if spreadsheet is None:
        if settings is None:
            raise ValueError("Either a spreadsheet or settings must be provided.")
        spreadsheet = open_spreadsheet(settings)
    max_width = settings.column_width_max if settings else 300

    existing = [ws.title for ws in spreadsheet.worksheets()]
    title = unique_sheet_name(sheet_name, existing)
    ws = spreadsheet.add_worksheet(title=title, rows=len(grid.rows), cols=max(grid.width, 1))
    logging.info("Created worksheet %s", title)

    values = [[str(value) for value in row] for row in grid.rows]
    ws.update(values=values, range_name="A1", value_input_option="USER_ENTERED")
    spreadsheet.batch_update({"requests": format_requests(grid, ws.id, max_width)})
    logging.info("Wrote %d row(s) to worksheet %s", len(values), title)
    return title
