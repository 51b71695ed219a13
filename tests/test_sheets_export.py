from unittest import mock

import pytest

from helpers import order
from order_sheet.service import build_sheet
from order_sheet.sheets_export import export_sheet, format_requests


@pytest.fixture
def grid(fruit_catalog):
    orders = [order("Alice", ("사과", 3, 1000)), order("Alice", ("배", 1, 2000)), order("Bob", ("배", 1, 2000))]
    return build_sheet(orders, fruit_catalog)


@pytest.fixture
def spreadsheet():
    book = mock.MagicMock()
    existing = mock.MagicMock()
    existing.title = "250110"
    book.worksheets.return_value = [existing]
    book.add_worksheet.return_value.id = 77
    return book


def requests_of(kind, requests):
    return [request[kind] for request in requests if kind in request]


def test_export_adds_a_unique_tab(grid, spreadsheet):
    title = export_sheet(grid, "250110", spreadsheet=spreadsheet)

    assert title == "250110(1)"
    spreadsheet.add_worksheet.assert_called_once_with(title="250110(1)", rows=len(grid.rows), cols=grid.width)
    worksheet = spreadsheet.add_worksheet.return_value
    worksheet.update.assert_called_once()
    kwargs = worksheet.update.call_args.kwargs
    assert kwargs["value_input_option"] == "USER_ENTERED"
    assert kwargs["range_name"] == "A1"
    assert kwargs["values"][0] == ["주문자", "원본주문", "비고", "사과", "배"]

    body = spreadsheet.batch_update.call_args.args[0]
    assert all(
        r["range"]["sheetId"] == 77 for r in requests_of("mergeCells", body["requests"])
    )


def test_merges_and_frozen_rows(grid):
    requests = format_requests(grid, sheet_id=5)

    merges = requests_of("mergeCells", requests)
    assert len(merges) == 1
    assert merges[0]["mergeType"] == "MERGE_ROWS"
    assert merges[0]["range"]["startRowIndex"] == grid.data_start_index
    assert merges[0]["range"]["endRowIndex"] == grid.data_start_index + 2

    (frozen,) = requests_of("updateSheetProperties", requests)
    assert frozen["properties"]["gridProperties"]["frozenRowCount"] == grid.header_rows + 1


def test_column_widths_in_pixels(grid):
    widths = [
        r["properties"]["pixelSize"] for r in requests_of("updateDimensionProperties", format_requests(grid, 0))
    ]
    assert widths == [120, 300, 150, 80, 80]


def test_number_formats_skip_sale_date_row(grid):
    for request in requests_of("repeatCell", format_requests(grid, 0)):
        cell_format = request["cell"]["userEnteredFormat"]
        if "numberFormat" in cell_format:
            assert not request["range"]["startRowIndex"] <= 1 < request["range"]["endRowIndex"]


def test_missing_destination():
    with pytest.raises(ValueError):
        export_sheet(mock.MagicMock(rows=[[]]), "250110")
