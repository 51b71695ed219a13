"""Write a finished grid to an .xlsx workbook with openpyxl."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .hints import column_widths, frozen_rows, merge_ranges, number_format_hints, unique_sheet_name
from .layout import RAW_ORDER_LABEL
from .schema import Cell, SheetGrid

DIGITS_ONLY = re.compile(r"^\d+$")
PIXELS_PER_CHAR = 7


def cell_value(value: Cell):
    """Formulas stay ``=`` strings (openpyxl stores them as formulas), digit strings become ints."""
    if isinstance(value, str):
        if value.startswith("=") and len(value.strip()) > 1:
            return value.strip()
        if DIGITS_ONLY.match(value):
            return int(value)
        return value
    return value


def write_grid(ws: Worksheet, grid: SheetGrid, max_width: int = 300) -> None:
    grid.validate()
    for r, row in enumerate(grid.rows, start=1):
        for c, value in enumerate(row, start=1):
            ws.cell(row=r, column=c, value=cell_value(value))

    for hint in number_format_hints(grid):
        for r in range(hint.start_row + 1, hint.end_row + 1):
            for c in range(hint.start_column + 1, hint.end_column + 1):
                ws.cell(row=r, column=c).number_format = hint.pattern

    header_font = Font(bold=True)
    header_align = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for r in range(1, grid.header_rows + 1):
        for c in range(1, grid.width + 1):
            cell = ws.cell(row=r, column=c)
            cell.font = header_font
            cell.alignment = header_align

    for r in range(grid.header_rows + 1, len(grid.rows) + 1):
        cell = ws.cell(row=r, column=1)
        cell.font = header_font
        cell.alignment = Alignment(horizontal="left", vertical="center")

    raw_col = grid.rows[0].index(RAW_ORDER_LABEL) + 1
    wrap_top = Alignment(wrap_text=True, vertical="top")
    for r in range(grid.data_start_index + 1, grid.data_end_index + 1):
        ws.cell(row=r, column=raw_col).alignment = wrap_top

    for index, pixels in enumerate(column_widths(grid, max_width), start=1):
        ws.column_dimensions[get_column_letter(index)].width = round(pixels / PIXELS_PER_CHAR, 1)

    for merge in merge_ranges(grid):
        ws.merge_cells(
            start_row=merge.start_row + 1,
            start_column=merge.column + 1,
            end_row=merge.end_row,
            end_column=merge.column + 1,
        )

    ws.freeze_panes = ws.cell(row=frozen_rows(grid) + 1, column=grid.fixed_columns + 1)


def copy_sheet(source: Worksheet, target: Worksheet) -> None:
    """Copy values, merged ranges and column widths between workbooks."""
    for row in source.iter_rows():
        for cell in row:
            if cell.value is not None:
                target.cell(row=cell.row, column=cell.column, value=cell.value)
    for merged in source.merged_cells.ranges:
        target.merge_cells(str(merged))
    for key, dimension in source.column_dimensions.items():
        if dimension.width:
            target.column_dimensions[key].width = dimension.width


def export_workbook(
    grid: SheetGrid,
    sheet_name: str,
    out_path: Path,
    merge_into: Optional[Path] = None,
    max_width: int = 300,
) -> str:
    """Save ``grid`` as the first tab of a new workbook and return the tab name.

    Tabs of ``merge_into`` are appended after it, renamed on collision.
    """
    workbook = Workbook()
    ws = workbook.active
    ws.title = title = sheet_name
    write_grid(ws, grid, max_width)

    if merge_into is not None:
        source_book = load_workbook(merge_into)
        for source in source_book.worksheets:
            name = unique_sheet_name(source.title, workbook.sheetnames)
            copy_sheet(source, workbook.create_sheet(title=name))
            logging.debug("Copied sheet %s as %s", source.title, name)

    workbook.save(out_path)
    logging.info("Wrote %d row(s) to %s [%s]", len(grid.rows), out_path, title)
    return title
