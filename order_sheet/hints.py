"""Presentation hints handed to the export adapters alongside the grid."""

from __future__ import annotations

import re
from typing import Collection, List

from .layout import (
    AMOUNT_LABEL,
    GRAND_TOTAL_COLUMN,
    NOTES_LABEL,
    ORDERER_LABEL,
    PRICE_ROW_NUMBER,
    RAW_ORDER_LABEL,
)
from .schema import VARIANT_EXCEL, CellFormatHint, MergeRange, SheetGrid

FIXED_COLUMN_PIXELS = {
    ORDERER_LABEL: 120,
    AMOUNT_LABEL: 100,
    RAW_ORDER_LABEL: 300,
    NOTES_LABEL: 150,
}
HANGUL_SYLLABLE = re.compile(r"[가-힣]")


def unique_sheet_name(requested: str, existing: Collection[str]) -> str:
    """``requested``, or ``requested(1)``, ``requested(2)`` ... when taken."""
    name = requested
    counter = 1
    while name in existing:
        name = f"{requested}({counter})"
        counter += 1
    return name


def product_column_width(name: str, maximum: int = 300) -> int:
    """Pixel width for a product column: 14px per Hangul syllable, 8px otherwise."""
    korean = len(HANGUL_SYLLABLE.findall(name))
    other = len(name) - korean
    return min(max(80, korean * 14 + other * 8 + 20), maximum)


def column_widths(grid: SheetGrid, maximum: int = 300) -> List[int]:
    widths = [FIXED_COLUMN_PIXELS.get(str(label), 100) for label in grid.rows[0][: grid.fixed_columns]]
    widths.extend(product_column_width(name, maximum) for name in grid.product_names)
    return widths


def merge_ranges(grid: SheetGrid) -> List[MergeRange]:
    """Vertical merges over column A for each nickname block of two or more rows."""
    merges: List[MergeRange] = []
    start = None
    for index in range(grid.data_start_index, grid.data_end_index):
        if grid.rows[index][0] != "":
            if start is not None and index - start > 1:
                merges.append(MergeRange(start_row=start, end_row=index))
            start = index
    if start is not None and grid.data_end_index - start > 1:
        merges.append(MergeRange(start_row=start, end_row=grid.data_end_index))
    return merges


def number_format_hints(grid: SheetGrid) -> List[CellFormatHint]:
    """Blocks that get thousand separators. The sale-date row is never one of them."""
    first = grid.fixed_columns
    last = grid.width
    hints: List[CellFormatHint] = []
    if last > first:
        hints.append(CellFormatHint(PRICE_ROW_NUMBER - 1, PRICE_ROW_NUMBER, first, last))
        hints.append(CellFormatHint(grid.top_total_index, grid.data_end_index, first, last))
        hints.append(CellFormatHint(grid.bottom_total_index, grid.revenue_index + 1, first, last))
    if grid.variant == VARIANT_EXCEL:
        hints.append(
            CellFormatHint(grid.data_start_index, grid.revenue_index + 1, GRAND_TOTAL_COLUMN, GRAND_TOTAL_COLUMN + 1)
        )
    else:
        hints.append(
            CellFormatHint(grid.revenue_index, grid.revenue_index + 1, GRAND_TOTAL_COLUMN, GRAND_TOTAL_COLUMN + 1)
        )
    return hints


def frozen_rows(grid: SheetGrid) -> int:
    """Header rows plus the top total-ordered row."""
    return grid.header_rows + 1
