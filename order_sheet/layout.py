"""Lay out grouped orders and the product catalog as a spreadsheet grid.

Grid rows, top to bottom::

    header rows        product name / sale date / price (/ stock for excel)
    total ordered      =SUM over the data rows, one per product column
    data rows          one per order, nickname only on the first row of a group
    total ordered      same formulas as the top row
    total revenue      price x total ordered, grand total in column B

Formulas are plain ``=`` strings with A1 references, so every structural
change to the grid has to be followed by :func:`apply_formulas`.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Sequence

from openpyxl.utils import column_index_from_string, get_column_letter

from .ordering import layout_products, sale_date_label
from .schema import (
    VARIANT_EXCEL,
    VARIANT_SHEETS,
    VARIANTS,
    Cell,
    CombinedOrder,
    ProductRef,
    SheetGrid,
)

ORDERER_LABEL = "주문자"
AMOUNT_LABEL = "주문금액"
RAW_ORDER_LABEL = "원본주문"
NOTES_LABEL = "비고"
PRICE_LABEL = "판매가"
STOCK_LABEL = "재고"
TOTAL_ORDERED_LABEL = "총 주문수"
TOTAL_REVENUE_LABEL = "총 판매액"

PRICE_ROW_NUMBER = 3
GRAND_TOTAL_COLUMN = 1

FIXED_COLUMNS: Dict[str, List[str]] = {
    VARIANT_SHEETS: [ORDERER_LABEL, RAW_ORDER_LABEL, NOTES_LABEL],
    VARIANT_EXCEL: [ORDERER_LABEL, AMOUNT_LABEL, RAW_ORDER_LABEL, NOTES_LABEL],
}

QUANTITY_BOUNDARY = re.compile(r"(\d+개)(?=\s|$)")


def column_letter(column_number: int) -> str:
    """1-based column number -> spreadsheet letters (1 -> A, 27 -> AA)."""
    return get_column_letter(column_number)


def column_number(letters: str) -> int:
    """Spreadsheet letters -> 1-based column number ('A' -> 1, 'AA' -> 27)."""
    return column_index_from_string(letters.strip().upper())


def normalise_order_text(text: str) -> str:
    if not text or not text.strip():
        return ""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return "\n".join(line.strip() for line in lines if line.strip())


def split_product_lines(text: str) -> str:
    """Put each ``<name> <n>개`` chunk of an order on its own line.

    Text with at most one quantity chunk is returned unchanged. Words after the
    last chunk are kept as a final line of their own rather than dropped.
    """
    parts = QUANTITY_BOUNDARY.split(text)
    if len(parts) <= 1:
        return text

    chunks: List[str] = []
    for i in range(0, len(parts) - 1, 2):
        if parts[i] and parts[i + 1]:
            chunk = (parts[i] + parts[i + 1]).strip()
            if chunk:
                chunks.append(chunk)
    if len(chunks) <= 1:
        return text

    tail = parts[-1].strip()
    if tail:
        chunks.append(tail)
    return "\n".join(chunks)


def _range(column: int, start_row: int, end_row: int) -> str:
    letter = column_letter(column)
    return f"{letter}{start_row}:{letter}{end_row}"


def _has_order(row: Sequence[Cell], grid: SheetGrid) -> bool:
    price_row = grid.rows[PRICE_ROW_NUMBER - 1]
    total = 0.0
    for col in range(grid.fixed_columns, grid.width):
        try:
            total += float(str(price_row[col]).replace(",", "")) * float(str(row[col]))
        except ValueError:
            continue
    return total != 0


def apply_formulas(grid: SheetGrid) -> SheetGrid:
    """(Re)write every formula cell from the grid's current positions."""
    first_col = grid.fixed_columns + 1
    last_col = grid.width
    data_start = grid.data_start_index + 1
    data_end = grid.data_end_index
    top_total_row = grid.top_total_index + 1
    revenue_row = grid.revenue_index + 1
    excel = grid.variant == VARIANT_EXCEL

    for col in range(first_col, last_col + 1):
        letter = column_letter(col)
        # An empty data span would make the top total reference itself.
        total_formula = f"=SUM({_range(col, data_start, data_end)})" if grid.data_row_count else "=0"
        grid.rows[grid.top_total_index][col - 1] = total_formula
        grid.rows[grid.bottom_total_index][col - 1] = total_formula

        price_ref = f"{letter}{PRICE_ROW_NUMBER}"
        if excel:
            price_ref = f"VALUE({price_ref})"
        grid.rows[grid.revenue_index][col - 1] = f"={price_ref}*{letter}{top_total_row}"

    if last_col >= first_col:
        grid.rows[grid.revenue_index][GRAND_TOTAL_COLUMN] = (
            f"=SUM({column_letter(first_col)}{revenue_row}:{column_letter(last_col)}{revenue_row})"
        )

    if excel:
        price_span = f"${column_letter(first_col)}${PRICE_ROW_NUMBER}:${column_letter(last_col)}${PRICE_ROW_NUMBER}"
        for offset in range(grid.data_row_count):
            index = grid.data_start_index + offset
            row = grid.rows[index]
            if last_col >= first_col and _has_order(row, grid):
                row_number = index + 1
                row_span = f"{column_letter(first_col)}{row_number}:{column_letter(last_col)}{row_number}"
                row[GRAND_TOTAL_COLUMN] = f"=SUMPRODUCT({price_span},{row_span})"
            else:
                row[GRAND_TOTAL_COLUMN] = ""

    grid.validate()
    return grid


class SheetLayoutBuilder:
    """Builds the export grid for one batch of grouped orders."""

    def __init__(self, variant: str = VARIANT_SHEETS) -> None:
        if variant not in VARIANTS:
            raise ValueError(f"Unknown sheet variant: {variant!r}")
        self.variant = variant
        self.labels = FIXED_COLUMNS[variant]

    @property
    def fixed_columns(self) -> int:
        return len(self.labels)

    def _pad(self, label: str = "") -> List[Cell]:
        return [label] + [""] * (self.fixed_columns - 1)

    def header_rows(self, columns: Sequence[ProductRef]) -> List[List[Cell]]:
        rows: List[List[Cell]] = [
            list(self.labels) + [product.display_name for product in columns],
            self._pad() + [sale_date_label(product) for product in columns],
            self._pad(PRICE_LABEL) + [str(product.price) for product in columns],
        ]
        if self.variant == VARIANT_EXCEL:
            rows.append(self._pad(STOCK_LABEL) + [""] * len(columns))
        return rows

    def order_text_cell(self, order: CombinedOrder) -> str:
        text = normalise_order_text(order.order_text)
        if self.variant == VARIANT_EXCEL and text:
            text = split_product_lines(text)
        return text

    def data_rows(self, orders: Iterable[CombinedOrder], columns: Sequence[ProductRef]) -> List[List[Cell]]:
        grouped: Dict[str, List[CombinedOrder]] = {}
        for order in orders:
            grouped.setdefault(order.nickname, []).append(order)

        rows: List[List[Cell]] = []
        for nickname, members in grouped.items():
            for index, order in enumerate(members):
                row: List[Cell] = [nickname if index == 0 else ""]
                if self.variant == VARIANT_EXCEL:
                    row.append("")
                row.append(self.order_text_cell(order))
                row.append(order.notes or "")
                for product in columns:
                    quantity = order.quantity_for(product.name)
                    row.append(str(quantity) if quantity > 0 else "")
                rows.append(row)
        return rows

    def build(self, orders: Sequence[CombinedOrder], products: Iterable[ProductRef]) -> SheetGrid:
        columns = layout_products(products)
        header = self.header_rows(columns)
        data = self.data_rows(orders, columns)

        total_row = self._pad(TOTAL_ORDERED_LABEL) + [""] * len(columns)
        revenue_row = self._pad(TOTAL_REVENUE_LABEL) + [""] * len(columns)

        grid = SheetGrid(
            rows=header + [list(total_row)] + data + [list(total_row), revenue_row],
            variant=self.variant,
            fixed_columns=self.fixed_columns,
            header_rows=len(header),
            data_row_count=len(data),
        )
        return apply_formulas(grid)


def build(orders: Sequence[CombinedOrder], products: Iterable[ProductRef], variant: str = VARIANT_SHEETS) -> SheetGrid:
    return SheetLayoutBuilder(variant).build(orders, products)
