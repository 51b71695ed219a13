"""Typed structures shared across the order sheet pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

Cell = Union[str, int, float]

VARIANT_SHEETS = "sheets"
VARIANT_EXCEL = "excel"
VARIANTS = (VARIANT_SHEETS, VARIANT_EXCEL)


class NoOrdersFound(ValueError):
    """The transcript did not contain a single customer order."""


class InconsistentColumnCount(AssertionError):
    """A grid row no longer lines up with the header row."""


@dataclass(frozen=True)
class RawMessage:
    sender_id: str
    timestamp: str
    text: str


@dataclass(frozen=True)
class OrderFragment:
    nickname: str
    time: str
    text: str


@dataclass(frozen=True)
class OrderItem:
    name: str
    quantity: int
    price: int = 0

    @property
    def total(self) -> int:
        return self.price * self.quantity


@dataclass(frozen=True)
class CombinedOrder:
    nickname: str
    order_text: str
    first_time: str
    latest_time: str
    items: Tuple[OrderItem, ...] = ()
    notes: str = ""

    def quantity_for(self, product_name: str) -> int:
        return sum(item.quantity for item in self.items if item.name == product_name)


@dataclass(frozen=True)
class ProductRef:
    name: str
    price: int
    sale_date: Optional[str]
    is_active: bool = True

    @property
    def display_name(self) -> str:
        return self.name.replace("\n", " ")


@dataclass(frozen=True)
class MergeRange:
    """Vertical merge over a single column, 0-based and end-exclusive."""

    start_row: int
    end_row: int
    column: int = 0


@dataclass(frozen=True)
class CellFormatHint:
    """Rectangular block (0-based, end-exclusive) that needs a number format."""

    start_row: int
    end_row: int
    start_column: int
    end_column: int
    pattern: str = "#,##0"


@dataclass
class SheetGrid:
    rows: List[List[Cell]]
    variant: str
    fixed_columns: int
    header_rows: int
    data_row_count: int

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def product_names(self) -> List[str]:
        return [str(value) for value in self.rows[0][self.fixed_columns:]]

    @property
    def top_total_index(self) -> int:
        return self.header_rows

    @property
    def data_start_index(self) -> int:
        return self.header_rows + 1

    @property
    def data_end_index(self) -> int:
        """Index one past the last data row."""
        return self.data_start_index + self.data_row_count

    @property
    def bottom_total_index(self) -> int:
        return self.data_end_index

    @property
    def revenue_index(self) -> int:
        return self.data_end_index + 1

    def data_rows(self) -> List[List[Cell]]:
        return self.rows[self.data_start_index:self.data_end_index]

    def validate(self) -> None:
        expected_rows = self.header_rows + self.data_row_count + 3
        if len(self.rows) != expected_rows:
            raise InconsistentColumnCount(
                f"Grid has {len(self.rows)} row(s); layout expects {expected_rows}."
            )
        width = self.width
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise InconsistentColumnCount(
                    f"Row {index + 1} has {len(row)} column(s); header has {width}."
                )
