"""Second pass over a built grid: product columns by order volume."""

from __future__ import annotations

import logging
from typing import List, Optional

from .layout import apply_formulas
from .ordering import demand_positions, parse_quantity
from .schema import SheetGrid


def column_totals(grid: SheetGrid) -> List[float]:
    """Ordered quantity per product column, read from the data rows only."""
    totals = [0.0] * (grid.width - grid.fixed_columns)
    for row in grid.data_rows():
        for offset in range(len(totals)):
            quantity = parse_quantity(row[grid.fixed_columns + offset])
            if quantity is not None:
                totals[offset] += quantity
    return totals


class ColumnReorderer:
    def reorder(self, grid: SheetGrid, header_rows: Optional[int] = None) -> SheetGrid:
        """Permute the product columns in place and regenerate every formula."""
        if header_rows is not None and header_rows != grid.header_rows:
            raise ValueError(
                f"Grid was built with {grid.header_rows} header row(s), not {header_rows}."
            )
        grid.validate()

        names = grid.product_names
        totals = column_totals(grid)
        positions = demand_positions(names, totals)
        logging.debug(
            "Column order by demand: %s",
            ", ".join(f"{names[i]}={totals[i]:g}" for i in positions),
        )

        fixed = grid.fixed_columns
        for index, row in enumerate(grid.rows):
            grid.rows[index] = row[:fixed] + [row[fixed + i] for i in positions]

        return apply_formulas(grid)


def reorder(grid: SheetGrid, header_rows: Optional[int] = None) -> SheetGrid:
    return ColumnReorderer().reorder(grid, header_rows)
