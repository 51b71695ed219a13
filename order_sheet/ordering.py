"""Product column ordering: catalog display order and order-volume order."""

from __future__ import annotations

import unicodedata
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .schema import ProductRef

ALWAYS_MARKER = "상시"

_DATE_FORMATS = ("%Y-%m-%d", "%Y.%m.%d", "%Y/%m/%d", "%Y.%m.%d.", "%Y-%m-%d %H:%M:%S")


def _script_rank(char: str) -> int:
    # Korean collation puts Hangul, then Hanja, ahead of other scripts.
    if not char.isalpha():
        return 0
    name = unicodedata.name(char, "")
    if name.startswith("HANGUL"):
        return 1
    if name.startswith("CJK"):
        return 2
    return 3


def korean_sort_key(value: str) -> Tuple:
    text = unicodedata.normalize("NFC", value)
    return (tuple((_script_rank(ch), ch.casefold()) for ch in text), text)


def parse_sale_date(value: Optional[str]) -> Optional[date]:
    """Return the sale date, or None when the product is sold all the time."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text == ALWAYS_MARKER:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def sale_date_label(product: ProductRef) -> str:
    if product.sale_date is None or not str(product.sale_date).strip():
        return ALWAYS_MARKER
    return str(product.sale_date)


def display_order(products: Iterable[ProductRef]) -> List[ProductRef]:
    """Newest sale date first, always-available products last, names break ties."""
    dated: List[Tuple[date, ProductRef]] = []
    always: List[ProductRef] = []
    for product in products:
        if not product.is_active:
            continue
        sold_on = parse_sale_date(product.sale_date)
        if sold_on is None:
            always.append(product)
        else:
            dated.append((sold_on, product))

    # Stable sorts: name first, then date descending.
    dated.sort(key=lambda pair: korean_sort_key(pair[1].display_name))
    dated.sort(key=lambda pair: pair[0], reverse=True)
    always.sort(key=lambda product: korean_sort_key(product.display_name))
    return [product for _, product in dated] + always


def layout_products(products: Iterable[ProductRef]) -> List[ProductRef]:
    """Products that get a column: active, priced, in display order."""
    return [product for product in display_order(products) if product.price > 0]


def parse_quantity(value) -> Optional[float]:
    """Quantity held in a grid cell, or None when the cell does not count."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if value != value or value == 0 else float(value)
    text = str(value)
    if text == "" or text == "0":
        return None
    try:
        number = float(text.strip()) if text.strip() else None
    except ValueError:
        return None
    if number is None or number != number:
        return None
    return number


def demand_positions(names: Sequence[str], totals: Sequence[float]) -> List[int]:
    """Indices of ``names`` ordered by quantity, highest first.

    Products nobody ordered go last, by name, whatever their position was.
    """
    ordered = [i for i in range(len(names)) if totals[i]]
    unordered = [i for i in range(len(names)) if not totals[i]]
    ordered.sort(key=lambda i: (-totals[i], korean_sort_key(names[i])))
    unordered.sort(key=lambda i: korean_sort_key(names[i]))
    return ordered + unordered


def demand_order(names: Sequence[str], totals: Dict[str, float]) -> List[str]:
    positions = demand_positions(names, [totals.get(name, 0) for name in names])
    return [names[i] for i in positions]


class ProductOrderingPolicy:
    """Both column orderings used by the sheet export."""

    def display(self, products: Iterable[ProductRef]) -> List[ProductRef]:
        return display_order(products)

    def for_layout(self, products: Iterable[ProductRef]) -> List[ProductRef]:
        return layout_products(products)

    def by_demand(self, names: Sequence[str], totals: Dict[str, float]) -> List[str]:
        return demand_order(names, totals)
