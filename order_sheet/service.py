"""High-level helpers that run a transcript through the whole pipeline."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .chatlog import ChatLogParser, OrderGrouper
from .config import DEFAULT_SHOP_MARKER
from .layout import SheetLayoutBuilder
from .matcher import extract_items
from .reorder import ColumnReorderer
from .schema import VARIANT_SHEETS, CombinedOrder, NoOrdersFound, OrderItem, ProductRef, SheetGrid

TRANSCRIPT_ENCODINGS = ("utf-8-sig", "cp949", "euc-kr")

ItemMatcher = Callable[[CombinedOrder], Sequence[OrderItem]]


def decode_transcript(data: bytes, encoding: Optional[str] = None) -> str:
    if encoding:
        return data.decode(encoding)
    for candidate in TRANSCRIPT_ENCODINGS:
        try:
            return data.decode(candidate)
        except UnicodeDecodeError:
            logging.debug("Transcript is not %s", candidate)
    raise ValueError(f"Transcript is not in any of: {', '.join(TRANSCRIPT_ENCODINGS)}")


def read_transcript(path: Path, encoding: Optional[str] = None) -> str:
    return decode_transcript(Path(path).read_bytes(), encoding)


def parse_transcript(transcript: str, shop_marker: Optional[str] = DEFAULT_SHOP_MARKER) -> List[CombinedOrder]:
    """Parse and group a transcript; raise NoOrdersFound when nothing is left."""
    fragments = ChatLogParser(shop_marker).parse(transcript)
    if not fragments:
        raise NoOrdersFound("No customer orders found in the transcript.")
    orders = OrderGrouper().group(fragments)
    logging.info("Parsed %d message(s) from %d customer(s)", len(fragments), len(orders))
    return orders


def match_orders(
    orders: Iterable[CombinedOrder],
    products: Sequence[ProductRef],
    matcher: Optional[ItemMatcher] = None,
    min_score: float = 0.5,
) -> List[CombinedOrder]:
    """Attach product items to each order; a failing order keeps no items."""
    if matcher is None:
        def matcher(order: CombinedOrder) -> Sequence[OrderItem]:
            return extract_items(order.order_text, products, min_score=min_score)

    matched: List[CombinedOrder] = []
    failures = 0
    for order in orders:
        try:
            items = tuple(matcher(order))
        except Exception as exc:  # noqa: BLE001
            failures += 1
            logging.warning("Failed to match products for %s: %s", order.nickname, exc)
            items = ()
        matched.append(replace(order, items=items))

    if failures:
        logging.info("Matched %d order(s); %d failed.", len(matched) - failures, failures)
    return matched


def build_sheet(
    orders: Sequence[CombinedOrder],
    products: Iterable[ProductRef],
    variant: str = VARIANT_SHEETS,
    reorder: bool = True,
) -> SheetGrid:
    grid = SheetLayoutBuilder(variant).build(orders, products)
    if reorder:
        grid = ColumnReorderer().reorder(grid, grid.header_rows)
    return grid


def run_pipeline(
    transcript: str,
    products: Sequence[ProductRef],
    variant: str = VARIANT_SHEETS,
    shop_marker: Optional[str] = DEFAULT_SHOP_MARKER,
    matcher: Optional[ItemMatcher] = None,
    min_score: float = 0.5,
    reorder: bool = True,
) -> SheetGrid:
    """Transcript in, finished grid out."""

    orders = parse_transcript(transcript, shop_marker)
    orders = match_orders(orders, products, matcher=matcher, min_score=min_score)
    return build_sheet(orders, products, variant=variant, reorder=reorder)
