"""Match free-text order lines against catalog product names."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from .schema import OrderItem, ProductRef

QUANTITY_CHUNK = re.compile(r"([^\d\n]+?)\s*(\d+)\s*개")
TIMESTAMP_PREFIX = re.compile(r"^\[[^\]]*\]\s*")


@dataclass(frozen=True)
class ProductMatch:
    product: ProductRef
    similarity: float


def _collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text.replace("\n", " ")).strip()


def similarity(first: str, second: str) -> float:
    """Score in [0, 1] for how closely two product labels agree."""
    s1 = first.lower().strip()
    s2 = second.lower().strip()

    if s1 == s2:
        return 1.0
    if not s1 or not s2:
        return 0.0

    if s1 in s2 or s2 in s1:
        shorter, longer = sorted((len(s1), len(s2)))
        return min(shorter / longer * 0.9, 0.9)

    longest = max(len(s1), len(s2))
    positional = sum(1 for a, b in zip(s1, s2) if a == b) / longest

    common = sum(1 for ch in s1 if ch in s2) / longest

    words1 = s1.split()
    words2 = s2.split()
    keyword = sum(1 for word in words1 if word in words2) / max(len(words1), len(words2))

    return min(max(positional, common, keyword), 1.0)


def find_matches(
    text: str,
    products: Iterable[ProductRef],
    threshold: float = 0.1,
    limit: int = 5,
) -> List[ProductMatch]:
    """Best catalog candidates for ``text``, active or not, best first."""
    query = text.strip()
    matches: List[ProductMatch] = []
    for product in products:
        score = similarity(query, _collapse(product.name))
        if score >= threshold:
            matches.append(ProductMatch(product=product, similarity=score))
    matches.sort(key=lambda match: match.similarity, reverse=True)
    return matches[:limit]


def extract_items(
    order_text: str,
    products: Sequence[ProductRef],
    min_score: float = 0.5,
) -> List[OrderItem]:
    """Read ``<product> <n>개`` chunks out of an order and total them per product.

    Chunks that do not match an active product closely enough are skipped.
    """
    quantities: Dict[str, int] = {}
    prices: Dict[str, int] = {}
    for line in order_text.split("\n"):
        line = TIMESTAMP_PREFIX.sub("", line.strip())
        for label, count in QUANTITY_CHUNK.findall(line):
            label = label.strip(" ,/+&")
            quantity = int(count)
            if not label or quantity <= 0:
                continue

            candidates = [m for m in find_matches(label, products, threshold=min_score) if m.product.is_active]
            if not candidates:
                logging.debug("No active product matches %r", label)
                continue

            product = candidates[0].product
            quantities[product.name] = quantities.get(product.name, 0) + quantity
            prices[product.name] = product.price

    return [OrderItem(name=name, quantity=qty, price=prices[name]) for name, qty in quantities.items()]

