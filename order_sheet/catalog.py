"""Load the product catalog from a JSON export or the Supabase REST API."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional

import requests

from .config import Settings
from .schema import ProductRef

PRODUCT_FIELDS = "id,name,price,sale_date,is_active"


def _to_price(value) -> int:
    if value is None:
        return 0
    try:
        return int(float(str(value).replace(",", "")))
    except (TypeError, ValueError):
        return 0


def _to_active(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "n")
    return bool(value) if value is not None else True


def product_from_row(row: dict) -> Optional[ProductRef]:
    name = str(row.get("name") or "").strip()
    if not name:
        return None
    sale_date = row.get("sale_date")
    return ProductRef(
        name=name,
        price=_to_price(row.get("price")),
        sale_date=str(sale_date).strip() if sale_date not in (None, "") else None,
        is_active=_to_active(row.get("is_active", True)),
    )


def products_from_rows(rows: Iterable[dict]) -> List[ProductRef]:
    products: List[ProductRef] = []
    for row in rows:
        product = product_from_row(row)
        if product is None:
            logging.warning("Skipping catalog row without a name: %s", row)
            continue
        products.append(product)
    return products


def load_products_file(path: Path) -> List[ProductRef]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("products", [])
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a list of products.")
    return products_from_rows(payload)


def fetch_products(settings: Settings) -> List[ProductRef]:
    if not settings.supabase_url or not settings.supabase_key:
        raise SystemExit("SUPABASE_URL and SUPABASE_SERVICE_KEY are required to fetch products.")

    url = f"{settings.supabase_url.rstrip('/')}/rest/v1/{settings.products_table}"
    headers = {
        "apikey": settings.supabase_key,
        "Authorization": f"Bearer {settings.supabase_key}",
    }
    logging.debug("Requesting products from %s", url)

    try:
        response = requests.get(
            url,
            params={"select": PRODUCT_FIELDS},
            headers=headers,
            timeout=settings.request_timeout,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        logging.error("Failed to fetch products: %s", exc)
        raise

    payload = response.json()
    if not isinstance(payload, list):
        logging.error("Unexpected product payload: %s", payload)
        raise ValueError("Product endpoint must return a list.")
    logging.info("Fetched %d product(s)", len(payload))
    return products_from_rows(payload)
