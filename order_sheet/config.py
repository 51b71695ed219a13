"""Configuration helpers for the order sheet pipeline."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_SHOP_MARKER = "과실당"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    return value if value not in (None, "") else default


@dataclass(frozen=True)
class Settings:
    """Runtime settings for parsing, catalog lookups and exports."""

    shop_marker: str = _env("SHOP_NAME_MARKER", DEFAULT_SHOP_MARKER)
    supabase_url: Optional[str] = _env("SUPABASE_URL")
    supabase_key: Optional[str] = _env("SUPABASE_SERVICE_KEY")
    products_table: str = _env("SUPABASE_PRODUCTS_TABLE", "products")
    service_account_file: Optional[str] = _env("GOOGLE_SERVICE_ACCOUNT_FILE")
    spreadsheet_id: Optional[str] = _env("SPREADSHEET_ID")
    request_timeout: int = int(_env("REQUEST_TIMEOUT_SECONDS", "30"))
    match_min_score: float = float(_env("MATCH_MIN_SCORE", "0.5"))
    column_width_max: int = int(_env("COLUMN_WIDTH_MAX", "300"))


def get_settings() -> Settings:
    """Return the active configuration, re-reading the environment."""

    return Settings(
        shop_marker=_env("SHOP_NAME_MARKER", DEFAULT_SHOP_MARKER),
        supabase_url=_env("SUPABASE_URL"),
        supabase_key=_env("SUPABASE_SERVICE_KEY"),
        products_table=_env("SUPABASE_PRODUCTS_TABLE", "products"),
        service_account_file=_env("GOOGLE_SERVICE_ACCOUNT_FILE"),
        spreadsheet_id=_env("SPREADSHEET_ID"),
        request_timeout=int(_env("REQUEST_TIMEOUT_SECONDS", "30")),
        match_min_score=float(_env("MATCH_MIN_SCORE", "0.5")),
        column_width_max=int(_env("COLUMN_WIDTH_MAX", "300")),
    )


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s")
