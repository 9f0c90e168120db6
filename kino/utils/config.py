"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    host: str
    port: int
    database_path: Path
    log_level: str
    admin_token: str
    seed_demo_data: bool
    pricing_small_group_max_seats: int
    pricing_large_group_min_seats: int
    pricing_runtime_fee_threshold_minutes: int
    pricing_currency_precision: Decimal


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests call ``cache_clear``."""
    return Settings(
        app_name=os.getenv("APP_NAME", "Kino Reservations"),
        app_version=os.getenv("APP_VERSION", "1.0.0"),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        database_path=Path(
            os.getenv("DATABASE_PATH", str(PROJECT_ROOT / "data" / "kino.db"))
        ),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        admin_token=os.getenv("ADMIN_TOKEN", ""),
        seed_demo_data=_env_bool("SEED_DEMO_DATA", True),
        pricing_small_group_max_seats=int(
            os.getenv("PRICING_SMALL_GROUP_MAX_SEATS", "5")
        ),
        pricing_large_group_min_seats=int(
            os.getenv("PRICING_LARGE_GROUP_MIN_SEATS", "10")
        ),
        pricing_runtime_fee_threshold_minutes=int(
            os.getenv("PRICING_RUNTIME_FEE_THRESHOLD_MINUTES", "160")
        ),
        pricing_currency_precision=Decimal(
            os.getenv("PRICING_CURRENCY_PRECISION", "0.01")
        ),
    )
