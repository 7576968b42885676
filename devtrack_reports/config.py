"""Central configuration for the DevTrack reporting package."""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timezone, tzinfo
from decimal import Context, Decimal, ROUND_HALF_UP

from devtrack_reports.infrastructure.storage.vat_rate_store import load_vat_rates

APP_NAME = "DevTrack Portfolio Manager"
DEFAULT_CURRENCY = "EUR"
DEFAULT_VAT_RATE = Decimal("13.5")
LOOKAHEAD_DAYS = 12 * 7
ACTIVITY_WINDOW_DAYS = 4 * 7


@dataclass(slots=True, frozen=True)
class Settings:
    decimal_context: Context
    timezone: tzinfo
    app_name: str
    default_currency: str
    default_vat_rate: Decimal
    default_vat_rates: dict[str, Decimal]
    lookahead_days: int
    activity_window_days: int
    log_level: str


SETTINGS = Settings(
    decimal_context=Context(prec=28, rounding=ROUND_HALF_UP),
    timezone=timezone.utc,
    app_name=APP_NAME,
    default_currency=os.getenv("DEVTRACK_DEFAULT_CURRENCY", DEFAULT_CURRENCY).strip().upper() or DEFAULT_CURRENCY,
    default_vat_rate=DEFAULT_VAT_RATE,
    default_vat_rates=load_vat_rates(),
    lookahead_days=LOOKAHEAD_DAYS,
    activity_window_days=ACTIVITY_WINDOW_DAYS,
    log_level=os.getenv("DEVTRACK_LOG_LEVEL", "INFO").strip().upper() or "INFO",
)
