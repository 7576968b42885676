"""Storage helpers for the default VAT-rate table."""
from __future__ import annotations

import json
import os
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

DEFAULT_PATH = Path(__file__).resolve().parents[3] / "vat_rates_override.json"

# Irish residential rate applies to every unit type unless overridden.
BASE_VAT_RATES: dict[str, Decimal] = {
    "House-Semi": Decimal("13.5"),
    "House-Detached": Decimal("13.5"),
    "House-Terrace": Decimal("13.5"),
    "Apartment": Decimal("13.5"),
    "Duplex Apartment": Decimal("13.5"),
    "Apartment Studio": Decimal("13.5"),
}


def _override_path(path: Path | None) -> Path:
    if path is not None:
        return path
    env_path = os.getenv("DEVTRACK_VAT_OVERRIDE")
    return Path(env_path) if env_path else DEFAULT_PATH


def _normalize_rates(raw: dict[str, Any] | None) -> dict[str, Decimal]:
    normalized: dict[str, Decimal] = {}
    if not isinstance(raw, dict):
        return normalized
    for key, value in raw.items():
        if key is None or value is None:
            continue
        key_str = str(key).strip()
        if not key_str:
            continue
        try:
            rate = Decimal(str(value).strip())
        except InvalidOperation:
            continue
        if rate < 0 or rate >= 100:
            continue
        normalized[key_str] = rate
    return normalized


def load_vat_rates(path: Path | None = None) -> dict[str, Decimal]:
    override_path = _override_path(path)
    rates = dict(BASE_VAT_RATES)
    if not override_path.exists():
        return rates
    try:
        data = json.loads(override_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return rates
    rates.update(_normalize_rates(data))
    return rates


def save_vat_rates(rates: dict[str, Any], path: Path | None = None) -> dict[str, Decimal]:
    override_path = _override_path(path)
    normalized = _normalize_rates(rates)
    override_path.write_text(
        json.dumps({key: str(value) for key, value in normalized.items()}, indent=2, sort_keys=True),
        encoding="utf-8",
    )
    merged = dict(BASE_VAT_RATES)
    merged.update(normalized)
    return merged
