"""Shared parsing utilities for snapshot ingestion."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from io import BytesIO
from pathlib import Path
import re

import pandas as pd

_MISSING = {"", "NAN", "NAT", "NONE", "NULL", "N/A"}
_ISO_DATE = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}")


def ensure_bytes(source: BytesIO | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, Path):
        return source.read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return str(value).strip().upper() in _MISSING


def parse_decimal(value: object, default: Decimal | None = Decimal("0")) -> Decimal | None:
    if is_blank(value):
        return default
    s = str(value).strip()
    negative = False
    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]
    for ch in [",", "$", "€", "£", " "]:
        s = s.replace(ch, "")
    try:
        result = Decimal(s)
    except InvalidOperation:
        return default
    if not result.is_finite():
        return default
    if negative:
        result = -result
    return result


def parse_int(value: object, default: int = 0) -> int:
    parsed = parse_decimal(value, default=None)
    if parsed is None:
        # "Studio" or "2 Bed" style labels
        match = re.search(r"\d+", str(value or ""))
        return int(match.group()) if match else default
    return int(parsed)


def parse_date(value: object) -> date | None:
    """Dates from ISO strings, ``dd/mm/yyyy`` strings, Excel cells or timestamps."""
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    parsed = pd.to_datetime(text, errors="coerce", dayfirst=not _ISO_DATE.match(text))
    if pd.isna(parsed):
        return None
    return parsed.date()


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if is_blank(value):
        return False
    return str(value).strip().lower() in {"true", "yes", "y", "1"}


def parse_text(value: object) -> str | None:
    if is_blank(value):
        return None
    return str(value).strip()
