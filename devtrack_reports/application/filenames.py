"""Download filename convention for generated reports."""
from __future__ import annotations

import re
from datetime import date

from devtrack_reports.domain.services import ReportKind

from .dto import EXTENSIONS

REPORT_STEMS = {
    ReportKind.LOOKAHEAD: "12-Week-Lookahead",
    ReportKind.SALES_ACTIVITY: "Sales-Activity-4-Weeks",
    ReportKind.CASHFLOW: "Cashflow-Report",
    ReportKind.UNITS_EXPORT: "Units-Export",
}

_WHITESPACE = re.compile(r"\s+")


def report_filename(kind: ReportKind, fmt: str, on: date, development_name: str | None = None) -> str:
    """``<Stem>-<ISODate>.<ext>``, or ``<Development-Name>-Report-<ISODate>.<ext>``."""
    extension = EXTENSIONS[fmt]
    if kind is ReportKind.DEVELOPMENT:
        stem = f"{_WHITESPACE.sub('-', (development_name or '').strip())}-Report"
    else:
        stem = REPORT_STEMS[kind]
    return f"{stem}-{on.isoformat()}.{extension}"
