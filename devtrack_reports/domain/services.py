"""Domain service selecting the builder for a report kind."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Callable, Mapping, Sequence

from .builders.activity import build_activity_report
from .builders.cashflow import build_cashflow_report
from .builders.development import build_development_report
from .builders.lookahead import build_lookahead_report
from .builders.units_export import build_units_export
from .document import DocumentModel
from .models import DevelopmentRecord
from .options import ReportOptions

Builder = Callable[[Sequence[DevelopmentRecord], datetime, ReportOptions | None], DocumentModel]


class ReportKind(str, Enum):
    LOOKAHEAD = "12week-lookahead"
    SALES_ACTIVITY = "sales-activity"
    CASHFLOW = "cashflow"
    DEVELOPMENT = "development"
    UNITS_EXPORT = "units-export"


DEFAULT_BUILDERS: Mapping[ReportKind, Builder] = {
    ReportKind.LOOKAHEAD: build_lookahead_report,
    ReportKind.SALES_ACTIVITY: build_activity_report,
    ReportKind.CASHFLOW: build_cashflow_report,
    ReportKind.DEVELOPMENT: build_development_report,
    ReportKind.UNITS_EXPORT: build_units_export,
}


class ReportBuilder:
    """Builds a complete document model before anything is emitted."""

    def __init__(self, builders: Mapping[ReportKind, Builder] | None = None) -> None:
        self._builders = dict(builders or DEFAULT_BUILDERS)

    def build(
        self,
        kind: ReportKind,
        developments: Sequence[DevelopmentRecord],
        as_of: datetime,
        options: ReportOptions | None = None,
    ) -> DocumentModel:
        try:
            builder = self._builders[ReportKind(kind)]
        except KeyError as exc:
            raise ValueError(f"No builder registered for {kind!r}") from exc
        return builder(developments, as_of, options)
