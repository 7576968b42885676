"""Options shared by the report builders."""
from __future__ import annotations

from dataclasses import dataclass, field

from .models import CashflowFilter
from .windows import PeriodRange


@dataclass(slots=True, frozen=True)
class ReportOptions:
    selected_ids: tuple[str, ...] = ()
    development_id: str | None = None
    period_range: PeriodRange = field(default_factory=PeriodRange)
    filters: CashflowFilter = field(default_factory=CashflowFilter)
    horizon_days: int | None = None
    window_days: int | None = None
