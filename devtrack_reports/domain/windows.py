"""Inclusion windows evaluated against a report's "today".

A unit that lacks the date a window needs is left out of that window. A
missing milestone date means the event has not happened yet, which is a valid
state rather than a data defect.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Sequence

from devtrack_reports.config import SETTINGS

from .aggregation import ACTIVITY_KIND_ORDER
from .models import (
    ActivityEntry,
    DevelopmentRecord,
    LookaheadEntry,
    SalesStatus,
)
from .periods import PeriodKey, last_day_of_month, months_back, parse_key, parse_month_key
from .rules import planned_close_date, sale_value


def select_developments(
    developments: Iterable[DevelopmentRecord],
    selected_ids: Sequence[str] | None = None,
) -> list[DevelopmentRecord]:
    """An empty or missing selection means every development."""
    if not selected_ids:
        return list(developments)
    wanted = set(selected_ids)
    return [dev for dev in developments if dev.id in wanted]


def lookahead_entries(
    developments: Iterable[DevelopmentRecord],
    today: date,
    horizon_days: int | None = None,
    selected_ids: Sequence[str] | None = None,
) -> list[LookaheadEntry]:
    if horizon_days is None:
        horizon_days = SETTINGS.lookahead_days
    horizon = today + timedelta(days=horizon_days)

    entries: list[LookaheadEntry] = []
    for development in select_developments(developments, selected_ids):
        for unit in development.units:
            if unit.sales_status is SalesStatus.COMPLETE:
                continue
            planned = planned_close_date(unit)
            if planned is None or planned > horizon:
                continue
            if planned < today:
                entries.append(
                    LookaheadEntry(
                        development=development,
                        unit=unit,
                        is_past_due=True,
                        days_overdue=(today - planned).days,
                    )
                )
            else:
                entries.append(
                    LookaheadEntry(
                        development=development,
                        unit=unit,
                        is_past_due=False,
                        days_overdue=None,
                        weeks_remaining=(planned - today).days // 7,
                    )
                )
    return entries


def activity_entries(
    developments: Iterable[DevelopmentRecord],
    today: date,
    window_days: int | None = None,
    selected_ids: Sequence[str] | None = None,
) -> list[ActivityEntry]:
    """One entry per milestone that falls inside ``[today - window, today]``."""
    if window_days is None:
        window_days = SETTINGS.activity_window_days
    window_start = today - timedelta(days=window_days)

    entries: list[ActivityEntry] = []
    for development in select_developments(developments, selected_ids):
        for unit in development.units:
            value = sale_value(unit)
            for kind in ACTIVITY_KIND_ORDER:
                happened = unit.documentation.milestone_date(kind)
                if happened is None or not window_start <= happened <= today:
                    continue
                entries.append(
                    ActivityEntry(
                        development=development,
                        unit=unit,
                        kind=kind,
                        activity_date=happened,
                        weeks_ago=(today - happened).days // 7,
                        value=value,
                    )
                )
    return entries


class RangePreset(str, Enum):
    ALL = "all"
    YEAR = "year"
    LAST_6_MONTHS = "last6"
    LAST_12_MONTHS = "last12"
    CUSTOM = "custom"


@dataclass(frozen=True)
class PeriodRange:
    """Quick or custom date range used by the cash-flow views."""

    preset: RangePreset = RangePreset.ALL
    year: int | None = None
    from_month: str | None = None
    to_month: str | None = None

    @classmethod
    def parse(cls, value: str | None, from_month: str | None = None, to_month: str | None = None) -> "PeriodRange":
        """Build a range from a quick-range id such as ``all``, ``2025`` or ``last6``."""
        text = (value or "all").strip().lower()
        if text.isdigit() and len(text) == 4:
            return cls(preset=RangePreset.YEAR, year=int(text))
        preset = RangePreset(text)
        if preset is RangePreset.CUSTOM:
            return cls(preset=preset, from_month=from_month, to_month=to_month)
        return cls(preset=preset)

    def resolve(self, today: date) -> tuple[date, date] | None:
        """Boundary dates, or ``None`` when everything is included."""
        if self.preset is RangePreset.YEAR and self.year is not None:
            return date(self.year, 1, 1), date(self.year, 12, 31)
        if self.preset is RangePreset.LAST_6_MONTHS:
            return months_back(today, 6), today
        if self.preset is RangePreset.LAST_12_MONTHS:
            return months_back(today, 12), today
        if self.preset is RangePreset.CUSTOM and self.from_month and self.to_month:
            return parse_month_key(self.from_month), last_day_of_month(parse_month_key(self.to_month))
        return None

    def includes(self, period: PeriodKey | str | date, today: date) -> bool:
        if isinstance(period, date):
            representative = period
        else:
            representative = parse_key(period)
        if self.preset is RangePreset.YEAR and self.year is not None:
            return representative.year == self.year
        bounds = self.resolve(today)
        if bounds is None:
            return True
        start, end = bounds
        return start <= representative <= end


def range_choices(today: date, years: int = 5) -> list[str]:
    """Quick-range ids offered by the cash-flow views, most recent year first."""
    presets = (RangePreset.ALL, RangePreset.LAST_6_MONTHS, RangePreset.LAST_12_MONTHS, RangePreset.CUSTOM)
    return [preset.value for preset in presets] + [str(today.year - offset) for offset in range(years)]
