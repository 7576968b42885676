"""Week and month period keys.

Week numbers follow the "day of year plus weekday of 1 January, divided by
seven, rounded up" rule with Sunday counted as weekday 0. The first partial
week of a year is week 1 of that year and no week is reassigned across a year
boundary.

Keys order chronologically by ``(year, number)``. Labels are only for display;
anything that sorts labels must go through the parse functions.
"""
from __future__ import annotations

import calendar
import math
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from devtrack_reports.logging_config import get_logger

logger = get_logger(__name__)

EPOCH = date(1970, 1, 1)
WEEK = "week"
MONTH = "month"

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_WEEK_PATTERN = re.compile(r"^\s*W(\d{1,2})\s+(\d{4})\s*$", re.IGNORECASE)
_MONTH_NAME_PATTERN = re.compile(r"^\s*([A-Za-z]{3})[A-Za-z]*\s+'?(\d{2}|\d{4})\s*$")
_MONTH_ISO_PATTERN = re.compile(r"^\s*(\d{4})-(\d{1,2})(?:-\d{1,2})?\s*$")


def _sunday_based_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


def week_number(day: date) -> int:
    start_of_year = date(day.year, 1, 1)
    days = (day - start_of_year).days
    return math.ceil((days + _sunday_based_weekday(start_of_year) + 1) / 7)


@dataclass(frozen=True, order=True)
class PeriodKey:
    year: int
    number: int
    granularity: str = MONTH

    @property
    def label(self) -> str:
        if self.granularity == WEEK:
            return f"W{self.number:02d} {self.year}"
        return f"{MONTH_NAMES[self.number - 1]} {self.year}"

    @property
    def short_label(self) -> str:
        if self.granularity == WEEK:
            return f"W{self.number:02d} '{self.year % 100:02d}"
        return f"{MONTH_NAMES[self.number - 1]} '{self.year % 100:02d}"

    def start_date(self) -> date:
        if self.granularity == WEEK:
            return parse_week_key(self.label)
        return date(self.year, self.number, 1)

    def end_date(self) -> date:
        if self.granularity == WEEK:
            start_of_year = date(self.year, 1, 1)
            sunday = start_of_year + timedelta(days=(self.number - 1) * 7 - _sunday_based_weekday(start_of_year))
            return min(sunday + timedelta(days=6), date(self.year, 12, 31))
        return date(self.year, self.number, calendar.monthrange(self.year, self.number)[1])

    @classmethod
    def from_label(cls, text: str, granularity: str = MONTH) -> "PeriodKey":
        if granularity == WEEK:
            return week_key(parse_week_key(text))
        return month_key(parse_month_key(text))

    def __str__(self) -> str:
        return self.label


def week_key(day: date) -> PeriodKey:
    return PeriodKey(year=day.year, number=week_number(day), granularity=WEEK)


def month_key(day: date) -> PeriodKey:
    return PeriodKey(year=day.year, number=day.month, granularity=MONTH)


def bucket(day: date, granularity: str = MONTH) -> PeriodKey:
    return week_key(day) if granularity == WEEK else month_key(day)


def parse_week_key(text: str | PeriodKey) -> date:
    """Return a date inside the week named by ``text`` (``EPOCH`` if unparseable)."""
    if isinstance(text, PeriodKey):
        text = text.label
    match = _WEEK_PATTERN.match(str(text or ""))
    if not match:
        logger.warning("Unrecognized week key %r; using %s", text, EPOCH.isoformat())
        return EPOCH
    number, year = int(match.group(1)), int(match.group(2))
    if not 1 <= year <= 9999 or number < 1:
        logger.warning("Week key %r is out of range; using %s", text, EPOCH.isoformat())
        return EPOCH
    start_of_year = date(year, 1, 1)
    offset = (number - 1) * 7 - _sunday_based_weekday(start_of_year) + 1
    candidate = start_of_year + timedelta(days=max(offset, 0))
    return min(candidate, date(year, 12, 31))


def parse_month_key(text: str | PeriodKey) -> date:
    """Return the first day of the month named by ``text``.

    Accepts ``Jan 2024``, ``Jan '24`` and ``2024-01``. Two-digit years are
    read as 20xx. Unparseable input returns ``EPOCH``.
    """
    if isinstance(text, PeriodKey):
        text = text.label
    raw = str(text or "")
    iso = _MONTH_ISO_PATTERN.match(raw)
    if iso:
        year, month = int(iso.group(1)), int(iso.group(2))
    else:
        match = _MONTH_NAME_PATTERN.match(raw)
        name = match.group(1).title() if match else ""
        if name not in MONTH_NAMES:
            logger.warning("Unrecognized month key %r; using %s", text, EPOCH.isoformat())
            return EPOCH
        month = MONTH_NAMES.index(name) + 1
        year = int(match.group(2))
        if year < 100:
            year += 2000
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        logger.warning("Month key %r is out of range; using %s", text, EPOCH.isoformat())
        return EPOCH
    return date(year, month, 1)


def parse_key(text: str | PeriodKey, granularity: str = MONTH) -> date:
    if isinstance(text, PeriodKey):
        granularity = text.granularity
    return parse_week_key(text) if granularity == WEEK else parse_month_key(text)


def sort_labels(labels: Iterable[str], granularity: str = MONTH) -> list[str]:
    return sorted(labels, key=lambda label: parse_key(label, granularity))


def months_back(day: date, months: int) -> date:
    """First day of the month ``months`` before ``day``'s month."""
    index = day.year * 12 + (day.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def last_day_of_month(day: date) -> date:
    return date(day.year, day.month, calendar.monthrange(day.year, day.month)[1])
