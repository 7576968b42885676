"""Helpers shared by the report builders."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from devtrack_reports.config import SETTINGS

from ..document import Column
from ..models import DevelopmentRecord, UnitRecord
from ..money import ex_vat, vat_rate_for
from ..rules import effective_price


def report_currency(developments: Sequence[DevelopmentRecord]) -> str:
    """The developments' shared currency, else the configured default."""
    currencies = {dev.currency for dev in developments}
    if len(currencies) == 1:
        return currencies.pop()
    return SETTINGS.default_currency


def unit_vat_rate(development: DevelopmentRecord, unit: UnitRecord) -> Decimal:
    return vat_rate_for(development.vat_rates, unit.unit_type)


def unit_ex_vat(development: DevelopmentRecord, unit: UnitRecord) -> Decimal:
    return ex_vat(effective_price(unit), unit_vat_rate(development, unit))


def days_since(day: date | None, today: date) -> int | None:
    if day is None:
        return None
    return (today - day).days


def sum_decimals(values: Iterable[Decimal | None]) -> Decimal:
    return sum((value for value in values if value is not None), Decimal("0"))


def pad(cells: Sequence[object], width: int) -> tuple[object, ...]:
    return tuple(cells) + (None,) * (width - len(cells))


def percent(part: int | Decimal, whole: int | Decimal) -> Decimal:
    if not whole:
        return Decimal("0")
    return (Decimal(part) * 100 / Decimal(whole)).quantize(Decimal("0.1"))


MONEY_COLUMN_WIDTH = 14

FLAG_COLUMNS = (
    Column("BCMS", "flag", width=6),
    Column("Land", "flag", width=6),
    Column("Home", "flag", width=6),
    Column("SAN", "flag", width=6),
    Column("C.Out", "flag", width=6),
    Column("C.In", "flag", width=6),
    Column("Closed", "flag", width=6),
)


def documentation_flags(unit: UnitRecord) -> tuple[bool, ...]:
    doc = unit.documentation
    return (
        doc.bcms_received,
        doc.land_registry_approved,
        doc.homebond_received,
        doc.san_approved,
        doc.contract_issued,
        doc.contract_signed,
        doc.sale_closed,
    )
