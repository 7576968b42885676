"""Precedence rules for fields that have more than one source.

Each rule is the only place its fallback order is written down:

* ``effective_price``: price inc VAT, then list price, then zero.
* ``sale_value``: sold price, then ``effective_price``.
* ``effective_close_date``: sale-closed documentation date, then the actual-close
  key date, then the legacy close date.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal

from .models import UnitRecord

ZERO = Decimal("0")


def _positive(value: Decimal | None) -> Decimal | None:
    if value is None or value <= 0:
        return None
    return value


def effective_price(unit: UnitRecord) -> Decimal:
    return _positive(unit.price_inc_vat) or _positive(unit.list_price) or ZERO


def sale_value(unit: UnitRecord) -> Decimal:
    return _positive(unit.sold_price) or effective_price(unit)


def effective_close_date(unit: UnitRecord) -> date | None:
    return unit.documentation.sale_closed_date or unit.actual_close or unit.close_date


def planned_close_date(unit: UnitRecord) -> date | None:
    return unit.planned_close


def cashflow_date(unit: UnitRecord) -> date | None:
    """Date used by the cash-flow monitoring series: closed, else planned."""
    return effective_close_date(unit) or unit.planned_close
