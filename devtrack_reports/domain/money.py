"""Money and VAT arithmetic.

Amounts are ``Decimal`` throughout. ``ex_vat`` rounds to two decimal places
(half-up), so ``ex_vat(x, r) * (1 + r / 100)`` is within ``VAT_TOLERANCE`` (one
minor currency unit) of ``x`` for any ``x >= 0`` and ``0 <= r < 100``.
Display rounding to whole units happens afterwards, in ``format_currency``.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from devtrack_reports.config import SETTINGS

HUNDRED = Decimal("100")
CENT = Decimal("0.01")
VAT_TOLERANCE = CENT

CURRENCY_SYMBOLS = {
    "EUR": "€",
    "GBP": "£",
    "USD": "$",
}


def round_money(amount: Decimal, places: int = 2) -> Decimal:
    quantum = Decimal(1).scaleb(-places)
    return Decimal(amount).quantize(quantum, rounding=ROUND_HALF_UP)


def ex_vat(amount_inc_vat: Decimal, rate_percent: Decimal) -> Decimal:
    divisor = SETTINGS.decimal_context.add(Decimal(1), Decimal(rate_percent) / HUNDRED)
    return round_money(SETTINGS.decimal_context.divide(Decimal(amount_inc_vat), divisor))


def vat_amount(amount_inc_vat: Decimal, rate_percent: Decimal) -> Decimal:
    return round_money(Decimal(amount_inc_vat) - ex_vat(amount_inc_vat, rate_percent))


def vat_rate_for(table: Mapping[str, Decimal] | None, unit_type: str) -> Decimal:
    """Look up a unit type's VAT rate.

    Falls back to the default table when the development has none, and to the
    default percentage when the unit type is not mapped.
    """
    rates = table if table is not None else SETTINGS.default_vat_rates
    rate = rates.get(unit_type)
    if rate is None:
        return SETTINGS.default_vat_rate
    return Decimal(rate)


def currency_symbol(currency: str) -> str:
    code = (currency or SETTINGS.default_currency).upper()
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def format_currency(amount: Decimal | int | float | None, currency: str, places: int = 0) -> str:
    if amount is None:
        amount = Decimal("0")
    value = round_money(Decimal(str(amount)), places)
    sign = "-" if value < 0 else ""
    return f"{sign}{currency_symbol(currency)}{abs(value):,.{places}f}"


def excel_number_format(currency: str, places: int = 0) -> str:
    decimals = "." + "0" * places if places else ""
    symbol = currency_symbol(currency).strip()
    return f'"{symbol}"#,##0{decimals}'
