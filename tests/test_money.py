from decimal import Decimal

import pytest

from devtrack_reports.domain.money import (
    VAT_TOLERANCE,
    currency_symbol,
    ex_vat,
    excel_number_format,
    format_currency,
    round_money,
    vat_amount,
    vat_rate_for,
)


@pytest.mark.parametrize("amount", ["0", "0.01", "99.99", "123456.78", "395000", "1000000.01"])
@pytest.mark.parametrize("rate", ["0", "9", "13.5", "23", "99.9"])
def test_ex_vat_recovers_inclusive_amount(amount: str, rate: str) -> None:
    inc = Decimal(amount)
    pct = Decimal(rate)

    net = ex_vat(inc, pct)

    assert net == net.quantize(Decimal("0.01"))
    assert abs(net * (1 + pct / 100) - inc) <= VAT_TOLERANCE


def test_ex_vat_known_value() -> None:
    assert ex_vat(Decimal("113500"), Decimal("13.5")) == Decimal("100000.00")
    assert vat_amount(Decimal("113500"), Decimal("13.5")) == Decimal("13500.00")


def test_vat_rate_lookup_falls_back() -> None:
    table = {"Apartment": Decimal("23")}

    assert vat_rate_for(table, "Apartment") == Decimal("23")
    assert vat_rate_for(table, "Penthouse") == Decimal("13.5")
    assert vat_rate_for(None, "House-Semi") == Decimal("13.5")


def test_round_money_is_half_up() -> None:
    assert round_money(Decimal("2.345")) == Decimal("2.35")
    assert round_money(Decimal("2.5"), 0) == Decimal("3")


def test_format_currency() -> None:
    assert format_currency(Decimal("1234567.4"), "EUR") == "€1,234,567"
    assert format_currency(Decimal("-950.5"), "GBP", 2) == "-£950.50"
    assert format_currency(None, "USD") == "$0"
    assert currency_symbol("CHF") == "CHF "


def test_excel_number_format() -> None:
    assert excel_number_format("EUR") == '"€"#,##0'
    assert excel_number_format("USD", 2) == '"$"#,##0.00'
