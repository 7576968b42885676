from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

from devtrack_reports.domain.builders.cashflow import (
    EMPTY_MESSAGE,
    build_cashflow_report,
    cashflow_series,
    closed_sales,
)
from devtrack_reports.domain.document import GROUP, SUBTOTAL, TOTAL, FormulaTable, Heading
from devtrack_reports.domain.formulas import Formula, evaluate
from devtrack_reports.domain.models import CashflowFilter, SalesStatus
from devtrack_reports.domain.options import ReportOptions
from devtrack_reports.domain.periods import WEEK
from devtrack_reports.domain.windows import PeriodRange
from tests.factories import AS_OF, TODAY, closed_unit, make_development, make_unit


def portfolio():
    riverside = make_development(
        "Riverside",
        closed_unit("B", date(2024, 2, 20), "450000"),
        closed_unit("A", date(2024, 1, 10), "300000"),
        make_unit("C", planned=date(2024, 4, 1)),
    )
    elmwood = make_development("Elmwood", closed_unit("C", date(2024, 1, 25), "200000"))
    return [riverside, elmwood]


def formula_table(model) -> FormulaTable:
    return next(block for block in model.blocks if isinstance(block, FormulaTable))


def rows_with(table: FormulaTable, emphasis: str) -> list[list]:
    values = evaluate(table.rows)
    return [values[i] for i, row in enumerate(table.rows) if row.emphasis == emphasis]


def test_matrix_layout_and_totals() -> None:
    model = build_cashflow_report(portfolio(), AS_OF)
    table = formula_table(model)

    assert [column.label for column in table.columns] == ["Development/ Unit", "Jan '24", "Feb '24", "Total"]
    assert [row[0] for row in rows_with(table, GROUP)] == ["Elmwood", "Riverside"]

    elmwood, riverside = rows_with(table, SUBTOTAL)
    assert riverside[1:] == [Decimal("300000"), Decimal("450000"), Decimal("750000")]
    assert elmwood[1:] == [Decimal("200000"), Decimal("0"), Decimal("200000")]

    (grand,) = rows_with(table, TOTAL)
    assert grand[0] == "Grand Total"
    assert grand[1:] == [Decimal("500000"), Decimal("450000"), Decimal("950000")]
    assert model.subtitle == "Period: Jan '24 to Feb '24"


def test_unit_rows_hold_values_only_in_their_close_month() -> None:
    table = formula_table(build_cashflow_report(portfolio(), AS_OF))
    unit_rows = [row for row in table.rows if row.emphasis is None]

    assert [row.cells[0] for row in unit_rows] == ["C", "A", "B"]
    a_row = unit_rows[1]
    assert a_row.cells[1:3] == (Decimal("300000"), None)
    assert isinstance(a_row.cells[3], Formula)


def test_subtotals_and_grand_total_are_live_formulas() -> None:
    table = formula_table(build_cashflow_report(portfolio(), AS_OF))
    subtotal_rows = [i for i, row in enumerate(table.rows) if row.emphasis == SUBTOTAL]
    grand = table.rows[-1]

    first_subtotal = table.rows[subtotal_rows[0]]
    assert first_subtotal.cells[1].to_a1(origin_row=4) == "SUBTOTAL(9,B6:B6)"
    assert grand.cells[1].function == "SUM"
    referenced_rows = {ref.row for ref in grand.cells[1].references()}
    assert referenced_rows == set(subtotal_rows)


def test_formula_totals_match_direct_sums() -> None:
    developments = portfolio()
    table = formula_table(build_cashflow_report(developments, AS_OF))
    sales = closed_sales(developments, TODAY)

    subtotals = rows_with(table, SUBTOTAL)
    for name, sub in zip(["Elmwood", "Riverside"], subtotals):
        assert sub[-1] == sum(sale.value for sale in sales if sale.development.name == name)
    assert rows_with(table, TOTAL)[0][-1] == sum(sale.value for sale in sales)


def test_range_and_selection_filter_the_matrix() -> None:
    options = ReportOptions(period_range=PeriodRange.parse("custom", "2024-02", "2024-02"))
    table = formula_table(build_cashflow_report(portfolio(), AS_OF, options))

    assert [column.label for column in table.columns] == ["Development/ Unit", "Feb '24", "Total"]
    assert [row[0] for row in rows_with(table, GROUP)] == ["Riverside"]


def test_empty_period_renders_message() -> None:
    options = ReportOptions(period_range=PeriodRange.parse("2020"))
    model = build_cashflow_report(portfolio(), AS_OF, options)

    assert not any(isinstance(block, FormulaTable) for block in model.blocks)
    assert [block.text for block in model.blocks if isinstance(block, Heading)][-1] == EMPTY_MESSAGE


def test_closed_sales_use_close_date_precedence_and_skip_zero_values() -> None:
    legacy = make_unit("L", status=SalesStatus.COMPLETE, price="150000")
    legacy = replace(legacy, close_date=date(2023, 12, 5))
    zero = closed_unit("Z", date(2024, 1, 5), "0")

    sales = closed_sales([make_development("Legacy", legacy, zero)], TODAY)

    assert [(sale.unit.unit_number, sale.close_date) for sale in sales] == [("L", date(2023, 12, 5))]


def test_series_groups_by_period_and_development() -> None:
    series = cashflow_series(portfolio(), TODAY)

    assert [point.label for point in series.points] == ["Jan 2024", "Feb 2024", "Apr 2024"]
    assert series.points[0].values == {"Riverside": Decimal("300000"), "Elmwood": Decimal("200000")}
    assert series.points[2].values == {"Riverside": Decimal("300000")}
    assert series.developments == ("Elmwood", "Riverside")
    assert series.total == Decimal("1250000")


def test_series_filters_and_weekly_short_labels() -> None:
    units = [closed_unit(str(n), date(2024, 1, 1) + timedelta(weeks=n), "1000") for n in range(14)]
    dev = make_development("Weekly", *units)

    weekly = cashflow_series([dev], TODAY, granularity=WEEK)
    assert len(weekly.points) == 14
    assert weekly.points[0].label == "W01 '24"
    assert all(point.key.granularity == WEEK for point in weekly.points)

    filtered = cashflow_series(portfolio(), TODAY, filters=CashflowFilter(development_names=("Elmwood",)))
    assert filtered.developments == ("Elmwood",)


def test_series_honours_year_and_custom_ranges() -> None:
    year = cashflow_series(portfolio(), TODAY, period_range=PeriodRange.parse("2024"))
    custom = cashflow_series(portfolio(), TODAY, period_range=PeriodRange.parse("custom", "2024-02", "2024-04"))

    assert [point.label for point in year.points] == ["Jan 2024", "Feb 2024", "Apr 2024"]
    assert [point.label for point in custom.points] == ["Feb 2024", "Apr 2024"]
    assert cashflow_series(portfolio(), TODAY, period_range=PeriodRange.parse("2023")).points == ()


def test_same_named_developments_keep_separate_subtotals() -> None:
    first = make_development("Oak", closed_unit("1", date(2024, 1, 5), "100000"), dev_id="oak-north")
    second = make_development("Oak", closed_unit("1", date(2024, 1, 9), "250000"), dev_id="oak-south")

    table = formula_table(build_cashflow_report([second, first], AS_OF))

    assert [row[0] for row in rows_with(table, GROUP)] == ["Oak", "Oak"]
    assert [row[1] for row in rows_with(table, SUBTOTAL)] == [Decimal("100000"), Decimal("250000")]
    (grand,) = rows_with(table, TOTAL)
    assert grand[1] == Decimal("350000")
