"""Cash-flow reports.

``build_cashflow_report`` lays out closed sales as a month-by-unit matrix
whose subtotal and grand-total cells are live formulas, so a spreadsheet user
can filter unit rows and still read correct totals. ``cashflow_series`` backs
the monitoring chart: it sums unit prices per period and development.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Sequence

from devtrack_reports.logging_config import get_logger

from ..aggregation import group, natural_key
from ..document import GROUP, SUBTOTAL, TOTAL, Column, DocumentModel, FormulaTable, Heading
from ..formulas import CellRef, GridBuilder, row_total, subtotal_of, sum_of
from ..models import CashflowFilter, ClosedSale, DevelopmentRecord
from ..options import ReportOptions
from ..periods import MONTH, PeriodKey, bucket, month_key
from ..rules import cashflow_date, effective_close_date, effective_price, sale_value
from ..windows import PeriodRange, select_developments
from .common import MONEY_COLUMN_WIDTH, report_currency

logger = get_logger(__name__)

TITLE = "Cashflow Report"
SHEET = "Cashflow"
EMPTY_MESSAGE = "No closed sales found for the selected period."
LABEL_HEADER = "Development/ Unit"
SHORT_LABEL_THRESHOLD = 12


def closed_sales(
    developments: Sequence[DevelopmentRecord],
    today: date,
    period_range: PeriodRange | None = None,
    filters: CashflowFilter | None = None,
) -> list[ClosedSale]:
    """Units with a close date and a positive sale value inside the range."""
    period_range = period_range or PeriodRange()
    filters = filters or CashflowFilter()
    sales: list[ClosedSale] = []
    for development in developments:
        for unit in development.units:
            closed_on = effective_close_date(unit)
            if closed_on is None:
                continue
            value = sale_value(unit)
            if value <= 0:
                continue
            if not filters.accepts(development, unit):
                continue
            if not period_range.includes(month_key(closed_on), today):
                continue
            sales.append(ClosedSale(development=development, unit=unit, close_date=closed_on, value=value))
    return sales


def build_cashflow_report(
    developments: Sequence[DevelopmentRecord],
    as_of: datetime,
    options: ReportOptions | None = None,
) -> DocumentModel:
    options = options or ReportOptions()
    today = as_of.date()
    selected = select_developments(developments, options.selected_ids)
    currency = report_currency(selected)
    sales = closed_sales(selected, today, options.period_range, options.filters)

    if not sales:
        return DocumentModel(
            title=TITLE,
            generated_at=as_of,
            currency=currency,
            blocks=(Heading(TITLE, sheet=SHEET), Heading(EMPTY_MESSAGE, level=2, sheet=SHEET)),
        )

    months = sorted({month_key(sale.close_date) for sale in sales})
    column_of = {key: index + 1 for index, key in enumerate(months)}
    total_col = len(months) + 1
    width = total_col + 1

    grid = GridBuilder()
    subtotal_rows: list[int] = []
    # same-named developments keep separate groups
    by_development = group(sales, key=lambda sale: (sale.development.name, sale.development.id), order=lambda key: key)
    for (name, _dev_id), dev_group in by_development.items():
        grid.add_row([name] + [None] * (width - 1), emphasis=GROUP)
        first = grid.next_row
        for sale in sorted(dev_group.entries, key=lambda item: natural_key(item.unit.unit_number)):
            cells: list[object] = [sale.unit.unit_number] + [None] * (width - 1)
            row = grid.next_row
            cells[column_of[month_key(sale.close_date)]] = sale.value
            cells[total_col] = row_total(row, 1, len(months))
            grid.add_row(cells)
        span = grid.span_since(first)
        subtotal_rows.append(
            grid.add_row(["Sub Total"] + [subtotal_of(span.column(col)) for col in range(1, width)], emphasis=SUBTOTAL)
        )
    grid.add_row(
        ["Grand Total"] + [sum_of(*(CellRef(row, col) for row in subtotal_rows)) for col in range(1, width)],
        emphasis=TOTAL,
    )

    columns = (
        (Column(LABEL_HEADER, width=30),)
        + tuple(Column(key.short_label, "money", width=MONEY_COLUMN_WIDTH) for key in months)
        + (Column("Total", "money", width=MONEY_COLUMN_WIDTH),)
    )
    period = f"Period: {months[0].short_label} to {months[-1].short_label}"
    logger.debug("Cash-flow matrix: %d sales over %d months", len(sales), len(months))
    return DocumentModel(
        title=TITLE,
        subtitle=period,
        generated_at=as_of,
        currency=currency,
        blocks=(
            Heading(TITLE, subtitle=period, sheet=SHEET),
            FormulaTable(None, columns, grid.rows(), sheet=SHEET),
        ),
    )


@dataclass(frozen=True)
class SeriesPoint:
    key: PeriodKey
    label: str
    values: dict[str, Decimal]
    total: Decimal


@dataclass(frozen=True)
class CashflowSeries:
    points: tuple[SeriesPoint, ...]
    developments: tuple[str, ...]

    @property
    def total(self) -> Decimal:
        return sum((point.total for point in self.points), Decimal("0"))


def cashflow_series(
    developments: Sequence[DevelopmentRecord],
    today: date,
    granularity: str = MONTH,
    period_range: PeriodRange | None = None,
    filters: CashflowFilter | None = None,
) -> CashflowSeries:
    """Per-period sums of unit prices, split by development.

    Units are placed by their close date, falling back to the planned close.
    Periods are ordered chronologically; labels switch to the short form when
    there are more than twelve of them.
    """
    period_range = period_range or PeriodRange()
    filters = filters or CashflowFilter()

    buckets: dict[PeriodKey, dict[str, Decimal]] = {}
    names: set[str] = set()
    for development in developments:
        for unit in development.units:
            if not filters.accepts(development, unit):
                continue
            when = cashflow_date(unit)
            if when is None:
                continue
            key = bucket(when, granularity)
            if not period_range.includes(key, today):
                continue
            per_dev = buckets.setdefault(key, {})
            per_dev[development.name] = per_dev.get(development.name, Decimal("0")) + effective_price(unit)
            names.add(development.name)

    keys = sorted(buckets)
    short = len(keys) > SHORT_LABEL_THRESHOLD
    points = tuple(
        SeriesPoint(
            key=key,
            label=key.short_label if short else key.label,
            values=dict(buckets[key]),
            total=sum(buckets[key].values(), Decimal("0")),
        )
        for key in keys
    )
    return CashflowSeries(points=points, developments=tuple(sorted(names)))
