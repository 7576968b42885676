"""12-week look-ahead report."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Sequence

from devtrack_reports.config import SETTINGS

from ..aggregation import GroupOrder, group, grand_total
from ..document import (
    PAST_DUE,
    SUBTOTAL,
    TOTAL,
    Column,
    DocumentModel,
    GroupedTable,
    Heading,
    Row,
    SummaryTable,
    TableGroup,
)
from ..models import DevelopmentRecord, LookaheadEntry
from ..options import ReportOptions
from ..rules import effective_price
from ..windows import lookahead_entries, select_developments
from .common import (
    FLAG_COLUMNS,
    MONEY_COLUMN_WIDTH,
    days_since,
    documentation_flags,
    report_currency,
    sum_decimals,
    unit_ex_vat,
    unit_vat_rate,
)

TITLE = "12-Week Lookahead Report"
EMPTY_MESSAGE = "No units are planned to close in the next 12 weeks."

DETAIL_COLUMNS = (
    Column("Unit", width=10),
    Column("Beds", "number", width=6),
    Column("Type", width=12),
    Column("Inc VAT", "money", width=MONEY_COLUMN_WIDTH),
    Column("VAT %", "percent", width=7, precision=1),
    Column("Ex VAT", "money", width=MONEY_COLUMN_WIDTH),
    Column("Status", width=12),
    Column("Plan Close", "date", width=11),
    Column("Days O/D", "number", width=8),
    Column("BCMS Date", "date", width=11),
    Column("Days", "number", width=6),
) + FLAG_COLUMNS

SUMMARY_COLUMNS = (
    Column("Development", width=30),
    Column("Units", "number", width=8),
    Column("Past Due", "number", width=9),
    Column("Value (Inc VAT)", "money", width=MONEY_COLUMN_WIDTH),
)

_INC_VAT = 3
_EX_VAT = 5


def _planned_sort_key(entry: LookaheadEntry):
    return entry.unit.planned_close


def _detail_row(entry: LookaheadEntry, today) -> Row:
    unit = entry.unit
    bcms_date = unit.documentation.bcms_received_date
    cells = (
        unit.unit_number,
        unit.bedrooms,
        unit.unit_type,
        effective_price(unit),
        unit_vat_rate(entry.development, unit),
        unit_ex_vat(entry.development, unit),
        unit.sales_status.value,
        unit.planned_close,
        entry.days_overdue,
        bcms_date,
        days_since(bcms_date, today),
    ) + documentation_flags(unit)
    return Row(cells=cells, emphasis=PAST_DUE if entry.is_past_due else None)


def _total_row(label: str, entries: Sequence[LookaheadEntry], emphasis: str) -> Row:
    cells = [None] * len(DETAIL_COLUMNS)
    cells[0] = label
    cells[_INC_VAT] = sum_decimals(effective_price(entry.unit) for entry in entries)
    cells[_EX_VAT] = sum_decimals(unit_ex_vat(entry.development, entry.unit) for entry in entries)
    return Row(cells=tuple(cells), emphasis=emphasis)


def build_lookahead_report(
    developments: Sequence[DevelopmentRecord],
    as_of: datetime,
    options: ReportOptions | None = None,
) -> DocumentModel:
    """Units planned to close within the horizon, plus the overdue backlog.

    One table group per development (alphabetical), rows ordered by planned
    close. Past-due rows carry the ``past_due`` emphasis and count towards the
    same subtotals as upcoming rows.
    """
    options = options or ReportOptions()
    today = as_of.date()
    horizon_days = options.horizon_days if options.horizon_days is not None else SETTINGS.lookahead_days
    selected = select_developments(developments, options.selected_ids)
    currency = report_currency(selected)

    entries = lookahead_entries(selected, today, horizon_days)
    heading = Heading(
        TITLE,
        subtitle=f"Planned closings from {today:%d %b %Y} to {today + timedelta(days=horizon_days):%d %b %Y}",
    )
    if not entries:
        return DocumentModel(
            title=TITLE,
            generated_at=as_of,
            currency=currency,
            blocks=(heading, Heading(EMPTY_MESSAGE, level=2)),
        )

    groups = group(
        entries,
        key=lambda entry: entry.development.name,
        order=GroupOrder.ALPHABETICAL,
        value=lambda entry: effective_price(entry.unit),
    )

    summary_rows = []
    table_groups = []
    for name, aggregated in groups.items():
        ordered = sorted(aggregated.entries, key=_planned_sort_key)
        past_due = sum(1 for entry in ordered if entry.is_past_due)
        summary_rows.append(Row(cells=(name, aggregated.count, past_due, aggregated.subtotal)))
        table_groups.append(
            TableGroup(
                label=name,
                rows=tuple(_detail_row(entry, today) for entry in ordered),
                subtotal=_total_row(f"Subtotal: {aggregated.count} units", ordered, SUBTOTAL),
                currency=ordered[0].development.currency,
            )
        )

    total_past_due = sum(1 for entry in entries if entry.is_past_due)
    summary_rows.append(
        Row(cells=("Total", len(entries), total_past_due, grand_total(list(groups.values()))), emphasis=TOTAL)
    )

    blocks = (
        heading,
        SummaryTable("Summary", SUMMARY_COLUMNS, tuple(summary_rows)),
        GroupedTable(
            "Units by Development",
            DETAIL_COLUMNS,
            tuple(table_groups),
            total=_total_row(f"TOTAL: {len(entries)} units", entries, TOTAL),
        ),
    )
    return DocumentModel(title=TITLE, generated_at=as_of, currency=currency, blocks=blocks)

