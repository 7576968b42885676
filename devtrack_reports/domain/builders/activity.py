"""Sales activity over the trailing four weeks."""
from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Sequence

from devtrack_reports.config import SETTINGS

from ..aggregation import ACTIVITY_KIND_ORDER, GroupOrder, activity_kind_rank, group
from ..document import (
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
from ..models import ActivityEntry, DevelopmentRecord
from ..options import ReportOptions
from ..windows import activity_entries, select_developments
from .common import MONEY_COLUMN_WIDTH, report_currency, sum_decimals

TITLE = "Sales Activity Report - Last 4 Weeks"
EMPTY_MESSAGE = "No sales activity in the last 4 weeks."

SUMMARY_WEEK_COLUMNS = (
    Column("Week", width=16),
    Column("Count", "number", width=8),
    Column("Value", "money", width=MONEY_COLUMN_WIDTH),
)
SUMMARY_KIND_COLUMNS = (
    Column("Activity", width=16),
    Column("Count", "number", width=8),
    Column("Value", "money", width=MONEY_COLUMN_WIDTH),
)
DETAIL_COLUMNS = (
    Column("Unit", width=10),
    Column("Type", width=12),
    Column("Beds", "number", width=6),
    Column("Activity", width=16),
    Column("Date", "date", width=11),
    Column("Week", width=14),
    Column("Value", "money", width=MONEY_COLUMN_WIDTH),
)
_VALUE = len(DETAIL_COLUMNS) - 1


def week_label(weeks_ago: int) -> str:
    if weeks_ago == 0:
        return "This Week"
    if weeks_ago == 1:
        return "1 Week Ago"
    return f"{weeks_ago} Weeks Ago"


def _value(entry: ActivityEntry) -> Decimal:
    return entry.value


def _detail_row(entry: ActivityEntry) -> Row:
    unit = entry.unit
    return Row(
        cells=(
            unit.unit_number,
            unit.unit_type,
            unit.bedrooms,
            entry.kind.value,
            entry.activity_date,
            week_label(entry.weeks_ago),
            entry.value,
        )
    )


def _value_row(label: str, value: Decimal, emphasis: str) -> Row:
    cells: list[object] = [None] * len(DETAIL_COLUMNS)
    cells[0] = label
    cells[_VALUE] = value
    return Row(cells=tuple(cells), emphasis=emphasis)


def _summary_rows(labelled: Sequence[tuple[str, Sequence[ActivityEntry]]]) -> tuple[Row, ...]:
    rows = [Row(cells=(label, len(items), sum_decimals(map(_value, items)))) for label, items in labelled]
    everything = [entry for _label, items in labelled for entry in items]
    rows.append(Row(cells=("Total", len(everything), sum_decimals(map(_value, everything))), emphasis=TOTAL))
    return tuple(rows)


def build_activity_report(
    developments: Sequence[DevelopmentRecord],
    as_of: datetime,
    options: ReportOptions | None = None,
) -> DocumentModel:
    options = options or ReportOptions()
    today = as_of.date()
    window_days = options.window_days if options.window_days is not None else SETTINGS.activity_window_days
    selected = select_developments(developments, options.selected_ids)
    currency = report_currency(selected)

    entries = activity_entries(selected, today, window_days)
    heading = Heading(
        TITLE,
        subtitle=f"{today - timedelta(days=window_days):%d %b %Y} to {today:%d %b %Y}",
    )
    if not entries:
        return DocumentModel(
            title=TITLE,
            generated_at=as_of,
            currency=currency,
            blocks=(heading, Heading(EMPTY_MESSAGE, level=2)),
        )

    by_week = group(entries, key=lambda entry: entry.weeks_ago)
    week_count = window_days // 7 + 1
    weekly = [
        (week_label(weeks), by_week[weeks].entries if weeks in by_week else ())
        for weeks in range(week_count)
    ]

    by_kind = group(entries, key=lambda entry: entry.kind)
    per_kind = [
        (kind.value, by_kind[kind].entries if kind in by_kind else ())
        for kind in ACTIVITY_KIND_ORDER
    ]

    development_groups = []
    by_development = group(entries, key=lambda entry: entry.development.name, order=GroupOrder.ALPHABETICAL, value=_value)
    for name, dev_group in by_development.items():
        kind_groups = group(dev_group.entries, key=lambda entry: entry.kind, order=activity_kind_rank, value=_value)
        children = []
        for kind, kind_group in kind_groups.items():
            newest_first = sorted(kind_group.entries, key=lambda entry: entry.activity_date, reverse=True)
            children.append(
                TableGroup(
                    label=kind.value,
                    rows=tuple(_detail_row(entry) for entry in newest_first),
                    subtotal=_value_row(f"{kind.value} Subtotal ({kind_group.count})", kind_group.subtotal, SUBTOTAL),
                )
            )
        development_groups.append(
            TableGroup(
                label=name,
                children=tuple(children),
                subtotal=_value_row(f"{name} Total ({dev_group.count})", dev_group.subtotal, TOTAL),
                currency=dev_group.entries[0].development.currency,
            )
        )

    blocks = (
        heading,
        SummaryTable("Activity by Week", SUMMARY_WEEK_COLUMNS, _summary_rows(weekly)),
        SummaryTable("Activity by Type", SUMMARY_KIND_COLUMNS, _summary_rows(per_kind)),
        GroupedTable(
            "Activity by Development",
            DETAIL_COLUMNS,
            tuple(development_groups),
            total=_value_row(f"TOTAL ({len(entries)})", sum_decimals(map(_value, entries)), TOTAL),
        ),
    )
    return DocumentModel(title=TITLE, generated_at=as_of, currency=currency, blocks=blocks)
