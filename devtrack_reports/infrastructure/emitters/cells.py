"""Cell rendering shared by the emitters and previews."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterator, Sequence

from devtrack_reports.domain.document import GROUP, Column, FormulaTable, GroupedTable, SummaryTable, TableGroup
from devtrack_reports.domain.formulas import evaluate
from devtrack_reports.domain.money import format_currency

DATE_DISPLAY = "%d/%m/%Y"
DATE_NUMBER_FORMAT = "dd/mm/yyyy"
GENERATED_FORMAT = "%d/%m/%Y %H:%M"

# Shared palette
HEADER_FILL = "#06B6D4"
PAST_DUE_FILL = "#FEE2E2"
GROUP_FILL = "#D6EAF8"
SUBTOTAL_FILL = "#E8E8E8"
TOTAL_FILL = "#1E3A5F"
YES_COLOUR = "#22C55E"
NO_COLOUR = "#DC2626"
WHITE = "#FFFFFF"


def flag_text(value: object) -> str:
    return "YES" if value else "NO"


def display_value(column: Column, value: object, currency: str) -> str:
    """Text form of a cell, as shown in PDFs and previews."""
    if value is None or value == "":
        return ""
    if isinstance(value, str) and column.kind != "flag":
        return value
    if column.kind == "money":
        return format_currency(Decimal(str(value)), currency, column.precision)
    if column.kind == "percent":
        return f"{Decimal(str(value)):.{column.precision}f}%"
    if column.kind == "number":
        if column.precision:
            return f"{Decimal(str(value)):,.{column.precision}f}"
        return f"{value:,}" if isinstance(value, int) else f"{Decimal(str(value)):,.0f}"
    if column.kind == "date" and isinstance(value, (date, datetime)):
        return value.strftime(DATE_DISPLAY)
    if column.kind == "flag":
        return flag_text(value)
    return str(value)


def excel_value(value: object) -> object:
    """Convert a cell value into something xlsxwriter writes natively."""
    if isinstance(value, Decimal):
        return float(value)
    return value


DisplayRow = tuple[Sequence[Any], "str | None", str]


def table_rows(block: SummaryTable | GroupedTable | FormulaTable, currency: str) -> Iterator[DisplayRow]:
    """Flatten a table block into ``(cells, emphasis, currency)`` display rows.

    Group labels become their own rows and formula cells are replaced by
    their evaluated values.
    """
    if isinstance(block, SummaryTable):
        for row in block.rows:
            yield row.cells, row.emphasis, currency
    elif isinstance(block, GroupedTable):
        for group in block.groups:
            yield from _group_rows(group, currency)
        if block.total is not None:
            yield block.total.cells, block.total.emphasis, currency
    else:
        for grid_row, values in zip(block.rows, evaluate(block.rows)):
            yield values, grid_row.emphasis, currency


def _group_rows(group: TableGroup, currency: str) -> Iterator[DisplayRow]:
    currency = group.currency or currency
    yield (group.label,), GROUP, currency
    for row in group.rows:
        yield row.cells, row.emphasis, currency
    for child in group.children:
        yield from _group_rows(child, currency)
    if group.subtotal is not None:
        yield group.subtotal.cells, group.subtotal.emphasis, currency
