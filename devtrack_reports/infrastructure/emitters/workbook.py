"""Spreadsheet emitter backed by xlsxwriter.

Formula cells are written as live formulas together with their evaluated
result, so viewers that never recalculate still show the right totals.
"""
from __future__ import annotations

from datetime import date, datetime
from io import BytesIO
from typing import Any, Sequence

import pandas as pd
from xlsxwriter.exceptions import XlsxWriterException

from devtrack_reports.domain.document import (
    GROUP,
    PAST_DUE,
    SUBTOTAL,
    TOTAL,
    Column,
    DocumentModel,
    FormulaTable,
    GroupedTable,
    Heading,
    Row,
    SummaryTable,
    TableGroup,
)
from devtrack_reports.domain.errors import EmitterError
from devtrack_reports.domain.formulas import Formula, evaluate
from devtrack_reports.domain.money import excel_number_format
from devtrack_reports.logging_config import get_logger

from .cells import (
    DATE_NUMBER_FORMAT,
    GENERATED_FORMAT,
    GROUP_FILL,
    HEADER_FILL,
    NO_COLOUR,
    PAST_DUE_FILL,
    SUBTOTAL_FILL,
    TOTAL_FILL,
    WHITE,
    YES_COLOUR,
    excel_value,
    flag_text,
)

logger = get_logger(__name__)

MAX_SHEET_NAME = 31

_EMPHASIS_STYLE = {
    PAST_DUE: {"bg_color": PAST_DUE_FILL},
    GROUP: {"bold": True, "bg_color": GROUP_FILL},
    SUBTOTAL: {"bold": True, "bg_color": SUBTOTAL_FILL},
    TOTAL: {"bold": True, "bg_color": TOTAL_FILL, "font_color": WHITE},
}


class _Formats:
    """Caches xlsxwriter formats per column kind, emphasis and currency."""

    def __init__(self, workbook: Any) -> None:
        self._workbook = workbook
        self._cache: dict[tuple, Any] = {}
        self.title = workbook.add_format({"bold": True, "font_size": 14})
        self.subtitle = workbook.add_format({"italic": True, "font_color": "#555555"})
        self.section = workbook.add_format({"bold": True, "font_size": 12})
        self.header = workbook.add_format(
            {"bold": True, "font_color": WHITE, "bg_color": HEADER_FILL, "border": 1, "text_wrap": True}
        )

    def cell(self, column: Column, emphasis: str | None, currency: str, flag: bool | None = None) -> Any:
        key = (column.kind, column.precision, emphasis, currency, flag)
        if key not in self._cache:
            props: dict[str, Any] = {"border": 1}
            if column.kind == "money":
                props["num_format"] = excel_number_format(currency, column.precision)
            elif column.kind == "percent":
                decimals = "." + "0" * column.precision if column.precision else ""
                props["num_format"] = f'0{decimals}"%"'
            elif column.kind == "number":
                props["num_format"] = "#,##0" + ("." + "0" * column.precision if column.precision else "")
            elif column.kind == "date":
                props["num_format"] = DATE_NUMBER_FORMAT
            elif column.kind == "flag":
                props["align"] = "center"
                if flag is not None:
                    props["font_color"] = YES_COLOUR if flag else NO_COLOUR
            props.update(_EMPHASIS_STYLE.get(emphasis, {}))
            self._cache[key] = self._workbook.add_format(props)
        return self._cache[key]


class _SheetWriter:
    def __init__(self, worksheet: Any, formats: _Formats, model: DocumentModel, width: int) -> None:
        self._ws = worksheet
        self._formats = formats
        self._model = model
        self._width = max(width, 1)
        self.row = 0

    def heading(self, block: Heading) -> None:
        if block.level == 1:
            if self._width > 1:
                self._ws.merge_range(self.row, 0, self.row, self._width - 1, block.text, self._formats.title)
            else:
                self._ws.write(self.row, 0, block.text, self._formats.title)
            self.row += 1
            generated = self._model.generated_at.strftime(GENERATED_FORMAT)
            self._ws.write(self.row, 0, f"Generated: {generated}", self._formats.subtitle)
            self.row += 1
        else:
            self._ws.write(self.row, 0, block.text, self._formats.section)
            self.row += 1
        if block.subtitle:
            self._ws.write(self.row, 0, block.subtitle, self._formats.subtitle)
            self.row += 1

    def _columns(self, columns: Sequence[Column]) -> None:
        for index, column in enumerate(columns):
            self._ws.set_column(index, index, column.width)

    def _header(self, title: str | None, columns: Sequence[Column]) -> None:
        if title:
            self._ws.write(self.row, 0, title, self._formats.section)
            self.row += 1
        for index, column in enumerate(columns):
            self._ws.write(self.row, index, column.label, self._formats.header)
        self.row += 1

    def _write_cell(self, col: int, column: Column, value: Any, emphasis: str | None, currency: str) -> None:
        if column.kind == "flag" and isinstance(value, bool):
            self._ws.write_string(self.row, col, flag_text(value), self._formats.cell(column, emphasis, currency, value))
            return
        fmt = self._formats.cell(column, emphasis, currency)
        if value is None:
            self._ws.write_blank(self.row, col, None, fmt)
        elif isinstance(value, (date, datetime)):
            self._ws.write_datetime(self.row, col, value, fmt)
        else:
            self._ws.write(self.row, col, excel_value(value), fmt)

    def _row(self, columns: Sequence[Column], row: Row, currency: str) -> None:
        for col, column in enumerate(columns):
            value = row.cells[col] if col < len(row.cells) else None
            self._write_cell(col, column, value, row.emphasis, currency)
        self.row += 1

    def _label_row(self, columns: Sequence[Column], label: str, currency: str) -> None:
        self._row(columns, Row(cells=(label,), emphasis=GROUP), currency)

    def summary(self, block: SummaryTable) -> None:
        self._columns(block.columns)
        self._header(block.title, block.columns)
        if block.freeze_header:
            self._ws.freeze_panes(self.row, 0)
        for row in block.rows:
            self._row(block.columns, row, self._model.currency)
        self.row += 1

    def _group(self, columns: Sequence[Column], group: TableGroup, currency: str) -> None:
        currency = group.currency or currency
        self._label_row(columns, group.label, currency)
        for row in group.rows:
            self._row(columns, row, currency)
        for child in group.children:
            self._group(columns, child, currency)
        if group.subtotal is not None:
            self._row(columns, group.subtotal, currency)

    def grouped(self, block: GroupedTable) -> None:
        self._columns(block.columns)
        self._header(block.title, block.columns)
        for group in block.groups:
            self._group(block.columns, group, self._model.currency)
        if block.total is not None:
            self._row(block.columns, block.total, self._model.currency)
        self.row += 1

    def formula_table(self, block: FormulaTable) -> None:
        self._columns(block.columns)
        self._header(block.title, block.columns)
        origin = self.row
        if block.freeze_header:
            self._ws.freeze_panes(origin, 1)
        values = evaluate(block.rows)
        currency = self._model.currency
        for grid_row, evaluated in zip(block.rows, values):
            for col, column in enumerate(block.columns):
                raw = grid_row.cells[col] if col < len(grid_row.cells) else None
                if isinstance(raw, Formula):
                    self._ws.write_formula(
                        self.row,
                        col,
                        "=" + raw.to_a1(origin_row=origin),
                        self._formats.cell(column, grid_row.emphasis, currency),
                        float(evaluated[col]),
                    )
                else:
                    self._write_cell(col, column, raw, grid_row.emphasis, currency)
            self.row += 1
        self.row += 1


def _sheet_width(model: DocumentModel, sheet: str) -> int:
    widths = [len(block.columns) for block in model.blocks_for(sheet) if not isinstance(block, Heading)]
    return max(widths, default=1)


def _sheet_title(name: str, used: set[str]) -> str:
    base = "".join(ch for ch in name if ch not in "[]:*?/\\")[:MAX_SHEET_NAME] or "Sheet"
    title = base
    suffix = 2
    while title.lower() in used:
        tag = f" ({suffix})"
        title = base[: MAX_SHEET_NAME - len(tag)] + tag
        suffix += 1
    used.add(title.lower())
    return title


def render_workbook(model: DocumentModel) -> bytes:
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="xlsxwriter") as writer:
        workbook = writer.book
        formats = _Formats(workbook)
        used: set[str] = set()
        for sheet in model.sheets() or ["Report"]:
            worksheet = workbook.add_worksheet(_sheet_title(sheet, used))
            out = _SheetWriter(worksheet, formats, model, _sheet_width(model, sheet))
            for block in model.blocks_for(sheet):
                if isinstance(block, Heading):
                    out.heading(block)
                elif isinstance(block, SummaryTable):
                    out.summary(block)
                elif isinstance(block, GroupedTable):
                    out.grouped(block)
                elif isinstance(block, FormulaTable):
                    out.formula_table(block)
    buffer.seek(0)
    return buffer.getvalue()


class WorkbookEmitter:
    async def emit(self, model: DocumentModel, fmt: str = "excel") -> bytes:
        try:
            content = render_workbook(model)
        except (XlsxWriterException, ValueError, TypeError, OSError) as exc:
            raise EmitterError(f"Could not write workbook for {model.title!r}: {exc}") from exc
        logger.debug("Wrote workbook for %r (%d bytes)", model.title, len(content))
        return content
