"""Tabular previews of document models for the UI."""
from __future__ import annotations

from html import escape

import pandas as pd

from devtrack_reports.domain.builders.cashflow import CashflowSeries
from devtrack_reports.domain.document import DocumentModel, FormulaTable, GroupedTable, Heading, SummaryTable
from devtrack_reports.infrastructure.emitters.cells import display_value, table_rows


def block_to_frame(block: SummaryTable | GroupedTable | FormulaTable, currency: str) -> pd.DataFrame:
    labels = [column.label for column in block.columns]
    records = []
    for cells, _emphasis, row_currency in table_rows(block, currency):
        values = [cells[col] if col < len(cells) else None for col in range(len(block.columns))]
        records.append([display_value(column, value, row_currency) for column, value in zip(block.columns, values)])
    return pd.DataFrame(records, columns=labels)


def model_to_frames(model: DocumentModel) -> list[tuple[str, pd.DataFrame]]:
    frames = []
    for block in model.tables():
        frames.append((block.title or block.sheet, block_to_frame(block, model.currency)))
    return frames


def render_html(model: DocumentModel) -> str:
    parts = []
    for block in model.blocks:
        if isinstance(block, Heading):
            tag = "h2" if block.level == 1 else "h3"
            parts.append(f"<{tag}>{escape(block.text)}</{tag}>")
            if block.subtitle:
                parts.append(f"<p>{escape(block.subtitle)}</p>")
            continue
        if block.title:
            parts.append(f"<h4>{escape(block.title)}</h4>")
        parts.append(block_to_frame(block, model.currency).to_html(index=False, border=0))
    if not parts:
        return "<p>Nothing to report.</p>"
    return "".join(parts)


def series_to_frame(series: CashflowSeries) -> pd.DataFrame:
    """Period rows, one column per development plus ``Total``."""
    columns = list(series.developments) + ["Total"]
    data = [
        [float(point.values.get(name, 0)) for name in series.developments] + [float(point.total)]
        for point in series.points
    ]
    index = pd.Index([point.label for point in series.points], name="Period")
    return pd.DataFrame(data, index=index, columns=columns)
