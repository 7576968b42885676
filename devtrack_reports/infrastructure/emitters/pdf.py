"""PDF emitter built on reportlab platypus."""
from __future__ import annotations

from html import escape
from io import BytesIO
from typing import Any, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import LongTable, Paragraph, SimpleDocTemplate, Spacer, TableStyle
from reportlab.platypus.doctemplate import LayoutError

from devtrack_reports.config import SETTINGS
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
    SummaryTable,
)
from devtrack_reports.domain.errors import EmitterError
from devtrack_reports.logging_config import get_logger

from .cells import (
    GENERATED_FORMAT,
    GROUP_FILL,
    HEADER_FILL,
    NO_COLOUR,
    PAST_DUE_FILL,
    SUBTOTAL_FILL,
    TOTAL_FILL,
    YES_COLOUR,
    display_value,
    table_rows,
)

logger = get_logger(__name__)

PAGE_SIZE = landscape(A4)
MARGIN = 12 * mm

_ROW_FILLS = {
    PAST_DUE: colors.HexColor(PAST_DUE_FILL),
    GROUP: colors.HexColor(GROUP_FILL),
    SUBTOTAL: colors.HexColor(SUBTOTAL_FILL),
    TOTAL: colors.HexColor(TOTAL_FILL),
}


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("ReportTitle", parent=base["Title"], fontSize=16, leading=20, spaceAfter=4),
        "section": ParagraphStyle("Section", parent=base["Heading2"], fontSize=12, leading=15, spaceBefore=6),
        "subtitle": ParagraphStyle("Subtitle", parent=base["Normal"], fontSize=9, textColor=colors.HexColor("#555555")),
    }


class _TableRows:
    """Collects display rows and the style commands for a single table."""

    def __init__(self, columns: Sequence[Column]) -> None:
        self.columns = columns
        self.data: list[list[str]] = [[column.label for column in columns]]
        self.commands: list[tuple] = []

    def add(self, cells: Sequence[Any], emphasis: str | None, currency: str) -> None:
        index = len(self.data)
        values = [cells[col] if col < len(cells) else None for col in range(len(self.columns))]
        self.data.append([display_value(column, value, currency) for column, value in zip(self.columns, values)])
        fill = _ROW_FILLS.get(emphasis)
        if fill is not None:
            self.commands.append(("BACKGROUND", (0, index), (-1, index), fill))
        if emphasis in (GROUP, SUBTOTAL, TOTAL):
            self.commands.append(("FONTNAME", (0, index), (-1, index), "Helvetica-Bold"))
        if emphasis == TOTAL:
            self.commands.append(("TEXTCOLOR", (0, index), (-1, index), colors.white))
        for col, (column, value) in enumerate(zip(self.columns, values)):
            if column.kind == "flag" and isinstance(value, bool):
                colour = colors.HexColor(YES_COLOUR if value else NO_COLOUR)
                self.commands.append(("TEXTCOLOR", (col, index), (col, index), colour))
            if column.kind in ("money", "number", "percent"):
                self.commands.append(("ALIGN", (col, index), (col, index), "RIGHT"))

    def table(self, available_width: float) -> LongTable:
        total = sum(column.width for column in self.columns) or 1
        widths = [available_width * column.width / total for column in self.columns]
        font_size = 8 if len(self.columns) <= 12 else 6.5
        table = LongTable(self.data, colWidths=widths, repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(HEADER_FILL)),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
                    ("FONTSIZE", (0, 0), (-1, -1), font_size),
                    ("GRID", (0, 0), (-1, -1), 0.3, colors.HexColor("#E5E7EB")),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                    ("LEFTPADDING", (0, 0), (-1, -1), 3),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 3),
                    ("TOPPADDING", (0, 0), (-1, -1), 2),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
                ]
                + self.commands
            )
        )
        return table


def _table_for(block: SummaryTable | GroupedTable | FormulaTable, currency: str) -> _TableRows:
    rows = _TableRows(block.columns)
    for cells, emphasis, row_currency in table_rows(block, currency):
        rows.add(cells, emphasis, row_currency)
    return rows


def _footer(generated: str):
    def draw(canvas, doc) -> None:
        canvas.saveState()
        canvas.setFont("Helvetica", 7)
        canvas.setFillColor(colors.HexColor("#6B7280"))
        canvas.drawString(doc.leftMargin, 6 * mm, SETTINGS.app_name)
        canvas.drawCentredString(PAGE_SIZE[0] / 2, 6 * mm, f"Page {canvas.getPageNumber()}")
        canvas.drawRightString(PAGE_SIZE[0] - doc.rightMargin, 6 * mm, f"Generated: {generated}")
        canvas.restoreState()

    return draw


def render_pdf(model: DocumentModel) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=PAGE_SIZE,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title=model.title,
        author=SETTINGS.app_name,
    )
    styles = _styles()
    generated = model.generated_at.strftime(GENERATED_FORMAT)
    story: list[Any] = []
    for block in model.blocks:
        if isinstance(block, Heading):
            style = styles["title"] if block.level == 1 else styles["section"]
            story.append(Paragraph(escape(block.text), style))
            if block.subtitle:
                story.append(Paragraph(escape(block.subtitle), styles["subtitle"]))
            story.append(Spacer(1, 3 * mm))
            continue
        if block.title:
            story.append(Paragraph(escape(block.title), styles["section"]))
        story.append(_table_for(block, model.currency).table(doc.width))
        story.append(Spacer(1, 5 * mm))
    if not story:
        story.append(Paragraph(escape(model.title), styles["title"]))
    footer = _footer(generated)
    doc.build(story, onFirstPage=footer, onLaterPages=footer)
    return buffer.getvalue()


class PdfEmitter:
    async def emit(self, model: DocumentModel, fmt: str = "pdf") -> bytes:
        try:
            content = render_pdf(model)
        except (LayoutError, ValueError, TypeError, OSError) as exc:
            raise EmitterError(f"Could not render PDF for {model.title!r}: {exc}") from exc
        logger.debug("Rendered PDF for %r (%d bytes)", model.title, len(content))
        return content
