"""Format-neutral document model produced by the report builders."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Union

from .formulas import GridRow

DEFAULT_SHEET = "Report"

# Row emphasis markers understood by the emitters.
PAST_DUE = "past_due"
GROUP = "group"
SUBTOTAL = "subtotal"
TOTAL = "total"


@dataclass(frozen=True)
class Column:
    """A table column. ``kind`` is one of text, number, money, date, flag or percent."""

    label: str
    kind: str = "text"
    width: int = 12
    precision: int = 0


@dataclass(frozen=True)
class Row:
    cells: tuple[Any, ...]
    emphasis: str | None = None


@dataclass(frozen=True)
class Heading:
    text: str
    subtitle: str | None = None
    level: int = 1
    sheet: str = DEFAULT_SHEET


@dataclass(frozen=True)
class SummaryTable:
    title: str | None
    columns: tuple[Column, ...]
    rows: tuple[Row, ...]
    sheet: str = DEFAULT_SHEET
    freeze_header: bool = False


@dataclass(frozen=True)
class TableGroup:
    label: str
    rows: tuple[Row, ...] = ()
    subtotal: Row | None = None
    children: tuple["TableGroup", ...] = ()
    currency: str | None = None


@dataclass(frozen=True)
class GroupedTable:
    title: str | None
    columns: tuple[Column, ...]
    groups: tuple[TableGroup, ...]
    total: Row | None = None
    sheet: str = DEFAULT_SHEET


@dataclass(frozen=True)
class FormulaTable:
    title: str | None
    columns: tuple[Column, ...]
    rows: tuple[GridRow, ...]
    sheet: str = DEFAULT_SHEET
    freeze_header: bool = True


Block = Union[Heading, SummaryTable, GroupedTable, FormulaTable]


@dataclass(frozen=True)
class DocumentModel:
    title: str
    generated_at: datetime
    currency: str
    blocks: tuple[Block, ...] = field(default_factory=tuple)
    subtitle: str | None = None

    def sheets(self) -> list[str]:
        names: list[str] = []
        for block in self.blocks:
            if block.sheet not in names:
                names.append(block.sheet)
        return names

    def blocks_for(self, sheet: str) -> Iterable[Block]:
        return (block for block in self.blocks if block.sheet == sheet)

    def tables(self) -> Iterable[Block]:
        return (block for block in self.blocks if not isinstance(block, Heading))
