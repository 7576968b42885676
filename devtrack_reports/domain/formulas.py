"""Spreadsheet formulas over table-relative cell references.

Formulas refer to rows and columns by their position inside a formula table,
not by sheet coordinates. ``GridBuilder`` hands out row indices and spans as
rows are appended, so which rows a subtotal covers is tracked separately from
the A1 text that ends up in the workbook. ``Formula.to_a1`` renders that text
once the emitter knows where the table starts, and ``evaluate`` computes the
same values the spreadsheet application would.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterator, Sequence

SUBTOTAL_SUM = 9


def column_letter(col_idx: int) -> str:
    # 0 -> A, 25 -> Z, 26 -> AA
    name = ""
    n = col_idx
    while True:
        n, r = divmod(n, 26)
        name = chr(65 + r) + name
        if n == 0:
            break
        n -= 1
    return name


@dataclass(frozen=True)
class CellRef:
    row: int
    col: int

    def to_a1(self, origin_row: int = 0, origin_col: int = 0) -> str:
        return f"{column_letter(origin_col + self.col)}{origin_row + self.row + 1}"

    def cells(self) -> Iterator["CellRef"]:
        yield self


@dataclass(frozen=True)
class CellRange:
    start: CellRef
    end: CellRef

    def to_a1(self, origin_row: int = 0, origin_col: int = 0) -> str:
        return f"{self.start.to_a1(origin_row, origin_col)}:{self.end.to_a1(origin_row, origin_col)}"

    def cells(self) -> Iterator[CellRef]:
        for row in range(self.start.row, self.end.row + 1):
            for col in range(self.start.col, self.end.col + 1):
                yield CellRef(row, col)


@dataclass(frozen=True)
class Formula:
    function: str
    args: tuple[CellRef | CellRange, ...]
    function_code: int | None = None

    def to_a1(self, origin_row: int = 0, origin_col: int = 0) -> str:
        parts = [arg.to_a1(origin_row, origin_col) for arg in self.args]
        if self.function_code is not None:
            parts.insert(0, str(self.function_code))
        return f"{self.function}({','.join(parts)})"

    def references(self) -> Iterator[CellRef]:
        for arg in self.args:
            yield from arg.cells()


@dataclass(frozen=True)
class RowSpan:
    first: int
    last: int

    def column(self, col: int) -> CellRange:
        return CellRange(CellRef(self.first, col), CellRef(self.last, col))


def sum_of(*args: CellRef | CellRange) -> Formula:
    return Formula("SUM", tuple(args))


def subtotal_of(cell_range: CellRange) -> Formula:
    """Subtotal that a spreadsheet recomputes over visible rows only."""
    return Formula("SUBTOTAL", (cell_range,), function_code=SUBTOTAL_SUM)


def row_total(row: int, first_col: int, last_col: int) -> Formula:
    return sum_of(CellRange(CellRef(row, first_col), CellRef(row, last_col)))


@dataclass(frozen=True)
class GridRow:
    cells: tuple[Any, ...]
    emphasis: str | None = None


class GridBuilder:
    """Accumulates formula-table rows and tracks their indices."""

    def __init__(self) -> None:
        self._rows: list[GridRow] = []

    @property
    def next_row(self) -> int:
        return len(self._rows)

    def add_row(self, cells: Sequence[Any], emphasis: str | None = None) -> int:
        self._rows.append(GridRow(cells=tuple(cells), emphasis=emphasis))
        return len(self._rows) - 1

    def span_since(self, first: int) -> RowSpan:
        if first >= len(self._rows):
            raise ValueError("span would cover no rows")
        return RowSpan(first=first, last=len(self._rows) - 1)

    def rows(self) -> tuple[GridRow, ...]:
        return tuple(self._rows)


def _numeric(value: Any) -> Decimal:
    if value is None or isinstance(value, (str, bool)):
        return Decimal("0")
    return Decimal(value)


def evaluate(rows: Sequence[GridRow]) -> list[list[Any]]:
    """Replace every formula cell with its computed ``Decimal`` value."""
    resolved: dict[CellRef, Decimal] = {}
    in_progress: set[CellRef] = set()

    def cell_value(ref: CellRef) -> Decimal:
        if ref.row >= len(rows) or ref.col >= len(rows[ref.row].cells):
            return Decimal("0")
        raw = rows[ref.row].cells[ref.col]
        if not isinstance(raw, Formula):
            return _numeric(raw)
        if ref in resolved:
            return resolved[ref]
        if ref in in_progress:
            raise ValueError(f"circular reference at {ref.to_a1()}")
        in_progress.add(ref)
        total = sum((cell_value(target) for target in raw.references()), Decimal("0"))
        in_progress.discard(ref)
        resolved[ref] = total
        return total

    values: list[list[Any]] = []
    for row_idx, row in enumerate(rows):
        values.append(
            [
                cell_value(CellRef(row_idx, col_idx)) if isinstance(cell, Formula) else cell
                for col_idx, cell in enumerate(row.cells)
            ]
        )
    return values
