from decimal import Decimal

import pytest

from devtrack_reports.domain.formulas import (
    CellRef,
    GridBuilder,
    GridRow,
    Formula,
    column_letter,
    evaluate,
    row_total,
    subtotal_of,
    sum_of,
)


def test_column_letters() -> None:
    assert [column_letter(i) for i in (0, 1, 25, 26, 27, 701, 702)] == ["A", "B", "Z", "AA", "AB", "ZZ", "AAA"]


def test_formulas_render_relative_to_table_origin() -> None:
    grid = GridBuilder()
    first = grid.next_row
    grid.add_row(["1", 100, None])
    grid.add_row(["2", None, 50])
    span = grid.span_since(first)

    assert subtotal_of(span.column(1)).to_a1(origin_row=4) == "SUBTOTAL(9,B5:B6)"
    assert row_total(0, 1, 2).to_a1(origin_row=4) == "SUM(B5:C5)"
    assert sum_of(CellRef(2, 1), CellRef(5, 1)).to_a1() == "SUM(B3,B6)"


def test_evaluate_resolves_nested_formulas() -> None:
    grid = GridBuilder()
    grid.add_row(["a", Decimal("10"), row_total(0, 1, 1)])
    grid.add_row(["b", Decimal("5"), row_total(1, 1, 1)])
    span = grid.span_since(0)
    sub = grid.add_row(["sub", subtotal_of(span.column(1)), subtotal_of(span.column(2))])
    grid.add_row(["total", sum_of(CellRef(sub, 1)), sum_of(CellRef(sub, 2))])

    values = evaluate(grid.rows())

    assert values[2][1:] == [Decimal("15"), Decimal("15")]
    assert values[3][1:] == [Decimal("15"), Decimal("15")]
    assert values[0][0] == "a"


def test_evaluate_rejects_cycles() -> None:
    rows = [GridRow(cells=(Formula("SUM", (CellRef(0, 0),)),))]
    with pytest.raises(ValueError):
        evaluate(rows)


def test_empty_span_is_an_error() -> None:
    grid = GridBuilder()
    with pytest.raises(ValueError):
        grid.span_since(0)
