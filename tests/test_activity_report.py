from datetime import timedelta
from decimal import Decimal

from devtrack_reports.domain.builders.activity import EMPTY_MESSAGE, build_activity_report, week_label
from devtrack_reports.domain.document import GroupedTable, Heading, SummaryTable
from devtrack_reports.domain.options import ReportOptions
from tests.factories import AS_OF, TODAY, make_development, make_unit


def days_ago(days: int):
    return TODAY - timedelta(days=days)


def portfolio():
    return [
        make_development(
            "Riverside",
            make_unit("1", sold="400000", sale_closed=True, sale_closed_date=days_ago(10)),
            make_unit("2", price="350000", contract_signed=True, contract_signed_date=days_ago(2),
                      san_approved=True, san_approved_date=days_ago(20)),
            make_unit("3", price="320000", contract_signed=True, contract_signed_date=days_ago(5)),
        ),
        make_development("Elmwood", make_unit("7", price="250000", san_approved=True, san_approved_date=days_ago(0))),
    ]


def tables(model):
    summaries = [block for block in model.blocks if isinstance(block, SummaryTable)]
    detail = next(block for block in model.blocks if isinstance(block, GroupedTable))
    return summaries, detail


def test_week_labels() -> None:
    assert [week_label(n) for n in range(5)] == ["This Week", "1 Week Ago", "2 Weeks Ago", "3 Weeks Ago", "4 Weeks Ago"]


def test_summaries_by_week_and_kind() -> None:
    (by_week, by_kind), _detail = tables(build_activity_report(portfolio(), AS_OF))

    assert [row.cells for row in by_week.rows] == [
        ("This Week", 3, Decimal("920000")),
        ("1 Week Ago", 1, Decimal("400000")),
        ("2 Weeks Ago", 1, Decimal("350000")),
        ("3 Weeks Ago", 0, Decimal("0")),
        ("4 Weeks Ago", 0, Decimal("0")),
        ("Total", 5, Decimal("1670000")),
    ]
    assert [row.cells for row in by_kind.rows] == [
        ("SAN Approved", 2, Decimal("600000")),
        ("Contract Signed", 2, Decimal("670000")),
        ("Sale Closed", 1, Decimal("400000")),
        ("Total", 5, Decimal("1670000")),
    ]


def test_detail_groups_by_development_then_kind() -> None:
    _summaries, detail = tables(build_activity_report(portfolio(), AS_OF))

    assert [group.label for group in detail.groups] == ["Elmwood", "Riverside"]
    riverside = detail.groups[1]
    assert [child.label for child in riverside.children] == ["SAN Approved", "Contract Signed", "Sale Closed"]

    signed = riverside.children[1]
    assert [row.cells[0] for row in signed.rows] == ["2", "3"]
    assert signed.subtotal.cells[-1] == Decimal("670000")
    assert riverside.subtotal.cells[-1] == Decimal("1420000")
    assert detail.total.cells[-1] == Decimal("1670000")


def test_quiet_window_renders_message() -> None:
    quiet = [make_development("Quiet", make_unit("1", sale_closed=True, sale_closed_date=days_ago(60)))]

    model = build_activity_report(quiet, AS_OF)

    assert [block.text for block in model.blocks if isinstance(block, Heading)][-1] == EMPTY_MESSAGE


def test_window_option_limits_the_weeks() -> None:
    (by_week, _by_kind), _detail = tables(build_activity_report(portfolio(), AS_OF, ReportOptions(window_days=7)))

    assert [row.cells for row in by_week.rows] == [
        ("This Week", 3, Decimal("920000")),
        ("1 Week Ago", 0, Decimal("0")),
        ("Total", 3, Decimal("920000")),
    ]
