from datetime import date, timedelta
from decimal import Decimal

from devtrack_reports.domain.models import ActivityKind, SalesStatus
from devtrack_reports.domain.periods import month_key
from devtrack_reports.domain.windows import (
    PeriodRange,
    RangePreset,
    activity_entries,
    lookahead_entries,
    range_choices,
)
from tests.factories import TODAY, make_development, make_unit


def test_lookahead_classifies_past_due_and_upcoming() -> None:
    dev = make_development(
        "Riverside",
        make_unit("1", planned=date(2024, 2, 15)),
        make_unit("2", planned=date(2024, 5, 1)),
    )

    entries = {entry.unit.unit_number: entry for entry in lookahead_entries([dev], TODAY)}

    assert entries["1"].is_past_due is True
    assert entries["1"].days_overdue == 15
    assert entries["1"].weeks_remaining is None
    assert entries["2"].is_past_due is False
    assert entries["2"].days_overdue is None
    assert entries["2"].weeks_remaining == 8


def test_lookahead_excludes_complete_undated_and_far_future() -> None:
    horizon = TODAY + timedelta(days=84)
    dev = make_development(
        "Elmwood",
        make_unit("1", planned=horizon),
        make_unit("2", planned=horizon + timedelta(days=1)),
        make_unit("3", planned=None),
        make_unit("4", planned=TODAY, status=SalesStatus.COMPLETE),
    )

    numbers = [entry.unit.unit_number for entry in lookahead_entries([dev], TODAY)]

    assert numbers == ["1"]


def test_lookahead_entries_are_exclusively_classified() -> None:
    units = [make_unit(str(n), planned=TODAY + timedelta(days=n)) for n in range(-30, 90, 7)]
    for entry in lookahead_entries([make_development("Mixed", *units)], TODAY):
        assert entry.is_past_due == (entry.days_overdue is not None)
        if entry.days_overdue is not None:
            assert entry.days_overdue > 0


def test_lookahead_respects_selection() -> None:
    first = make_development("A", make_unit("1", planned=TODAY), dev_id="a")
    second = make_development("B", make_unit("1", planned=TODAY), dev_id="b")

    entries = lookahead_entries([first, second], TODAY, selected_ids=["b"])

    assert [entry.development.id for entry in entries] == ["b"]


def test_activity_window_includes_recent_and_drops_old() -> None:
    recent = make_unit("1", sold="410000", sale_closed=True, sale_closed_date=TODAY - timedelta(days=10))
    old = make_unit("2", sale_closed=True, sale_closed_date=TODAY - timedelta(days=40))

    entries = activity_entries([make_development("Riverside", recent, old)], TODAY)

    assert len(entries) == 1
    assert entries[0].unit.unit_number == "1"
    assert entries[0].kind is ActivityKind.SALE_CLOSED
    assert entries[0].weeks_ago == 1
    assert entries[0].value == Decimal("410000")


def test_activity_emits_one_entry_per_milestone() -> None:
    unit = make_unit(
        "7",
        san_approved=True,
        san_approved_date=TODAY - timedelta(days=28),
        contract_signed=True,
        contract_signed_date=TODAY,
    )

    entries = activity_entries([make_development("Oak", unit)], TODAY)

    assert [(entry.kind, entry.weeks_ago) for entry in entries] == [
        (ActivityKind.SAN_APPROVED, 4),
        (ActivityKind.CONTRACT_SIGNED, 0),
    ]


def test_period_range_presets() -> None:
    assert PeriodRange.parse("2023").preset is RangePreset.YEAR
    assert PeriodRange.parse(None).resolve(TODAY) is None
    assert PeriodRange.parse("last6").resolve(TODAY) == (date(2023, 9, 1), TODAY)

    custom = PeriodRange.parse("custom", "2023-11", "2024-01")
    assert custom.resolve(TODAY) == (date(2023, 11, 1), date(2024, 1, 31))
    assert custom.includes("Jan '24", TODAY)
    assert not custom.includes(month_key(date(2024, 2, 1)), TODAY)
    assert PeriodRange.parse("2023").includes(date(2023, 12, 31), TODAY)


def test_range_choices_offer_presets_custom_and_recent_years() -> None:
    assert range_choices(TODAY, years=3) == ["all", "last6", "last12", "custom", "2024", "2023", "2022"]
    assert all(PeriodRange.parse(choice) is not None for choice in range_choices(TODAY))
