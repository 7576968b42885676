from decimal import Decimal

from devtrack_reports.domain.aggregation import (
    GroupOrder,
    count,
    grand_total,
    group,
    natural_key,
    subtotal,
)

ENTRIES = [
    ("Riverside", "Jan", Decimal("300000")),
    ("Elmwood", "Jan", Decimal("200000")),
    ("Riverside", "Feb", Decimal("450000")),
    ("Oakfield", "Mar", Decimal("125000.50")),
    ("Elmwood", "Mar", Decimal("0")),
]


def value(entry) -> Decimal:
    return entry[2]


def test_partition_subtotals_match_ungrouped_total() -> None:
    for key in (lambda e: e[0], lambda e: e[1], lambda e: (e[0], e[1]), lambda e: "all"):
        for projection in (value, count):
            groups = group(ENTRIES, key=key, value=projection)
            assert grand_total(list(groups.values())) == subtotal(ENTRIES, projection)


def test_group_orders() -> None:
    first_seen = group(ENTRIES, key=lambda e: e[0])
    alphabetical = group(ENTRIES, key=lambda e: e[0], order=GroupOrder.ALPHABETICAL)
    custom = group(ENTRIES, key=lambda e: e[1], order=["Jan", "Feb", "Mar"].index)

    assert list(first_seen) == ["Riverside", "Elmwood", "Oakfield"]
    assert list(alphabetical) == ["Elmwood", "Oakfield", "Riverside"]
    assert list(custom) == ["Jan", "Feb", "Mar"]


def test_group_keeps_entry_order_and_counts() -> None:
    riverside = group(ENTRIES, key=lambda e: e[0], value=value)["Riverside"]

    assert [entry[1] for entry in riverside.entries] == ["Jan", "Feb"]
    assert riverside.count == 2
    assert riverside.subtotal == Decimal("750000")


def test_natural_key_orders_numbers_numerically() -> None:
    numbers = ["10", "2", "A1", "1", "A10", "A2"]
    assert sorted(numbers, key=natural_key) == ["1", "2", "10", "A1", "A2", "A10"]
