"""Grouping and subtotal helpers used by every report builder."""
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Generic, Hashable, Iterable, Sequence, TypeVar

from .models import ActivityKind

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

ACTIVITY_KIND_ORDER: tuple[ActivityKind, ...] = (
    ActivityKind.SAN_APPROVED,
    ActivityKind.CONTRACT_SIGNED,
    ActivityKind.SALE_CLOSED,
)


class GroupOrder(str, Enum):
    FIRST_SEEN = "first_seen"
    ALPHABETICAL = "alphabetical"
    CHRONOLOGICAL = "chronological"


@dataclass(frozen=True)
class AggregatedGroup(Generic[K, T]):
    key: K
    entries: tuple[T, ...]
    subtotal: Decimal

    @property
    def count(self) -> int:
        return len(self.entries)


def count(_entry: Any) -> Decimal:
    return Decimal(1)


def subtotal(entries: Iterable[T], projection: Callable[[T], Decimal | int]) -> Decimal:
    total = Decimal("0")
    for entry in entries:
        total += Decimal(projection(entry))
    return total


def natural_key(text: str) -> tuple[tuple[int, int, str], ...]:
    """Sort key that orders embedded numbers numerically ("2" before "10")."""
    parts = re.split(r"(\d+)", str(text))
    return tuple((0, int(part), "") if part.isdigit() else (1, 0, part.lower()) for part in parts if part)


def _ordered_keys(keys: list[K], order: GroupOrder | Callable[[K], Any]) -> list[K]:
    if callable(order) and not isinstance(order, GroupOrder):
        return sorted(keys, key=order)
    if order is GroupOrder.ALPHABETICAL:
        return sorted(keys, key=lambda key: str(key))
    if order is GroupOrder.CHRONOLOGICAL:
        return sorted(keys)
    return keys


def group(
    entries: Iterable[T],
    key: Callable[[T], K],
    order: GroupOrder | Callable[[K], Any] = GroupOrder.FIRST_SEEN,
    value: Callable[[T], Decimal | int] = count,
) -> dict[K, AggregatedGroup[K, T]]:
    """Partition ``entries`` by ``key``.

    Entries keep their incoming order inside a group. Groups follow
    first-seen order unless ``order`` asks for alphabetical or chronological
    sorting, or supplies its own sort key. ``value`` is the projection summed
    into each group's subtotal.
    """
    buckets: dict[K, list[T]] = {}
    for entry in entries:
        buckets.setdefault(key(entry), []).append(entry)

    result: dict[K, AggregatedGroup[K, T]] = {}
    for group_key in _ordered_keys(list(buckets), order):
        members = tuple(buckets[group_key])
        result[group_key] = AggregatedGroup(key=group_key, entries=members, subtotal=subtotal(members, value))
    return result


def activity_kind_rank(kind: ActivityKind) -> int:
    return ACTIVITY_KIND_ORDER.index(kind)


def grand_total(groups: Sequence[AggregatedGroup[Any, Any]]) -> Decimal:
    return sum((item.subtotal for item in groups), Decimal("0"))
