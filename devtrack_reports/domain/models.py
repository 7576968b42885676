"""Domain models for the portfolio reporting pipeline.

These dataclasses capture the validated shape of developments and units as
seen by the reporting core. They are built once at the snapshot boundary and
never mutated afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Mapping


class SalesStatus(str, Enum):
    NOT_RELEASED = "Not Released"
    FOR_SALE = "For Sale"
    UNDER_OFFER = "Under Offer"
    CONTRACTED = "Contracted"
    COMPLETE = "Complete"


class ConstructionStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETE = "Complete"


class ActivityKind(str, Enum):
    SAN_APPROVED = "SAN Approved"
    CONTRACT_SIGNED = "Contract Signed"
    SALE_CLOSED = "Sale Closed"


@dataclass(frozen=True)
class Documentation:
    """Milestone flags and dates recorded against a unit."""

    bcms_submit_date: date | None = None
    bcms_received: bool = False
    bcms_received_date: date | None = None
    bcms_approved_date: date | None = None
    land_registry_approved: bool = False
    land_registry_approved_date: date | None = None
    homebond_submit_date: date | None = None
    homebond_received: bool = False
    homebond_received_date: date | None = None
    homebond_approved_date: date | None = None
    san_approved: bool = False
    san_approved_date: date | None = None
    contract_issued: bool = False
    contract_issued_date: date | None = None
    contract_signed: bool = False
    contract_signed_date: date | None = None
    sale_closed: bool = False
    sale_closed_date: date | None = None

    def milestone_date(self, kind: ActivityKind) -> date | None:
        if kind is ActivityKind.SAN_APPROVED:
            return self.san_approved_date
        if kind is ActivityKind.CONTRACT_SIGNED:
            return self.contract_signed_date
        return self.sale_closed_date


@dataclass(frozen=True)
class UnitRecord:
    """A single saleable unit, normalized at the snapshot boundary."""

    unit_number: str
    unit_type: str
    bedrooms: int
    construction_status: ConstructionStatus
    sales_status: SalesStatus
    list_price: Decimal | None = None
    sold_price: Decimal | None = None
    price_inc_vat: Decimal | None = None
    planned_close: date | None = None
    actual_close: date | None = None
    close_date: date | None = None
    planned_bcms: date | None = None
    start_date: date | None = None
    completion_date: date | None = None
    documentation: Documentation = field(default_factory=Documentation)
    size: Decimal | None = None
    part_v: bool = False
    address: str | None = None
    purchaser_type: str | None = None
    purchaser_name: str | None = None
    purchaser_phone: str | None = None
    purchaser_email: str | None = None
    applied_incentive: str | None = None
    incentive_status: str | None = None


@dataclass(frozen=True)
class DevelopmentRecord:
    id: str
    name: str
    project_code: str = ""
    currency: str = "EUR"
    vat_rates: Mapping[str, Decimal] | None = None
    units: tuple[UnitRecord, ...] = ()


@dataclass(frozen=True)
class LookaheadEntry:
    """A unit inside the look-ahead horizon.

    ``days_overdue`` is set exactly when ``is_past_due`` is true.
    ``weeks_remaining`` is only set for upcoming rows.
    """

    development: DevelopmentRecord
    unit: UnitRecord
    is_past_due: bool
    days_overdue: int | None
    weeks_remaining: int | None = None


@dataclass(frozen=True)
class ActivityEntry:
    development: DevelopmentRecord
    unit: UnitRecord
    kind: ActivityKind
    activity_date: date
    weeks_ago: int
    value: Decimal


@dataclass(frozen=True)
class ClosedSale:
    """A unit counted in the cash-flow matrix."""

    development: DevelopmentRecord
    unit: UnitRecord
    close_date: date
    value: Decimal


@dataclass(frozen=True)
class CashflowFilter:
    development_names: tuple[str, ...] = ()
    unit_types: tuple[str, ...] = ()
    bedrooms: tuple[int, ...] = ()

    def accepts(self, development: DevelopmentRecord, unit: UnitRecord) -> bool:
        if self.development_names and development.name not in self.development_names:
            return False
        if self.unit_types and unit.unit_type not in self.unit_types:
            return False
        if self.bedrooms and unit.bedrooms not in self.bedrooms:
            return False
        return True
