"""Convert raw snapshot records into validated domain records.

Two raw shapes are accepted: the camelCase JSON documents produced by the
portfolio data layer, and rows of the units export workbook. Both end up as
``UnitRecord`` instances so the reporting core never sees partial data.
"""
from __future__ import annotations

import re
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping, TypeVar

from devtrack_reports.domain.models import (
    ConstructionStatus,
    DevelopmentRecord,
    Documentation,
    SalesStatus,
    UnitRecord,
)
from devtrack_reports.logging_config import get_logger

from .utils import parse_bool, parse_date, parse_decimal, parse_int, parse_text

logger = get_logger(__name__)

E = TypeVar("E", bound=Enum)


def parse_status(value: object, enum: type[E], default: E) -> E:
    text = parse_text(value)
    if text is None:
        return default
    for member in enum:
        if member.value.lower() == text.lower() or member.name.lower() == text.lower().replace(" ", "_"):
            return member
    logger.warning("Unknown %s %r; using %s", enum.__name__, text, default.value)
    return default


def _flag(raw: Mapping[str, Any], flag: str, date_field: str) -> bool:
    return parse_bool(raw.get(flag)) or parse_date(raw.get(date_field)) is not None


def documentation_from_json(raw: Mapping[str, Any] | None) -> Documentation:
    raw = raw or {}
    return Documentation(
        bcms_submit_date=parse_date(raw.get("bcmsSubmitDate")),
        bcms_received=_flag(raw, "bcmsReceived", "bcmsReceivedDate"),
        bcms_received_date=parse_date(raw.get("bcmsReceivedDate")),
        bcms_approved_date=parse_date(raw.get("bcmsApprovedDate")),
        land_registry_approved=_flag(raw, "landRegistryApproved", "landRegistryApprovedDate"),
        land_registry_approved_date=parse_date(raw.get("landRegistryApprovedDate")),
        homebond_submit_date=parse_date(raw.get("homebondSubmitDate")),
        homebond_received=_flag(raw, "homebondReceived", "homebondReceivedDate"),
        homebond_received_date=parse_date(raw.get("homebondReceivedDate")),
        homebond_approved_date=parse_date(raw.get("homebondApprovedDate")),
        san_approved=_flag(raw, "sanApproved", "sanApprovedDate"),
        san_approved_date=parse_date(raw.get("sanApprovedDate")),
        contract_issued=_flag(raw, "contractIssued", "contractIssuedDate"),
        contract_issued_date=parse_date(raw.get("contractIssuedDate")),
        contract_signed=_flag(raw, "contractSigned", "contractSignedDate"),
        contract_signed_date=parse_date(raw.get("contractSignedDate")),
        sale_closed=_flag(raw, "saleClosed", "saleClosedDate"),
        sale_closed_date=parse_date(raw.get("saleClosedDate")),
    )


def unit_from_json(raw: Mapping[str, Any]) -> UnitRecord:
    key_dates = raw.get("keyDates") or {}
    documentation = raw.get("documentation") or {}
    return UnitRecord(
        unit_number=str(raw.get("unitNumber", "")).strip(),
        unit_type=parse_text(raw.get("type")) or "",
        bedrooms=parse_int(raw.get("bedrooms")),
        construction_status=parse_status(
            raw.get("constructionStatus"), ConstructionStatus, ConstructionStatus.NOT_STARTED
        ),
        sales_status=parse_status(raw.get("salesStatus"), SalesStatus, SalesStatus.NOT_RELEASED),
        list_price=parse_decimal(raw.get("listPrice"), default=None),
        sold_price=parse_decimal(raw.get("soldPrice"), default=None),
        price_inc_vat=parse_decimal(raw.get("priceIncVat"), default=None),
        planned_close=parse_date(key_dates.get("plannedClose")) or parse_date(raw.get("plannedCloseDate")),
        actual_close=parse_date(key_dates.get("actualClose")),
        close_date=parse_date(raw.get("closeDate")),
        planned_bcms=parse_date(key_dates.get("plannedBcms")) or parse_date(documentation.get("plannedBcmsDate")),
        start_date=parse_date(raw.get("startDate")),
        completion_date=parse_date(raw.get("completionDate")),
        documentation=documentation_from_json(documentation),
        size=parse_decimal(raw.get("size"), default=None),
        part_v=parse_bool(raw.get("partV")),
        address=parse_text(raw.get("address")),
        purchaser_type=parse_text(raw.get("purchaserType")),
        purchaser_name=parse_text(raw.get("purchaserName")),
        purchaser_phone=parse_text(raw.get("purchaserPhone")),
        purchaser_email=parse_text(raw.get("purchaserEmail")),
        applied_incentive=parse_text(raw.get("appliedIncentive")),
        incentive_status=parse_text(raw.get("incentiveStatus")),
    )


def _vat_rates(raw: object) -> dict[str, Decimal] | None:
    if not isinstance(raw, Mapping):
        return None
    rates: dict[str, Decimal] = {}
    for unit_type, rate in raw.items():
        parsed = parse_decimal(rate, default=None)
        if parsed is not None:
            rates[str(unit_type)] = parsed
    return rates


def development_from_json(raw: Mapping[str, Any]) -> DevelopmentRecord:
    name = str(raw.get("name", "")).strip()
    return DevelopmentRecord(
        id=str(raw.get("id") or slugify(name)),
        name=name,
        project_code=str(raw.get("projectNumber") or raw.get("projectCode") or ""),
        currency=(parse_text(raw.get("currency")) or "EUR").upper(),
        vat_rates=_vat_rates(raw.get("vatRates")),
        units=tuple(unit_from_json(unit) for unit in raw.get("units") or ()),
    )


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def unit_from_export_row(row: Mapping[str, Any]) -> UnitRecord:
    """Build a unit from one row of the units export layout."""
    documentation = Documentation(
        bcms_submit_date=parse_date(row.get("BCMS Submit Date")),
        bcms_received=parse_date(row.get("BCMS Received Date")) is not None,
        bcms_received_date=parse_date(row.get("BCMS Received Date")),
        bcms_approved_date=parse_date(row.get("BCMS Approved Date")) or parse_date(row.get("Actual BCMS")),
        land_registry_approved=parse_date(row.get("Land Registry Approved Date")) is not None,
        land_registry_approved_date=parse_date(row.get("Land Registry Approved Date")),
        homebond_submit_date=parse_date(row.get("Homebond Submit Date")),
        homebond_received=parse_date(row.get("Homebond Received Date")) is not None,
        homebond_received_date=parse_date(row.get("Homebond Received Date")),
        homebond_approved_date=parse_date(row.get("Homebond Approved Date")),
        san_approved=parse_date(row.get("SAN Approved Date")) is not None,
        san_approved_date=parse_date(row.get("SAN Approved Date")),
        contract_issued=parse_date(row.get("Contract Issued Date")) is not None,
        contract_issued_date=parse_date(row.get("Contract Issued Date")),
        contract_signed=parse_date(row.get("Contract Signed Date")) is not None,
        contract_signed_date=parse_date(row.get("Contract Signed Date")),
        sale_closed=parse_date(row.get("Sale Closed Date")) is not None,
        sale_closed_date=parse_date(row.get("Sale Closed Date")),
    )
    return UnitRecord(
        unit_number=parse_text(row.get("Unit Number")) or "",
        unit_type=parse_text(row.get("Unit Type")) or "",
        bedrooms=parse_int(row.get("Bedrooms")),
        construction_status=parse_status(
            row.get("Construction Status"), ConstructionStatus, ConstructionStatus.NOT_STARTED
        ),
        sales_status=parse_status(row.get("Sales Status"), SalesStatus, SalesStatus.NOT_RELEASED),
        list_price=parse_decimal(row.get("List Price"), default=None),
        sold_price=parse_decimal(row.get("Sold Price"), default=None),
        price_inc_vat=parse_decimal(row.get("Price Inc VAT"), default=None),
        planned_close=parse_date(row.get("Planned Close")),
        actual_close=parse_date(row.get("Actual Close")),
        planned_bcms=parse_date(row.get("Planned BCMS")),
        documentation=documentation,
        size=parse_decimal(row.get("Size (m²)"), default=None),
        part_v=parse_bool(row.get("Part V")),
        address=parse_text(row.get("Address")),
        purchaser_type=parse_text(row.get("Purchaser Type")),
        purchaser_name=parse_text(row.get("Purchaser Name")),
        purchaser_phone=parse_text(row.get("Purchaser Phone")),
        purchaser_email=parse_text(row.get("Purchaser Email")),
        applied_incentive=parse_text(row.get("Incentive Scheme")),
        incentive_status=parse_text(row.get("Incentive Status")),
    )


def developments_from_export_rows(rows: Iterable[Mapping[str, Any]]) -> list[DevelopmentRecord]:
    units_by_name: dict[str, list[UnitRecord]] = {}
    currency_by_name: dict[str, str] = {}
    skipped = 0
    for row in rows:
        name = parse_text(row.get("Development Name"))
        if name is None or parse_text(row.get("Unit Number")) is None:
            skipped += 1
            continue
        units_by_name.setdefault(name, []).append(unit_from_export_row(row))
        currency = parse_text(row.get("Currency"))
        if currency is not None:
            currency_by_name.setdefault(name, currency.upper())
    if skipped:
        logger.info("Skipped %d export rows without a development or unit number", skipped)
    return [
        DevelopmentRecord(
            id=slugify(name),
            name=name,
            currency=currency_by_name.get(name, "EUR"),
            units=tuple(units),
        )
        for name, units in units_by_name.items()
    ]
