import asyncio
import json
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from devtrack_reports.domain.builders.units_export import build_units_export
from devtrack_reports.domain.document import DocumentModel
from devtrack_reports.domain.errors import SnapshotUnavailableError
from devtrack_reports.domain.models import SalesStatus
from devtrack_reports.infrastructure.emitters.workbook import render_workbook
from devtrack_reports.infrastructure.repositories.snapshot_repositories import (
    ExcelSnapshotRepository,
    JsonSnapshotRepository,
)
from tests.factories import AS_OF, closed_unit, make_development, make_unit

SNAPSHOT = {
    "developments": [
        {
            "id": "dev-1",
            "name": "Riverside Gardens",
            "projectNumber": "RG01",
            "vatRates": {"Apartment": "9"},
            "units": [
                {
                    "unitNumber": "12",
                    "type": "Apartment",
                    "bedrooms": "2",
                    "salesStatus": "Contracted",
                    "constructionStatus": "In Progress",
                    "listPrice": 350000,
                    "soldPrice": "345000",
                    "plannedCloseDate": "2024-05-01",
                    "keyDates": {"plannedClose": "2024-04-15"},
                    "documentation": {"bcmsReceivedDate": "2024-02-01", "contractSigned": True},
                },
                {"unitNumber": "13", "type": "Apartment", "salesStatus": "Mystery"},
            ],
        }
    ]
}


def load(repository):
    return asyncio.run(repository.list_developments())


def test_json_snapshot_parses_camel_case_records() -> None:
    (development,) = load(JsonSnapshotRepository(json.dumps(SNAPSHOT).encode("utf-8")))

    assert development.id == "dev-1"
    assert development.project_code == "RG01"
    assert development.vat_rates == {"Apartment": Decimal("9")}
    unit, unknown = development.units
    assert unit.bedrooms == 2
    assert unit.sales_status is SalesStatus.CONTRACTED
    assert unit.sold_price == Decimal("345000")
    assert unit.planned_close == date(2024, 4, 15)
    assert unit.documentation.bcms_received is True
    assert unit.documentation.contract_signed is True
    assert unit.documentation.land_registry_approved is False
    assert unknown.sales_status is SalesStatus.NOT_RELEASED


def test_json_snapshot_accepts_a_bare_list_and_slugs_missing_ids() -> None:
    payload = [{"name": "Oak Hill Phase 2", "units": []}]

    (development,) = load(JsonSnapshotRepository(json.dumps(payload).encode("utf-8")))

    assert development.id == "oak-hill-phase-2"


def test_malformed_json_snapshot_is_unavailable() -> None:
    with pytest.raises(SnapshotUnavailableError):
        load(JsonSnapshotRepository(b"{not json"))


def test_units_export_workbook_reads_back() -> None:
    exported = [
        make_development(
            "Riverside",
            closed_unit("2", date(2024, 1, 10), "300000"),
            make_unit("10", status=SalesStatus.UNDER_OFFER, planned=date(2024, 4, 2), bedrooms=4),
        )
    ]
    content = render_workbook(build_units_export(exported, AS_OF))

    (development,) = load(ExcelSnapshotRepository(content))

    assert development.name == "Riverside"
    closed, offered = development.units
    assert closed.unit_number == "2"
    assert closed.sales_status is SalesStatus.COMPLETE
    assert closed.documentation.sale_closed_date == date(2024, 1, 10)
    assert closed.list_price == Decimal("300000")
    assert offered.bedrooms == 4
    assert offered.planned_close == date(2024, 4, 2)
    assert offered.documentation.sale_closed is False


def test_workbook_without_key_columns_is_unavailable() -> None:
    content = render_workbook(DocumentModel(title="Empty", generated_at=AS_OF, currency="EUR", blocks=()))

    with pytest.raises(SnapshotUnavailableError):
        load(ExcelSnapshotRepository(content))


def test_garbage_workbook_is_unavailable() -> None:
    with pytest.raises(SnapshotUnavailableError):
        load(ExcelSnapshotRepository(b"not a workbook"))


def test_units_export_round_trip_keeps_prices_and_currency() -> None:
    sterling = replace(make_development("Harbour View", make_unit("1", price="250000")), currency="GBP")
    content = render_workbook(build_units_export([sterling], AS_OF))

    (development,) = load(ExcelSnapshotRepository(content))

    assert development.currency == "GBP"
    (unit,) = development.units
    assert unit.list_price == Decimal("250000")
    assert unit.price_inc_vat is None
