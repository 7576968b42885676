"""Flat units export, one row per unit.

The column layout is shared with the Excel snapshot reader so an exported
workbook can be loaded back as a snapshot.
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Sequence

from ..aggregation import natural_key
from ..document import Column, DocumentModel, Row, SummaryTable
from ..models import DevelopmentRecord, UnitRecord
from ..options import ReportOptions
from ..windows import select_developments
from .common import MONEY_COLUMN_WIDTH, report_currency, unit_ex_vat

TITLE = "Units Export"
SHEET = "Units"

Getter = Callable[[DevelopmentRecord, UnitRecord], object]


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


EXPORT_LAYOUT: tuple[tuple[Column, Getter], ...] = (
    (Column("Development Name", width=25), lambda dev, unit: dev.name),
    (Column("Unit Number", width=12), lambda dev, unit: unit.unit_number),
    (Column("Unit Type", width=15), lambda dev, unit: unit.unit_type),
    (Column("Currency", width=10), lambda dev, unit: dev.currency),
    (Column("Address", width=30), lambda dev, unit: unit.address),
    (Column("Bedrooms", "number", width=10), lambda dev, unit: unit.bedrooms),
    (Column("Size (m²)", "number", width=10, precision=1), lambda dev, unit: unit.size),
    (Column("Construction Status", width=18), lambda dev, unit: unit.construction_status.value),
    (Column("Sales Status", width=15), lambda dev, unit: unit.sales_status.value),
    (Column("List Price", "money", width=MONEY_COLUMN_WIDTH), lambda dev, unit: unit.list_price),
    (Column("Sold Price", "money", width=MONEY_COLUMN_WIDTH), lambda dev, unit: unit.sold_price),
    (Column("Price Ex VAT", "money", width=MONEY_COLUMN_WIDTH), unit_ex_vat),
    (Column("Price Inc VAT", "money", width=MONEY_COLUMN_WIDTH), lambda dev, unit: unit.price_inc_vat),
    (Column("Purchaser Type", width=15), lambda dev, unit: unit.purchaser_type or "Private"),
    (Column("Part V", width=8), lambda dev, unit: _yes_no(unit.part_v)),
    (Column("Purchaser Name", width=25), lambda dev, unit: unit.purchaser_name),
    (Column("Purchaser Phone", width=15), lambda dev, unit: unit.purchaser_phone),
    (Column("Purchaser Email", width=25), lambda dev, unit: unit.purchaser_email),
    (Column("Planned BCMS", "date", width=15), lambda dev, unit: unit.planned_bcms),
    (Column("Actual BCMS", "date", width=15), lambda dev, unit: unit.documentation.bcms_approved_date),
    (Column("Planned Close", "date", width=15), lambda dev, unit: unit.planned_close),
    (Column("Actual Close", "date", width=15), lambda dev, unit: unit.actual_close),
    (Column("BCMS Submit Date", "date", width=18), lambda dev, unit: unit.documentation.bcms_submit_date),
    (Column("BCMS Received Date", "date", width=18), lambda dev, unit: unit.documentation.bcms_received_date),
    (Column("BCMS Approved Date", "date", width=18), lambda dev, unit: unit.documentation.bcms_approved_date),
    (
        Column("Land Registry Approved Date", "date", width=25),
        lambda dev, unit: unit.documentation.land_registry_approved_date,
    ),
    (Column("Homebond Submit Date", "date", width=20), lambda dev, unit: unit.documentation.homebond_submit_date),
    (Column("Homebond Received Date", "date", width=20), lambda dev, unit: unit.documentation.homebond_received_date),
    (Column("Homebond Approved Date", "date", width=20), lambda dev, unit: unit.documentation.homebond_approved_date),
    (Column("SAN Approved Date", "date", width=18), lambda dev, unit: unit.documentation.san_approved_date),
    (Column("Contract Issued Date", "date", width=18), lambda dev, unit: unit.documentation.contract_issued_date),
    (Column("Contract Signed Date", "date", width=18), lambda dev, unit: unit.documentation.contract_signed_date),
    (Column("Sale Closed Date", "date", width=15), lambda dev, unit: unit.documentation.sale_closed_date),
    (Column("Incentive Scheme", width=18), lambda dev, unit: unit.applied_incentive),
    (Column("Incentive Status", width=15), lambda dev, unit: unit.incentive_status),
)

EXPORT_COLUMNS = tuple(column for column, _getter in EXPORT_LAYOUT)
EXPORT_HEADERS = tuple(column.label for column in EXPORT_COLUMNS)


def build_units_export(
    developments: Sequence[DevelopmentRecord],
    as_of: datetime,
    options: ReportOptions | None = None,
) -> DocumentModel:
    options = options or ReportOptions()
    selected = select_developments(developments, options.selected_ids)
    rows = []
    for development in sorted(selected, key=lambda dev: dev.name):
        for unit in sorted(development.units, key=lambda item: natural_key(item.unit_number)):
            rows.append(tuple(getter(development, unit) for _column, getter in EXPORT_LAYOUT))

    table = SummaryTable(
        None,
        EXPORT_COLUMNS,
        tuple(Row(cells=cells) for cells in rows),
        sheet=SHEET,
        freeze_header=True,
    )
    return DocumentModel(title=TITLE, generated_at=as_of, currency=report_currency(selected), blocks=(table,))
