"""Single-development detail report."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Sequence

from ..aggregation import natural_key
from ..document import TOTAL, Column, DocumentModel, Heading, Row, SummaryTable
from ..errors import DevelopmentNotFoundError
from ..models import DevelopmentRecord, SalesStatus, UnitRecord
from ..options import ReportOptions
from ..rules import effective_close_date, effective_price, sale_value
from .common import MONEY_COLUMN_WIDTH, percent, sum_decimals, unit_ex_vat, unit_vat_rate


@dataclass(frozen=True)
class DevelopmentStats:
    total_units: int
    gdv: Decimal
    sales_complete: int
    sales_complete_value: Decimal
    contracted: int
    under_offer: int
    for_sale: int
    not_released: int

    @property
    def completion_rate(self) -> Decimal:
        return percent(self.sales_complete, self.total_units)


def development_stats(development: DevelopmentRecord) -> DevelopmentStats:
    units = development.units

    def with_status(status: SalesStatus) -> list[UnitRecord]:
        return [unit for unit in units if unit.sales_status is status]

    complete = with_status(SalesStatus.COMPLETE)
    return DevelopmentStats(
        total_units=len(units),
        gdv=sum_decimals(effective_price(unit) for unit in units),
        sales_complete=len(complete),
        sales_complete_value=sum_decimals(sale_value(unit) for unit in complete),
        contracted=len(with_status(SalesStatus.CONTRACTED)),
        under_offer=len(with_status(SalesStatus.UNDER_OFFER)),
        for_sale=len(with_status(SalesStatus.FOR_SALE)),
        not_released=len(with_status(SalesStatus.NOT_RELEASED)),
    )


def find_development(developments: Sequence[DevelopmentRecord], development_id: str | None) -> DevelopmentRecord:
    for development in developments:
        if development.id == development_id:
            return development
    raise DevelopmentNotFoundError(str(development_id))


KPI_COLUMNS = (
    Column("Metric", width=26),
    Column("Units", "number", width=8),
    Column("Value", "money", width=MONEY_COLUMN_WIDTH),
    Column("Share", "percent", width=8, precision=1),
)

UNIT_COLUMNS = (
    Column("Unit", width=10),
    Column("Type", width=12),
    Column("Beds", "number", width=6),
    Column("Size (m²)", "number", width=9, precision=1),
    Column("Construction", width=13),
    Column("Sales Status", width=12),
    Column("List Price", "money", width=MONEY_COLUMN_WIDTH),
    Column("Inc VAT", "money", width=MONEY_COLUMN_WIDTH),
    Column("VAT %", "percent", width=7, precision=1),
    Column("Ex VAT", "money", width=MONEY_COLUMN_WIDTH),
    Column("Sold Price", "money", width=MONEY_COLUMN_WIDTH),
    Column("Planned Close", "date", width=12),
    Column("Closed", "date", width=11),
    Column("Purchaser", width=20),
)

DOCUMENTATION_COLUMNS = (
    Column("Milestone", width=24),
    Column("Completed", width=12),
    Column("Share", "percent", width=8, precision=1),
)

DOCUMENTATION_MILESTONES: tuple[tuple[str, Callable[[UnitRecord], bool]], ...] = (
    ("BCMS Received", lambda unit: unit.documentation.bcms_received),
    ("Land Registry Approved", lambda unit: unit.documentation.land_registry_approved),
    ("Homebond Received", lambda unit: unit.documentation.homebond_received),
    ("Contracts Signed", lambda unit: unit.documentation.contract_signed),
    ("Sales Closed", lambda unit: unit.documentation.sale_closed),
)


def _kpi_rows(development: DevelopmentRecord, stats: DevelopmentStats) -> tuple[Row, ...]:
    total = stats.total_units

    def status_row(label: str, status: SalesStatus) -> Row:
        units = [unit for unit in development.units if unit.sales_status is status]
        return Row(cells=(label, len(units), sum_decimals(sale_value(unit) for unit in units), percent(len(units), total)))

    return (
        Row(cells=("Total Units / GDV", total, stats.gdv, percent(total, total)), emphasis=TOTAL),
        Row(cells=("Sales Complete", stats.sales_complete, stats.sales_complete_value, stats.completion_rate)),
        status_row("Contracted", SalesStatus.CONTRACTED),
        status_row("Under Offer", SalesStatus.UNDER_OFFER),
        status_row("For Sale", SalesStatus.FOR_SALE),
        status_row("Not Released", SalesStatus.NOT_RELEASED),
    )


def _unit_row(development: DevelopmentRecord, unit: UnitRecord) -> Row:
    return Row(
        cells=(
            unit.unit_number,
            unit.unit_type,
            unit.bedrooms,
            unit.size,
            unit.construction_status.value,
            unit.sales_status.value,
            unit.list_price,
            effective_price(unit),
            unit_vat_rate(development, unit),
            unit_ex_vat(development, unit),
            unit.sold_price,
            unit.planned_close,
            effective_close_date(unit),
            unit.purchaser_name,
        )
    )


def _documentation_rows(development: DevelopmentRecord) -> tuple[Row, ...]:
    total = len(development.units)
    rows = []
    for label, reached in DOCUMENTATION_MILESTONES:
        done = sum(1 for unit in development.units if reached(unit))
        rows.append(Row(cells=(label, f"{done} / {total}", percent(done, total))))
    return tuple(rows)


def build_development_report(
    developments: Sequence[DevelopmentRecord],
    as_of: datetime,
    options: ReportOptions | None = None,
) -> DocumentModel:
    options = options or ReportOptions()
    development = find_development(developments, options.development_id)
    stats = development_stats(development)
    units = sorted(development.units, key=lambda unit: natural_key(unit.unit_number))

    subtitle = f"Project {development.project_code}" if development.project_code else None
    blocks = (
        Heading(development.name, subtitle=subtitle),
        SummaryTable("Key Metrics", KPI_COLUMNS, _kpi_rows(development, stats)),
        SummaryTable("Units", UNIT_COLUMNS, tuple(_unit_row(development, unit) for unit in units)),
        SummaryTable("Documentation Completion", DOCUMENTATION_COLUMNS, _documentation_rows(development)),
    )
    return DocumentModel(
        title=f"{development.name} Report",
        subtitle=subtitle,
        generated_at=as_of,
        currency=development.currency,
        blocks=blocks,
    )
