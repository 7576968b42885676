from datetime import date, datetime, timezone
from decimal import Decimal

from devtrack_reports.domain.models import (
    ConstructionStatus,
    DevelopmentRecord,
    Documentation,
    SalesStatus,
    UnitRecord,
)

AS_OF = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)
TODAY = AS_OF.date()


def make_unit(
    number: str,
    *,
    status: SalesStatus = SalesStatus.FOR_SALE,
    price: str | None = "300000",
    sold: str | None = None,
    planned: date | None = None,
    unit_type: str = "House-Semi",
    bedrooms: int = 3,
    **documentation: object,
) -> UnitRecord:
    return UnitRecord(
        unit_number=number,
        unit_type=unit_type,
        bedrooms=bedrooms,
        construction_status=ConstructionStatus.IN_PROGRESS,
        sales_status=status,
        list_price=Decimal(price) if price is not None else None,
        sold_price=Decimal(sold) if sold is not None else None,
        planned_close=planned,
        documentation=Documentation(**documentation),
    )


def make_development(name: str, *units: UnitRecord, dev_id: str | None = None) -> DevelopmentRecord:
    return DevelopmentRecord(
        id=dev_id or name.lower().replace(" ", "-"),
        name=name,
        project_code=name[:3].upper(),
        units=tuple(units),
    )


def closed_unit(number: str, closed_on: date, value: str) -> UnitRecord:
    return make_unit(
        number,
        status=SalesStatus.COMPLETE,
        price=value,
        sale_closed=True,
        sale_closed_date=closed_on,
    )
