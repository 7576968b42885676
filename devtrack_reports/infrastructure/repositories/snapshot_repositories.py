"""File-backed development snapshot repositories."""
from __future__ import annotations

import json
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Sequence

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from devtrack_reports.domain.errors import SnapshotUnavailableError
from devtrack_reports.domain.models import DevelopmentRecord
from devtrack_reports.domain.repositories import DevelopmentSnapshotRepository
from devtrack_reports.infrastructure.parsing.records import (
    development_from_json,
    developments_from_export_rows,
)
from devtrack_reports.infrastructure.parsing.utils import ensure_bytes
from devtrack_reports.logging_config import get_logger

logger = get_logger(__name__)

UNITS_SHEET = "Units"


class JsonSnapshotRepository(DevelopmentSnapshotRepository):
    """Developments from a JSON document: a list, or ``{"developments": [...]}``."""

    def __init__(self, source: BytesIO | Path | bytes) -> None:
        self._source = source

    async def list_developments(self) -> Sequence[DevelopmentRecord]:
        try:
            payload = json.loads(ensure_bytes(self._source).decode("utf-8"))
            if isinstance(payload, dict):
                payload = payload.get("developments", [])
            if not isinstance(payload, list):
                raise ValueError("expected a list of developments")
            developments = [development_from_json(item) for item in payload]
        except (OSError, TypeError, ValueError, AttributeError) as exc:
            raise SnapshotUnavailableError(f"Could not read JSON snapshot: {exc}") from exc
        logger.info(
            "Loaded %d developments (%d units) from JSON snapshot",
            len(developments),
            sum(len(dev.units) for dev in developments),
        )
        return developments


class ExcelSnapshotRepository(DevelopmentSnapshotRepository):
    """Developments from a workbook in the units export layout."""

    def __init__(self, source: BytesIO | Path | bytes, sheet_name: str | int = UNITS_SHEET) -> None:
        self._source = source
        self._sheet_name = sheet_name

    async def list_developments(self) -> Sequence[DevelopmentRecord]:
        try:
            data = ensure_bytes(self._source)
            with pd.ExcelFile(BytesIO(data), engine="openpyxl") as workbook:
                sheet = self._sheet_name if self._sheet_name in workbook.sheet_names else 0
                df = pd.read_excel(workbook, sheet_name=sheet, dtype=str)
        except (OSError, TypeError, ValueError, KeyError, zipfile.BadZipFile, InvalidFileException) as exc:
            raise SnapshotUnavailableError(f"Could not read units workbook: {exc}") from exc

        df.columns = [str(column).strip() for column in df.columns]
        if "Development Name" not in df.columns or "Unit Number" not in df.columns:
            raise SnapshotUnavailableError("Units workbook is missing the Development Name or Unit Number column")
        developments = developments_from_export_rows(df.to_dict(orient="records"))
        logger.info(
            "Loaded %d developments (%d units) from units workbook",
            len(developments),
            sum(len(dev.units) for dev in developments),
        )
        return developments
