"""Application-level DTOs for report generation."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Sequence

from devtrack_reports.domain.document import DocumentModel
from devtrack_reports.domain.options import ReportOptions
from devtrack_reports.domain.services import ReportKind


class ReportFormat(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"
    BOTH = "both"

    def targets(self) -> tuple[str, ...]:
        if self is ReportFormat.BOTH:
            return (ReportFormat.PDF.value, ReportFormat.EXCEL.value)
        return (self.value,)


MEDIA_TYPES = {
    "pdf": "application/pdf",
    "excel": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}
EXTENSIONS = {"pdf": "pdf", "excel": "xlsx"}


@dataclass(slots=True, frozen=True)
class ReportRequest:
    kind: ReportKind
    fmt: ReportFormat = ReportFormat.PDF
    options: ReportOptions = field(default_factory=ReportOptions)
    requested_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class GeneratedFile:
    name: str
    content: bytes
    media_type: str


@dataclass(slots=True, frozen=True)
class ReportResponse:
    files: Sequence[GeneratedFile]
    model: DocumentModel
    ok: bool = True


@dataclass(slots=True, frozen=True)
class ReportFailure:
    """Distinguishable failure result; nothing was emitted."""

    reason: str
    message: str
    ok: bool = False
