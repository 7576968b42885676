"""Domain-driven property portfolio reporting toolkit."""
from devtrack_reports.application.dto import ReportFailure, ReportFormat, ReportRequest, ReportResponse
from devtrack_reports.application.use_cases import GenerateReportUseCase, ReportContext
from devtrack_reports.domain.options import ReportOptions
from devtrack_reports.domain.services import ReportBuilder, ReportKind
from devtrack_reports.infrastructure.emitters.dispatch import FormatEmitter
from devtrack_reports.infrastructure.repositories.snapshot_repositories import (
    ExcelSnapshotRepository,
    JsonSnapshotRepository,
)

__all__ = [
    "GenerateReportUseCase",
    "ReportContext",
    "ReportBuilder",
    "ReportKind",
    "ReportOptions",
    "ReportFormat",
    "ReportRequest",
    "ReportResponse",
    "ReportFailure",
    "FormatEmitter",
    "JsonSnapshotRepository",
    "ExcelSnapshotRepository",
]
