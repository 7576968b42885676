"""Exceptions raised by the reporting pipeline."""
from __future__ import annotations


class ReportError(Exception):
    """Base class for failures that abort a single report request."""

    reason = "report_error"


class DevelopmentNotFoundError(ReportError):
    reason = "not_found"

    def __init__(self, development_id: str) -> None:
        super().__init__(f"Development {development_id!r} is not in the snapshot")
        self.development_id = development_id


class SnapshotUnavailableError(ReportError):
    reason = "snapshot_unavailable"


class EmitterError(ReportError):
    reason = "emitter_failed"
