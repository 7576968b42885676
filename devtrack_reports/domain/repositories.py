"""Collaborator interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .document import DocumentModel
from .models import DevelopmentRecord


class DevelopmentSnapshotRepository(Protocol):
    """Provides the validated development snapshot a report is built from."""

    async def list_developments(self) -> Sequence[DevelopmentRecord]:
        ...


class DocumentEmitter(Protocol):
    """Serializes a finished document model into one file format."""

    async def emit(self, model: DocumentModel, fmt: str) -> bytes:
        ...
