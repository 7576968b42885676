"""Emitter that routes each target format to its concrete emitter."""
from __future__ import annotations

from typing import Mapping

from devtrack_reports.domain.document import DocumentModel
from devtrack_reports.domain.errors import EmitterError
from devtrack_reports.domain.repositories import DocumentEmitter

from .pdf import PdfEmitter
from .workbook import WorkbookEmitter


class FormatEmitter:
    def __init__(self, emitters: Mapping[str, DocumentEmitter] | None = None) -> None:
        self._emitters = dict(emitters or {"pdf": PdfEmitter(), "excel": WorkbookEmitter()})

    async def emit(self, model: DocumentModel, fmt: str) -> bytes:
        emitter = self._emitters.get(fmt)
        if emitter is None:
            raise EmitterError(f"Unsupported report format {fmt!r}")
        return await emitter.emit(model, fmt)
