"""Application services orchestrating report generation."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from devtrack_reports.config import SETTINGS
from devtrack_reports.domain.builders.development import find_development
from devtrack_reports.domain.errors import EmitterError, ReportError, SnapshotUnavailableError
from devtrack_reports.domain.repositories import DevelopmentSnapshotRepository, DocumentEmitter
from devtrack_reports.domain.services import ReportBuilder, ReportKind
from devtrack_reports.logging_config import get_logger

from .dto import MEDIA_TYPES, GeneratedFile, ReportFailure, ReportRequest, ReportResponse
from .filenames import report_filename

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(SETTINGS.timezone)


@dataclass(slots=True)
class ReportContext:
    repository: DevelopmentSnapshotRepository
    emitter: DocumentEmitter
    builder: ReportBuilder = field(default_factory=ReportBuilder)
    clock: Callable[[], datetime] = _utc_now


class GenerateReportUseCase:
    def __init__(self, context: ReportContext) -> None:
        self._context = context

    async def execute(self, request: ReportRequest) -> ReportResponse | ReportFailure:
        """Read the snapshot, build the whole model, then emit each requested format.

        Collaborator failures and unknown developments come back as a
        ``ReportFailure``; no file is returned unless every format emitted.
        """
        as_of = request.requested_at or self._context.clock()
        logger.info("Generating %s report (%s)", request.kind.value, request.fmt.value)
        try:
            developments = await self._context.repository.list_developments()
            model = self._context.builder.build(request.kind, developments, as_of, request.options)
            development_name = None
            if request.kind is ReportKind.DEVELOPMENT:
                development_name = find_development(developments, request.options.development_id).name

            files = []
            for target in request.fmt.targets():
                content = await self._context.emitter.emit(model, target)
                files.append(
                    GeneratedFile(
                        name=report_filename(request.kind, target, as_of.date(), development_name),
                        content=content,
                        media_type=MEDIA_TYPES[target],
                    )
                )
        except (SnapshotUnavailableError, EmitterError) as exc:
            logger.exception("Report %s failed: %s", request.kind.value, exc.reason)
            return ReportFailure(reason=exc.reason, message=str(exc))
        except ReportError as exc:
            logger.warning("Report %s rejected: %s", request.kind.value, exc)
            return ReportFailure(reason=exc.reason, message=str(exc))

        logger.info("Generated %d file(s): %s", len(files), ", ".join(item.name for item in files))
        return ReportResponse(files=tuple(files), model=model)
