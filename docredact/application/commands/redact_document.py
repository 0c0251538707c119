"""RedactDocument Command - Renders a redacted copy of a processed job's document."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from docredact.application.job_store import JobStore
from docredact.domain.entities.extracted_field import ExtractedField
from docredact.domain.entities.redaction import ManualRegion, RedactionResult, RedactionSelection
from docredact.domain.exceptions import EntityNotFoundError, JobStateConflictError
from docredact.infrastructure.pdf.redaction_renderer import RedactionRenderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedactDocumentCommand:
    job_id: str
    field_ids: Tuple[str, ...] = field(default_factory=tuple)
    manual_regions: Tuple[ManualRegion, ...] = field(default_factory=tuple)


class RedactDocumentHandler:
    """Handles RedactDocument commands."""

    def __init__(self, job_store: JobStore, renderer: RedactionRenderer):
        self._jobs = job_store
        self._renderer = renderer

    def handle(self, command: RedactDocumentCommand) -> RedactionResult:
        job = self._jobs.get(command.job_id)
        if job is None:
            raise EntityNotFoundError("Job", command.job_id)
        if job.result is None or not job.is_terminal:
            raise JobStateConflictError(command.job_id, job.state.value, "redact")

        selection = RedactionSelection(field_ids=command.field_ids, manual_regions=command.manual_regions)
        fields = _redactable_fields(job.result.fields, job.result.missing)
        result = self._renderer.render(job.source.content, job.source.mime_type, selection, fields)
        logger.info(
            "Redacted job %s: %d redacted, %d drawn, %d skipped, %d unknown",
            job.job_id, len(result.redacted_ids), len(result.rendered_ids),
            len(result.skipped_ids), len(result.unknown_ids),
        )
        return result


def _redactable_fields(fields: Sequence[ExtractedField], missing) -> List[ExtractedField]:
    """Extracted fields plus a geometry-less stand-in for every missing element.

    Missing elements can be selected by id; they count as redacted but have
    nothing to draw.
    """
    stand_ins = [
        ExtractedField(id=m.id, label=m.label, value="", confidence=0.0)
        for m in missing
    ]
    return list(fields) + stand_ins
