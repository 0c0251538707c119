"""RelabelField Command - Applies a user correction to a field label.

The corrected label is matched again against the job's configured elements,
so a relabel can claim a previously missing element or release one.
Fields of failed jobs are relabelled but left unmatched.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from docredact.application.job_store import JobStore
from docredact.domain.entities.extracted_field import ExtractedField, FieldSource
from docredact.domain.entities.match_result import MatchResult
from docredact.domain.exceptions import DomainValidationError, EntityNotFoundError, JobStateConflictError
from docredact.domain.services.field_matcher import FieldMatcher
from docredact.domain.value_objects.pipeline_status import PipelineState
from docredact.infrastructure.feedback.feedback_client import FeedbackReport, FeedbackReporter

logger = logging.getLogger(__name__)

_RELABEL_STATES = (PipelineState.DONE, PipelineState.FAILED)


@dataclass(frozen=True)
class RelabelFieldCommand:
    job_id: str
    field_id: str
    label: str


@dataclass(frozen=True)
class RelabelFieldResult:
    field: ExtractedField
    match: Optional[MatchResult]


class RelabelFieldHandler:
    """Handles RelabelField commands."""

    def __init__(self, job_store: JobStore, matcher: FieldMatcher, feedback: Optional[FeedbackReporter] = None):
        self._jobs = job_store
        self._matcher = matcher
        self._feedback = feedback

    def handle(self, command: RelabelFieldCommand) -> RelabelFieldResult:
        job = self._jobs.get(command.job_id)
        if job is None:
            raise EntityNotFoundError("Job", command.job_id)
        if job.result is None or job.state not in _RELABEL_STATES:
            raise JobStateConflictError(command.job_id, job.state.value, "relabel fields of")

        target = next((f for f in job.result.fields if f.id == command.field_id), None)
        if target is None:
            raise EntityNotFoundError("ExtractedField", command.field_id)

        previous = target.label
        try:
            target.relabel(command.label)
        except ValueError as exc:
            raise DomainValidationError(str(exc)) from exc

        # failed jobs keep their fields unmatched
        match = None
        if job.state is PipelineState.DONE:
            backend_fields = [f for f in job.result.fields if f.source is not FieldSource.PATTERN]
            pattern_fields = [f for f in job.result.fields if f.source is FieldSource.PATTERN]
            job.result.matches = self._matcher.match_all(backend_fields, pattern_fields, job.elements)
            match = next((m for m in job.result.matches if m.field is not None and m.field.id == target.id), None)
        self._jobs.update(job.job_id, job)
        logger.info(
            "Relabelled field %s of job %s from '%s' to '%s' (%s)",
            target.id, job.job_id, previous, target.label, match.tier.value if match else "none",
        )

        if self._feedback is not None:
            self._feedback.report(FeedbackReport(
                document_id=job.job_id,
                predicted_type=job.document_type_id,
                corrected_type=job.document_type_id,
                predicted_sub_type=job.sub_type_id,
                corrected_sub_type=job.sub_type_id,
                field_corrections=[{"fieldId": target.id, "from": previous, "to": target.label}],
                confidence=target.confidence,
            ))
        return RelabelFieldResult(field=target, match=match)
