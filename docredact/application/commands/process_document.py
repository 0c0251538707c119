"""Submit and process documents.

Submission validates the upload, resolves the document type's configured
elements and extraction mode from the catalog, and registers a job. Processing
runs the pipeline for a registered job and records progress and the final
result on it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from docredact.app_logging import job_logger
from docredact.application.job_store import JobRecord, JobStore
from docredact.application.pipeline.orchestrator import PipelineJob, PipelineOrchestrator, PipelineResult
from docredact.application.pipeline.progress import PipelineProgress
from docredact.domain.entities.documents import SUPPORTED_MIME_TYPES, SourceDocument
from docredact.domain.exceptions import (
    DomainValidationError,
    EntityNotFoundError,
    PipelineError,
    UnsupportedMediaTypeError,
)
from docredact.domain.value_objects.pipeline_status import PipelineState
from docredact.infrastructure.configuration.element_catalog import ElementCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitDocumentCommand:
    content: bytes
    filename: str
    mime_type: str
    document_type_id: str
    sub_type_id: Optional[str] = None


class SubmitDocumentHandler:
    """Handles SubmitDocument commands."""

    def __init__(self, catalog: ElementCatalog, job_store: JobStore):
        self._catalog = catalog
        self._jobs = job_store

    def handle(self, command: SubmitDocumentCommand) -> JobRecord:
        mime_type = (command.mime_type or "").strip().lower()
        if mime_type not in SUPPORTED_MIME_TYPES:
            raise UnsupportedMediaTypeError(mime_type)
        if not command.content:
            raise DomainValidationError("Uploaded document is empty")

        try:
            document_type = self._catalog.get_document_type(command.document_type_id)
            elements = self._catalog.get_elements(command.document_type_id, command.sub_type_id)
        except EntityNotFoundError as exc:
            raise DomainValidationError(str(exc)) from exc

        job = JobRecord(
            source=SourceDocument(content=command.content, mime_type=mime_type, filename=command.filename),
            document_type_id=document_type.id,
            sub_type_id=command.sub_type_id or None,
            elements=tuple(elements),
            mode=document_type.extraction_mode,
        )
        self._jobs.add(job)
        logger.info(
            "Registered job %s for %s (%s, %d elements, mode=%s)",
            job.job_id, command.filename, document_type.id, len(elements), job.mode.value,
        )
        return job


@dataclass(frozen=True)
class ProcessDocumentCommand:
    job_id: str


class ProcessDocumentHandler:
    """Runs the pipeline for a registered job. Intended for a background task."""

    def __init__(self, orchestrator: PipelineOrchestrator, job_store: JobStore):
        self._orchestrator = orchestrator
        self._jobs = job_store

    def handle(self, command: ProcessDocumentCommand) -> PipelineResult:
        job = self._jobs.get(command.job_id)
        if job is None:
            raise EntityNotFoundError("Job", command.job_id)
        log = job_logger(logger, job.job_id)

        def on_progress(progress: PipelineProgress) -> None:
            job.progress = progress

        try:
            result = self._orchestrator.run(
                PipelineJob(source=job.source, elements=job.elements, mode=job.mode, job_id=job.job_id),
                on_progress=on_progress,
                cancellation=job.cancellation,
            )
        except Exception as exc:
            log.exception("Pipeline crashed")
            result = PipelineResult(
                state=PipelineState.FAILED,
                progress=job.progress,
                failure=PipelineError(f"Pipeline crashed: {type(exc).__name__}: {exc}"),
            )
            job.finish(result)
            self._jobs.update(job.job_id, job)
            raise

        job.finish(result)
        self._jobs.update(job.job_id, job)
        log.info("Job finished with state %s", result.state.value)
        return result
