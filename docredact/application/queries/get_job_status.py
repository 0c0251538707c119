"""
Job queries - read-only views of a job's progress and result.
"""
from __future__ import annotations

from dataclasses import dataclass

from docredact.application.dto.job_dto import JobResultDTO, JobStatusDTO
from docredact.application.job_store import JobRecord, JobStore
from docredact.domain.exceptions import EntityNotFoundError, JobStateConflictError


@dataclass(frozen=True)
class GetJobStatusQuery:
    """Query to get status of a specific job."""

    job_id: str


class GetJobStatusHandler:
    """Handles GetJobStatus queries."""

    def __init__(self, job_store: JobStore):
        self._jobs = job_store

    def handle(self, query: GetJobStatusQuery) -> JobStatusDTO:
        """
        Raises:
            EntityNotFoundError: If job not found
        """
        job = _require(self._jobs, query.job_id)
        progress = job.progress
        failure = job.result.failure if job.result is not None else None
        return JobStatusDTO(
            job_id=job.job_id,
            state=job.state.value,
            filename=job.source.filename,
            document_type_id=job.document_type_id,
            created_at=job.created_at,
            status_message=progress.status if progress else "Queued",
            processed_pages=progress.processed_pages if progress else 0,
            total_pages=progress.total_pages if progress else 0,
            percent=progress.percent if progress else 0.0,
            cancelled=job.cancellation.is_cancelled,
            page_index=progress.page_index if progress else None,
            finished_at=job.finished_at,
            failure=failure.to_dict() if failure is not None else None,
        )


@dataclass(frozen=True)
class GetJobResultQuery:
    job_id: str


class GetJobResultHandler:
    """Result of a job that reached a terminal state, partial pages included."""

    def __init__(self, job_store: JobStore):
        self._jobs = job_store

    def handle(self, query: GetJobResultQuery) -> JobResultDTO:
        job = _require(self._jobs, query.job_id)
        result = job.result
        if result is None:
            raise JobStateConflictError(job.job_id, job.state.value, "read the result of")
        return JobResultDTO(
            job_id=job.job_id,
            state=result.state.value,
            text=result.text,
            fields=[f.to_dict() for f in result.fields],
            matches=[m.to_dict() for m in result.matches],
            pages=[p.to_dict() for p in result.pages],
            failure=result.failure.to_dict() if result.failure else None,
            page_failures=[f.to_dict() for f in result.page_failures],
        )


def _require(jobs: JobStore, job_id: str) -> JobRecord:
    job = jobs.get(job_id)
    if job is None:
        raise EntityNotFoundError("Job", job_id, message=f"Job with ID '{job_id}' not found")
    return job
