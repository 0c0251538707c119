"""Job-related API routes for v1 endpoints."""
from __future__ import annotations

import base64
import mimetypes
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile

from docredact.api.schemas import (
    CancelResponseSchema,
    JobResultSchema,
    JobStatusSchema,
    RedactRequestSchema,
    RedactResponseSchema,
    RelabelRequestSchema,
    RelabelResponseSchema,
    UploadResponseSchema,
)
from docredact.api.v1.dependencies import (
    get_cancel_job_handler,
    get_job_result_handler,
    get_job_status_handler,
    get_process_document_handler,
    get_redact_document_handler,
    get_relabel_field_handler,
    get_submit_document_handler,
)
from docredact.application.commands.cancel_job import CancelJobCommand, CancelJobHandler
from docredact.application.commands.process_document import (
    ProcessDocumentCommand,
    ProcessDocumentHandler,
    SubmitDocumentCommand,
    SubmitDocumentHandler,
)
from docredact.application.commands.redact_document import RedactDocumentCommand, RedactDocumentHandler
from docredact.application.commands.relabel_field import RelabelFieldCommand, RelabelFieldHandler
from docredact.application.dto.job_dto import JobResultDTO, JobStatusDTO
from docredact.application.queries.get_job_status import (
    GetJobResultHandler,
    GetJobResultQuery,
    GetJobStatusHandler,
    GetJobStatusQuery,
)
from docredact.domain.entities.redaction import ManualRegion
from docredact.domain.exceptions import (
    DomainValidationError,
    EntityNotFoundError,
    JobStateConflictError,
    RedactionUnsupportedArtifactError,
    UnsupportedMediaTypeError,
)

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", response_model=UploadResponseSchema, status_code=202)
async def submit_job(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    documentType: str = Form(...),
    subType: Optional[str] = Form(default=None),
    submit_handler: SubmitDocumentHandler = Depends(get_submit_document_handler),
    process_handler: ProcessDocumentHandler = Depends(get_process_document_handler),
) -> UploadResponseSchema:
    if not file.filename:
        raise HTTPException(status_code=400, detail="Filename is required")

    content = await file.read()
    try:
        job = submit_handler.handle(
            SubmitDocumentCommand(
                content=content,
                filename=file.filename,
                mime_type=_mime_type(file),
                document_type_id=documentType,
                sub_type_id=subType,
            )
        )
    except UnsupportedMediaTypeError as exc:
        raise HTTPException(status_code=415, detail=str(exc)) from exc
    except DomainValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    background_tasks.add_task(process_handler.handle, ProcessDocumentCommand(job_id=job.job_id))
    return UploadResponseSchema(
        jobId=job.job_id,
        state=job.state.value,
        documentType=job.document_type_id,
        subType=job.sub_type_id,
    )


@router.get("/{job_id}/status", response_model=JobStatusSchema)
def get_job_status(
    job_id: str,
    handler: GetJobStatusHandler = Depends(get_job_status_handler),
) -> JobStatusSchema:
    try:
        dto = handler.handle(GetJobStatusQuery(job_id=job_id))
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return _job_status_to_schema(dto)


@router.get("/{job_id}/result", response_model=JobResultSchema)
def get_job_result(
    job_id: str,
    handler: GetJobResultHandler = Depends(get_job_result_handler),
) -> JobResultSchema:
    try:
        dto = handler.handle(GetJobResultQuery(job_id=job_id))
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except JobStateConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    return _job_result_to_schema(dto)


@router.post("/{job_id}/cancel", response_model=CancelResponseSchema)
def cancel_job(
    job_id: str,
    handler: CancelJobHandler = Depends(get_cancel_job_handler),
) -> CancelResponseSchema:
    try:
        summary = handler.handle(CancelJobCommand(job_id=job_id))
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except JobStateConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    return CancelResponseSchema(
        jobId=summary["job_id"],
        cancelRequested=summary["cancel_requested"],
        state=summary["state"],
    )


@router.patch("/{job_id}/fields/{field_id}", response_model=RelabelResponseSchema)
def relabel_field(
    job_id: str,
    field_id: str,
    payload: RelabelRequestSchema,
    handler: RelabelFieldHandler = Depends(get_relabel_field_handler),
) -> RelabelResponseSchema:
    try:
        result = handler.handle(RelabelFieldCommand(job_id=job_id, field_id=field_id, label=payload.label))
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except JobStateConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except DomainValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return RelabelResponseSchema(
        field=result.field.to_dict(),
        match=result.match.to_dict() if result.match else None,
    )


@router.post("/{job_id}/redact", response_model=RedactResponseSchema)
def redact_document(
    job_id: str,
    payload: RedactRequestSchema,
    handler: RedactDocumentHandler = Depends(get_redact_document_handler),
) -> RedactResponseSchema:
    try:
        regions = tuple(
            ManualRegion(
                id=region.id,
                label=region.label,
                bounding_box=region.boundingBox,
                page_index=region.pageIndex,
            )
            for region in payload.manualRegions
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    try:
        result = handler.handle(
            RedactDocumentCommand(job_id=job_id, field_ids=tuple(payload.fieldIds), manual_regions=regions)
        )
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except JobStateConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except RedactionUnsupportedArtifactError as exc:
        raise HTTPException(status_code=415, detail=exc.message) from exc

    return RedactResponseSchema(
        jobId=job_id,
        artifact=base64.b64encode(result.artifact).decode("ascii"),
        **result.to_dict(),
    )


def _mime_type(file: UploadFile) -> str:
    declared = (file.content_type or "").split(";")[0].strip().lower()
    if declared and declared != "application/octet-stream":
        return declared
    guessed, _ = mimetypes.guess_type(file.filename or "")
    return guessed or declared


def _job_status_to_schema(dto: JobStatusDTO) -> JobStatusSchema:
    return JobStatusSchema(
        jobId=dto.job_id,
        state=dto.state,
        status=dto.status_message,
        filename=dto.filename,
        documentType=dto.document_type_id,
        processedPages=dto.processed_pages,
        totalPages=dto.total_pages,
        percent=dto.percent,
        cancelled=dto.cancelled,
        pageIndex=dto.page_index,
        startedAt=dto.created_at,
        finishedAt=dto.finished_at,
        failure=dto.failure,
    )


def _job_result_to_schema(dto: JobResultDTO) -> JobResultSchema:
    return JobResultSchema(
        jobId=dto.job_id,
        state=dto.state,
        text=dto.text,
        fields=dto.fields,
        matches=dto.matches,
        pages=dto.pages,
        failure=dto.failure,
        pageFailures=dto.page_failures,
    )
