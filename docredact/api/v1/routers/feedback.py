"""Classification feedback routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from docredact.api.schemas import FeedbackRequestSchema, FeedbackResponseSchema
from docredact.api.v1.dependencies import get_submit_feedback_handler
from docredact.application.commands.submit_feedback import SubmitFeedbackCommand, SubmitFeedbackHandler
from docredact.domain.exceptions import DomainValidationError

router = APIRouter(prefix="/feedback", tags=["feedback"])


@router.post("", response_model=FeedbackResponseSchema, status_code=202)
def submit_feedback(
    payload: FeedbackRequestSchema,
    handler: SubmitFeedbackHandler = Depends(get_submit_feedback_handler),
) -> FeedbackResponseSchema:
    try:
        queued = handler.handle(
            SubmitFeedbackCommand(
                document_id=payload.documentId,
                predicted_type=payload.predictedType,
                corrected_type=payload.correctedType,
                predicted_sub_type=payload.predictedSubType,
                corrected_sub_type=payload.correctedSubType,
                field_corrections=list(payload.fieldCorrections),
                confidence=payload.confidence,
                feedback_source=payload.feedbackSource,
            )
        )
    except DomainValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return FeedbackResponseSchema(accepted=True, queued=queued)
