"""SubmitFeedback Command - Forwards a classification correction."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from docredact.domain.exceptions import DomainValidationError
from docredact.infrastructure.feedback.feedback_client import FeedbackReport, FeedbackReporter

_FEEDBACK_SOURCES = ("auto", "manual", "review")


@dataclass(frozen=True)
class SubmitFeedbackCommand:
    document_id: str
    predicted_type: Optional[str] = None
    corrected_type: Optional[str] = None
    predicted_sub_type: Optional[str] = None
    corrected_sub_type: Optional[str] = None
    field_corrections: List[Dict[str, str]] = field(default_factory=list)
    confidence: Optional[float] = None
    feedback_source: str = "manual"


class SubmitFeedbackHandler:
    """Handles SubmitFeedback commands. Delivery happens in the background."""

    def __init__(self, reporter: FeedbackReporter):
        self._reporter = reporter

    def handle(self, command: SubmitFeedbackCommand) -> bool:
        """Returns True when the report was queued for delivery."""
        if not (command.document_id or "").strip():
            raise DomainValidationError("documentId is required")
        if command.feedback_source not in _FEEDBACK_SOURCES:
            raise DomainValidationError(f"feedbackSource must be one of {', '.join(_FEEDBACK_SOURCES)}")

        future = self._reporter.report(FeedbackReport(
            document_id=command.document_id.strip(),
            predicted_type=command.predicted_type,
            corrected_type=command.corrected_type,
            predicted_sub_type=command.predicted_sub_type,
            corrected_sub_type=command.corrected_sub_type,
            field_corrections=list(command.field_corrections),
            confidence=command.confidence,
            feedback_source=command.feedback_source,
        ))
        return future is not None
