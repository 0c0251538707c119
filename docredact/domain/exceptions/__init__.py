"""Domain exceptions."""
from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence


class DomainException(Exception):
    """Base exception for domain layer errors."""
    pass


class EntityNotFoundError(DomainException):
    """Exception raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: str, *, message: str | None = None):
        final_message = message or f"{entity_type} not found: {entity_id}"
        super().__init__(final_message)
        self.entity_type = entity_type
        self.entity_id = entity_id


class DomainValidationError(DomainException):
    """Exception raised when validation fails at the domain boundary."""

    def __init__(self, message: str):
        super().__init__(message)


class UnsupportedMediaTypeError(DomainValidationError):
    """The uploaded document's mime type is not accepted."""

    def __init__(self, mime_type: str):
        super().__init__(f"Unsupported media type: {mime_type or 'unknown'}")
        self.mime_type = mime_type


class JobStateConflictError(DomainException):
    """The job is in a state that does not allow the requested operation."""

    def __init__(self, job_id: str, state: str, operation: str):
        super().__init__(f"Cannot {operation} job {job_id} while it is {state}")
        self.job_id = job_id
        self.state = state
        self.operation = operation


class ExtractionFailureReason(str, Enum):
    """Why every extraction tier failed for a page."""
    ENCRYPTED = "encrypted"
    CORRUPTED = "corrupted"
    UNSUPPORTED_FORMAT = "unsupported_format"
    UNKNOWN = "unknown"


class ServiceErrorKind(str, Enum):
    """Classification of remote extraction service failures."""
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    UNSUPPORTED_FORMAT = "unsupported_format"
    UNKNOWN = "unknown"


class PipelineError(DomainException):
    """Base for errors that can terminate or degrade a pipeline run.

    Carries a machine-readable ``classification`` alongside the message.
    """

    classification = "pipeline_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"classification": self.classification, "message": self.message}


class SplitFailedError(PipelineError):
    """Page count could not be determined; the job falls back to one page."""

    classification = "split_failed"


class ExtractionFailedError(PipelineError):
    """Every extraction tier failed for a page."""

    classification = "extraction_failed"

    def __init__(
        self,
        page_index: int,
        reason: ExtractionFailureReason,
        message: Optional[str] = None,
        tier_errors: Sequence[str] = (),
    ):
        final_message = message or f"Extraction failed for page {page_index + 1}: {reason.value}"
        super().__init__(final_message)
        self.page_index = page_index
        self.reason = reason
        self.tier_errors: List[str] = list(tier_errors)

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["pageIndex"] = self.page_index
        payload["reason"] = self.reason.value
        return payload


class RedactionUnsupportedArtifactError(PipelineError):
    """The artifact's declared mime type cannot be decoded for redaction."""

    classification = "redaction_unsupported_artifact"

    def __init__(self, mime_type: str, message: Optional[str] = None):
        super().__init__(message or f"Cannot redact artifact of type {mime_type!r}")
        self.mime_type = mime_type


class PipelineCancelledError(PipelineError):
    classification = "pipeline_cancelled"


class PipelineTimeoutError(PipelineError):
    classification = "pipeline_timeout"


class ExtractionTierError(DomainException):
    """A single extraction tier could not produce a result."""

    def __init__(self, method: str, message: str, *, retryable: bool = False):
        super().__init__(f"{method}: {message}")
        self.method = method
        self.detail = message
        self.retryable = retryable


class TierNotApplicableError(ExtractionTierError):
    """The tier does not handle this kind of input at all."""


class ExtractionServiceError(ExtractionTierError):
    """A remote extraction service call failed."""

    def __init__(self, method: str, kind: ServiceErrorKind, message: str, *, retryable: bool = False):
        super().__init__(method, message, retryable=retryable)
        self.kind = kind
