"""
API Schemas - organized by domain
"""
from .common_schemas import BoundingBoxSchema, ErrorSchema
from .document_type_schemas import DataElementSchema, DocumentSubTypeSchema, DocumentTypeSchema
from .feedback_schemas import FeedbackRequestSchema, FeedbackResponseSchema
from .job_schemas import (
    CancelResponseSchema,
    ExtractedFieldSchema,
    FailureSchema,
    JobResultSchema,
    JobStatusSchema,
    ManualRegionSchema,
    MatchResultSchema,
    PageResultSchema,
    RedactRequestSchema,
    RedactResponseSchema,
    RelabelRequestSchema,
    RelabelResponseSchema,
    UploadResponseSchema,
)

__all__ = [
    # Common
    "BoundingBoxSchema",
    "ErrorSchema",
    # Document types
    "DataElementSchema",
    "DocumentSubTypeSchema",
    "DocumentTypeSchema",
    # Feedback
    "FeedbackRequestSchema",
    "FeedbackResponseSchema",
    # Jobs
    "CancelResponseSchema",
    "ExtractedFieldSchema",
    "FailureSchema",
    "JobResultSchema",
    "JobStatusSchema",
    "ManualRegionSchema",
    "MatchResultSchema",
    "PageResultSchema",
    "RedactRequestSchema",
    "RedactResponseSchema",
    "RelabelRequestSchema",
    "RelabelResponseSchema",
    "UploadResponseSchema",
]
