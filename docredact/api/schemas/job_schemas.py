"""
Schemas for job processing, relabelling and redaction endpoints
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .common_schemas import BoundingBoxSchema


class UploadResponseSchema(BaseModel):
    jobId: str
    state: str
    documentType: str
    subType: Optional[str] = None


class FailureSchema(BaseModel):
    classification: str
    message: str
    pageIndex: Optional[int] = None
    reason: Optional[str] = None


class JobStatusSchema(BaseModel):
    jobId: str
    state: str
    status: str
    filename: str
    documentType: str
    processedPages: int
    totalPages: int
    percent: float
    cancelled: bool = False
    pageIndex: Optional[int] = None
    startedAt: datetime
    finishedAt: Optional[datetime] = None
    failure: Optional[FailureSchema] = None


class ExtractedFieldSchema(BaseModel):
    id: str
    label: str
    value: str
    confidence: float
    pageIndex: int
    boundingBox: Optional[BoundingBoxSchema] = None
    source: str
    type: str = "Text"
    category: Optional[str] = None
    originalLabel: Optional[str] = None


class MatchResultSchema(BaseModel):
    id: str
    label: str
    text: str
    confidence: float
    tier: str
    missing: bool = False
    isConfigured: bool = False
    elementId: Optional[str] = None
    required: bool = False
    field: Optional[ExtractedFieldSchema] = None


class PageResultSchema(BaseModel):
    pageIndex: int
    text: str
    method: str
    fields: List[ExtractedFieldSchema] = Field(default_factory=list)


class JobResultSchema(BaseModel):
    jobId: str
    state: str
    text: str
    fields: List[ExtractedFieldSchema] = Field(default_factory=list)
    matches: List[MatchResultSchema] = Field(default_factory=list)
    pages: List[PageResultSchema] = Field(default_factory=list)
    failure: Optional[FailureSchema] = None
    pageFailures: List[FailureSchema] = Field(default_factory=list)


class CancelResponseSchema(BaseModel):
    jobId: str
    cancelRequested: bool
    state: str


class RelabelRequestSchema(BaseModel):
    label: str = Field(..., min_length=1)


class RelabelResponseSchema(BaseModel):
    field: ExtractedFieldSchema
    match: Optional[MatchResultSchema] = None


class ManualRegionSchema(BaseModel):
    id: str
    label: str = ""
    boundingBox: Dict[str, float]  # either raw box shape
    pageIndex: int = Field(default=0, ge=0)


class RedactRequestSchema(BaseModel):
    fieldIds: List[str] = Field(default_factory=list)
    manualRegions: List[ManualRegionSchema] = Field(default_factory=list)


class RedactResponseSchema(BaseModel):
    jobId: str
    mimeType: str
    artifact: str  # base64
    redactedIds: List[str] = Field(default_factory=list)
    renderedIds: List[str] = Field(default_factory=list)
    skippedIds: List[str] = Field(default_factory=list)
    unknownIds: List[str] = Field(default_factory=list)
    manualRegionIds: List[str] = Field(default_factory=list)
