"""
Schemas for classification feedback
"""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class FeedbackRequestSchema(BaseModel):
    documentId: str = Field(..., min_length=1)
    predictedType: Optional[str] = None
    correctedType: Optional[str] = None
    predictedSubType: Optional[str] = None
    correctedSubType: Optional[str] = None
    fieldCorrections: List[Dict[str, str]] = Field(default_factory=list)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    feedbackSource: str = "manual"


class FeedbackResponseSchema(BaseModel):
    accepted: bool = True
    queued: bool
