"""
Data Transfer Objects for job queries.

Plain structures handed to the API layer; no behaviour beyond conversion.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class JobStatusDTO:
    """DTO for job status information."""

    job_id: str
    state: str
    filename: str
    document_type_id: str
    created_at: datetime
    status_message: str = ""
    processed_pages: int = 0
    total_pages: int = 0
    percent: float = 0.0
    cancelled: bool = False
    page_index: Optional[int] = None
    finished_at: Optional[datetime] = None
    failure: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class JobResultDTO:
    """DTO for the outcome of a finished job."""

    job_id: str
    state: str
    text: str
    fields: List[Dict[str, Any]] = field(default_factory=list)
    matches: List[Dict[str, Any]] = field(default_factory=list)
    pages: List[Dict[str, Any]] = field(default_factory=list)
    failure: Optional[Dict[str, Any]] = None
    page_failures: List[Dict[str, Any]] = field(default_factory=list)
