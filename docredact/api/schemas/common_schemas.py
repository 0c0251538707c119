"""
Common schemas shared across different API endpoints
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class BoundingBoxSchema(BaseModel):
    Left: float
    Top: float
    Width: float
    Height: float


class ErrorSchema(BaseModel):
    detail: str
    classification: Optional[str] = None
