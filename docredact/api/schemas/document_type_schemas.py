"""
Schemas for the document type catalog
"""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class DataElementSchema(BaseModel):
    id: str
    name: str
    type: str = "Text"
    category: str = "General"
    aliases: List[str] = Field(default_factory=list)
    action: str
    required: bool = False


class DocumentSubTypeSchema(BaseModel):
    id: str
    name: str
    isActive: bool = True
    dataElements: List[DataElementSchema] = Field(default_factory=list)


class DocumentTypeSchema(BaseModel):
    id: str
    name: str
    description: str = ""
    extractionMode: str
    isActive: bool = True
    dataElements: List[DataElementSchema] = Field(default_factory=list)
    subTypes: List[DocumentSubTypeSchema] = Field(default_factory=list)
