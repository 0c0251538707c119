"""Read-only document type catalog routes."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from docredact.api.schemas import DocumentTypeSchema
from docredact.api.v1.dependencies import get_element_catalog
from docredact.domain.exceptions import DomainValidationError, EntityNotFoundError
from docredact.infrastructure.configuration.element_catalog import ElementCatalog

router = APIRouter(prefix="/document-types", tags=["document-types"])


@router.get("", response_model=List[DocumentTypeSchema])
def list_document_types(
    catalog: ElementCatalog = Depends(get_element_catalog),
) -> List[DocumentTypeSchema]:
    try:
        document_types = catalog.list_document_types()
    except DomainValidationError as exc:
        raise HTTPException(status_code=500, detail="Failed to load document types") from exc
    return [DocumentTypeSchema(**t.to_dict()) for t in document_types]


@router.get("/{document_type_id}", response_model=DocumentTypeSchema)
def get_document_type(
    document_type_id: str,
    catalog: ElementCatalog = Depends(get_element_catalog),
) -> DocumentTypeSchema:
    try:
        document_type = catalog.get_document_type(document_type_id)
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return DocumentTypeSchema(**document_type.to_dict())
