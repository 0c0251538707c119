"""Read-only provider of document types and their configured data elements."""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from docredact.domain.entities.data_element import ConfiguredDataElement
from docredact.domain.exceptions import DomainValidationError, EntityNotFoundError
from docredact.infrastructure.extraction.base import ExtractionMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentSubTypeConfig:
    id: str
    name: str
    data_elements: Tuple[ConfiguredDataElement, ...] = field(default_factory=tuple)
    is_active: bool = True


@dataclass(frozen=True)
class DocumentTypeConfig:
    id: str
    name: str
    description: str = ""
    extraction_mode: ExtractionMode = ExtractionMode.STANDARD
    data_elements: Tuple[ConfiguredDataElement, ...] = field(default_factory=tuple)
    sub_types: Tuple[DocumentSubTypeConfig, ...] = field(default_factory=tuple)
    is_active: bool = True

    def sub_type(self, sub_type_id: str) -> Optional[DocumentSubTypeConfig]:
        for sub_type in self.sub_types:
            if sub_type.id == sub_type_id:
                return sub_type
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "extractionMode": self.extraction_mode.value,
            "isActive": self.is_active,
            "dataElements": [e.to_dict() for e in self.data_elements],
            "subTypes": [
                {
                    "id": s.id,
                    "name": s.name,
                    "isActive": s.is_active,
                    "dataElements": [e.to_dict() for e in s.data_elements],
                }
                for s in self.sub_types
            ],
        }


class ElementCatalog(Protocol):
    def list_document_types(self) -> List[DocumentTypeConfig]: ...

    def get_document_type(self, document_type_id: str) -> DocumentTypeConfig: ...

    def get_elements(self, document_type_id: str, sub_type_id: Optional[str] = None) -> List[ConfiguredDataElement]: ...


class JsonElementCatalog:
    """
    Loads document types from a JSON file on first use.

    Expected shape::

        {"documentTypes": [{"id", "name", "extractionMode", "dataElements": [...],
                            "subTypes": [{"id", "name", "dataElements": [...]}]}]}

    Elements with action ``Ignore`` are dropped.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._types: Optional[Dict[str, DocumentTypeConfig]] = None

    def list_document_types(self) -> List[DocumentTypeConfig]:
        return [t for t in self._load().values() if t.is_active]

    def get_document_type(self, document_type_id: str) -> DocumentTypeConfig:
        document_type = self._load().get(document_type_id)
        if document_type is None or not document_type.is_active:
            raise EntityNotFoundError("DocumentType", document_type_id)
        return document_type

    def get_elements(self, document_type_id: str, sub_type_id: Optional[str] = None) -> List[ConfiguredDataElement]:
        """Elements of the sub-type when it defines any, else of the document type."""
        document_type = self.get_document_type(document_type_id)
        if sub_type_id:
            sub_type = document_type.sub_type(sub_type_id)
            if sub_type is None or not sub_type.is_active:
                raise EntityNotFoundError("DocumentSubType", f"{document_type_id}/{sub_type_id}")
            if sub_type.data_elements:
                return list(sub_type.data_elements)
        return list(document_type.data_elements)

    def _load(self) -> Dict[str, DocumentTypeConfig]:
        with self._lock:
            if self._types is None:
                self._types = self._read()
            return self._types

    def _read(self) -> Dict[str, DocumentTypeConfig]:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.warning("Element catalog %s not found; no document types configured", self._path)
            return {}
        except json.JSONDecodeError as exc:
            raise DomainValidationError(f"Element catalog {self._path} is not valid JSON: {exc}") from exc

        types: Dict[str, DocumentTypeConfig] = {}
        for entry in raw.get("documentTypes") or []:
            document_type = _parse_document_type(entry)
            types[document_type.id] = document_type
        logger.info("Loaded %d document types from %s", len(types), self._path)
        return types


def _parse_elements(raw: Any) -> Tuple[ConfiguredDataElement, ...]:
    elements: List[ConfiguredDataElement] = []
    for item in raw or []:
        if not isinstance(item, dict):
            continue
        if str(item.get("action", "")).lower() == "ignore":
            continue
        elements.append(ConfiguredDataElement.from_dict(item))
    return tuple(elements)


def _parse_document_type(entry: Dict[str, Any]) -> DocumentTypeConfig:
    try:
        mode = ExtractionMode(entry.get("extractionMode") or ExtractionMode.STANDARD.value)
    except ValueError:
        mode = ExtractionMode.STANDARD
    return DocumentTypeConfig(
        id=str(entry["id"]),
        name=str(entry.get("name") or entry["id"]),
        description=str(entry.get("description") or ""),
        extraction_mode=mode,
        data_elements=_parse_elements(entry.get("dataElements")),
        sub_types=tuple(
            DocumentSubTypeConfig(
                id=str(sub["id"]),
                name=str(sub.get("name") or sub["id"]),
                data_elements=_parse_elements(sub.get("dataElements")),
                is_active=bool(sub.get("isActive", True)),
            )
            for sub in entry.get("subTypes") or []
            if isinstance(sub, dict) and sub.get("id")
        ),
        is_active=bool(entry.get("isActive", True)),
    )

