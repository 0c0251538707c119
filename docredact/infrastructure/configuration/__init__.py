"""Configuration providers (document types and their data elements)."""

from .element_catalog import DocumentSubTypeConfig, DocumentTypeConfig, ElementCatalog, JsonElementCatalog

__all__ = ["DocumentSubTypeConfig", "DocumentTypeConfig", "ElementCatalog", "JsonElementCatalog"]
