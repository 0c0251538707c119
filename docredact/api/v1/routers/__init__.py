"""API v1 routers package."""

from . import document_types, feedback, jobs

__all__ = [
    "document_types",
    "feedback",
    "jobs",
]
