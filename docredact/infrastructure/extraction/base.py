"""Shared types for extraction tiers."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Protocol, runtime_checkable

from docredact.domain.entities.documents import PageDocument
from docredact.domain.entities.extracted_field import ExtractedField


class ExtractionMode(str, Enum):
    """How the remote tiers should read a page."""
    STANDARD = "standard"
    IDENTITY_DOCUMENT = "identity_document"


@dataclass
class ExtractionOutcome:
    """Text and fields one tier produced for a page."""

    text: str = ""
    fields: List[ExtractedField] = field(default_factory=list)
    method: str = ""
    page_count: int = 1


@dataclass(frozen=True)
class TierPolicy:
    """Retry and timeout budget for a single tier."""

    max_attempts: int = 1
    timeout_seconds: float = 60.0
    backoff_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            object.__setattr__(self, "max_attempts", 1)
        if self.backoff_seconds < 0:
            object.__setattr__(self, "backoff_seconds", 0.0)


@runtime_checkable
class ExtractionStrategy(Protocol):
    """One tier of the extraction chain.

    Implementations raise :class:`~docredact.domain.exceptions.ExtractionTierError`
    when they cannot produce a result.
    """

    name: str
    policy: TierPolicy

    def extract(self, page: PageDocument, mode: ExtractionMode) -> ExtractionOutcome:
        ...
