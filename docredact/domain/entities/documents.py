"""Source documents and their single-page derivatives."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

PDF_MIME = "application/pdf"

IMAGE_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/tiff",
    "image/bmp",
    "image/webp",
})

SUPPORTED_MIME_TYPES = frozenset({PDF_MIME}) | IMAGE_MIME_TYPES


def is_pdf(mime_type: str) -> bool:
    return (mime_type or "").lower() == PDF_MIME


def is_image(mime_type: str) -> bool:
    return (mime_type or "").lower() in IMAGE_MIME_TYPES


@dataclass
class SourceDocument:
    """An uploaded document. ``page_count`` is resolved lazily by the splitter."""

    content: bytes
    mime_type: str
    filename: str = "document"
    page_count: Optional[int] = field(default=None, compare=False)

    def __post_init__(self):
        self.mime_type = (self.mime_type or "").strip().lower()
        if not isinstance(self.content, (bytes, bytearray)):
            raise TypeError("content must be bytes")
        self.content = bytes(self.content)

    @property
    def is_pdf(self) -> bool:
        return is_pdf(self.mime_type)

    @property
    def is_image(self) -> bool:
        return is_image(self.mime_type)

    def __repr__(self) -> str:
        return (
            f"SourceDocument(filename='{self.filename}', mime_type='{self.mime_type}', "
            f"size={len(self.content)}, page_count={self.page_count})"
        )


@dataclass(frozen=True)
class PageDocument:
    """A single page, independently extractable and renderable."""

    index: int
    content: bytes
    mime_type: str

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError("index must be >= 0")

    @property
    def page_number(self) -> int:
        return self.index + 1

    def __repr__(self) -> str:
        return f"PageDocument(index={self.index}, mime_type='{self.mime_type}', size={len(self.content)})"
