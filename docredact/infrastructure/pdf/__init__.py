"""PDF and image infrastructure utilities."""

from .image_processor import decode_image, encode_image, ensure_vision_compatible, image_to_data_url
from .page_splitter import PageSplitter
from .pdf_renderer import PdfRenderer, RenderedPage
from .redaction_renderer import RedactionRenderer

__all__ = [
    "PageSplitter",
    "PdfRenderer",
    "RedactionRenderer",
    "RenderedPage",
    "decode_image",
    "encode_image",
    "ensure_vision_compatible",
    "image_to_data_url",
]
