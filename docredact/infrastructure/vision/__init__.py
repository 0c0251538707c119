"""Vision infrastructure adapters."""

from .azure_vision_client import AzureVisionClient, VisionExtractionError, classify_openai_error
from .vision_prompt_builder import DEFAULT_PROMPT_TEMPLATE, IDENTITY_FIELD_CODES, build_prompt_attempts
from .vision_response_parser import VisionResponseParser

__all__ = [
    "AzureVisionClient",
    "VisionExtractionError",
    "VisionResponseParser",
    "build_prompt_attempts",
    "classify_openai_error",
    "DEFAULT_PROMPT_TEMPLATE",
    "IDENTITY_FIELD_CODES",
]
