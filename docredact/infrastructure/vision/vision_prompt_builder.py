"""Utilities for constructing Azure OpenAI vision prompts."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from docredact.infrastructure.extraction.base import ExtractionMode

_BBOX_SCHEMA = (
    "{\"Left\": number between 0 and 1, \"Top\": number between 0 and 1,"
    " \"Width\": number between 0 and 1, \"Height\": number between 0 and 1}"
)

DEFAULT_PROMPT_TEMPLATE = (
    "You are an expert document extraction system. Analyze the document image and return structured JSON only. Your goals are:"
    " (1) transcribe all readable text on the page in reading order;"
    " (2) extract every labelled field as a label/value pair with its location."
    " Use this exact JSON schema for your response: {\n"
    "  \"text\": string,\n"
    "  \"fields\": [\n"
    "    {\"label\": string, \"value\": string, \"confidence\": number between 0 and 1,"
    f"     \"boundingBox\": {_BBOX_SCHEMA} }}\n"
    "  ]\n"
    "}.\n"
    "The boundingBox must enclose the value, normalised to the [0,1] range relative to the page width/height."
    " Confidence values must be chosen from [0.0, 0.2, 0.4, 0.6, 0.8, 1.0] (0.0 = unreadable, 1.0 = exact match)."
    " Do not add commentary. If nothing is found return {\"text\":\"\",\"fields\":[]}."
)

# Field codes requested when reading identity documents.
IDENTITY_FIELD_CODES = (
    "FIRST_NAME",
    "MIDDLE_NAME",
    "LAST_NAME",
    "DATE_OF_BIRTH",
    "PLACE_OF_BIRTH",
    "DOCUMENT_NUMBER",
    "DATE_OF_ISSUE",
    "EXPIRATION_DATE",
    "NATIONALITY",
    "ADDRESS",
    "ID_TYPE",
    "MRZ_CODE",
)

IDENTITY_PROMPT_SUFFIX = (
    " This page is an identity document (passport, driving licence or ID card)."
    " Use these field codes as labels where they apply: " + ", ".join(IDENTITY_FIELD_CODES) + "."
    " Keep dates exactly as printed."
)


@dataclass(frozen=True)
class VisionPromptAttempt:
    """Encapsulates a single attempt payload for the vision model."""

    messages: List[dict[str, Any]]
    force_json: bool


def system_prompt(mode: ExtractionMode) -> str:
    if mode is ExtractionMode.IDENTITY_DOCUMENT:
        return DEFAULT_PROMPT_TEMPLATE + IDENTITY_PROMPT_SUFFIX
    return DEFAULT_PROMPT_TEMPLATE


def build_prompt_attempts(
    page_number: int,
    image_data_url: str,
    mode: ExtractionMode = ExtractionMode.STANDARD,
) -> List[VisionPromptAttempt]:
    """Construct prompt attempts for a page image.

    The model occasionally misses returning JSON, so the first attempt forces
    JSON output and the next ones relax formatting.
    """

    system_message = {"role": "system", "content": system_prompt(mode)}
    base_messages = [
        system_message,
        {
            "role": "user",
            "content": [
                {"type": "text", "text": f"Extract the text and fields of page {page_number}."},
                {"type": "image_url", "image_url": {"url": image_data_url}},
            ],
        },
    ]

    relaxed_messages = [
        system_message,
        {
            "role": "user",
            "content": [
                {
                    "type": "text",
                    "text": (
                        "Extract the text and fields of this page."
                        " If no fields can be extracted, reply with an empty fields array."
                    ),
                },
                {"type": "image_url", "image_url": {"url": image_data_url}},
            ],
        },
    ]

    return [
        VisionPromptAttempt(messages=base_messages, force_json=True),
        VisionPromptAttempt(messages=relaxed_messages, force_json=False),
    ]
