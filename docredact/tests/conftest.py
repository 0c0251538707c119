"""Shared pytest fixtures.

PDFs and images are built in memory so no binary fixtures are checked in.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

import cv2  # type: ignore
import fitz  # type: ignore
import numpy as np
import pytest

from docredact.domain.entities.data_element import ConfiguredDataElement, DataElementAction
from docredact.domain.entities.documents import PageDocument
from docredact.domain.entities.extracted_field import ExtractedField
from docredact.domain.exceptions import ExtractionTierError
from docredact.infrastructure.extraction.base import ExtractionMode, ExtractionOutcome, TierPolicy


def build_pdf(page_texts: Sequence[str], *, width: float = 595, height: float = 842) -> bytes:
    """One page per entry; each text line is inserted one below the other."""
    document = fitz.open()
    for text in page_texts:
        page = document.new_page(width=width, height=height)
        y = 72
        for line in text.splitlines():
            if line:
                page.insert_text((72, y), line, fontsize=12)
            y += 18
    content = document.tobytes()
    document.close()
    return content


def build_png(width: int = 64, height: int = 48, color: int = 255) -> bytes:
    image = np.full((height, width, 3), color, dtype=np.uint8)
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return buffer.tobytes()


class StubStrategy:
    """Extraction tier double driven by a per-page script.

    ``script`` maps page index to either an ExtractionOutcome or an exception
    to raise; pages not in the script raise a non-retryable tier error.
    """

    def __init__(self, name: str, script: Optional[Dict[int, object]] = None, policy: Optional[TierPolicy] = None):
        self.name = name
        self.policy = policy or TierPolicy()
        self.script = dict(script or {})
        self.calls: List[int] = []

    def extract(self, page: PageDocument, mode: ExtractionMode) -> ExtractionOutcome:
        self.calls.append(page.index)
        action = self.script.get(page.index)
        if action is None:
            raise ExtractionTierError(self.name, "nothing scripted")
        if isinstance(action, Exception):
            raise action
        if callable(action):
            return action(page)
        return action


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    return build_pdf


@pytest.fixture
def three_page_pdf() -> bytes:
    return build_pdf([
        "Name: Alice Example\nPassport No: P1234567",
        "Date of Birth: 01/02/1980",
        "Email: alice@example.com",
    ])


@pytest.fixture
def png_bytes() -> bytes:
    return build_png()


@pytest.fixture
def passport_elements() -> List[ConfiguredDataElement]:
    return [
        ConfiguredDataElement(id="el-first", name="First Name", category="PII",
                              aliases=("Forename",), action=DataElementAction.EXTRACT_AND_REDACT, required=True),
        ConfiguredDataElement(id="el-last", name="Last Name", category="PII",
                              action=DataElementAction.EXTRACT_AND_REDACT, required=True),
        ConfiguredDataElement(id="el-dob", name="Date of Birth", category="PII",
                              action=DataElementAction.EXTRACT_AND_REDACT),
        ConfiguredDataElement(id="el-passport", name="Passport Number", category="PII",
                              action=DataElementAction.REDACT, required=True),
        ConfiguredDataElement(id="el-nationality", name="Nationality",
                              action=DataElementAction.EXTRACT),
    ]


def make_field(label: str, value: str = "value", **kwargs) -> ExtractedField:
    kwargs.setdefault("confidence", 0.8)
    return ExtractedField(label=label, value=value, **kwargs)
