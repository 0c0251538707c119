from unittest.mock import MagicMock

import pytest

from docredact.domain.entities.documents import PageDocument
from docredact.domain.exceptions import ExtractionTierError
from docredact.infrastructure.extraction.base import ExtractionMode, ExtractionOutcome, TierPolicy
from docredact.infrastructure.extraction.vision_strategy import VisionOcrStrategy
from docredact.infrastructure.pdf.pdf_renderer import PdfRenderer
from docredact.tests.conftest import build_pdf, make_field


def _client_returning(outcome):
    client = MagicMock()
    client.extract_page.return_value = outcome
    return client


def test_pdf_pages_are_rendered_to_png():
    client = _client_returning(ExtractionOutcome(text="Alice", fields=[make_field("Name", "Alice")]))
    strategy = VisionOcrStrategy(lambda: client, renderer=PdfRenderer(zoom=1.0), policy=TierPolicy(timeout_seconds=5))
    page = PageDocument(index=3, content=build_pdf(["Name: Alice"]), mime_type="application/pdf")

    outcome = strategy.extract(page, ExtractionMode.STANDARD)

    args, kwargs = client.extract_page.call_args
    assert args[0] == 3
    assert args[1].startswith(b"\x89PNG")
    assert args[2] == "image/png"
    assert kwargs["timeout"] == 5
    assert outcome.fields[0].page_index == 3


def test_images_are_sent_directly(png_bytes):
    client = _client_returning(ExtractionOutcome(text="x"))
    strategy = VisionOcrStrategy(lambda: client)

    strategy.extract(PageDocument(index=0, content=png_bytes, mime_type="image/png"), ExtractionMode.STANDARD)

    args, _ = client.extract_page.call_args
    assert args[1] == png_bytes


def test_client_is_built_once():
    factory = MagicMock(return_value=_client_returning(ExtractionOutcome(text="x")))
    strategy = VisionOcrStrategy(factory)
    page = PageDocument(index=0, content=b"img", mime_type="image/png")

    strategy.extract(page, ExtractionMode.STANDARD)
    strategy.extract(page, ExtractionMode.STANDARD)

    factory.assert_called_once()


def test_unconfigured_client_fails_the_tier_only():
    def factory():
        raise RuntimeError("AZURE_OPENAI_ENDPOINT must be configured")

    strategy = VisionOcrStrategy(factory)

    with pytest.raises(ExtractionTierError, match="vision client unavailable"):
        strategy.extract(PageDocument(index=0, content=b"img", mime_type="image/png"), ExtractionMode.STANDARD)


def test_unreadable_pdf_is_reported_as_malformed():
    strategy = VisionOcrStrategy(lambda: _client_returning(ExtractionOutcome()))
    page = PageDocument(index=0, content=b"garbage", mime_type="application/pdf")

    with pytest.raises(ExtractionTierError, match="malformed"):
        strategy.extract(page, ExtractionMode.STANDARD)


def test_unsupported_input_type():
    strategy = VisionOcrStrategy(lambda: _client_returning(ExtractionOutcome()))
    with pytest.raises(ExtractionTierError, match="unsupported input type"):
        strategy.extract(PageDocument(index=0, content=b"x", mime_type="text/plain"), ExtractionMode.STANDARD)
