from unittest.mock import MagicMock

import pytest
import requests

from docredact.domain.entities.documents import PageDocument
from docredact.domain.exceptions import ExtractionServiceError, ExtractionTierError, ServiceErrorKind
from docredact.infrastructure.extraction.base import ExtractionMode, TierPolicy
from docredact.infrastructure.extraction.fallback_endpoint import FallbackEndpointStrategy, classify_http_status


@pytest.fixture
def page():
    return PageDocument(index=1, content=b"%PDF-page", mime_type="application/pdf")


def _response(status_code=200, payload=None, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


def _strategy(session, **kwargs):
    return FallbackEndpointStrategy(
        "https://fallback.example/extract",
        api_key="secret",
        policy=TierPolicy(timeout_seconds=7),
        session=session,
        **kwargs,
    )


def test_unconfigured_endpoint_fails_fast(page):
    strategy = FallbackEndpointStrategy(None, session=MagicMock())
    assert not strategy.is_configured
    with pytest.raises(ExtractionTierError, match="no fallback endpoint configured"):
        strategy.extract(page, ExtractionMode.STANDARD)


def test_posts_page_and_parses_fields(page):
    session = MagicMock()
    session.post.return_value = _response(payload={
        "text": "Name: Alice",
        "fields": [{"label": "Name", "value": "Alice", "confidence": 0.9,
                    "boundingBox": {"x": 0.1, "y": 0.1, "width": 0.2, "height": 0.05}}],
        "pageCount": 1,
    })

    outcome = _strategy(session).extract(page, ExtractionMode.IDENTITY_DOCUMENT)

    _, kwargs = session.post.call_args
    assert kwargs["data"] == {"mode": "identity_document", "pageIndex": "1"}
    assert kwargs["headers"]["api-key"] == "secret"
    assert kwargs["timeout"] == 7
    assert kwargs["files"]["file"][1] == b"%PDF-page"
    assert outcome.method == "fallback-endpoint"
    assert outcome.text == "Name: Alice"
    assert outcome.fields[0].id == "fallback-1-0"
    assert outcome.fields[0].page_index == 1


@pytest.mark.parametrize("status, kind, retryable", [
    (401, ServiceErrorKind.UNAUTHORIZED, False),
    (429, ServiceErrorKind.RATE_LIMITED, True),
    (415, ServiceErrorKind.UNSUPPORTED_FORMAT, False),
    (503, ServiceErrorKind.UNKNOWN, True),
])
def test_http_errors_are_classified(page, status, kind, retryable):
    session = MagicMock()
    session.post.return_value = _response(status, payload={"error": "nope"})

    with pytest.raises(ExtractionServiceError) as exc_info:
        _strategy(session).extract(page, ExtractionMode.STANDARD)

    assert exc_info.value.kind is kind
    assert exc_info.value.retryable is retryable
    assert classify_http_status(status) is kind


def test_network_errors_are_retryable(page):
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("down")

    with pytest.raises(ExtractionServiceError) as exc_info:
        _strategy(session).extract(page, ExtractionMode.STANDARD)

    assert exc_info.value.retryable


def test_non_json_body_fails(page):
    session = MagicMock()
    session.post.return_value = _response(json_error=True)

    with pytest.raises(ExtractionServiceError, match="non-JSON"):
        _strategy(session).extract(page, ExtractionMode.STANDARD)


def test_empty_payload_fails(page):
    session = MagicMock()
    session.post.return_value = _response(payload={"text": "", "fields": []})

    with pytest.raises(ExtractionTierError, match="no text"):
        _strategy(session).extract(page, ExtractionMode.STANDARD)
