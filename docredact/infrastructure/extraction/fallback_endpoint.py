"""Last-resort tier: POST the page to a secondary extraction endpoint."""
from __future__ import annotations

import logging
from typing import Optional

import requests

from docredact.constants import METHOD_FALLBACK_ENDPOINT
from docredact.domain.entities.documents import PageDocument
from docredact.domain.exceptions import ExtractionServiceError, ExtractionTierError, ServiceErrorKind
from docredact.infrastructure.vision.vision_response_parser import VisionResponseParser

from .base import ExtractionMode, ExtractionOutcome, TierPolicy

logger = logging.getLogger(__name__)


def classify_http_status(status_code: int) -> ServiceErrorKind:
    if status_code in (401, 403):
        return ServiceErrorKind.UNAUTHORIZED
    if status_code == 429:
        return ServiceErrorKind.RATE_LIMITED
    if status_code in (415, 422):
        return ServiceErrorKind.UNSUPPORTED_FORMAT
    return ServiceErrorKind.UNKNOWN


class FallbackEndpointStrategy:
    """
    Sends the page as multipart form data and expects
    ``{text, fields: [{label, value, confidence, boundingBox}], pageCount}``.
    """

    name = METHOD_FALLBACK_ENDPOINT

    def __init__(
        self,
        endpoint: Optional[str],
        *,
        api_key: Optional[str] = None,
        policy: TierPolicy | None = None,
        session: Optional[requests.Session] = None,
        parser: Optional[VisionResponseParser] = None,
    ) -> None:
        self._endpoint = (endpoint or "").strip()
        self._api_key = api_key
        self._session = session or requests.Session()
        self._parser = parser or VisionResponseParser()
        self.policy = policy or TierPolicy()

    @property
    def is_configured(self) -> bool:
        return bool(self._endpoint)

    def extract(self, page: PageDocument, mode: ExtractionMode) -> ExtractionOutcome:
        if not self.is_configured:
            raise ExtractionTierError(self.name, "no fallback endpoint configured")

        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["api-key"] = self._api_key

        files = {"file": (f"page-{page.page_number}", page.content, page.mime_type or "application/octet-stream")}
        data = {"mode": mode.value, "pageIndex": str(page.index)}

        try:
            response = self._session.post(
                self._endpoint,
                files=files,
                data=data,
                headers=headers,
                timeout=self.policy.timeout_seconds,
            )
        except requests.Timeout as exc:
            raise ExtractionServiceError(self.name, ServiceErrorKind.UNKNOWN, "fallback endpoint timed out", retryable=True) from exc
        except requests.RequestException as exc:
            raise ExtractionServiceError(
                self.name, ServiceErrorKind.UNKNOWN, f"fallback endpoint unreachable ({type(exc).__name__})", retryable=True
            ) from exc

        if response.status_code >= 400:
            kind = classify_http_status(response.status_code)
            logger.warning("Fallback endpoint answered %s for page %s", response.status_code, page.page_number)
            raise ExtractionServiceError(
                self.name,
                kind,
                _error_detail(response),
                retryable=kind is ServiceErrorKind.RATE_LIMITED or response.status_code >= 500,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ExtractionServiceError(self.name, ServiceErrorKind.UNKNOWN, "fallback endpoint returned a non-JSON body") from exc
        if not isinstance(payload, dict):
            raise ExtractionServiceError(self.name, ServiceErrorKind.UNKNOWN, "fallback endpoint returned an unexpected payload")

        outcome = self._parser.parse_page(page.index, payload, method=self.name, id_prefix="fallback")
        if not outcome.text and not outcome.fields:
            raise ExtractionTierError(self.name, "fallback endpoint returned no text")
        return outcome


def _error_detail(response: requests.Response) -> str:
    """Short error text for classification; the remote ``error`` field when JSON."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return f"fallback endpoint error {response.status_code}: {str(body['error'])[:200]}"
    return f"fallback endpoint error {response.status_code}"
