"""Fire-and-forget reporting of classification and matching corrections."""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedbackReport:
    document_id: str
    predicted_type: Optional[str]
    corrected_type: Optional[str]
    predicted_sub_type: Optional[str] = None
    corrected_sub_type: Optional[str] = None
    field_corrections: List[Dict[str, str]] = field(default_factory=list)
    confidence: Optional[float] = None
    feedback_source: str = "manual"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "documentId": self.document_id,
            "predictedType": self.predicted_type,
            "correctedType": self.corrected_type,
            "predictedSubType": self.predicted_sub_type,
            "correctedSubType": self.corrected_sub_type,
            "fieldCorrections": list(self.field_corrections),
            "confidence": self.confidence,
            "feedbackSource": self.feedback_source,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


class FeedbackReporter:
    """
    Posts feedback on a background thread.

    Delivery failures are logged and never reach the caller.
    """

    def __init__(
        self,
        endpoint: Optional[str],
        *,
        session: Optional[requests.Session] = None,
        executor: Optional[ThreadPoolExecutor] = None,
        timeout: float = 10.0,
    ) -> None:
        self._endpoint = (endpoint or "").strip()
        self._session = session or requests.Session()
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="feedback")
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self._endpoint)

    def report(self, feedback: FeedbackReport) -> Optional[Future]:
        if not self.is_configured:
            logger.info("Feedback endpoint not configured; dropping feedback for %s", feedback.document_id)
            return None
        try:
            return self._executor.submit(self._send, feedback)
        except RuntimeError:
            logger.warning("Feedback executor unavailable; dropping feedback for %s", feedback.document_id)
            return None

    def _send(self, feedback: FeedbackReport) -> bool:
        try:
            response = self._session.post(self._endpoint, json=feedback.to_payload(), timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Feedback delivery failed for %s: %s", feedback.document_id, type(exc).__name__)
            return False
        logger.debug("Feedback delivered for %s", feedback.document_id)
        return True

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)
