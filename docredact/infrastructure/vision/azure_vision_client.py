"""Azure OpenAI vision client used by the OCR extraction tier."""
from __future__ import annotations

import json
import logging
from typing import Iterable, Optional

import openai
from azure.identity import DefaultAzureCredential, get_bearer_token_provider
from openai import AzureOpenAI

from docredact.config import Settings, get_settings
from docredact.constants import METHOD_VISION_OCR
from docredact.domain.exceptions import ExtractionServiceError, ServiceErrorKind
from docredact.infrastructure.extraction.base import ExtractionMode, ExtractionOutcome
from docredact.infrastructure.pdf.image_processor import image_to_data_url

from .vision_prompt_builder import VisionPromptAttempt, build_prompt_attempts
from .vision_response_parser import VisionResponseParser

logger = logging.getLogger(__name__)


class VisionExtractionError(ExtractionServiceError):
    """Raised when the vision model fails to produce a usable payload."""

    def __init__(self, kind: ServiceErrorKind, message: str, *, retryable: bool = False):
        super().__init__(METHOD_VISION_OCR, kind, message, retryable=retryable)


def classify_openai_error(exc: Exception) -> VisionExtractionError:
    """Map an OpenAI SDK error onto the service error kinds.

    The SDK message is kept out of the classification; only the exception
    type (and, for bad requests, a hint in the message) decides the kind.
    """
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return VisionExtractionError(ServiceErrorKind.UNAUTHORIZED, "vision service rejected the credentials")
    if isinstance(exc, openai.RateLimitError):
        return VisionExtractionError(ServiceErrorKind.RATE_LIMITED, "vision service rate limited", retryable=True)
    if isinstance(exc, openai.APITimeoutError):
        return VisionExtractionError(ServiceErrorKind.UNKNOWN, "vision service timed out", retryable=True)
    if isinstance(exc, openai.APIConnectionError):
        return VisionExtractionError(ServiceErrorKind.UNKNOWN, "vision service unreachable", retryable=True)
    if isinstance(exc, openai.BadRequestError):
        detail = str(exc).lower()
        if "image" in detail or "unsupported" in detail:
            return VisionExtractionError(ServiceErrorKind.UNSUPPORTED_FORMAT, "vision service: unsupported image format")
        return VisionExtractionError(ServiceErrorKind.UNKNOWN, "vision service rejected the request")
    if isinstance(exc, openai.InternalServerError):
        return VisionExtractionError(ServiceErrorKind.UNKNOWN, "vision service internal error", retryable=True)
    return VisionExtractionError(ServiceErrorKind.UNKNOWN, f"vision service failed ({type(exc).__name__})")


class AzureVisionClient:
    """High-level client responsible for orchestrating Azure OpenAI Vision calls."""

    def __init__(
        self,
        *,
        client: Optional[AzureOpenAI] = None,
        parser: Optional[VisionResponseParser] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        endpoint = settings.ensure_endpoint()
        model = settings.azure_openai_vision_model or settings.azure_openai_deployment_name

        if client is not None:
            self._client = client
        else:
            if not endpoint:
                raise RuntimeError("AZURE_OPENAI_ENDPOINT must be configured before using the vision client")
            if not model:
                raise RuntimeError("AZURE_OPENAI_VISION_MODEL or AZURE_OPENAI_DEPLOYMENT_NAME must be configured")

            api_key = settings.azure_openai_api_key
            if api_key:
                self._client = AzureOpenAI(
                    api_key=api_key,
                    api_version=settings.azure_openai_api_version,
                    azure_endpoint=endpoint,
                )
            else:
                token_provider = get_bearer_token_provider(
                    DefaultAzureCredential(),
                    "https://cognitiveservices.azure.com/.default",
                )
                self._client = AzureOpenAI(
                    api_version=settings.azure_openai_api_version,
                    azure_endpoint=endpoint,
                    azure_ad_token_provider=token_provider,
                )

        self._model = model or "vision"
        self._parser = parser or VisionResponseParser()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def extract_page(
        self,
        page_index: int,
        image: bytes,
        mime_type: str,
        mode: ExtractionMode = ExtractionMode.STANDARD,
        *,
        timeout: Optional[float] = None,
    ) -> ExtractionOutcome:
        """Extract text and fields from a single page image.

        Raises:
            VisionExtractionError: the service failed or never returned JSON.
        """

        attempts = build_prompt_attempts(page_index + 1, image_to_data_url(image, mime_type), mode)
        payload = self._run_attempts(attempts, timeout)
        if payload is None:
            logger.error("Vision model returned no payload for page %s", page_index + 1)
            raise VisionExtractionError(ServiceErrorKind.UNKNOWN, "vision model returned no usable JSON payload")

        return self._parser.parse_page(page_index, payload, method=METHOD_VISION_OCR)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _run_attempts(self, attempts: Iterable[VisionPromptAttempt], timeout: Optional[float]) -> Optional[dict]:
        content: Optional[str] = None
        last_attempt_forced_json = False

        for attempt in attempts:
            content, last_attempt_forced_json = self._invoke_model(attempt, timeout)
            if content:
                payload = self._extract_json_payload(content)
                if payload is not None:
                    return payload
                logger.debug(
                    "Vision attempt yielded invalid JSON (force_json=%s): %.200s",
                    attempt.force_json,
                    content,
                )

        if content:
            logger.warning(
                "Failed to parse vision payload after retries (force_json=%s).", last_attempt_forced_json
            )
        return None

    def _invoke_model(self, attempt: VisionPromptAttempt, timeout: Optional[float]) -> tuple[Optional[str], bool]:
        kwargs = {
            "model": self._model,
            "messages": attempt.messages,
            "max_completion_tokens": 16000,
        }
        if attempt.force_json:
            kwargs["response_format"] = {"type": "json_object"}
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = self._client.chat.completions.create(**kwargs)
        except openai.OpenAIError as exc:
            error = classify_openai_error(exc)
            logger.warning("Vision call failed: %s (%s)", error.kind.value, type(exc).__name__)
            raise error from exc

        content = response.choices[0].message.content if response.choices else None
        return content or None, attempt.force_json

    @staticmethod
    def _extract_json_payload(content: str) -> Optional[dict]:
        text = content.strip()
        if not text:
            return None

        try:
            parsed = json.loads(text)
            return parsed if isinstance(parsed, dict) else None
        except json.JSONDecodeError:
            pass

        # Handle fenced code blocks
        if text.startswith("```") and text.endswith("```"):
            body = "\n".join(text.splitlines()[1:-1]).strip()
            if body:
                try:
                    parsed = json.loads(body)
                    return parsed if isinstance(parsed, dict) else None
                except json.JSONDecodeError:
                    pass

        # Fallback: attempt to locate first JSON object within the text
        start_index = text.find("{")
        end_index = text.rfind("}")
        if start_index != -1 and end_index != -1 and end_index > start_index:
            snippet = text[start_index : end_index + 1]
            try:
                parsed = json.loads(snippet)
                return parsed if isinstance(parsed, dict) else None
            except json.JSONDecodeError:
                return None

        return None
