"""Shared FastAPI dependencies for v1 API routers.

These factories centralize construction of the pipeline, its collaborators
and the command/query handlers so routers can depend on simple callables.
Tests swap any of them through ``app.dependency_overrides``.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from docredact.application.commands.cancel_job import CancelJobHandler
from docredact.application.commands.process_document import ProcessDocumentHandler, SubmitDocumentHandler
from docredact.application.commands.redact_document import RedactDocumentHandler
from docredact.application.commands.relabel_field import RelabelFieldHandler
from docredact.application.commands.submit_feedback import SubmitFeedbackHandler
from docredact.application.job_store import JobStore
from docredact.application.pipeline.orchestrator import PipelineOrchestrator
from docredact.application.queries.get_job_status import GetJobResultHandler, GetJobStatusHandler
from docredact.config import Settings, get_settings
from docredact.constants import DEFAULT_ELEMENT_CATALOG
from docredact.domain.services.field_matcher import FieldMatcher
from docredact.domain.services.pattern_detector import PatternDetector
from docredact.infrastructure.configuration.element_catalog import ElementCatalog, JsonElementCatalog
from docredact.infrastructure.extraction.base import TierPolicy
from docredact.infrastructure.extraction.chain import ExtractionChain
from docredact.infrastructure.extraction.direct_parse import DirectParseStrategy
from docredact.infrastructure.extraction.fallback_endpoint import FallbackEndpointStrategy
from docredact.infrastructure.extraction.layout_parse import LayoutParseStrategy
from docredact.infrastructure.extraction.vision_strategy import VisionOcrStrategy
from docredact.infrastructure.feedback.feedback_client import FeedbackReporter
from docredact.infrastructure.pdf.page_splitter import PageSplitter
from docredact.infrastructure.pdf.pdf_renderer import PdfRenderer
from docredact.infrastructure.pdf.redaction_renderer import RedactionRenderer
from docredact.infrastructure.vision.azure_vision_client import AzureVisionClient

PACKAGE_DIR = Path(__file__).resolve().parents[2]


@lru_cache()
def _element_catalog() -> ElementCatalog:
    configured = get_settings().element_catalog_path
    path = Path(configured) if configured else PACKAGE_DIR / DEFAULT_ELEMENT_CATALOG
    return JsonElementCatalog(path)


def get_element_catalog() -> ElementCatalog:
    """Provide the singleton document type catalog."""
    return _element_catalog()


@lru_cache()
def _job_store() -> JobStore:
    return JobStore()


def get_job_store() -> JobStore:
    """Provide the singleton in-memory job registry."""
    return _job_store()


@lru_cache()
def _field_matcher() -> FieldMatcher:
    return FieldMatcher()


def _remote_policy(settings: Settings) -> TierPolicy:
    return TierPolicy(
        max_attempts=max(1, settings.extraction_max_attempts),
        timeout_seconds=settings.extraction_timeout_seconds,
        backoff_seconds=settings.extraction_backoff_seconds,
    )


@lru_cache()
def _extraction_chain() -> ExtractionChain:
    settings = get_settings()
    remote = _remote_policy(settings)
    return ExtractionChain([
        DirectParseStrategy(),
        VisionOcrStrategy(
            lambda: AzureVisionClient(settings=settings),
            renderer=PdfRenderer(zoom=settings.render_zoom),
            policy=remote,
        ),
        LayoutParseStrategy(),
        FallbackEndpointStrategy(
            settings.extraction_fallback_endpoint,
            api_key=settings.extraction_fallback_api_key,
            policy=remote,
        ),
    ])


@lru_cache()
def _orchestrator() -> PipelineOrchestrator:
    settings = get_settings()
    return PipelineOrchestrator(
        splitter=PageSplitter(),
        chain=_extraction_chain(),
        matcher=_field_matcher(),
        detector=PatternDetector(),
        max_workers=settings.pipeline_max_workers,
        job_timeout_seconds=settings.pipeline_job_timeout_seconds,
    )


@lru_cache()
def _feedback_reporter() -> FeedbackReporter:
    return FeedbackReporter(get_settings().feedback_endpoint)


def get_feedback_reporter() -> FeedbackReporter:
    return _feedback_reporter()


@lru_cache()
def _get_submit_document_handler() -> SubmitDocumentHandler:
    return SubmitDocumentHandler(_element_catalog(), _job_store())


def get_submit_document_handler() -> SubmitDocumentHandler:
    """Provide a cached SubmitDocument handler."""
    return _get_submit_document_handler()


@lru_cache()
def _get_process_document_handler() -> ProcessDocumentHandler:
    return ProcessDocumentHandler(_orchestrator(), _job_store())


def get_process_document_handler() -> ProcessDocumentHandler:
    """Provide a cached ProcessDocument handler."""
    return _get_process_document_handler()


@lru_cache()
def _get_job_status_handler() -> GetJobStatusHandler:
    return GetJobStatusHandler(_job_store())


def get_job_status_handler() -> GetJobStatusHandler:
    return _get_job_status_handler()


@lru_cache()
def _get_job_result_handler() -> GetJobResultHandler:
    return GetJobResultHandler(_job_store())


def get_job_result_handler() -> GetJobResultHandler:
    return _get_job_result_handler()


@lru_cache()
def _get_cancel_job_handler() -> CancelJobHandler:
    return CancelJobHandler(_job_store())


def get_cancel_job_handler() -> CancelJobHandler:
    return _get_cancel_job_handler()


@lru_cache()
def _get_relabel_field_handler() -> RelabelFieldHandler:
    return RelabelFieldHandler(_job_store(), _field_matcher(), _feedback_reporter())


def get_relabel_field_handler() -> RelabelFieldHandler:
    return _get_relabel_field_handler()


@lru_cache()
def _get_redact_document_handler() -> RedactDocumentHandler:
    return RedactDocumentHandler(_job_store(), RedactionRenderer())


def get_redact_document_handler() -> RedactDocumentHandler:
    """Provide a cached RedactDocument handler."""
    return _get_redact_document_handler()


@lru_cache()
def _get_submit_feedback_handler() -> SubmitFeedbackHandler:
    return SubmitFeedbackHandler(_feedback_reporter())


def get_submit_feedback_handler() -> SubmitFeedbackHandler:
    return _get_submit_feedback_handler()
