"""
Pipeline orchestrator.

Drives one document through splitting, per-page extraction, field matching,
pattern detection and aggregation:

    IDLE -> SPLITTING -> EXTRACTING_PAGE(i) -> MATCHING -> PATTERN_DETECTING
         -> AGGREGATING -> DONE

FAILED and CANCELLED can be reached from any in-flight state. Pages run on a
bounded thread pool (one worker by default) and are scheduled lazily, so a
cancellation stops every page that has not started yet while in-flight pages
finish.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from docredact.app_logging import job_logger
from docredact.domain.entities.data_element import ConfiguredDataElement
from docredact.domain.entities.documents import PageDocument, SourceDocument
from docredact.domain.entities.extracted_field import ExtractedField
from docredact.domain.entities.match_result import MatchResult
from docredact.domain.entities.page_extraction import PageExtractionResult
from docredact.domain.exceptions import (
    ExtractionFailedError,
    ExtractionFailureReason,
    PipelineCancelledError,
    PipelineError,
    PipelineTimeoutError,
)
from docredact.domain.services.field_matcher import FieldMatcher, combine_reports
from docredact.domain.services.pattern_detector import PatternDetector
from docredact.domain.value_objects.pipeline_status import PipelineState
from docredact.infrastructure.extraction.base import ExtractionMode
from docredact.infrastructure.extraction.chain import ExtractionChain
from docredact.infrastructure.pdf.page_splitter import PageSplitter

from .cancellation import CancellationToken
from .progress import PipelineProgress, ProgressCallback, ProgressTracker

logger = logging.getLogger(__name__)


@dataclass
class PipelineJob:
    """Everything one run needs; nothing is read from shared context."""

    source: SourceDocument
    elements: Sequence[ConfiguredDataElement] = field(default_factory=tuple)
    mode: ExtractionMode = ExtractionMode.STANDARD
    job_id: Optional[str] = None


@dataclass
class PipelineResult:
    state: PipelineState
    pages: List[PageExtractionResult] = field(default_factory=list)
    fields: List[ExtractedField] = field(default_factory=list)
    matches: List[MatchResult] = field(default_factory=list)
    text: str = ""
    failure: Optional[PipelineError] = None
    page_failures: List[ExtractionFailedError] = field(default_factory=list)
    progress: Optional[PipelineProgress] = None

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.DONE

    @property
    def missing(self) -> List[MatchResult]:
        return [m for m in self.matches if m.missing]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "pages": [p.to_dict() for p in self.pages],
            "fields": [f.to_dict() for f in self.fields],
            "matches": [m.to_dict() for m in self.matches],
            "text": self.text,
            "failure": self.failure.to_dict() if self.failure else None,
            "pageFailures": [f.to_dict() for f in self.page_failures],
            "progress": self.progress.to_dict() if self.progress else None,
        }


def aggregate_text(pages: Sequence[PageExtractionResult]) -> str:
    """Join page texts as ``[Page n]`` sections in page order."""
    sections = [f"[Page {p.page_number}]\n{p.text}" for p in pages if p.text]
    return "\n\n".join(sections)


class PipelineOrchestrator:
    def __init__(
        self,
        *,
        splitter: PageSplitter,
        chain: ExtractionChain,
        matcher: Optional[FieldMatcher] = None,
        detector: Optional[PatternDetector] = None,
        max_workers: int = 1,
        job_timeout_seconds: Optional[float] = None,
        clock=time.monotonic,
    ) -> None:
        self._splitter = splitter
        self._chain = chain
        self._matcher = matcher or FieldMatcher()
        self._detector = detector or PatternDetector()
        self._max_workers = max(1, int(max_workers))
        self._job_timeout = job_timeout_seconds if job_timeout_seconds and job_timeout_seconds > 0 else None
        self._clock = clock

    def run(
        self,
        job: PipelineJob,
        on_progress: Optional[ProgressCallback] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> PipelineResult:
        log = job_logger(logger, job.job_id)
        cancellation = cancellation or CancellationToken()
        tracker = ProgressTracker(on_progress)
        deadline = self._clock() + self._job_timeout if self._job_timeout else None

        tracker.transition(PipelineState.SPLITTING, "Splitting document")
        pages = self._splitter.split(job.source)
        tracker.set_total(len(pages))
        log.info("Processing %d pages of %s", len(pages), job.source.filename)

        completed, failures, interrupted = self._extract_pages(job, pages, tracker, cancellation, deadline, log)
        completed.sort(key=lambda p: p.page_index)
        failures.sort(key=lambda f: f.page_index)
        backend_fields = [f for page in completed for f in page.fields]
        text = aggregate_text(completed)

        if interrupted is not None:
            state = PipelineState.CANCELLED if isinstance(interrupted, PipelineCancelledError) else PipelineState.FAILED
            progress = tracker.transition(state, interrupted.message)
            log.warning("Pipeline %s after %d of %d pages", state.value, len(completed), len(pages))
            return PipelineResult(
                state=state,
                pages=completed,
                fields=backend_fields,
                text=text,
                failure=interrupted,
                page_failures=failures,
                progress=progress,
            )

        if failures:
            failure = failures[0]
            progress = tracker.transition(
                PipelineState.FAILED,
                f"Extraction failed for {len(failures)} of {len(pages)} pages",
            )
            log.error(
                "Pipeline failed: %d pages failed, first on page %d (%s)",
                len(failures), failure.page_index + 1, failure.reason.value,
            )
            return PipelineResult(
                state=PipelineState.FAILED,
                pages=completed,
                fields=backend_fields,
                text=text,
                failure=failure,
                page_failures=failures,
                progress=progress,
            )

        tracker.transition(PipelineState.MATCHING, "Matching fields")
        backend_report = self._matcher.match(backend_fields, job.elements)

        tracker.transition(PipelineState.PATTERN_DETECTING, "Detecting patterns")
        detected = [f for page in completed for f in self._detector.detect(page.text, page.page_index)]
        merged = self._detector.merge(backend_fields, detected)
        pattern_fields = merged[len(backend_fields):]

        tracker.transition(PipelineState.AGGREGATING, "Aggregating results")
        pattern_report = self._matcher.match(pattern_fields, backend_report.remaining_elements)
        matches = combine_reports(backend_report, pattern_report)

        progress = tracker.transition(PipelineState.DONE, "Done")
        log.info(
            "Pipeline done: %d fields (%d from patterns), %d missing elements",
            len(merged), len(pattern_fields), len(pattern_report.remaining_elements),
        )
        return PipelineResult(
            state=PipelineState.DONE,
            pages=completed,
            fields=merged,
            matches=matches,
            text=text,
            progress=progress,
        )

    def _extract_pages(
        self,
        job: PipelineJob,
        pages: Sequence[PageDocument],
        tracker: ProgressTracker,
        cancellation: CancellationToken,
        deadline: Optional[float],
        log: logging.LoggerAdapter,
    ) -> tuple[List[PageExtractionResult], List[ExtractionFailedError], Optional[PipelineError]]:
        completed: List[PageExtractionResult] = []
        failures: List[ExtractionFailedError] = []
        interrupted: Optional[PipelineError] = None
        pending = list(pages)
        in_flight: Dict[Future, PageDocument] = {}

        executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="pipeline-page")
        try:
            while pending or in_flight:
                while pending and len(in_flight) < self._max_workers and interrupted is None:
                    if cancellation.is_cancelled:
                        interrupted = PipelineCancelledError(
                            f"Cancelled before page {pending[0].page_number} of {len(pages)}"
                        )
                        break
                    page = pending.pop(0)
                    tracker.transition(
                        PipelineState.EXTRACTING_PAGE,
                        f"Extracting page {page.page_number} of {len(pages)}",
                        page_index=page.index,
                    )
                    in_flight[executor.submit(self._extract_one, page, job.mode)] = page

                if interrupted is not None:
                    pending.clear()
                if not in_flight:
                    break

                timeout = None if deadline is None else max(0.0, deadline - self._clock())
                done, _ = wait(list(in_flight), timeout=timeout, return_when=FIRST_COMPLETED)
                if not done:
                    interrupted = PipelineTimeoutError(
                        f"Job exceeded {self._job_timeout:.0f}s with {len(in_flight) + len(pending)} pages unfinished"
                    )
                    for future in in_flight:
                        future.cancel()
                    in_flight.clear()
                    pending.clear()
                    break

                for future in sorted(done, key=lambda f: in_flight[f].index):
                    page = in_flight.pop(future)
                    outcome = future.result()
                    if isinstance(outcome, ExtractionFailedError):
                        failures.append(outcome)
                        tracker.page_done(f"Page {page.page_number} failed: {outcome.reason.value}")
                    else:
                        completed.append(outcome)
                        tracker.page_done(f"Processed page {page.page_number} of {len(pages)}")
        finally:
            # Timed-out pages keep running in their threads; don't block on them.
            executor.shutdown(wait=not isinstance(interrupted, PipelineTimeoutError), cancel_futures=True)

        if failures:
            log.info("Extraction failed on pages %s", [f.page_index + 1 for f in failures])
        return completed, failures, interrupted

    def _extract_one(self, page: PageDocument, mode: ExtractionMode):
        """Run the chain for one page; failures are returned, not raised."""
        try:
            outcome = self._chain.extract(page, mode)
        except ExtractionFailedError as exc:
            return exc
        except Exception as exc:
            logger.exception("Unexpected error extracting page %s", page.page_number)
            return ExtractionFailedError(
                page.index,
                ExtractionFailureReason.UNKNOWN,
                tier_errors=[type(exc).__name__],
            )
        return PageExtractionResult(
            page_index=page.index,
            text=outcome.text,
            fields=list(outcome.fields),
            method=outcome.method,
        )
