import threading

import pytest

from docredact.application.pipeline import (
    CancellationToken,
    PipelineJob,
    PipelineOrchestrator,
    aggregate_text,
)
from docredact.domain.entities.documents import SourceDocument
from docredact.domain.entities.match_result import MatchTier
from docredact.domain.entities.page_extraction import PageExtractionResult
from docredact.domain.exceptions import (
    ExtractionFailedError,
    ExtractionFailureReason,
    ExtractionTierError,
    PipelineCancelledError,
    PipelineTimeoutError,
)
from docredact.domain.value_objects.pipeline_status import PipelineState
from docredact.infrastructure.extraction.base import ExtractionOutcome
from docredact.infrastructure.extraction.chain import ExtractionChain
from docredact.infrastructure.pdf.page_splitter import PageSplitter
from docredact.tests.conftest import StubStrategy, build_pdf, make_field


def _outcome(text, *fields):
    return ExtractionOutcome(text=text, fields=list(fields), method="stub")


def _orchestrator(*strategies, **kwargs):
    return PipelineOrchestrator(splitter=PageSplitter(), chain=ExtractionChain(list(strategies)), **kwargs)


def _job(page_count, elements=()):
    content = build_pdf([f"page {i}" for i in range(page_count)])
    return PipelineJob(source=SourceDocument(content, "application/pdf", filename="doc.pdf"), elements=elements)


def test_aggregate_text_labels_pages():
    pages = [PageExtractionResult(0, "first"), PageExtractionResult(1, ""), PageExtractionResult(2, "third")]
    assert aggregate_text(pages) == "[Page 1]\nfirst\n\n[Page 3]\nthird"


def test_successful_run_matches_backend_and_pattern_fields(passport_elements):
    stub = StubStrategy("stub", {
        0: _outcome("P1234567", make_field("First Name", "Alice", id="f-first")),
        1: _outcome("Date of Birth: 01/02/1980"),
        2: _outcome("nothing of note"),
    })

    result = _orchestrator(stub).run(_job(3, passport_elements))

    assert result.state is PipelineState.DONE
    assert result.succeeded
    assert [p.page_index for p in result.pages] == [0, 1, 2]
    assert result.text.startswith("[Page 1]\nP1234567")

    by_element = {m.element.id: m for m in result.matches if m.element is not None}
    assert by_element["el-first"].field.id == "f-first"
    assert by_element["el-first"].tier is MatchTier.EXACT
    assert by_element["el-passport"].field.value == "P1234567"
    assert by_element["el-dob"].field.value == "01/02/1980"
    assert {m.element.id for m in result.missing} == {"el-last", "el-nationality"}
    assert len([m for m in result.matches if m.missing]) == 2


def test_each_element_is_claimed_at_most_once(passport_elements):
    stub = StubStrategy("stub", {
        0: _outcome("", make_field("First Name", "Alice"), make_field("Forename", "Alicia")),
    })

    result = _orchestrator(stub).run(_job(1, passport_elements))

    claimed = [m.element.id for m in result.matches if m.is_matched]
    assert len(claimed) == len(set(claimed))
    assert claimed.count("el-first") == 1


@pytest.mark.parametrize("cancel_after", [1, 2])
def test_cancellation_stops_before_the_next_page(cancel_after):
    token = CancellationToken()

    def extract_and_cancel(page):
        if page.index == cancel_after - 1:
            token.cancel()
        return _outcome(f"page {page.index}")

    stub = StubStrategy("stub", {i: extract_and_cancel for i in range(4)})

    result = _orchestrator(stub).run(_job(4), cancellation=token)

    assert result.state is PipelineState.CANCELLED
    assert len(result.pages) == cancel_after
    assert stub.calls == list(range(cancel_after))
    assert isinstance(result.failure, PipelineCancelledError)
    assert result.progress.cancelled
    assert result.matches == []


def test_cancellation_from_progress_listener():
    token = CancellationToken()

    def listener(progress):
        if progress.processed_pages == 1:
            token.cancel()

    stub = StubStrategy("stub", {i: _outcome(f"page {i}") for i in range(3)})

    result = _orchestrator(stub).run(_job(3), on_progress=listener, cancellation=token)

    assert result.state is PipelineState.CANCELLED
    assert stub.calls == [0]
    assert [p.page_index for p in result.pages] == [0]


def test_cancelled_before_start_extracts_nothing():
    token = CancellationToken()
    token.cancel()
    stub = StubStrategy("stub", {0: _outcome("x")})

    result = _orchestrator(stub).run(_job(2), cancellation=token)

    assert result.state is PipelineState.CANCELLED
    assert result.pages == []
    assert stub.calls == []


def test_failed_page_keeps_the_other_pages():
    stub = StubStrategy("stub", {
        0: ExtractionTierError("stub", "document is encrypted"),
        1: _outcome("page one", make_field("Name", "Alice")),
        2: _outcome("page two"),
    })

    result = _orchestrator(stub).run(_job(3))

    assert result.state is PipelineState.FAILED
    assert [p.page_index for p in result.pages] == [1, 2]
    assert isinstance(result.failure, ExtractionFailedError)
    assert result.failure.page_index == 0
    assert result.failure.reason is ExtractionFailureReason.ENCRYPTED
    assert [f.page_index for f in result.page_failures] == [0]
    assert [f.label for f in result.fields] == ["Name"]
    assert result.to_dict()["failure"]["pageIndex"] == 0


def test_unexpected_chain_error_becomes_page_failure():
    class ExplodingChain(ExtractionChain):
        def extract(self, page, mode=None):
            raise KeyError("boom")

    orchestrator = PipelineOrchestrator(splitter=PageSplitter(), chain=ExplodingChain([StubStrategy("x")]))

    result = orchestrator.run(_job(1))

    assert result.state is PipelineState.FAILED
    assert result.failure.reason is ExtractionFailureReason.UNKNOWN


def test_progress_is_monotonic_and_complete():
    snapshots = []
    stub = StubStrategy("stub", {i: _outcome(f"page {i}") for i in range(3)})

    _orchestrator(stub).run(_job(3), on_progress=snapshots.append)

    processed = [s.processed_pages for s in snapshots]
    assert processed == sorted(processed)
    assert processed[-1] == 3
    assert snapshots[-1].state is PipelineState.DONE
    assert snapshots[-1].percent == 100.0
    extracting = [s.page_index for s in snapshots if s.state is PipelineState.EXTRACTING_PAGE]
    assert sorted(set(extracting)) == [0, 1, 2]


def test_failing_progress_listener_does_not_break_the_run():
    def listener(progress):
        raise RuntimeError("listener bug")

    stub = StubStrategy("stub", {0: _outcome("x")})

    assert _orchestrator(stub).run(_job(1), on_progress=listener).state is PipelineState.DONE


def test_parallel_workers_keep_page_order():
    stub = StubStrategy("stub", {i: _outcome(f"page {i}", make_field(f"Field {i}", str(i))) for i in range(6)})

    result = _orchestrator(stub, max_workers=3).run(_job(6))

    assert result.state is PipelineState.DONE
    assert [p.page_index for p in result.pages] == list(range(6))
    assert sorted(stub.calls) == list(range(6))


def test_job_timeout_fails_the_run():
    release = threading.Event()

    def slow(page):
        release.wait(5)
        return _outcome("late")

    stub = StubStrategy("stub", {0: slow, 1: slow})
    try:
        result = _orchestrator(stub, job_timeout_seconds=0.05).run(_job(2))
    finally:
        release.set()

    assert result.state is PipelineState.FAILED
    assert isinstance(result.failure, PipelineTimeoutError)
    assert result.failure.to_dict()["classification"] == "pipeline_timeout"
    assert result.pages == []
