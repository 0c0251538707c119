"""
Runs real documents through splitting, the local extraction tiers,
matching and pattern detection.
"""
import pytest

from docredact.application.pipeline import PipelineJob, PipelineOrchestrator
from docredact.domain.entities.documents import SourceDocument
from docredact.domain.entities.extracted_field import FieldSource
from docredact.domain.exceptions import ExtractionFailureReason, ExtractionServiceError, ServiceErrorKind
from docredact.domain.value_objects.pipeline_status import PipelineState
from docredact.infrastructure.extraction.chain import ExtractionChain
from docredact.infrastructure.extraction.direct_parse import DirectParseStrategy
from docredact.infrastructure.extraction.layout_parse import LayoutParseStrategy
from docredact.infrastructure.pdf.page_splitter import PageSplitter
from docredact.tests.conftest import StubStrategy, build_pdf


@pytest.fixture
def orchestrator():
    return PipelineOrchestrator(
        splitter=PageSplitter(),
        chain=ExtractionChain([DirectParseStrategy(), LayoutParseStrategy()]),
        max_workers=2,
    )


def test_text_layer_document_is_matched_from_patterns(orchestrator, three_page_pdf, passport_elements):
    job = PipelineJob(source=SourceDocument(three_page_pdf, "application/pdf", filename="passport.pdf"),
                      elements=passport_elements)

    result = orchestrator.run(job)

    assert result.state is PipelineState.DONE
    assert [p.method for p in result.pages] == ["direct-parse"] * 3
    assert result.text.count("[Page ") == 3

    matched = {m.element.id: m for m in result.matches if m.is_matched}
    assert matched["el-passport"].field.value == "P1234567"
    assert matched["el-passport"].field.source is FieldSource.PATTERN
    assert matched["el-dob"].field.page_index == 1
    assert {m.element.id for m in result.missing} == {"el-first", "el-last", "el-nationality"}
    assert any(f.label == "Email" and f.page_index == 2 for f in result.fields)


def test_blank_page_fails_but_other_pages_survive(orchestrator):
    content = build_pdf(["Name: Alice", "", "Email: alice@example.com"])

    result = orchestrator.run(PipelineJob(source=SourceDocument(content, "application/pdf")))

    assert result.state is PipelineState.FAILED
    assert [p.page_index for p in result.pages] == [0, 2]
    assert result.failure.page_index == 1
    assert len(result.failure.tier_errors) == 2


def test_image_with_only_pdf_tiers_fails_unclassified(orchestrator, png_bytes):
    result = orchestrator.run(PipelineJob(source=SourceDocument(png_bytes, "image/png")))

    assert result.state is PipelineState.FAILED
    assert result.failure.reason is ExtractionFailureReason.UNKNOWN
    assert result.pages == []


def test_image_failure_reports_the_remote_cause(png_bytes):
    def unauthorized(_page):
        raise ExtractionServiceError("vision-ocr", ServiceErrorKind.UNAUTHORIZED, "authentication failed")

    chain = ExtractionChain([
        DirectParseStrategy(),
        StubStrategy("vision-ocr", {0: unauthorized}),
        LayoutParseStrategy(),
    ])
    orchestrator = PipelineOrchestrator(splitter=PageSplitter(), chain=chain, max_workers=1)

    result = orchestrator.run(PipelineJob(source=SourceDocument(png_bytes, "image/png")))

    assert result.state is PipelineState.FAILED
    assert result.failure.reason is ExtractionFailureReason.UNKNOWN
    assert any("authentication failed" in e for e in result.failure.tier_errors)
