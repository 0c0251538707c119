import fitz  # type: ignore
import pytest

from docredact.domain.entities.documents import PageDocument
from docredact.domain.entities.extracted_field import FieldSource
from docredact.domain.exceptions import ExtractionTierError, TierNotApplicableError
from docredact.infrastructure.extraction.base import ExtractionMode
from docredact.infrastructure.extraction.direct_parse import DirectParseStrategy
from docredact.infrastructure.extraction.layout_parse import (
    LAYOUT_FIELD_CONFIDENCE,
    LayoutParseStrategy,
    TextItem,
    group_lines,
    lines_to_text,
)
from docredact.tests.conftest import build_pdf


def _pdf_page(content, index=0):
    return PageDocument(index=index, content=content, mime_type="application/pdf")


def test_direct_parse_reads_text_layer():
    page = _pdf_page(build_pdf(["Name: Alice Example\nPassport No: P1234567"]))

    outcome = DirectParseStrategy().extract(page, ExtractionMode.STANDARD)

    assert "Alice Example" in outcome.text
    assert "P1234567" in outcome.text
    assert outcome.fields == []
    assert outcome.method == "direct-parse"
    assert outcome.page_count == 1


def test_direct_parse_rejects_blank_pages():
    with pytest.raises(ExtractionTierError, match="no embedded text layer"):
        DirectParseStrategy().extract(_pdf_page(build_pdf([""])), ExtractionMode.STANDARD)


def test_direct_parse_rejects_images(png_bytes):
    page = PageDocument(index=0, content=png_bytes, mime_type="image/png")
    with pytest.raises(TierNotApplicableError, match="not a pdf"):
        DirectParseStrategy().extract(page, ExtractionMode.STANDARD)


def test_direct_parse_reports_encryption():
    document = fitz.open(stream=build_pdf(["secret"]), filetype="pdf")
    encrypted = document.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, user_pw="user", owner_pw="owner")
    document.close()

    with pytest.raises(ExtractionTierError, match="encrypted"):
        DirectParseStrategy().extract(_pdf_page(encrypted), ExtractionMode.STANDARD)


def test_group_lines_splits_on_baseline_change():
    items = [
        TextItem(0, 0, 10, 12, "Name:"),
        TextItem(12, 0, 30, 12, "Alice"),
        TextItem(0, 20, 10, 32, "Next"),
    ]

    lines = group_lines(items)

    assert [[i.text for i in line] for line in lines] == [["Name:", "Alice"], ["Next"]]
    assert lines_to_text(lines) == "Name: Alice\nNext"


def test_layout_parse_builds_label_value_fields():
    page = _pdf_page(build_pdf(["Name: Alice Example\nPassport No: P1234567\nno colon here"]), index=3)

    outcome = LayoutParseStrategy().extract(page, ExtractionMode.STANDARD)

    assert outcome.method == "layout-parse"
    assert outcome.text.splitlines()[0] == "Name: Alice Example"
    assert [(f.id, f.label, f.value) for f in outcome.fields] == [
        ("layout-3-0", "Name", "Alice Example"),
        ("layout-3-1", "Passport No", "P1234567"),
    ]
    for field in outcome.fields:
        assert field.confidence == LAYOUT_FIELD_CONFIDENCE
        assert field.source is FieldSource.DIRECT_PARSE
        assert field.has_real_geometry()
        assert 0 < field.bounding_box.left < 0.5


def test_layout_parse_rejects_blank_pages():
    with pytest.raises(ExtractionTierError):
        LayoutParseStrategy().extract(_pdf_page(build_pdf([""])), ExtractionMode.STANDARD)
