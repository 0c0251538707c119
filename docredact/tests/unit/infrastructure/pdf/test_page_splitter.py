import fitz  # type: ignore
import pytest

from docredact.domain.entities.documents import SourceDocument
from docredact.infrastructure.pdf.page_splitter import PageSplitter
from docredact.tests.conftest import build_pdf


@pytest.fixture
def splitter():
    return PageSplitter()


@pytest.mark.parametrize("page_count", [1, 2, 5])
def test_split_yields_one_page_per_pdf_page(splitter, page_count):
    source = SourceDocument(build_pdf([f"page {i}" for i in range(page_count)]), "application/pdf")

    pages = splitter.split(source)

    assert len(pages) == page_count
    assert [p.index for p in pages] == list(range(page_count))
    assert source.page_count == page_count


def test_each_page_is_an_independent_pdf(splitter):
    source = SourceDocument(build_pdf(["first page", "second page"]), "application/pdf")

    pages = splitter.split(source)

    for page, expected in zip(pages, ["first page", "second page"]):
        with fitz.open(stream=page.content, filetype="pdf") as single:
            assert single.page_count == 1
            assert expected in single[0].get_text()
        assert page.mime_type == "application/pdf"


def test_count_pages_is_cached(splitter):
    source = SourceDocument(build_pdf(["a", "b", "c"]), "application/pdf")
    assert splitter.count_pages(source) == 3
    source.content = b"garbage"
    assert splitter.count_pages(source) == 3


def test_unreadable_pdf_degrades_to_one_page(splitter):
    source = SourceDocument(b"%PDF-1.4 definitely not a pdf", "application/pdf")

    pages = splitter.split(source)

    assert len(pages) == 1
    assert pages[0].index == 0
    assert pages[0].content == source.content
    assert source.page_count == 1


def test_encrypted_pdf_degrades_to_one_page(splitter):
    document = fitz.open(stream=build_pdf(["secret", "more"]), filetype="pdf")
    encrypted = document.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, user_pw="user", owner_pw="owner")
    document.close()

    pages = splitter.split(SourceDocument(encrypted, "application/pdf"))

    assert len(pages) == 1
    assert pages[0].content == encrypted


def test_image_is_a_single_page(splitter, png_bytes):
    source = SourceDocument(png_bytes, "image/png", filename="scan.png")

    pages = splitter.split(source)

    assert len(pages) == 1
    assert pages[0].mime_type == "image/png"
    assert splitter.count_pages(source) == 1
