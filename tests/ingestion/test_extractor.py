from __future__ import annotations

import io
from typing import Any, BinaryIO, List

import pytest

from smartbids.errors import DependencyUnavailable, ExtractionFailed, UnsupportedFormat
from smartbids.ingestion import Document, DocumentKind, TextExtractor, detect_document_kind


class FakePage:
    def __init__(self, text: Any) -> None:
        self._text = text

    def extract_text(self) -> Any:
        if isinstance(self._text, Exception):
            raise self._text
        return self._text


class FakePdfReader:
    def __init__(self, texts: List[Any]) -> None:
        self.pages = [FakePage(text) for text in texts]


def fake_pdf_factory(*texts: Any):
    def _factory(_stream: BinaryIO) -> FakePdfReader:
        return FakePdfReader(list(texts))

    return _factory


@pytest.mark.asyncio
async def test_text_document_decodes_utf8() -> None:
    extractor = TextExtractor()
    document = Document(name="rfp.txt", content="PROJECT TITLE: X\n1. Shall use REST API.".encode("utf-8"))

    extracted = await extractor.extract(document)

    assert extracted.text == "PROJECT TITLE: X\n1. Shall use REST API."
    assert extracted.kind is DocumentKind.TEXT
    assert extracted.document_name == "rfp.txt"


@pytest.mark.asyncio
async def test_text_document_drops_byte_order_mark() -> None:
    extractor = TextExtractor()
    document = Document(name="bid.txt", content=b"\xef\xbb\xbfWe use GraphQL.")

    extracted = await extractor.extract(document)

    assert extracted.text == "We use GraphQL."


@pytest.mark.asyncio
async def test_undecodable_text_fails_extraction() -> None:
    extractor = TextExtractor()

    with pytest.raises(ExtractionFailed) as excinfo:
        await extractor.extract(Document(name="bid.txt", content=b"\xff\xfe\xfa broken"))

    assert "bid.txt" in excinfo.value.detail


@pytest.mark.asyncio
async def test_blank_text_fails_extraction() -> None:
    extractor = TextExtractor()

    with pytest.raises(ExtractionFailed):
        await extractor.extract(Document(name="empty.txt", content=b"  \n\n "))


@pytest.mark.asyncio
async def test_pdf_pages_concatenate_in_order() -> None:
    extractor = TextExtractor(pdf_reader_factory=fake_pdf_factory("A", "B", "C"))

    extracted = await extractor.extract(Document(name="rfp.pdf", content=b"%PDF-fake"))

    assert extracted.text == "A\n\nB\n\nC\n\n"
    assert extracted.page_count == 3


@pytest.mark.asyncio
async def test_pdf_page_without_text_keeps_separator() -> None:
    extractor = TextExtractor(pdf_reader_factory=fake_pdf_factory("A", None, "C"))

    extracted = await extractor.extract(Document(name="rfp.pdf", content=b"%PDF-fake"))

    assert extracted.text == "A\n\n\n\nC\n\n"


@pytest.mark.asyncio
async def test_pdf_without_reader_is_dependency_unavailable() -> None:
    extractor = TextExtractor(pdf_reader_factory=None)

    with pytest.raises(DependencyUnavailable):
        await extractor.extract(Document(name="rfp.pdf", content=b"%PDF-fake"))


@pytest.mark.asyncio
async def test_pdf_page_failure_fails_whole_document() -> None:
    extractor = TextExtractor(
        pdf_reader_factory=fake_pdf_factory("A", RuntimeError("bad xref"), "C")
    )

    with pytest.raises(ExtractionFailed) as excinfo:
        await extractor.extract(Document(name="rfp.pdf", content=b"%PDF-fake"))

    assert "bad xref" in excinfo.value.detail


@pytest.mark.asyncio
async def test_docx_returns_reader_text_verbatim() -> None:
    extractor = TextExtractor(docx_reader=lambda _stream: "Scope\n\nDeliverables\n\n")

    extracted = await extractor.extract(Document(name="rfp.docx", content=b"PK\x03\x04"))

    assert extracted.text == "Scope\n\nDeliverables\n\n"
    assert extracted.kind is DocumentKind.DOCX


@pytest.mark.asyncio
async def test_docx_without_reader_is_dependency_unavailable() -> None:
    extractor = TextExtractor(docx_reader=None)

    with pytest.raises(DependencyUnavailable):
        await extractor.extract(Document(name="rfp.docx", content=b"PK\x03\x04"))


@pytest.mark.asyncio
async def test_unknown_extension_is_unsupported() -> None:
    extractor = TextExtractor()

    with pytest.raises(UnsupportedFormat):
        await extractor.extract(Document(name="prices.xlsx", content=b"data"))


@pytest.mark.asyncio
async def test_declared_kind_overrides_extension() -> None:
    extractor = TextExtractor(pdf_reader_factory=fake_pdf_factory("A"))

    extracted = await extractor.extract(
        Document(name="upload.bin", content=b"%PDF-fake", kind=DocumentKind.PDF)
    )

    assert extracted.text == "A\n\n"


def test_detect_document_kind_is_case_insensitive() -> None:
    assert detect_document_kind("RFP.PDF") is DocumentKind.PDF
    assert detect_document_kind("bid.Docx") is DocumentKind.DOCX
    assert detect_document_kind("notes.txt") is DocumentKind.TEXT


def test_detect_document_kind_rejects_missing_extension() -> None:
    with pytest.raises(UnsupportedFormat):
        detect_document_kind("README")


@pytest.mark.asyncio
async def test_real_pdf_reader_rejects_corrupt_bytes() -> None:
    pytest.importorskip("pypdf")
    extractor = TextExtractor()

    with pytest.raises(ExtractionFailed):
        await extractor.extract(Document(name="broken.pdf", content=b"this is not a pdf"))


@pytest.mark.asyncio
async def test_real_docx_reader_extracts_paragraphs() -> None:
    python_docx = pytest.importorskip("docx")
    word_document = python_docx.Document()
    word_document.add_paragraph("PROJECT TITLE: X")
    word_document.add_paragraph("1. Shall use REST API.")
    buffer = io.BytesIO()
    word_document.save(buffer)

    extracted = await TextExtractor().extract(Document(name="rfp.docx", content=buffer.getvalue()))

    assert "PROJECT TITLE: X\n\n1. Shall use REST API.\n\n" in extracted.text
