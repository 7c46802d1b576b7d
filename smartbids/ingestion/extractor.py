"""Plain-text extraction for uploaded requirement and response documents."""

from __future__ import annotations

import asyncio
import io
import logging
from typing import Any, BinaryIO, Callable, Optional, Tuple, cast

from ..errors import AnalysisError, DependencyUnavailable, ExtractionFailed
from .detector import resolve_document_kind
from .models import Document, DocumentKind, ExtractedText

logger = logging.getLogger(__name__)

_PdfReader: Optional[Any] = None
try:
    from pypdf import PdfReader as _PdfReader
except ImportError:  # pragma: no cover - optional dependency
    _PdfReader = None

PdfReader = cast(Optional[Callable[[BinaryIO], Any]], _PdfReader)

try:
    import docx as python_docx
except ImportError:  # pragma: no cover - optional dependency
    python_docx = cast(Any, None)

PAGE_SEPARATOR = "\n\n"


def _read_docx_text(stream: BinaryIO) -> str:
    """Return the raw text of a Word document, one blank line after each paragraph."""

    document = python_docx.Document(stream)
    return "".join(f"{paragraph.text}{PAGE_SEPARATOR}" for paragraph in document.paragraphs)


default_docx_reader: Optional[Callable[[BinaryIO], str]] = (
    _read_docx_text if python_docx is not None else None
)


class TextExtractor:
    """Converts a Document into plain text, dispatching on its kind.

    Readers are injectable so callers can run without the optional PDF and
    Word libraries, or substitute fakes. A reader set to ``None`` is treated
    as unavailable.
    """

    def __init__(
        self,
        pdf_reader_factory: Optional[Callable[[BinaryIO], Any]] = PdfReader,
        docx_reader: Optional[Callable[[BinaryIO], str]] = default_docx_reader,
    ) -> None:
        self._pdf_reader_factory = pdf_reader_factory
        self._docx_reader = docx_reader

    async def extract(self, document: Document) -> ExtractedText:
        """Extract the document's text off the event loop."""

        kind = resolve_document_kind(document)

        if kind is DocumentKind.PDF:
            if self._pdf_reader_factory is None:
                raise DependencyUnavailable("PDF parsing requires the 'pypdf' package.")
            decoder = self._decode_pdf
        elif kind is DocumentKind.DOCX:
            if self._docx_reader is None:
                raise DependencyUnavailable("Word parsing requires the 'python-docx' package.")
            decoder = self._decode_docx
        else:
            decoder = self._decode_text

        try:
            text, page_count = await asyncio.to_thread(decoder, document.content)
        except AnalysisError:
            raise
        except Exception as exc:
            logger.warning("Extraction failed for %s: %s", document.name, exc)
            raise ExtractionFailed(f"Failed to read {document.name}: {exc}") from exc

        if not text.strip():
            raise ExtractionFailed(f"No extractable text found in {document.name}.")

        logger.debug("Extracted %d characters from %s", len(text), document.name)
        return ExtractedText(
            document_name=document.name,
            kind=kind,
            text=text,
            page_count=page_count,
        )

    @staticmethod
    def _decode_text(content: bytes) -> Tuple[str, Optional[int]]:
        return content.decode("utf-8-sig"), None

    def _decode_pdf(self, content: bytes) -> Tuple[str, Optional[int]]:
        assert self._pdf_reader_factory is not None
        reader = self._pdf_reader_factory(io.BytesIO(content))
        pages = list(reader.pages)
        fragments = []
        for page in pages:
            page_text = page.extract_text() or ""
            fragments.append(f"{page_text}{PAGE_SEPARATOR}")
        return "".join(fragments), len(pages)

    def _decode_docx(self, content: bytes) -> Tuple[str, Optional[int]]:
        assert self._docx_reader is not None
        return self._docx_reader(io.BytesIO(content)), None
