"""Document ingestion: kind detection and text extraction."""

from .detector import detect_document_kind, resolve_document_kind
from .extractor import TextExtractor
from .models import Document, DocumentKind, ExtractedText

__all__ = [
    "Document",
    "DocumentKind",
    "ExtractedText",
    "TextExtractor",
    "detect_document_kind",
    "resolve_document_kind",
]
