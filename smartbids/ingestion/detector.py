"""Document kind detection utilities."""

from __future__ import annotations

import logging
from pathlib import PurePath

from ..errors import UnsupportedFormat
from .models import Document, DocumentKind

logger = logging.getLogger(__name__)

_KINDS_BY_SUFFIX = {
    ".txt": DocumentKind.TEXT,
    ".pdf": DocumentKind.PDF,
    ".docx": DocumentKind.DOCX,
}


def detect_document_kind(file_name: str) -> DocumentKind:
    """Map a file name to its document kind using the extension."""

    suffix = PurePath(file_name).suffix.lower()
    kind = _KINDS_BY_SUFFIX.get(suffix)
    if kind is None:
        raise UnsupportedFormat(f"Unsupported file type: {suffix or file_name!r}")
    return kind


def resolve_document_kind(document: Document) -> DocumentKind:
    """Return the declared kind, or detect one from the document name."""

    if document.kind is not None:
        try:
            return DocumentKind(document.kind)
        except ValueError as exc:
            raise UnsupportedFormat(f"Unsupported document kind: {document.kind!r}") from exc

    kind = detect_document_kind(document.name)
    logger.debug("Detected %s as %s", document.name, kind.value)
    return kind
