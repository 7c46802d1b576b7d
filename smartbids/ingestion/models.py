"""Common data models for document ingestion."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class DocumentKind(str, Enum):
    """Document formats the extractor knows how to decode."""

    TEXT = "text"
    PDF = "pdf"
    DOCX = "docx"


@dataclass(frozen=True)
class Document:
    """An uploaded payload awaiting text extraction."""

    name: str
    content: bytes = field(repr=False)
    kind: Optional[DocumentKind] = None

    @classmethod
    def from_path(cls, path: Path, kind: Optional[DocumentKind] = None) -> "Document":
        """Read a document from disk, keeping the file name for extension dispatch."""

        return cls(name=path.name, content=path.read_bytes(), kind=kind)


@dataclass(frozen=True)
class ExtractedText:
    """Plain text recovered from a single document."""

    document_name: str
    kind: DocumentKind
    text: str
    page_count: Optional[int] = None
