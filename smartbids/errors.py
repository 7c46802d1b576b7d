"""Failure taxonomy shared by every stage of the analysis pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Dict


class ErrorKind(str, Enum):
    """Enumerated reasons an analysis run can terminate in failure."""

    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    DEPENDENCY_UNAVAILABLE = "DependencyUnavailable"
    EXTRACTION_FAILED = "ExtractionFailed"
    MISSING_INPUT = "MissingInput"
    TRANSPORT_EXHAUSTED = "TransportExhausted"
    MALFORMED_RESPONSE = "MalformedResponse"
    VALIDATION_ERROR = "ValidationError"
    CANCELLED = "Cancelled"


class AnalysisError(Exception):
    """Base class for terminal analysis failures."""

    kind: ErrorKind

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_payload(self) -> Dict[str, str]:
        return {"kind": self.kind.value, "detail": self.detail}

    @classmethod
    def from_payload(cls, payload: Dict[str, str]) -> "AnalysisError":
        """Rebuild the concrete error raised on the other side of a serialization boundary."""

        kind = ErrorKind(payload["kind"])
        return _ERRORS_BY_KIND[kind](payload.get("detail", ""))


class UnsupportedFormat(AnalysisError):
    kind = ErrorKind.UNSUPPORTED_FORMAT


class DependencyUnavailable(AnalysisError):
    kind = ErrorKind.DEPENDENCY_UNAVAILABLE


class ExtractionFailed(AnalysisError):
    kind = ErrorKind.EXTRACTION_FAILED


class MissingInput(AnalysisError):
    kind = ErrorKind.MISSING_INPUT


class TransportExhausted(AnalysisError):
    """Raised once every transport attempt has failed."""

    kind = ErrorKind.TRANSPORT_EXHAUSTED

    def __init__(self, detail: str, attempts: int = 0) -> None:
        super().__init__(detail)
        self.attempts = attempts


class MalformedResponse(AnalysisError):
    kind = ErrorKind.MALFORMED_RESPONSE


class ReportValidationError(AnalysisError):
    """Raised when a decoded payload does not satisfy its report contract."""

    kind = ErrorKind.VALIDATION_ERROR


class Cancelled(AnalysisError):
    kind = ErrorKind.CANCELLED


_ERRORS_BY_KIND = {
    error_cls.kind: error_cls
    for error_cls in (
        UnsupportedFormat,
        DependencyUnavailable,
        ExtractionFailed,
        MissingInput,
        TransportExhausted,
        MalformedResponse,
        ReportValidationError,
        Cancelled,
    )
}


__all__ = [
    "AnalysisError",
    "Cancelled",
    "DependencyUnavailable",
    "ErrorKind",
    "ExtractionFailed",
    "MalformedResponse",
    "MissingInput",
    "ReportValidationError",
    "TransportExhausted",
    "UnsupportedFormat",
]
