"""Schema-constrained generation: transport, contracts and prompt assembly."""

from .contracts import (
    ComplianceReport,
    ExtractionReport,
    Report,
    ReportContract,
    ReportKind,
    ReportSchemaRegistry,
    default_registry,
)
from .prompts import AnalysisMode, build_generation_payload
from .transport import RawResponse, RetryingTransport

__all__ = [
    "AnalysisMode",
    "ComplianceReport",
    "ExtractionReport",
    "RawResponse",
    "Report",
    "ReportContract",
    "ReportKind",
    "ReportSchemaRegistry",
    "RetryingTransport",
    "build_generation_payload",
    "default_registry",
]
