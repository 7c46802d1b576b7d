"""LangGraph-backed analysis pipeline."""

from .graph import LangGraphAnalysisPipeline, SuccessHook
from .state import (
    AnalysisGraphState,
    AnalysisRequest,
    AnalysisState,
    PipelineStage,
    StageError,
)

__all__ = [
    "AnalysisGraphState",
    "AnalysisRequest",
    "AnalysisState",
    "LangGraphAnalysisPipeline",
    "PipelineStage",
    "StageError",
    "SuccessHook",
]
