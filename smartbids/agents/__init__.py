"""Agent implementations used by the analysis activities."""

from __future__ import annotations

from .analysis import AnalysisRequest, LangGraphAnalysisPipeline

__all__ = ["AnalysisRequest", "LangGraphAnalysisPipeline"]
