"""Workflow package exposing public Temporal workflows."""

from .analysis_workflow import AnalysisWorkflow, AnalysisWorkflowInput

__all__ = ["AnalysisWorkflow", "AnalysisWorkflowInput"]
