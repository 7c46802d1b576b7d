"""Temporal activity package for the SmartBids analysis core."""

from .analysis import analyze_documents_activity

__all__ = ["analyze_documents_activity"]
