"""Temporal workflow that analyzes a requirements/response document pair."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from temporalio import workflow
from temporalio.common import RetryPolicy

ANALYZE_DOCUMENTS_ACTIVITY = "analyze_documents_activity"


@dataclass
class AnalysisWorkflowInput:
    """Input payload for the analysis workflow."""

    mode: str
    requirements_path: Optional[str] = None
    response_path: Optional[str] = None
    user_id: Optional[str] = None
    endpoint_url: Optional[str] = None
    max_retries: Optional[int] = None
    backoff_unit_seconds: Optional[float] = None
    request_timeout_seconds: Optional[float] = None

    def config_overrides(self) -> Dict[str, Any]:
        overrides = {
            "endpoint_url": self.endpoint_url,
            "max_retries": self.max_retries,
            "backoff_unit_seconds": self.backoff_unit_seconds,
            "request_timeout_seconds": self.request_timeout_seconds,
        }
        return {key: value for key, value in overrides.items() if value is not None}

    def to_activity_args(self) -> tuple[Any, ...]:
        return (
            self.mode,
            self.requirements_path,
            self.response_path,
            self.config_overrides(),
            self.user_id,
        )


@workflow.defn
class AnalysisWorkflow:
    """Workflow that runs the analysis activity once.

    The activity retries the generation call internally, so the activity
    itself is never retried by Temporal.
    """

    @workflow.run
    async def run(self, payload: AnalysisWorkflowInput) -> Dict[str, Any]:
        return await workflow.execute_activity(
            ANALYZE_DOCUMENTS_ACTIVITY,
            args=payload.to_activity_args(),
            schedule_to_close_timeout=workflow.timedelta(minutes=15),
            retry_policy=RetryPolicy(maximum_attempts=1),
        )


__all__ = ["AnalysisWorkflow", "AnalysisWorkflowInput"]
