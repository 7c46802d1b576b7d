"""Pydantic models and helpers for the LangGraph-based analysis state machine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict

from pydantic import BaseModel, Field

from ...errors import AnalysisError, ErrorKind, MissingInput
from ...generation.contracts import Report, report_adapter
from ...generation.prompts import AnalysisMode
from ...ingestion.models import Document


class PipelineStage(str, Enum):
    """Stages of a single analysis run."""

    IDLE = "IDLE"
    EXTRACTING = "EXTRACTING"
    REQUESTING = "REQUESTING"
    VALIDATING = "VALIDATING"
    DONE = "DONE"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineStage.DONE, PipelineStage.FAILED)


REQUIREMENTS_ROLE = "requirements"
RESPONSE_ROLE = "response"


@dataclass(frozen=True)
class AnalysisRequest:
    """Documents to analyze and the mode selecting the report kind."""

    mode: AnalysisMode
    requirements: Optional[Document] = None
    response: Optional[Document] = None
    user_id: Optional[str] = None

    def required_documents(self) -> Dict[str, Document]:
        """Return the documents the mode needs, keyed by role, or raise MissingInput."""

        if self.mode is AnalysisMode.FULL_AUDIT:
            if self.requirements is None or self.response is None:
                raise MissingInput("Please upload both RFP and Bid documents.")
            return {REQUIREMENTS_ROLE: self.requirements, RESPONSE_ROLE: self.response}

        if self.requirements is None:
            raise MissingInput("Please upload the RFP document to extract.")
        return {REQUIREMENTS_ROLE: self.requirements}


class StageError(BaseModel):
    """Failure recorded on the state when a run ends in FAILED."""

    kind: ErrorKind
    detail: str

    def to_exception(self) -> AnalysisError:
        return AnalysisError.from_payload({"kind": self.kind.value, "detail": self.detail})


class AnalysisState(BaseModel):
    """State shared across LangGraph nodes."""

    mode: AnalysisMode
    stage: PipelineStage = PipelineStage.IDLE
    history: List[PipelineStage] = Field(default_factory=lambda: [PipelineStage.IDLE])
    extracted: Dict[str, str] = Field(default_factory=dict)
    response_body: Optional[bytes] = None
    attempts: int = 0
    report: Optional[Report] = None
    error: Optional[StageError] = None

    def advance(self, stage: PipelineStage) -> None:
        """Move to ``stage``; terminal stages are final and no stage is entered twice."""

        if self.stage.is_terminal:
            raise RuntimeError(f"Run already settled in {self.stage.value}")
        if stage in self.history:
            raise RuntimeError(f"Stage {stage.value} already visited")
        self.stage = stage
        self.history.append(stage)

    def fail(self, error: AnalysisError) -> None:
        self.error = StageError(kind=error.kind, detail=error.detail)
        self.advance(PipelineStage.FAILED)

    def to_graph_state(self) -> "AnalysisGraphState":
        """Return a LangGraph compatible dictionary."""

        return {
            "mode": self.mode.value,
            "stage": self.stage.value,
            "history": [stage.value for stage in self.history],
            "extracted": dict(self.extracted),
            "response_body": self.response_body,
            "attempts": self.attempts,
            "report": self.report.model_dump() if self.report is not None else None,
            "error": self.error.model_dump() if self.error is not None else None,
        }

    @classmethod
    def from_graph_state(cls, state: "AnalysisGraphState") -> "AnalysisState":
        """Instantiate from a LangGraph state payload."""

        report_payload = state.get("report")
        error_payload = state.get("error")
        return cls(
            mode=AnalysisMode(state["mode"]),
            stage=PipelineStage(state.get("stage", PipelineStage.IDLE.value)),
            history=[PipelineStage(value) for value in state.get("history", [])],
            extracted=dict(state.get("extracted", {})),
            response_body=state.get("response_body"),
            attempts=int(state.get("attempts", 0)),
            report=report_adapter.validate_python(report_payload) if report_payload else None,
            error=StageError(**error_payload) if error_payload else None,
        )


class AnalysisGraphState(TypedDict, total=False):
    """TypedDict representation consumed by LangGraph."""

    mode: str
    stage: str
    history: List[str]
    extracted: Dict[str, str]
    response_body: Optional[bytes]
    attempts: int
    report: Optional[Dict[str, Any]]
    error: Optional[Dict[str, Any]]
