"""Activities that run the analysis pipeline for documents on disk."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from temporalio import activity

from ..agents.analysis import AnalysisRequest, AnalysisState, LangGraphAnalysisPipeline, PipelineStage
from ..config import AnalysisConfig
from ..errors import MissingInput
from ..generation.prompts import AnalysisMode
from ..ingestion.models import Document

logger = logging.getLogger(__name__)


def _build_pipeline(config: AnalysisConfig) -> LangGraphAnalysisPipeline:
    return LangGraphAnalysisPipeline(config)


def _load_document(path_value: Optional[str]) -> Optional[Document]:
    if not path_value:
        return None

    source_path = Path(path_value).expanduser()
    if not source_path.exists():
        raise MissingInput(f"File not found: {source_path}")
    if not source_path.is_file():
        raise MissingInput(f"Not a file: {source_path}")
    return Document.from_path(source_path)


def state_to_payload(state: AnalysisState) -> Dict[str, Any]:
    """Serialize a terminal state for the workflow boundary."""

    done = state.stage is PipelineStage.DONE
    return {
        "status": "ok" if done else "error",
        "mode": state.mode.value,
        "stage": state.stage.value,
        "history": [stage.value for stage in state.history],
        "attempts": state.attempts,
        "report": state.report.model_dump(mode="json", by_alias=True) if state.report is not None else None,
        "error": state.error.model_dump(mode="json") if state.error is not None else None,
        "increment_usage": done,
    }


@activity.defn
async def analyze_documents_activity(
    mode: str,
    requirements_path: Optional[str] = None,
    response_path: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Run one analysis and return its terminal state as a dict."""

    analysis_config = AnalysisConfig().copy(**(config or {}))
    analysis_mode = AnalysisMode(mode)
    try:
        request = AnalysisRequest(
            mode=analysis_mode,
            requirements=_load_document(requirements_path),
            response=_load_document(response_path),
            user_id=user_id,
        )
    except MissingInput as exc:
        logger.warning("Analysis input unavailable: %s", exc.detail)
        state = AnalysisState(mode=analysis_mode)
        state.fail(exc)
        return state_to_payload(state)

    def _on_step(label: str, _state: AnalysisState) -> None:
        activity.heartbeat({"stage": label})

    pipeline = _build_pipeline(analysis_config)
    state = await pipeline.run(request, on_step=_on_step)
    logger.debug("analyze_documents_activity finished in %s", state.stage.value)
    return state_to_payload(state)


__all__ = ["analyze_documents_activity", "state_to_payload"]
