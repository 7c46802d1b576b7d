"""LangGraph orchestration for the document analysis pipeline."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from langgraph.graph import END, START, StateGraph

from ...config import AnalysisConfig
from ...generation.contracts import Report, ReportSchemaRegistry, default_registry
from ...generation.transport import RetryingTransport
from ...ingestion.extractor import TextExtractor
from .nodes import (
    NodeDependencies,
    StepCallback,
    build_extractor,
    build_requester,
    build_validator,
    route_after,
)
from .state import AnalysisGraphState, AnalysisRequest, AnalysisState, PipelineStage

logger = logging.getLogger(__name__)

SuccessHook = Callable[[Report, AnalysisRequest], Union[Awaitable[Any], Any]]


class LangGraphAnalysisPipeline:
    """Runs extraction, generation and validation for one request at a time.

    ``on_success`` is the caller's usage-increment hook. It is awaited exactly
    once per run that reaches DONE and never for a failed or cancelled run.
    An exception from the hook is logged and the DONE state is still returned.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        *,
        extractor: Optional[TextExtractor] = None,
        transport: Optional[RetryingTransport] = None,
        registry: Optional[ReportSchemaRegistry] = None,
        on_success: Optional[SuccessHook] = None,
    ) -> None:
        self._config = config or AnalysisConfig()
        self._extractor = extractor or TextExtractor()
        self._transport = transport or RetryingTransport(
            max_retries=self._config.max_retries,
            backoff_unit=self._config.backoff_unit_seconds,
            timeout_seconds=self._config.request_timeout_seconds,
        )
        self._registry = registry or default_registry
        self._on_success = on_success

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    def _build_graph(self, deps: NodeDependencies):
        graph_builder = StateGraph(AnalysisGraphState)
        graph_builder.add_node("extract", build_extractor(deps))
        graph_builder.add_node("request", build_requester(deps))
        graph_builder.add_node("validate", build_validator(deps))
        graph_builder.add_edge(START, "extract")
        graph_builder.add_conditional_edges(
            "extract",
            route_after("request"),
            {"request": "request", "failed": END},
        )
        graph_builder.add_conditional_edges(
            "request",
            route_after("validate"),
            {"validate": "validate", "failed": END},
        )
        graph_builder.add_edge("validate", END)
        return graph_builder.compile()

    async def run(
        self,
        request: AnalysisRequest,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        on_step: Optional[StepCallback] = None,
    ) -> AnalysisState:
        """Execute one request and return its terminal state."""

        deps = NodeDependencies(
            request=request,
            extractor=self._extractor,
            transport=self._transport,
            registry=self._registry,
            endpoint_url=self._config.endpoint_url,
            cancel_event=cancel_event,
            on_step=on_step,
        )
        initial_state = AnalysisState(mode=request.mode)
        graph = self._build_graph(deps)
        result_state = await graph.ainvoke(initial_state.to_graph_state())
        final_state = AnalysisState.from_graph_state(result_state)

        if final_state.stage is PipelineStage.DONE and final_state.report is not None:
            logger.info(
                "Analysis produced a %s report after %d attempt(s)",
                final_state.report.kind.value,
                final_state.attempts,
            )
            await self._notify_success(final_state.report, request)
        elif final_state.error is not None:
            logger.warning(
                "Analysis failed with %s: %s",
                final_state.error.kind.value,
                final_state.error.detail,
            )
        return final_state

    async def analyze(
        self,
        request: AnalysisRequest,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Report:
        """Return the validated report or raise the run's AnalysisError."""

        final_state = await self.run(request, cancel_event=cancel_event)
        if final_state.error is not None:
            raise final_state.error.to_exception()
        if final_state.report is None:  # pragma: no cover - DONE always carries a report
            raise RuntimeError("Analysis settled without a report")
        return final_state.report

    async def _notify_success(self, report: Report, request: AnalysisRequest) -> None:
        if self._on_success is None:
            return
        try:
            outcome = self._on_success(report, request)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.exception("Success hook failed for %s report", report.kind.value)
