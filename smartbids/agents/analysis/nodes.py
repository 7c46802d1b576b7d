"""LangGraph node implementations for the analysis workflow."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from ...errors import AnalysisError, Cancelled, TransportExhausted
from ...generation.contracts import ReportSchemaRegistry
from ...generation.prompts import build_generation_payload, parse_generation_response
from ...generation.transport import RetryingTransport
from ...ingestion.extractor import TextExtractor
from .state import (
    REQUIREMENTS_ROLE,
    RESPONSE_ROLE,
    AnalysisGraphState,
    AnalysisRequest,
    AnalysisState,
    PipelineStage,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
StepCallback = Callable[[str, AnalysisState], None]


@dataclass
class NodeDependencies:
    """Collaborators shared across nodes for one run."""

    request: AnalysisRequest
    extractor: TextExtractor
    transport: RetryingTransport
    registry: ReportSchemaRegistry
    endpoint_url: str
    cancel_event: Optional[asyncio.Event] = None
    on_step: Optional[StepCallback] = None


def _notify_step(deps: NodeDependencies, agent_state: AnalysisState) -> None:
    if deps.on_step is not None:
        deps.on_step(agent_state.stage.value, agent_state)


def _transition(deps: NodeDependencies, agent_state: AnalysisState, stage: PipelineStage) -> None:
    agent_state.advance(stage)
    logger.debug("Analysis entered %s", stage.value)
    _notify_step(deps, agent_state)


def _fail(deps: NodeDependencies, agent_state: AnalysisState, error: AnalysisError) -> None:
    logger.debug("Analysis failed during %s: %s", agent_state.stage.value, error.detail)
    agent_state.fail(error)
    _notify_step(deps, agent_state)


def _raise_if_cancelled(deps: NodeDependencies) -> None:
    if deps.cancel_event is not None and deps.cancel_event.is_set():
        raise Cancelled("Analysis cancelled by caller.")


async def _await_or_cancel(awaitable: Awaitable[T], cancel_event: Optional[asyncio.Event]) -> T:
    """Await ``awaitable`` unless the cancel event fires first, in which case abandon it."""

    if cancel_event is None:
        return await awaitable

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        raise
    finally:
        waiter.cancel()

    if work in done:
        return work.result()

    work.cancel()
    with suppress(asyncio.CancelledError):
        await work
    raise Cancelled("Analysis cancelled by caller.")


def build_extractor(deps: NodeDependencies) -> Callable[[AnalysisGraphState], Awaitable[AnalysisGraphState]]:
    async def _node(state: AnalysisGraphState) -> AnalysisGraphState:
        agent_state = AnalysisState.from_graph_state(state)
        try:
            _raise_if_cancelled(deps)
            documents = deps.request.required_documents()
            _transition(deps, agent_state, PipelineStage.EXTRACTING)

            results = await _await_or_cancel(
                asyncio.gather(
                    *(deps.extractor.extract(document) for document in documents.values()),
                    return_exceptions=True,
                ),
                deps.cancel_event,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result

            agent_state.extracted = {
                role: extracted.text for role, extracted in zip(documents, results)
            }
        except AnalysisError as exc:
            _fail(deps, agent_state, exc)
        return agent_state.to_graph_state()

    return _node


def build_requester(deps: NodeDependencies) -> Callable[[AnalysisGraphState], Awaitable[AnalysisGraphState]]:
    async def _node(state: AnalysisGraphState) -> AnalysisGraphState:
        agent_state = AnalysisState.from_graph_state(state)
        try:
            _raise_if_cancelled(deps)
            _transition(deps, agent_state, PipelineStage.REQUESTING)

            contract = deps.registry.contract(agent_state.mode.report_kind)
            payload = build_generation_payload(
                agent_state.mode,
                agent_state.extracted[REQUIREMENTS_ROLE],
                agent_state.extracted.get(RESPONSE_ROLE),
                contract.response_schema,
            )
            raw_response = await _await_or_cancel(
                deps.transport.send(deps.endpoint_url, payload),
                deps.cancel_event,
            )
            agent_state.response_body = raw_response.body
            agent_state.attempts = raw_response.attempts
        except TransportExhausted as exc:
            agent_state.attempts = exc.attempts
            _fail(deps, agent_state, exc)
        except AnalysisError as exc:
            _fail(deps, agent_state, exc)
        return agent_state.to_graph_state()

    return _node


def build_validator(deps: NodeDependencies) -> Callable[[AnalysisGraphState], Awaitable[AnalysisGraphState]]:
    async def _node(state: AnalysisGraphState) -> AnalysisGraphState:
        agent_state = AnalysisState.from_graph_state(state)
        try:
            _raise_if_cancelled(deps)
            _transition(deps, agent_state, PipelineStage.VALIDATING)

            raw_payload: Any = parse_generation_response(agent_state.response_body or b"")
            agent_state.report = deps.registry.validate(agent_state.mode.report_kind, raw_payload)
            _transition(deps, agent_state, PipelineStage.DONE)
        except AnalysisError as exc:
            _fail(deps, agent_state, exc)
        return agent_state.to_graph_state()

    return _node


def route_after(next_node: str) -> Callable[[AnalysisGraphState], str]:
    """Return a router that stops the graph once the run has failed."""

    def _route(state: AnalysisGraphState) -> str:
        if state.get("stage") == PipelineStage.FAILED.value:
            return "failed"
        return next_node

    return _route
