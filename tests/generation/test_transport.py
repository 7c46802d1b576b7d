from __future__ import annotations

import json
from typing import Any, Dict, List

import httpx
import pytest

from smartbids.errors import TransportExhausted
from smartbids.generation.transport import RetryingTransport

ENDPOINT = "http://generation.test/api/analyze"


class ScriptedHandler:
    """MockTransport handler replaying a fixed list of outcomes."""

    def __init__(self, outcomes: List[Any]) -> None:
        self.outcomes = outcomes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes[min(len(self.requests), len(self.outcomes)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome.status_code, content=outcome.content)


def make_transport(handler: ScriptedHandler, sleep_recorder, **kwargs: Any) -> RetryingTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RetryingTransport(client, sleep=sleep_recorder, **kwargs)


@pytest.mark.asyncio
async def test_always_failing_transport_exhausts_attempts(sleep_recorder) -> None:
    handler = ScriptedHandler([httpx.Response(500)])
    transport = make_transport(handler, sleep_recorder, max_retries=3)

    with pytest.raises(TransportExhausted) as excinfo:
        await transport.send(ENDPOINT, {"contents": []})

    assert len(handler.requests) == 3
    assert sleep_recorder.calls == [1, 2]
    assert excinfo.value.attempts == 3
    assert "500" in excinfo.value.detail


@pytest.mark.asyncio
async def test_backoff_doubles_for_each_retry(sleep_recorder) -> None:
    handler = ScriptedHandler([httpx.Response(503)])
    transport = make_transport(handler, sleep_recorder, max_retries=4)

    with pytest.raises(TransportExhausted):
        await transport.send(ENDPOINT, {})

    assert len(handler.requests) == 4
    assert sleep_recorder.calls == [1, 2, 4]
    assert sum(sleep_recorder.calls) == sum(2**i for i in range(4 - 1))


@pytest.mark.asyncio
async def test_backoff_unit_scales_waits(sleep_recorder) -> None:
    handler = ScriptedHandler([httpx.Response(502)])
    transport = make_transport(handler, sleep_recorder, max_retries=3, backoff_unit=0.5)

    with pytest.raises(TransportExhausted):
        await transport.send(ENDPOINT, {})

    assert sleep_recorder.calls == [0.5, 1.0]


@pytest.mark.asyncio
async def test_fail_once_then_succeed_makes_two_attempts(sleep_recorder) -> None:
    handler = ScriptedHandler([httpx.Response(500), httpx.Response(200, content=b'{"ok": true}')])
    transport = make_transport(handler, sleep_recorder, max_retries=3)

    response = await transport.send(ENDPOINT, {})

    assert len(handler.requests) == 2
    assert sleep_recorder.calls == [1]
    assert response.status_code == 200
    assert response.body == b'{"ok": true}'
    assert response.attempts == 2


@pytest.mark.asyncio
async def test_network_errors_are_retried(sleep_recorder) -> None:
    request = httpx.Request("POST", ENDPOINT)
    handler = ScriptedHandler(
        [httpx.ConnectError("connection refused", request=request), httpx.Response(200, content=b"{}")]
    )
    transport = make_transport(handler, sleep_recorder)

    response = await transport.send(ENDPOINT, {})

    assert response.attempts == 2
    assert len(handler.requests) == 2


@pytest.mark.asyncio
async def test_exhausted_network_errors_carry_last_detail(sleep_recorder) -> None:
    request = httpx.Request("POST", ENDPOINT)
    handler = ScriptedHandler([httpx.ReadTimeout("timed out", request=request)])
    transport = make_transport(handler, sleep_recorder, max_retries=2)

    with pytest.raises(TransportExhausted) as excinfo:
        await transport.send(ENDPOINT, {})

    assert "ReadTimeout" in excinfo.value.detail
    assert sleep_recorder.calls == [1]


@pytest.mark.asyncio
async def test_first_success_does_not_wait(sleep_recorder) -> None:
    handler = ScriptedHandler([httpx.Response(200, content=b"not even json")])
    transport = make_transport(handler, sleep_recorder)

    response = await transport.send(ENDPOINT, {})

    assert response.attempts == 1
    assert response.body == b"not even json"
    assert sleep_recorder.calls == []


@pytest.mark.asyncio
async def test_payload_is_posted_as_json(sleep_recorder) -> None:
    handler = ScriptedHandler([httpx.Response(200, content=b"{}")])
    transport = make_transport(handler, sleep_recorder)
    payload: Dict[str, Any] = {"contents": [{"parts": [{"text": "hello"}]}]}

    await transport.send(ENDPOINT, payload)

    sent = handler.requests[0]
    assert sent.method == "POST"
    assert str(sent.url) == ENDPOINT
    assert json.loads(sent.content) == payload


def test_max_retries_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RetryingTransport(max_retries=0)
