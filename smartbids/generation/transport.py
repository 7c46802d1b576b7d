"""HTTP transport with bounded exponential-backoff retry."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..errors import TransportExhausted

logger = logging.getLogger(__name__)

SleepCallable = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RawResponse:
    """Undecoded result of a successful exchange."""

    status_code: int
    body: bytes = field(repr=False)
    attempts: int = 1


class RetryingTransport:
    """POSTs a JSON payload, retrying failed attempts with exponential backoff.

    The wait between attempt ``i`` and ``i + 1`` (counting from zero) is
    ``backoff_unit * 2 ** i`` seconds. Neither the request payload nor the
    response body is interpreted here.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        max_retries: int = 3,
        backoff_unit: float = 1.0,
        timeout_seconds: float = 120.0,
        sleep: SleepCallable = asyncio.sleep,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._client = client
        self._max_retries = max_retries
        self._backoff_unit = backoff_unit
        self._timeout_seconds = timeout_seconds
        self._sleep = sleep

    @property
    def max_retries(self) -> int:
        return self._max_retries

    async def send(self, endpoint: str, payload: Dict[str, Any]) -> RawResponse:
        """Deliver the payload, raising TransportExhausted after the final failed attempt."""

        if self._client is not None:
            return await self._send_with_retry(self._client, endpoint, payload)

        async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
            return await self._send_with_retry(client, endpoint, payload)

    async def _send_with_retry(
        self,
        client: httpx.AsyncClient,
        endpoint: str,
        payload: Dict[str, Any],
    ) -> RawResponse:
        attempts = 0
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=self._backoff_unit, exp_base=2, min=0),
            retry=retry_if_exception_type(httpx.HTTPError),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempts += 1
                    response = await client.post(endpoint, json=payload)
                    response.raise_for_status()
        except httpx.HTTPError as exc:
            detail = _describe_failure(exc)
            logger.warning("Transport exhausted after %d attempt(s): %s", attempts, detail)
            raise TransportExhausted(detail, attempts=attempts) from exc

        return RawResponse(
            status_code=response.status_code,
            body=response.content,
            attempts=attempts,
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        error = outcome.exception() if outcome is not None else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "Attempt %d failed (%s); retrying in %.1fs",
            retry_state.attempt_number,
            _describe_failure(error) if error else "unknown error",
            wait,
        )


def _describe_failure(exc: BaseException) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP error! Status: {exc.response.status_code}"
    if isinstance(exc, httpx.RequestError):
        return f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
    return str(exc)


__all__ = ["RawResponse", "RetryingTransport", "SleepCallable"]
