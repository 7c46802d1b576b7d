"""Interfaces the host application implements around the analysis core."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Protocol

from .generation.contracts import Report

if TYPE_CHECKING:
    from .agents.analysis.state import AnalysisRequest

logger = logging.getLogger(__name__)


class Role(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class UsageCounterStore(Protocol):
    """Per-user count of successful analyses."""

    async def get_usage(self, user_id: str) -> int:
        ...

    async def increment_usage(self, user_id: str) -> int:
        ...


class ReportHistoryStore(Protocol):
    """Append-only report history; bookkeeping fields are the store's concern."""

    async def append_report(self, user_id: str, report: Report, source_name: Optional[str]) -> str:
        ...


def usage_limit_reached(usage_count: int, role: Role, max_free_uses: int) -> bool:
    """Return True when a non-admin user has used up their free analyses."""

    if Role(role) is Role.ADMIN:
        return False
    return usage_count >= max_free_uses


def build_success_hook(
    usage_store: UsageCounterStore,
    history_store: Optional[ReportHistoryStore] = None,
) -> Callable[[Report, "AnalysisRequest"], Awaitable[None]]:
    """Return a pipeline ``on_success`` hook backed by the host's stores.

    The usage counter is incremented once per call. When a history store is
    given the report is appended under the requirements document's name.
    """

    async def _on_success(report: Report, request: "AnalysisRequest") -> None:
        if request.user_id is None:
            logger.debug("Anonymous run; usage counter left unchanged")
            return

        count = await usage_store.increment_usage(request.user_id)
        logger.debug("Usage for %s is now %d", request.user_id, count)

        if history_store is not None:
            source_name = request.requirements.name if request.requirements is not None else None
            await history_store.append_report(request.user_id, report, source_name)

    return _on_success


__all__ = [
    "ReportHistoryStore",
    "Role",
    "UsageCounterStore",
    "build_success_hook",
    "usage_limit_reached",
]
