"""Temporal worker entry point for SmartBids."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__all__ = ["build_parser", "main"]

if TYPE_CHECKING:
    from .worker import build_parser, main


def __getattr__(name: str) -> Any:
    # Deferred so importing the package does not pull in the Temporal client.
    if name in __all__:
        from . import worker

        return getattr(worker, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
