"""Application configuration dataclasses."""

from __future__ import annotations

import os
from typing import Any, Dict

from dotenv import load_dotenv
from pydantic.dataclasses import dataclass

load_dotenv()

DEFAULT_ENDPOINT_URL = os.environ.get("SMARTBIDS_ENDPOINT_URL", "http://127.0.0.1:8080/api/analyze")
DEFAULT_MAX_RETRIES = int(os.environ.get("SMARTBIDS_MAX_RETRIES", "3"))
DEFAULT_BACKOFF_UNIT_SECONDS = float(os.environ.get("SMARTBIDS_BACKOFF_UNIT_SECONDS", "1.0"))
DEFAULT_REQUEST_TIMEOUT_SECONDS = float(os.environ.get("SMARTBIDS_REQUEST_TIMEOUT_SECONDS", "120.0"))
DEFAULT_MAX_FREE_USES = int(os.environ.get("SMARTBIDS_MAX_FREE_USES", "1000000"))
DEFAULT_TEMPORAL_ADDRESS = os.environ.get("SMARTBIDS_TEMPORAL_ADDRESS", "127.0.0.1:7233")
DEFAULT_TEMPORAL_NAMESPACE = os.environ.get("SMARTBIDS_TEMPORAL_NAMESPACE", "default")
DEFAULT_TEMPORAL_TASK_QUEUE = os.environ.get("SMARTBIDS_TEMPORAL_TASK_QUEUE", "smartbids")


@dataclass
class AnalysisConfig:
    """Typed configuration handed to the analysis pipeline at construction."""

    endpoint_url: str = DEFAULT_ENDPOINT_URL
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_unit_seconds: float = DEFAULT_BACKOFF_UNIT_SECONDS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    max_free_uses: int = DEFAULT_MAX_FREE_USES
    temporal_address: str = DEFAULT_TEMPORAL_ADDRESS
    temporal_namespace: str = DEFAULT_TEMPORAL_NAMESPACE
    temporal_task_queue: str = DEFAULT_TEMPORAL_TASK_QUEUE

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if self.backoff_unit_seconds < 0:
            raise ValueError("backoff_unit_seconds must not be negative")

    def to_activity_payload(self) -> Dict[str, Any]:
        """Return the subset of settings the analysis activity consumes."""

        return {
            "endpoint_url": self.endpoint_url,
            "max_retries": self.max_retries,
            "backoff_unit_seconds": self.backoff_unit_seconds,
            "request_timeout_seconds": self.request_timeout_seconds,
        }

    def copy(self, **updates: Any) -> "AnalysisConfig":
        """Return a shallow copy with optional overrides."""

        values = {name: getattr(self, name) for name in self.__dataclass_fields__}
        values.update(updates)
        return AnalysisConfig(**values)
