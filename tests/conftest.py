from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

import pytest


@pytest.fixture
def compliance_payload() -> Dict[str, Any]:
    return {
        "projectTitle": "X",
        "scopeSummary": "Build a REST API integration.",
        "executiveSummary": "The bid proposes GraphQL instead of REST.",
        "findings": [
            {
                "requirement": "Shall use REST API.",
                "evidence": "We use GraphQL.",
                "flag": "NON-COMPLIANT",
                "complianceScore": 0,
            },
            {
                "requirement": "Shall document the interface.",
                "evidence": "Schema published.",
                "flag": "PARTIAL",
                "complianceScore": 0.5,
            },
        ],
    }


@pytest.fixture
def extraction_payload() -> Dict[str, Any]:
    return {
        "projectEssence": {
            "title": "X",
            "location": "Unknown",
            "oneLineScope": "Deliver a REST API.",
            "deliverables": ["REST API"],
            "constraints": ["Must use REST"],
            "risks": [],
            "timeline": ["Q3 go-live"],
        },
        "complianceMatrix": [
            {
                "requirement": "Shall use REST API.",
                "category": "TECHNICAL",
                "strictness": "MANDATORY",
                "sourceReference": "Section 1",
            }
        ],
    }


@pytest.fixture
def make_envelope() -> Callable[[Any], bytes]:
    """Wrap a report payload the way the generation endpoint returns it."""

    def _make(report_payload: Any) -> bytes:
        text = report_payload if isinstance(report_payload, str) else json.dumps(report_payload)
        return json.dumps({"candidates": [{"content": {"parts": [{"text": text}]}}]}).encode("utf-8")

    return _make


@pytest.fixture
def sleep_recorder() -> "SleepRecorder":
    return SleepRecorder()


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
