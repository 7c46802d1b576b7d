from __future__ import annotations

import json

import pytest

from smartbids.errors import MalformedResponse
from smartbids.generation.contracts import ReportKind
from smartbids.generation.prompts import (
    EXTRACTION_INSTRUCTIONS,
    FULL_AUDIT_INSTRUCTIONS,
    AnalysisMode,
    build_generation_payload,
    build_user_query,
    parse_generation_response,
)


def test_modes_select_report_kind() -> None:
    assert AnalysisMode.FULL_AUDIT.report_kind is ReportKind.COMPLIANCE
    assert AnalysisMode.EXTRACTION_ONLY.report_kind is ReportKind.EXTRACTION
    assert AnalysisMode.FULL_AUDIT.requires_response
    assert not AnalysisMode.EXTRACTION_ONLY.requires_response


def test_full_audit_query_wraps_both_documents() -> None:
    query = build_user_query(AnalysisMode.FULL_AUDIT, "RFP body", "Bid body")

    assert query.startswith("<RFP_Document>\nRFP body\n</RFP_Document>")
    assert "<Bid_Proposal>\nBid body\n</Bid_Proposal>" in query
    assert query.endswith("Perform Bid Compliance Analysis.")


def test_full_audit_query_needs_response_text() -> None:
    with pytest.raises(ValueError):
        build_user_query(AnalysisMode.FULL_AUDIT, "RFP body")


def test_extraction_query_ignores_response_text() -> None:
    query = build_user_query(AnalysisMode.EXTRACTION_ONLY, "RFP body", "Bid body")

    assert "Bid body" not in query
    assert query.endswith("Extract the project essence and compliance matrix.")


def test_generation_payload_shape() -> None:
    schema = {"type": "OBJECT", "properties": {}}

    payload = build_generation_payload(AnalysisMode.EXTRACTION_ONLY, "RFP body", None, schema)

    assert payload["systemInstruction"]["parts"][0]["text"] == EXTRACTION_INSTRUCTIONS
    assert payload["generationConfig"] == {
        "responseMimeType": "application/json",
        "responseSchema": schema,
    }
    assert "RFP body" in payload["contents"][0]["parts"][0]["text"]
    json.dumps(payload)


def test_full_audit_payload_uses_audit_instructions() -> None:
    payload = build_generation_payload(AnalysisMode.FULL_AUDIT, "a", "b", {})

    assert payload["systemInstruction"]["parts"][0]["text"] == FULL_AUDIT_INSTRUCTIONS


def test_parse_generation_response_returns_nested_json(make_envelope) -> None:
    assert parse_generation_response(make_envelope({"projectTitle": "X"})) == {"projectTitle": "X"}


def test_parse_generation_response_keeps_non_object_json(make_envelope) -> None:
    assert parse_generation_response(make_envelope("[1, 2]")) == [1, 2]


@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"not json",
        b"[]",
        b"{}",
        b'{"candidates": []}',
        b'{"candidates": [{"content": {"parts": []}}]}',
        b'{"candidates": [{"content": {"parts": [{"text": null}]}}]}',
        b'{"candidates": [{"content": {"parts": [{"text": "   "}]}}]}',
        b'{"candidates": [{"content": {"parts": [{"text": "{truncated"}]}}]}',
    ],
)
def test_parse_generation_response_rejects_malformed_bodies(body) -> None:
    with pytest.raises(MalformedResponse):
        parse_generation_response(body)
