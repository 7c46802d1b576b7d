"""Prompt text plus generation endpoint request and response bodies."""

from __future__ import annotations

import json
import textwrap
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ..errors import MalformedResponse
from .contracts import ReportKind


class AnalysisMode(str, Enum):
    """What the caller asked for; each mode produces one report kind."""

    FULL_AUDIT = "FULL_AUDIT"
    EXTRACTION_ONLY = "EXTRACTION_ONLY"

    @property
    def report_kind(self) -> ReportKind:
        if self is AnalysisMode.FULL_AUDIT:
            return ReportKind.COMPLIANCE
        return ReportKind.EXTRACTION

    @property
    def requires_response(self) -> bool:
        return self is AnalysisMode.FULL_AUDIT


FULL_AUDIT_INSTRUCTIONS = textwrap.dedent(
    """\
    You are SmartBids AI, an expert Proposal Evaluator & Compliance Officer.
    Your task is to analyze a Bid Proposal against an RFP/Tender Document.

    Objectives:
    1. EXTRACT Metadata: RFP title/subject (projectTitle), bidder name (bidderName).
    2. SUMMARIZE: the requested scope (scopeSummary) and an executive summary of the proposal.
    3. EXTRACT Specifics: bidder location if present, total proposed price or budget indication.
    4. CALCULATE: an overall 0-100 compliance score based on requirements met.
    5. IDENTIFY DEVIATIONS: list critical non-compliance issues or missing mandatory items (gaps).
    6. FORMULATE STRATEGY: generate 3 clarifying questions for the bidder.
    7. DETAILED MATCHING: create a line-by-line comparison of RFP requirements vs. proposal
       evidence. Flag each as COMPLIANT, PARTIAL or NON-COMPLIANT and score it 1, 0.5 or 0.

    Output MUST be strictly JSON matching the provided schema."""
)

EXTRACTION_INSTRUCTIONS = textwrap.dedent(
    """\
    You are SmartBids AI, an expert Tender Analyst.
    Your task is to read an RFP/Tender Document and extract everything a bidder must comply with.

    Objectives:
    1. PROJECT ESSENCE: title, location, a one-line scope, deliverables, constraints, risks
       and timeline milestones.
    2. COMPLIANCE MATRIX: list every requirement. Classify its category as SCOPE, TECHNICAL,
       COMMERCIAL, ADMIN, HSE, LOGISTICS or OTHER, and its strictness as MANDATORY, CRITICAL,
       HIGH_COST or HIDDEN_COST. Cite where in the document each requirement appears.

    Output MUST be strictly JSON matching the provided schema."""
)


def system_instruction(mode: AnalysisMode) -> str:
    if mode is AnalysisMode.FULL_AUDIT:
        return FULL_AUDIT_INSTRUCTIONS
    return EXTRACTION_INSTRUCTIONS


def build_user_query(mode: AnalysisMode, requirements_text: str, response_text: Optional[str] = None) -> str:
    """Wrap the extracted texts in the tags the instructions refer to."""

    sections = [f"<RFP_Document>\n{requirements_text}\n</RFP_Document>"]
    if mode is AnalysisMode.FULL_AUDIT:
        if response_text is None:
            raise ValueError("A full audit needs the response document text.")
        sections.append(f"<Bid_Proposal>\n{response_text}\n</Bid_Proposal>")
        sections.append("Perform Bid Compliance Analysis.")
    else:
        sections.append("Extract the project essence and compliance matrix.")
    return "\n\n".join(sections)


def build_generation_payload(
    mode: AnalysisMode,
    requirements_text: str,
    response_text: Optional[str],
    response_schema: Mapping[str, Any],
) -> Dict[str, Any]:
    """Return the generation endpoint request body."""

    return {
        "contents": [{"parts": [{"text": build_user_query(mode, requirements_text, response_text)}]}],
        "systemInstruction": {"parts": [{"text": system_instruction(mode)}]},
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": dict(response_schema),
        },
    }


def parse_generation_response(body: bytes) -> Any:
    """Decode the endpoint body and the JSON report text nested inside it.

    Expects ``{"candidates": [{"content": {"parts": [{"text": "<json>"}]}}]}``.
    """

    try:
        envelope = json.loads(body)
    except ValueError as exc:
        raise MalformedResponse(f"Response body is not valid JSON: {exc}") from exc

    try:
        report_text = envelope["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise MalformedResponse("AI response was empty or invalid.") from exc

    if not isinstance(report_text, str) or not report_text.strip():
        raise MalformedResponse("AI response was empty or invalid.")

    try:
        return json.loads(report_text)
    except ValueError as exc:
        raise MalformedResponse(f"Report text is not valid JSON: {exc}") from exc


__all__ = [
    "AnalysisMode",
    "EXTRACTION_INSTRUCTIONS",
    "FULL_AUDIT_INSTRUCTIONS",
    "build_generation_payload",
    "build_user_query",
    "parse_generation_response",
    "system_instruction",
]
