"""Report contracts: the structured shapes the generation endpoint must return."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat, Strict, StrictStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..errors import ReportValidationError

logger = logging.getLogger(__name__)


class ReportKind(str, Enum):
    """Discriminator carried by every validated report."""

    COMPLIANCE = "COMPLIANCE"
    EXTRACTION = "EXTRACTION"


ComplianceFlag = Literal["COMPLIANT", "PARTIAL", "NON-COMPLIANT"]
FitLevel = Literal["EXCELLENT FIT", "GOOD FIT", "AVERAGE", "POOR FIT"]
RequirementCategory = Literal["SCOPE", "TECHNICAL", "COMMERCIAL", "ADMIN", "HSE", "LOGISTICS", "OTHER"]
Strictness = Literal["MANDATORY", "CRITICAL", "HIGH_COST", "HIDDEN_COST"]

COMPLIANCE_FLAGS: List[str] = ["COMPLIANT", "PARTIAL", "NON-COMPLIANT"]
FIT_LEVELS: List[str] = ["EXCELLENT FIT", "GOOD FIT", "AVERAGE", "POOR FIT"]
REQUIREMENT_CATEGORIES: List[str] = ["SCOPE", "TECHNICAL", "COMMERCIAL", "ADMIN", "HSE", "LOGISTICS", "OTHER"]
STRICTNESS_LEVELS: List[str] = ["MANDATORY", "CRITICAL", "HIGH_COST", "HIDDEN_COST"]

Score = Annotated[FiniteFloat, Strict()]


class ContractModel(BaseModel):
    """Base for contract models: camelCase on the wire, unknown fields dropped."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Finding(ContractModel):
    """One requirement-versus-response comparison."""

    flag: ComplianceFlag
    compliance_score: Score
    requirement: Optional[StrictStr] = None
    evidence: Optional[StrictStr] = None
    category: Optional[StrictStr] = None
    action: Optional[StrictStr] = None


class ClarificationQuestion(ContractModel):
    topic: StrictStr
    question: StrictStr


class ComplianceReport(ContractModel):
    """Full audit of a response document against a requirements document."""

    kind: Literal[ReportKind.COMPLIANCE] = ReportKind.COMPLIANCE
    project_title: StrictStr
    scope_summary: StrictStr
    executive_summary: StrictStr
    findings: List[Finding]
    bidder_name: Optional[StrictStr] = None
    bidder_location: Optional[StrictStr] = None
    price_indication: Optional[StrictStr] = None
    suitability_score: Optional[Score] = None
    fit_level: Optional[FitLevel] = None
    gaps: List[StrictStr] = Field(default_factory=list)
    clarification_questions: List[ClarificationQuestion] = Field(default_factory=list)


class ProjectEssence(ContractModel):
    title: StrictStr
    location: StrictStr
    one_line_scope: StrictStr
    deliverables: List[StrictStr]
    constraints: List[StrictStr]
    risks: List[StrictStr]
    timeline: List[StrictStr]


class ComplianceMatrixEntry(ContractModel):
    """One requirement extracted from the requirements document."""

    category: RequirementCategory
    strictness: Strictness
    requirement: Optional[StrictStr] = None
    source_reference: Optional[StrictStr] = None
    notes: Optional[StrictStr] = None


class ExtractionReport(ContractModel):
    """Requirements-only extraction: project essence plus compliance matrix."""

    kind: Literal[ReportKind.EXTRACTION] = ReportKind.EXTRACTION
    project_essence: ProjectEssence
    compliance_matrix: List[ComplianceMatrixEntry]


Report = Annotated[Union[ComplianceReport, ExtractionReport], Field(discriminator="kind")]

report_adapter: TypeAdapter[Report] = TypeAdapter(Report)


def _string(description: str) -> Dict[str, Any]:
    return {"type": "STRING", "description": description}


def _string_list(description: str) -> Dict[str, Any]:
    return {"type": "ARRAY", "items": {"type": "STRING"}, "description": description}


COMPLIANCE_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "description": "Analysis report comparing a proposal (bid) against an RFP/RFQ.",
    "properties": {
        "projectTitle": _string("The title or main subject of the RFP/RFQ."),
        "scopeSummary": _string("One-paragraph summary of the scope requested by the RFP."),
        "executiveSummary": _string(
            "3-sentence summary of the proposal's strengths and weaknesses for the evaluator."
        ),
        "bidderName": _string("The name of the bidder company or individual."),
        "bidderLocation": _string("Detected location of the bidder if present, else 'Unknown'."),
        "priceIndication": _string(
            "Total proposed price or budget indication if found, else 'Not Specified'."
        ),
        "suitabilityScore": {
            "type": "NUMBER",
            "description": "0-100 score. 100 = perfect compliance, 0 = non-compliant.",
        },
        "fitLevel": {
            "type": "STRING",
            "enum": FIT_LEVELS,
            "description": "Overall assessment of proposal compliance.",
        },
        "gaps": _string_list("Missing mandatory requirements, deviations, or non-compliance issues."),
        "clarificationQuestions": {
            "type": "ARRAY",
            "description": "3-5 questions for the bidder to clarify ambiguities or weak points.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "topic": _string("The area of concern, e.g. 'Pricing Structure'."),
                    "question": _string("A suggested clarification question."),
                },
                "required": ["topic", "question"],
            },
        },
        "findings": {
            "type": "ARRAY",
            "description": "Line-by-line comparison against the RFP requirements.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "requirement": _string("Specific requirement extracted from the RFP/RFQ."),
                    "evidence": _string("Corresponding section or evidence found in the proposal."),
                    "complianceScore": {
                        "type": "NUMBER",
                        "description": "1 = full compliance, 0.5 = partial or alternative offered, 0 = missing.",
                    },
                    "flag": {
                        "type": "STRING",
                        "enum": COMPLIANCE_FLAGS,
                        "description": "Compliance status of the requirement.",
                    },
                    "category": _string("Requirement area, e.g. technical, commercial, schedule."),
                    "action": _string(
                        "Evaluator advice, e.g. 'Acceptable deviation' or 'Critical non-compliance'."
                    ),
                },
                "required": ["requirement", "evidence", "complianceScore", "flag"],
            },
        },
    },
    "required": ["projectTitle", "scopeSummary", "executiveSummary", "findings"],
}

EXTRACTION_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "description": "Structured extraction of the obligations stated in an RFP/RFQ.",
    "properties": {
        "projectEssence": {
            "type": "OBJECT",
            "properties": {
                "title": _string("Project title."),
                "location": _string("Project or delivery location, else 'Unknown'."),
                "oneLineScope": _string("The scope of work in a single sentence."),
                "deliverables": _string_list("Deliverables the bidder must provide."),
                "constraints": _string_list("Hard constraints: standards, budgets, exclusions."),
                "risks": _string_list("Commercial, technical or schedule risks for the bidder."),
                "timeline": _string_list("Key dates and milestones."),
            },
            "required": [
                "title",
                "location",
                "oneLineScope",
                "deliverables",
                "constraints",
                "risks",
                "timeline",
            ],
        },
        "complianceMatrix": {
            "type": "ARRAY",
            "description": "Every requirement found in the document.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "requirement": _string("The requirement, quoted or closely paraphrased."),
                    "category": {"type": "STRING", "enum": REQUIREMENT_CATEGORIES},
                    "strictness": {
                        "type": "STRING",
                        "enum": STRICTNESS_LEVELS,
                        "description": "Severity or cost classification of the requirement.",
                    },
                    "sourceReference": _string("Section, clause or page where the requirement appears."),
                    "notes": _string("Hidden costs, ambiguities or compliance advice."),
                },
                "required": ["requirement", "category", "strictness"],
            },
        },
    },
    "required": ["projectEssence", "complianceMatrix"],
}


@dataclass(frozen=True)
class ReportContract:
    """Pairs a report kind with its validation model and endpoint response schema."""

    kind: ReportKind
    model: Type[ContractModel]
    response_schema: Mapping[str, Any]


class ReportSchemaRegistry:
    """Validates decoded payloads against the contract registered for a report kind."""

    def __init__(self, contracts: Optional[List[ReportContract]] = None) -> None:
        registered = contracts if contracts is not None else DEFAULT_CONTRACTS
        self._contracts: Dict[ReportKind, ReportContract] = {
            contract.kind: contract for contract in registered
        }

    def contract(self, kind: ReportKind) -> ReportContract:
        try:
            return self._contracts[ReportKind(kind)]
        except (KeyError, ValueError) as exc:
            raise KeyError(f"No contract registered for report kind {kind!r}") from exc

    def validate(self, kind: ReportKind, raw_payload: Any) -> Report:
        """Return a validated report stamped with ``kind`` or raise ReportValidationError."""

        contract = self.contract(kind)
        if not isinstance(raw_payload, Mapping):
            raise ReportValidationError(
                f"{contract.kind.value} payload must be a JSON object, got {type(raw_payload).__name__}."
            )

        stamped = {**raw_payload, "kind": contract.kind}
        try:
            report = contract.model.model_validate(stamped)
        except PydanticValidationError as exc:
            detail = _summarize_errors(exc)
            logger.debug("%s payload rejected: %s", contract.kind.value, detail)
            raise ReportValidationError(f"{contract.kind.value} payload rejected: {detail}") from exc
        return report  # type: ignore[return-value]


def _summarize_errors(exc: PydanticValidationError) -> str:
    messages = []
    for error in exc.errors()[:5]:
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        messages.append(f"{location}: {error.get('msg', 'invalid')}")
    remaining = exc.error_count() - len(messages)
    if remaining > 0:
        messages.append(f"... and {remaining} more")
    return "; ".join(messages)


DEFAULT_CONTRACTS: List[ReportContract] = [
    ReportContract(ReportKind.COMPLIANCE, ComplianceReport, COMPLIANCE_RESPONSE_SCHEMA),
    ReportContract(ReportKind.EXTRACTION, ExtractionReport, EXTRACTION_RESPONSE_SCHEMA),
]

default_registry = ReportSchemaRegistry()


__all__ = [
    "ClarificationQuestion",
    "ComplianceMatrixEntry",
    "ComplianceReport",
    "ExtractionReport",
    "Finding",
    "ProjectEssence",
    "Report",
    "ReportContract",
    "ReportKind",
    "ReportSchemaRegistry",
    "default_registry",
    "report_adapter",
]
