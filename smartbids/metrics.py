"""Derived figures for validated reports: compliance scoring, tallies and ranking."""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .generation.contracts import (
    COMPLIANCE_FLAGS,
    STRICTNESS_LEVELS,
    ComplianceReport,
    ExtractionReport,
    Report,
)

UNTITLED_SOURCE = "Untitled RFP"
HIGH_BAND_THRESHOLD = 80.0
MEDIUM_BAND_THRESHOLD = 50.0
ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class HistoryEntry:
    """A stored report together with the caller's bookkeeping fields."""

    report: Report
    source_name: Optional[str] = None
    timestamp: float = 0.0
    report_id: Optional[str] = None

    @property
    def group_key(self) -> str:
        if self.source_name and self.source_name.strip():
            return self.source_name.strip()
        if isinstance(self.report, ComplianceReport) and self.report.project_title.strip():
            return self.report.project_title.strip()
        if isinstance(self.report, ExtractionReport) and self.report.project_essence.title.strip():
            return self.report.project_essence.title.strip()
        return UNTITLED_SOURCE


def compliance_percentage(report: Report) -> float:
    """Mean finding score as a 0-100 percentage with one decimal place.

    Each finding contributes at most 1 and at least 0, and halves round up, so
    6.25 is reported as 6.3. Extraction reports carry no findings, so asking
    for their percentage is a caller error.
    """

    if not isinstance(report, ComplianceReport):
        raise TypeError("compliance_percentage is only defined for compliance reports")

    if not report.findings:
        return 0.0

    total = sum(min(max(finding.compliance_score, 0.0), 1.0) for finding in report.findings)
    percentage = 100.0 * total / len(report.findings)
    return float(Decimal(repr(percentage)).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


def compliance_band(percentage: float) -> str:
    if percentage > HIGH_BAND_THRESHOLD:
        return "HIGH"
    if percentage > MEDIUM_BAND_THRESHOLD:
        return "MEDIUM"
    return "LOW"


def count_by_flag(report: ComplianceReport) -> Dict[str, int]:
    counts = Counter(finding.flag for finding in report.findings)
    return {flag: counts.get(flag, 0) for flag in COMPLIANCE_FLAGS}


def count_by_strictness(report: ExtractionReport) -> Dict[str, int]:
    counts = Counter(entry.strictness for entry in report.compliance_matrix)
    return {level: counts.get(level, 0) for level in STRICTNESS_LEVELS}


def ranking_score(report: Report) -> float:
    """Score used for ordering; extraction reports are unscored and rank as maximal."""

    if isinstance(report, ComplianceReport):
        return compliance_percentage(report)
    return math.inf


def _rank_key(entry: HistoryEntry) -> Tuple[float, float, str]:
    return (-ranking_score(entry.report), -entry.timestamp, entry.report_id or "")


def group_and_rank(entries: Iterable[HistoryEntry]) -> Dict[str, List[HistoryEntry]]:
    """Group entries by source document and rank each group.

    Groups are ordered by name, case-insensitively. Within a group entries are
    ordered by descending score, then newest first, then by report id.
    """

    groups: Dict[str, List[HistoryEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.group_key, []).append(entry)

    return {
        name: sorted(groups[name], key=_rank_key)
        for name in sorted(groups, key=lambda value: (value.casefold(), value))
    }


__all__ = [
    "HistoryEntry",
    "compliance_band",
    "compliance_percentage",
    "count_by_flag",
    "count_by_strictness",
    "group_and_rank",
    "ranking_score",
]
