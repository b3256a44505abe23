"""
LMA Compliance Mapper — the four Green Loan Principles against keyword evidence.

Each principle has a broad-evidence and a detailed-evidence regex:
  detailed match         → pass
  broad match only       → partial
  neither                → fail
Recomputed from scratch for every document.
"""

import re
from typing import NamedTuple, Optional, Pattern

from schemas import (
    ComplianceStatus,
    LMACategory,
    LMAComplianceMapping,
    LMAComplianceSummary,
    LMAStatus,
)
from tools.numbers import round_half_up


def _any(*patterns: str) -> Pattern[str]:
    return re.compile("|".join(f"(?:{p})" for p in patterns), re.IGNORECASE)


class Principle(NamedTuple):
    id: str
    name: str
    category: LMACategory
    broad: Pattern[str]
    detailed: Pattern[str]
    evidence: str
    partial_note: str
    fail_note: str


_REPORTING_FREQUENCY = _any(r"(?:annual|quarterly|semi[\s-]?annual)\s+report")
_REPORTING_AUDIT = _any(r"audit", r"verification")

PRINCIPLES: list[Principle] = [
    Principle(
        id="1",
        name="Use of Proceeds",
        category="use-of-proceeds",
        broad=_any(r"use\s+of\s+proceeds", r"proceeds\s+allocation"),
        detailed=_any(r"allocation\s+breakdown", r"\d+(?:\.\d+)?\s*%\s+(?:for|to|towards)\b"),
        evidence="Proceeds allocation mentioned",
        partial_note="Missing detailed allocation breakdown",
        fail_note="No proceeds allocation documented",
    ),
    Principle(
        id="2",
        name="Project Evaluation",
        category="evaluation",
        broad=_any(r"esg\s+evaluation", r"project\s+evaluation", r"sustainability\s+assessment"),
        detailed=_any(r"evaluation\s+criteria", r"eligibility\s+assessment"),
        evidence="ESG evaluation mentioned",
        partial_note="Evaluation criteria not fully detailed",
        fail_note="No ESG evaluation documented",
    ),
    Principle(
        id="3",
        name="Management of Proceeds",
        category="management",
        broad=_any(r"proceeds\s+management", r"tracking\s+of\s+proceeds", r"segregated\s+account"),
        detailed=_any(r"segregated\s+account", r"dedicated\s+account"),
        evidence="Proceeds management mentioned",
        partial_note="No segregated account specified",
        fail_note="No proceeds management documented",
    ),
    Principle(
        id="4",
        name="Reporting",
        category="reporting",
        broad=_any(r"reporting\s+requirements", r"esg\s+reporting"),
        detailed=_REPORTING_FREQUENCY,  # also requires audit/verification, see _is_detailed
        evidence="Reporting requirements mentioned",
        partial_note="Missing frequency or audit requirements",
        fail_note="No reporting requirements documented",
    ),
]


def _is_detailed(principle: Principle, text: str) -> bool:
    if principle.category == "reporting":
        return bool(_REPORTING_FREQUENCY.search(text) and _REPORTING_AUDIT.search(text))
    return bool(principle.detailed.search(text))


def _evaluate(principle: Principle, text: str) -> LMAComplianceMapping:
    broad = bool(principle.broad.search(text))
    detailed = _is_detailed(principle, text)

    status: LMAStatus = "pass" if detailed else "partial" if broad else "fail"
    notes: Optional[str] = None
    if status == "partial":
        notes = principle.partial_note
    elif status == "fail":
        notes = principle.fail_note

    return LMAComplianceMapping(
        id=principle.id,
        principle=principle.name,
        category=principle.category,
        status=status,
        evidence=principle.evidence if broad or detailed else None,
        notes=notes,
    )


def map_lma_compliance(text: str) -> list[LMAComplianceMapping]:
    """Exactly four mappings, one per principle, in principle order."""
    text = text or ""
    return [_evaluate(p, text) for p in PRINCIPLES]


def summarize_compliance(mappings: list[LMAComplianceMapping]) -> LMAComplianceSummary:
    """Score = (pass + ½·partial) / n × 100; all pass → compliant, all fail → non_compliant."""
    passed = sum(1 for m in mappings if m.status == "pass")
    partial = sum(1 for m in mappings if m.status == "partial")
    failed = sum(1 for m in mappings if m.status == "fail")
    total = len(mappings)

    score = round_half_up((passed + 0.5 * partial) / total * 100) if total else 0

    status: ComplianceStatus
    if total and passed == total:
        status = "compliant"
    elif failed == total:
        status = "non_compliant"
    else:
        status = "needs_review"

    return LMAComplianceSummary(
        score=score, status=status, passed=passed, partial=partial, failed=failed,
    )
