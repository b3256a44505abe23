"""
VerificationState TypedDict — shared memory for all LangGraph nodes.

Each node reads from this dict and writes only to its own output keys.
Input keys (document_id, text, file_name, total_metrics, historical_data,
peer_average, peer_std_dev) are set once by the engine and never modified.

The four text analysers (extractor, metadata, claims, auditor) run as
parallel branches, so `logs` and `pipeline_trace` are merged with an
`operator.add` reducer: every node returns only its own new entries.
"""

from __future__ import annotations

import operator
from typing import Annotated, Optional, TypedDict

from schemas import (
    ClaimedImprovement,
    ClaimedVsVerified,
    DisclosureEvidence,
    DocumentMetadata,
    ESGChunk,
    ExtractedMetrics,
    FeedResult,
    GreenwashingRiskResult,
    HistoricalYear,
    LMAComplianceMapping,
    LMAComplianceSummary,
    RiskAlert,
    VerificationDatum,
    VerificationReport,
    VerificationSource,
)


class VerificationState(TypedDict, total=False):
    # ── INIT: set by engine.run_verification() before graph.invoke() ───────
    document_id: str                      # UUID for this run
    text: str                             # Plain document text
    file_name: Optional[str]
    total_metrics: int                    # Denominator of data completeness
    historical_data: list[HistoricalYear]  # Prior-year metric means, if known
    peer_average: dict[str, float]
    peer_std_dev: dict[str, float]
    started_at: float
    logs: Annotated[list[dict], operator.add]            # { agent, msg, ts }
    pipeline_trace: Annotated[list[dict], operator.add]  # { agent, started_at, ms }

    # ── BRANCH OUTPUTS (parallel) ─────────────────────────────────────────
    sections: list[ESGChunk]                       # extractor
    metrics: ExtractedMetrics                      # extractor
    metadata: DocumentMetadata                     # metadata
    evidence: DisclosureEvidence                   # metadata
    claimed_improvements: list[ClaimedImprovement]  # claims
    lma_compliance: list[LMAComplianceMapping]     # auditor
    compliance_summary: LMAComplianceSummary       # auditor

    # ── VERIFIER OUTPUT ──────────────────────────────────────────────────────
    feed_result: Optional[FeedResult]
    claimed_vs_verified: list[ClaimedVsVerified]
    verification_sources: list[VerificationSource]
    verification_data: VerificationDatum

    # ── SCORER OUTPUT ────────────────────────────────────────────────────────
    greenwashing_risk: GreenwashingRiskResult
    alerts: list[RiskAlert]
    final_report: VerificationReport
