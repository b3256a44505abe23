"""
Pydantic v2 models — the JSON contract handed to the surrounding application.

Attributes are snake_case; `model_dump(by_alias=True)` yields the camelCase
contract. Every key is always serialised, even when None or empty, because
callers render "Not found" explicitly. Result models are frozen.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enum-like Literals
# ---------------------------------------------------------------------------

MetricStatus = Literal["found", "partial", "missing"]
Confidence = Literal["high", "medium", "low"]
SectionName = Literal[
    "Emissions", "Energy", "Water", "Waste", "Governance",
    "Diversity", "Safety", "Community", "Certifications",
]
AuditType = Literal["big4", "specialist", "industry", "internal", "none"]
ComparisonStatus = Literal["match", "minor", "major", "critical"]
LMACategory = Literal["use-of-proceeds", "evaluation", "management", "reporting"]
LMAStatus = Literal["pass", "partial", "fail"]
ComplianceStatus = Literal["compliant", "needs_review", "non_compliant"]
RiskLevel = Literal["low", "medium", "high"]
ESGCategory = Literal["environmental", "social", "governance"]
AlertSeverity = Literal["critical", "high", "medium", "low"]
AgentName = Literal["extractor", "metadata", "claims", "auditor", "verifier", "scorer"]


class ContractModel(BaseModel):
    """Base for every public model: camelCase aliases, immutable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ---------------------------------------------------------------------------
# 1. Input
# ---------------------------------------------------------------------------

class DocumentInput(ContractModel):
    text: str = ""
    file_name: Optional[str] = None


# ---------------------------------------------------------------------------
# 2. Section chunks
# ---------------------------------------------------------------------------

class ESGChunk(ContractModel):
    section: SectionName
    content: str
    confidence: int  # 50–90


# ---------------------------------------------------------------------------
# 3. Extracted metrics (tagged variants; a missing metric is None)
# ---------------------------------------------------------------------------

class FoundMetric(ContractModel):
    status: Literal["found"] = "found"
    value: float
    unit: Optional[str] = None
    confidence: Literal["high"] = "high"
    source: Optional[str] = None  # ≤100-char snippet
    baseline_year: Optional[int] = None


class PartialMetric(ContractModel):
    status: Literal["partial"] = "partial"
    value: Literal["Present"] = "Present"
    unit: Optional[str] = None
    confidence: Literal["medium"] = "medium"
    source: Optional[str] = "Section mentioned in document"
    baseline_year: Optional[int] = None


ExtractedMetric = Annotated[Union[FoundMetric, PartialMetric], Field(discriminator="status")]


def metric_status(metric: Optional[ExtractedMetric]) -> MetricStatus:
    """Resolve the tri-state status of a metric slot."""
    if metric is None:
        return "missing"
    return metric.status


def numeric_value(metric: Optional[ExtractedMetric]) -> Optional[float]:
    """Return the numeric value of a found metric, None otherwise."""
    if isinstance(metric, FoundMetric):
        return metric.value
    return None


class CarbonEmissions(ContractModel):
    scope1: Optional[ExtractedMetric] = None
    scope2: Optional[ExtractedMetric] = None
    scope3: Optional[ExtractedMetric] = None
    unit: str = "tCO2e"
    baseline_year: Optional[int] = None


class RenewableEnergy(ContractModel):
    percentage: Optional[ExtractedMetric] = None
    total_mwh: Optional[ExtractedMetric] = Field(default=None, alias="totalMWh")


class WaterUsage(ContractModel):
    total_liters: Optional[ExtractedMetric] = None
    recycled_percentage: Optional[ExtractedMetric] = None


class WasteRecycling(ContractModel):
    rate: Optional[ExtractedMetric] = None


class Diversity(ContractModel):
    women_in_leadership: Optional[ExtractedMetric] = None
    board_diversity: Optional[ExtractedMetric] = None


class Safety(ContractModel):
    incidents: Optional[ExtractedMetric] = None
    lost_time_rate: Optional[ExtractedMetric] = None


class Community(ContractModel):
    investment: Optional[ExtractedMetric] = None
    volunteer_hours: Optional[ExtractedMetric] = None


class ExtractedMetrics(ContractModel):
    carbon_emissions: CarbonEmissions = CarbonEmissions()
    renewable_energy: RenewableEnergy = RenewableEnergy()
    water_usage: WaterUsage = WaterUsage()
    waste_recycling: WasteRecycling = WasteRecycling()
    diversity: Diversity = Diversity()
    safety: Safety = Safety()
    community: Community = Community()

    def slots(self) -> list[Optional[ExtractedMetric]]:
        """All fourteen metric slots, in a fixed order."""
        ce = self.carbon_emissions
        return [
            ce.scope1, ce.scope2, ce.scope3,
            self.renewable_energy.percentage, self.renewable_energy.total_mwh,
            self.water_usage.total_liters, self.water_usage.recycled_percentage,
            self.waste_recycling.rate,
            self.diversity.women_in_leadership, self.diversity.board_diversity,
            self.safety.incidents, self.safety.lost_time_rate,
            self.community.investment, self.community.volunteer_hours,
        ]

    def provided_count(self) -> int:
        return sum(1 for m in self.slots() if m is not None)


# ---------------------------------------------------------------------------
# 4. Claims, metadata, disclosure evidence
# ---------------------------------------------------------------------------

class ClaimedImprovement(ContractModel):
    metric: str
    claimed: str   # e.g. "30%"
    baseline: str  # year token or "Unknown"
    source: Optional[str] = None


class DocumentMetadata(ContractModel):
    company_name: Optional[str] = None
    reporting_year: Optional[int] = None
    geography: Optional[str] = None
    framework_references: list[str] = []
    document_type: Optional[str] = None
    completeness: int = 0  # 0–100


class DisclosureEvidence(ContractModel):
    """Methodology, assurance and certification signals found in the text."""
    methodology_statement: Optional[str] = None
    assurance_type: AuditType = "none"
    assurance_source: Optional[str] = None
    certifications: list[str] = []


class ExtractedDocumentProfile(ContractModel):
    metrics: ExtractedMetrics = ExtractedMetrics()
    claimed_improvements: list[ClaimedImprovement] = []
    metadata: DocumentMetadata = DocumentMetadata()
    evidence: DisclosureEvidence = DisclosureEvidence()


# ---------------------------------------------------------------------------
# 5. Third-party verification
# ---------------------------------------------------------------------------

class CDPCheck(ContractModel):
    verified: bool = False
    confidence: Confidence = "low"
    data: dict[str, float] = {}
    deviation: float = 0.0
    last_updated: Optional[datetime] = None


class GRICheck(ContractModel):
    verified: bool = False
    confidence: Confidence = "low"
    data: dict[str, float] = {}
    missing_data_points: list[str] = []


class CertificationCheck(ContractModel):
    type: str
    valid: bool
    expired: bool
    expiration_date: Optional[datetime] = None
    scope: str = ""


class ThirdPartyVerification(ContractModel):
    cdp: CDPCheck = CDPCheck()
    gri: GRICheck = GRICheck()
    certifications: list[CertificationCheck] = []


class FeedResult(ContractModel):
    """What a verification feed hands back for one document."""
    source: str
    simulated: bool = False
    verified_metrics: dict[str, float] = {}
    third_party: ThirdPartyVerification = ThirdPartyVerification()


class VerificationSource(ContractModel):
    source: str
    confidence: Literal["High", "Medium", "Low"]
    notes: str


class ClaimedVsVerified(ContractModel):
    metric: str
    claimed: Union[float, str]
    verified: Union[float, str]
    deviation: float  # percentage (points for percentage metrics)
    status: ComparisonStatus


# ---------------------------------------------------------------------------
# 6. Verification datum (input of the greenwashing scorer)
# ---------------------------------------------------------------------------

class HistoricalYear(ContractModel):
    year: int
    metrics: dict[str, float] = {}


class CertificationStatus(ContractModel):
    type: str
    expired: bool
    valid: bool


class VerificationDatum(ContractModel):
    claimed_metrics: dict[str, Union[float, str]] = {}
    verified_metrics: dict[str, Union[float, str]] = {}
    total_metrics: int = 47
    provided_metrics: int = 0
    has_scope3: bool = False
    has_baseline: bool = False
    has_methodology: bool = False
    third_party_audit_type: AuditType = "none"
    has_third_party_audit: bool = False
    certifications: list[CertificationStatus] = []
    historical_data: list[HistoricalYear] = []
    peer_average: dict[str, float] = {}
    peer_std_dev: dict[str, float] = {}


# ---------------------------------------------------------------------------
# 7. LMA Green Loan Principles
# ---------------------------------------------------------------------------

class LMAComplianceMapping(ContractModel):
    id: str
    principle: str
    category: LMACategory
    status: LMAStatus
    evidence: Optional[str] = None
    notes: Optional[str] = None


class LMAComplianceSummary(ContractModel):
    score: int  # 0–100
    status: ComplianceStatus
    passed: int
    partial: int
    failed: int


# ---------------------------------------------------------------------------
# 8. Greenwashing risk
# ---------------------------------------------------------------------------

class RiskComponentScores(ContractModel):
    data_completeness: float
    external_verification: float
    methodology_transparency: float
    third_party_audit: float
    historical_consistency: float
    peer_benchmark_deviation: float


class RiskBreakdownItem(ContractModel):
    component: str
    score: float
    weight: float
    weighted_score: float


class GreenwashingRiskResult(ContractModel):
    overall_score: int  # 0–100
    risk_level: RiskLevel
    component_scores: RiskComponentScores
    breakdown: list[RiskBreakdownItem]


class RiskAlert(ContractModel):
    id: str
    severity: AlertSeverity
    title: str
    description: str
    recommended_action: str
    notify: list[str] = []
    priority: int  # 1 = most urgent
    timeline: str


# ---------------------------------------------------------------------------
# 9. ESG roll-up (quarterly metric records)
# ---------------------------------------------------------------------------

class ESGMetricRecord(ContractModel):
    id: str
    loan_id: str
    category: ESGCategory
    metric: str
    value: float
    unit: str = ""
    target: Optional[float] = None
    quarter: str  # "Q1".."Q4"
    year: int


class ESGScore(ContractModel):
    overall: int
    environmental: int
    social: int
    governance: int


class DisclosureFlags(ContractModel):
    transparency_score: int
    performance_decline: bool
    cherry_picking: bool
    vague_targets: bool
    risk_level: RiskLevel
    risk_factors: list[str] = []


_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class ESGMetricSnapshot(ContractModel):
    """Month-keyed snapshot shape accepted by the external history store."""
    id: str
    loan_id: str
    loan_name: str
    month: str  # "YYYY-MM"
    reported_reduction: Optional[float] = None
    verified_reduction: Optional[float] = None
    transparency_score: float = Field(ge=0, le=100)
    compliance_score: float = Field(ge=0, le=100)
    risk_score: float = Field(ge=0, le=100)
    verified_by: list[str] = []
    timestamp: Optional[datetime] = None
    data_quality: Literal["verified", "unverified", "flagged"] = "unverified"
    completeness: float = Field(default=0, ge=0, le=100)

    @field_validator("month")
    @classmethod
    def _check_month(cls, v: str) -> str:
        if not _MONTH_RE.match(v):
            raise ValueError(f"month must be YYYY-MM, got {v!r}")
        return v


class MonthlyAggregatedMetrics(ContractModel):
    month: str
    reported_reduction: Optional[float] = None
    verified_reduction: Optional[float] = None
    transparency_score: int
    compliance_score: int
    risk_score: int
    data_points: int


# ---------------------------------------------------------------------------
# 10. Settlement / covenant risk
# ---------------------------------------------------------------------------

class RiskFactors(ContractModel):
    document_completeness: float = Field(ge=0, le=100)
    amendment_complexity: float = Field(ge=0, le=100)
    cross_border_factors: float = Field(ge=0, le=100)
    party_history: float = Field(ge=0, le=100)
    covenant_status: float = Field(ge=0, le=100)
    market_volatility: float = Field(ge=0, le=100)


class SettlementRisk(ContractModel):
    risk_score: float
    risk_level: RiskLevel
    expected_settlement_days: int
    recommendation: str


# ---------------------------------------------------------------------------
# 11. Pipeline trace + top-level report
# ---------------------------------------------------------------------------

class AgentTiming(ContractModel):
    agent: AgentName
    duration_ms: int
    status: Literal["completed", "failed", "skipped"] = "completed"


class LogEntry(ContractModel):
    agent: AgentName
    msg: str
    ts: int  # epoch milliseconds


class PipelineTrace(ContractModel):
    total_duration_ms: int
    agents: list[AgentTiming]


class VerificationReport(ContractModel):
    """Unified result of one document run."""
    document_id: str
    file_name: Optional[str] = None
    generated_at: str  # ISO 8601
    schema_version: str = "1.0"
    sections: list[ESGChunk]
    profile: ExtractedDocumentProfile
    claimed_vs_verified: list[ClaimedVsVerified]
    verification_sources: list[VerificationSource]
    verification_simulated: bool
    verification_data: VerificationDatum
    lma_compliance: list[LMAComplianceMapping]
    compliance_summary: LMAComplianceSummary
    greenwashing_risk: GreenwashingRiskResult
    alerts: list[RiskAlert]
    pipeline: PipelineTrace
    logs: list[LogEntry] = []
