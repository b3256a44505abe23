"""
Greenwashing Risk Scorer — six weighted components → one 0–100 score.

Component                 Weight
  Data Completeness         0.20
  External Verification     0.25
  Methodology Transparency  0.20
  Third-Party Audit         0.15
  Historical Consistency    0.10
  Peer Benchmark            0.10

Every component is clamped to [0, 100] and every division is guarded, so the
result is never NaN. The risk level is read off the rounded overall score:
≤30 low, ≤60 medium, >60 high.
"""

from typing import Union

from schemas import (
    GreenwashingRiskResult,
    HistoricalYear,
    RiskBreakdownItem,
    RiskComponentScores,
    RiskLevel,
    VerificationDatum,
)
from tools.numbers import clamp, round_half_up

# (attribute, breakdown label, weight); weights sum to 1.0
COMPONENTS: list[tuple[str, str, float]] = [
    ("data_completeness", "Data Completeness", 0.20),
    ("external_verification", "External Verification", 0.25),
    ("methodology_transparency", "Methodology Transparency", 0.20),
    ("third_party_audit", "Third-Party Audit", 0.15),
    ("historical_consistency", "Historical Consistency", 0.10),
    ("peer_benchmark_deviation", "Peer Benchmark", 0.10),
]

AUDIT_SCORES = {
    "big4": 100.0,
    "specialist": 80.0,
    "industry": 60.0,
    "internal": 30.0,
    "none": 0.0,
}

NEUTRAL_HISTORY_SCORE = 50.0
NO_PEERS_SCORE = 100.0


def _as_number(value: Union[float, str]) -> float:
    return value if isinstance(value, (int, float)) else 0.0


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------

def score_data_completeness(datum: VerificationDatum) -> float:
    score = datum.provided_metrics / datum.total_metrics * 100 if datum.total_metrics > 0 else 0.0
    if not datum.has_scope3:
        score -= 15
    if not datum.has_baseline:
        score -= 10
    if not datum.has_methodology:
        score -= 10
    return clamp(score)


def score_external_verification(datum: VerificationDatum) -> float:
    claimed = len(datum.claimed_metrics)
    verified = sum(1 for k in datum.verified_metrics if k in datum.claimed_metrics)
    score = verified / claimed * 100 if claimed > 0 else 0.0
    if not datum.has_third_party_audit:
        score -= 20
    if verified == 0:
        score -= 15
    return clamp(score)


def score_methodology_transparency(datum: VerificationDatum) -> float:
    score = 0.0
    if datum.has_baseline:
        score += 25
    if datum.has_methodology:
        # methodology implies documented assumptions and limitations
        score += 25 + 50
    return clamp(score)


def score_third_party_audit(datum: VerificationDatum) -> float:
    return AUDIT_SCORES.get(datum.third_party_audit_type, 0.0)


def _change_score(current: float, previous: float) -> float:
    if previous == 0:
        return 1.0 if current == 0 else 0.0
    change = abs(current - previous) / abs(previous)
    if change < 0.10:
        return 1.0
    if change < 0.25:
        return 0.7
    return 0.0


def score_historical_consistency(history: list[HistoricalYear]) -> float:
    """Compare the two most recent years metric by metric. <2 years → 50."""
    years = sorted({h.year for h in history}, reverse=True)
    if len(years) < 2:
        return NEUTRAL_HISTORY_SCORE

    current = next(h for h in history if h.year == years[0])
    previous = next(h for h in history if h.year == years[1])

    scores = [
        _change_score(value, previous.metrics[key])
        for key, value in current.metrics.items()
        if key in previous.metrics
    ]
    if not scores:
        return NEUTRAL_HISTORY_SCORE
    return clamp(sum(scores) / len(scores) * 100)


def _peer_score(claimed: float, average: float, std_dev: float) -> float:
    if std_dev <= 0:
        return 1.0 if claimed == average else 0.0
    sigmas = abs(claimed - average) / std_dev
    if sigmas <= 1:
        return 1.0
    if sigmas <= 2:
        return 0.7
    if sigmas <= 3:
        return 0.3
    return 0.0


def score_peer_benchmark(datum: VerificationDatum) -> float:
    if not datum.peer_average:
        return NO_PEERS_SCORE

    scores = [
        _peer_score(_as_number(claimed), datum.peer_average[key], datum.peer_std_dev[key])
        for key, claimed in datum.claimed_metrics.items()
        if key in datum.peer_average and key in datum.peer_std_dev
    ]
    if not scores:
        return NO_PEERS_SCORE
    return clamp(sum(scores) / len(scores) * 100)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

def get_greenwashing_risk_level(score: float) -> RiskLevel:
    if score <= 30:
        return "low"
    if score <= 60:
        return "medium"
    return "high"


def calculate_greenwashing_risk(datum: VerificationDatum) -> GreenwashingRiskResult:
    components = RiskComponentScores(
        data_completeness=score_data_completeness(datum),
        external_verification=score_external_verification(datum),
        methodology_transparency=score_methodology_transparency(datum),
        third_party_audit=score_third_party_audit(datum),
        historical_consistency=score_historical_consistency(datum.historical_data),
        peer_benchmark_deviation=score_peer_benchmark(datum),
    )

    breakdown = []
    for attr, label, weight in COMPONENTS:
        score = getattr(components, attr)
        breakdown.append(RiskBreakdownItem(
            component=label, score=score, weight=weight, weighted_score=score * weight,
        ))

    overall = round_half_up(clamp(sum(item.weighted_score for item in breakdown)))

    return GreenwashingRiskResult(
        overall_score=overall,
        risk_level=get_greenwashing_risk_level(overall),
        component_scores=components,
        breakdown=breakdown,
    )
