"""
Settlement / covenant risk — six-factor weighted model for loan due diligence.

Unrelated to the greenwashing score. Inputs are pre-bounded to [0, 100] by
the RiskFactors model, so the weighted sum needs no clamping. The band cut
points (30, 70) are shared by the risk level, the settlement-days estimate
and the recommendation text.
"""

import math

from schemas import RiskFactors, RiskLevel, SettlementRisk

FACTOR_WEIGHTS: dict[str, float] = {
    "document_completeness": 0.25,
    "amendment_complexity": 0.20,
    "cross_border_factors": 0.18,
    "party_history": 0.15,
    "covenant_status": 0.12,
    "market_volatility": 0.10,
}

LOW_BELOW = 30
MEDIUM_BELOW = 70


def calculate_risk_score(factors: RiskFactors) -> float:
    return sum(getattr(factors, name) * weight for name, weight in FACTOR_WEIGHTS.items())


def get_risk_level(risk_score: float) -> RiskLevel:
    if risk_score < LOW_BELOW:
        return "low"
    if risk_score < MEDIUM_BELOW:
        return "medium"
    return "high"


def estimate_settlement_days(risk_score: float) -> int:
    """Piecewise linear: 5–10 days below 30, 10–18 below 70, 18–25 above."""
    if risk_score >= MEDIUM_BELOW:
        return math.floor(18 + (risk_score - MEDIUM_BELOW) * 0.23)
    if risk_score >= LOW_BELOW:
        return math.floor(10 + (risk_score - LOW_BELOW) * 0.2)
    return math.floor(5 + risk_score * 0.17)


def settlement_recommendation(risk_score: float, expected_days: int) -> str:
    level = get_risk_level(risk_score)
    if level == "low":
        return "Low risk: Expected settlement in 5-10 days. Standard process sufficient."
    if level == "medium":
        return (
            f"Medium risk: Expected settlement in {expected_days} days. "
            "Additional review recommended for amendments."
        )
    return (
        f"High risk: Expected settlement in {expected_days} days. "
        "Requires extensive review and potential escrow arrangements."
    )


def assess_settlement(factors: RiskFactors) -> SettlementRisk:
    score = calculate_risk_score(factors)
    days = estimate_settlement_days(score)
    return SettlementRisk(
        risk_score=round(score, 2),
        risk_level=get_risk_level(score),
        expected_settlement_days=days,
        recommendation=settlement_recommendation(score, days),
    )
