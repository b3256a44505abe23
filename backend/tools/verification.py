"""
Verification Comparator — claimed vs independently verified values.

Claimed values come from the extracted profile; verified values come from
whatever FeedResult the verification feed returned (or nothing at all).
The classification bands are independent of where the verified numbers
came from, so a real adapter can replace the simulation without touching
this module.
"""

from typing import Optional

from schemas import (
    CertificationStatus,
    ClaimedVsVerified,
    ComparisonStatus,
    ExtractedDocumentProfile,
    FeedResult,
    HistoricalYear,
    ThirdPartyVerification,
    VerificationDatum,
    VerificationSource,
    numeric_value,
)

NOT_AVAILABLE = "N/A"

# Upper bounds (exclusive) for match / minor / major; anything above is critical
STANDARD_BANDS = (5.0, 10.0, 20.0)
SCOPE3_BANDS = (10.0, 20.0, 35.0)

THIRD_PARTY_AUDIT_TYPES = frozenset({"big4", "specialist", "industry"})

# Claimed-metric keys shared with the verification feeds
CARBON_REDUCTION = "carbon_reduction"
RENEWABLE_ENERGY = "renewable_energy"
WATER_SAVINGS = "water_savings"
WATER_USAGE = "water_usage"
SCOPE3_EMISSIONS = "scope3_emissions"
WASTE_RECYCLING = "waste_recycling"


# ---------------------------------------------------------------------------
# Claimed metrics
# ---------------------------------------------------------------------------

def _parse_percentage(raw: str) -> Optional[float]:
    try:
        return float(raw.replace("%", "").replace("+", "").strip())
    except ValueError:
        return None


def claimed_metrics_from_profile(profile: ExtractedDocumentProfile) -> dict[str, float]:
    """Flatten the profile into the claimed values the comparator tracks.

    Only numeric (found) metrics are claims; "Present" mentions are not.
    Water is reported either as a recycled share or as a total volume.
    """
    claimed: dict[str, float] = {}
    metrics = profile.metrics

    carbon = next(
        (c for c in profile.claimed_improvements
         if any(k in c.metric.lower() for k in ("carbon", "emission", "co2"))),
        None,
    )
    if carbon is not None:
        value = _parse_percentage(carbon.claimed)
        if value is not None:
            claimed[CARBON_REDUCTION] = value

    renewable = numeric_value(metrics.renewable_energy.percentage)
    if renewable is not None:
        claimed[RENEWABLE_ENERGY] = renewable

    recycled = numeric_value(metrics.water_usage.recycled_percentage)
    liters = numeric_value(metrics.water_usage.total_liters)
    if recycled is not None:
        claimed[WATER_SAVINGS] = recycled
    elif liters is not None:
        claimed[WATER_USAGE] = liters

    scope3 = numeric_value(metrics.carbon_emissions.scope3)
    if scope3 is not None:
        claimed[SCOPE3_EMISSIONS] = scope3

    waste = numeric_value(metrics.waste_recycling.rate)
    if waste is not None:
        claimed[WASTE_RECYCLING] = waste

    return claimed


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def classify_deviation(deviation: float, scope3: bool = False) -> ComparisonStatus:
    match_below, minor_below, major_below = SCOPE3_BANDS if scope3 else STANDARD_BANDS
    if deviation < match_below:
        return "match"
    if deviation < minor_below:
        return "minor"
    if deviation < major_below:
        return "major"
    return "critical"


def compute_deviation(claimed: float, verified: float, percentage_points: bool) -> float:
    """Absolute difference for percentage metrics, relative % otherwise."""
    diff = abs(claimed - verified)
    if percentage_points:
        return diff
    if claimed == 0:
        return 0.0 if verified == 0 else 100.0
    return diff / abs(claimed) * 100


# (label, claimed key, percentage points?, scope-3 bands?)
_ROWS: list[tuple[str, str, bool, bool]] = [
    ("Carbon Reduction", CARBON_REDUCTION, True, False),
    ("Renewable Energy Usage", RENEWABLE_ENERGY, True, False),
    ("Water Savings", WATER_SAVINGS, True, False),
    ("Scope 3 Emissions", SCOPE3_EMISSIONS, False, True),
    ("Waste Recycling Rate", WASTE_RECYCLING, True, False),
]


def _compare_row(
    label: str,
    claimed: Optional[float],
    verified: Optional[float],
    percentage_points: bool,
    scope3: bool,
) -> ClaimedVsVerified:
    if claimed is None:
        return ClaimedVsVerified(
            metric=label, claimed=NOT_AVAILABLE, verified=NOT_AVAILABLE,
            deviation=0.0, status="critical",
        )
    if verified is None:
        # Verification could not be attempted: worst case, never skipped
        return ClaimedVsVerified(
            metric=label, claimed=claimed, verified=NOT_AVAILABLE,
            deviation=0.0, status="critical",
        )
    deviation = compute_deviation(claimed, verified, percentage_points)
    return ClaimedVsVerified(
        metric=label,
        claimed=claimed,
        verified=round(verified, 2),
        deviation=round(deviation, 2),
        status=classify_deviation(deviation, scope3=scope3),
    )


def compare_claimed_vs_verified(
    profile: ExtractedDocumentProfile,
    feed_result: Optional[FeedResult],
) -> list[ClaimedVsVerified]:
    """Exactly five rows, in a fixed order, one per tracked metric."""
    claimed = claimed_metrics_from_profile(profile)
    verified = feed_result.verified_metrics if feed_result is not None else {}

    rows: list[ClaimedVsVerified] = []
    for label, key, percentage_points, scope3 in _ROWS:
        if key == WATER_SAVINGS and WATER_SAVINGS not in claimed and WATER_USAGE in claimed:
            label, key, percentage_points = "Water Usage", WATER_USAGE, False
        rows.append(_compare_row(
            label, claimed.get(key), verified.get(key), percentage_points, scope3,
        ))
    return rows


# ---------------------------------------------------------------------------
# Verification sources
# ---------------------------------------------------------------------------

_CONFIDENCE_LABELS = {"high": "High", "medium": "Medium", "low": "Low"}


def generate_verification_sources(third_party: ThirdPartyVerification) -> list[VerificationSource]:
    """One confidence row each for CDP, GRI and the ISO registry."""
    sources: list[VerificationSource] = []

    cdp = third_party.cdp
    if cdp.verified:
        if cdp.deviation < 5:
            notes = "Scope 1 & 2 fully verified"
        elif cdp.deviation < 15:
            notes = "Scope 1 & 2 verified with minor discrepancies"
        else:
            notes = "Scope 1 & 2 verified with significant discrepancies"
        sources.append(VerificationSource(
            source="CDP", confidence=_CONFIDENCE_LABELS[cdp.confidence], notes=notes,
        ))
    else:
        sources.append(VerificationSource(
            source="CDP", confidence="Low", notes="No CDP data available for verification",
        ))

    gri = third_party.gri
    if gri.verified:
        missing = len(gri.missing_data_points)
        sources.append(VerificationSource(
            source="GRI",
            confidence=_CONFIDENCE_LABELS[gri.confidence],
            notes="All GRI indicators verified" if missing == 0 else f"{missing} missing data points",
        ))
    else:
        sources.append(VerificationSource(
            source="GRI", confidence="Low", notes="GRI reporting not found or incomplete",
        ))

    certifications = third_party.certifications
    valid = next((c for c in certifications if c.valid and not c.expired), None)
    expired = next((c for c in certifications if c.expired), None)
    if valid is not None:
        iso = VerificationSource(
            source="ISO Registry", confidence="High", notes=f"{valid.type} valid ({valid.scope})",
        )
    elif expired is not None:
        iso = VerificationSource(source="ISO Registry", confidence="Low", notes=f"{expired.type} expired")
    elif certifications:
        iso = VerificationSource(
            source="ISO Registry", confidence="Low", notes="No valid ISO certifications found",
        )
    else:
        iso = VerificationSource(
            source="ISO Registry", confidence="Low", notes="ISO 14001 expired or not found",
        )
    sources.append(iso)
    return sources


# ---------------------------------------------------------------------------
# Verification datum (scorer input)
# ---------------------------------------------------------------------------

def convert_to_verification_data(
    profile: ExtractedDocumentProfile,
    feed_result: Optional[FeedResult],
    total_metrics: int = 47,
    historical_data: Optional[list[HistoricalYear]] = None,
    peer_average: Optional[dict[str, float]] = None,
    peer_std_dev: Optional[dict[str, float]] = None,
) -> VerificationDatum:
    """Flatten a profile plus feed output into the greenwashing scorer's input."""
    claimed = claimed_metrics_from_profile(profile)

    verified: dict[str, float] = {}
    certifications: list[CertificationStatus] = []
    if feed_result is not None:
        verified = {k: v for k, v in feed_result.verified_metrics.items() if k in claimed}
        certifications = [
            CertificationStatus(type=c.type, expired=c.expired, valid=c.valid)
            for c in feed_result.third_party.certifications
        ]

    evidence = profile.evidence
    return VerificationDatum(
        claimed_metrics=claimed,
        verified_metrics=verified,
        total_metrics=total_metrics,
        provided_metrics=profile.metrics.provided_count(),
        has_scope3=profile.metrics.carbon_emissions.scope3 is not None,
        has_baseline=profile.metrics.carbon_emissions.baseline_year is not None,
        has_methodology=evidence.methodology_statement is not None,
        third_party_audit_type=evidence.assurance_type,
        has_third_party_audit=evidence.assurance_type in THIRD_PARTY_AUDIT_TYPES,
        certifications=certifications,
        historical_data=historical_data or [],
        peer_average=peer_average or {},
        peer_std_dev=peer_std_dev or {},
    )
