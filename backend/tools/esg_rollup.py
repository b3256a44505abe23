"""
ESG Roll-up — quarterly metric records → E/S/G scores, history and flags.

calculate_esg_score           per-category means, overall = 0.4E + 0.3S + 0.3G
historical_data_from_records  per-year metric means (greenwashing scorer input)
detect_disclosure_flags       transparency, decline, cherry-picking, vague targets
aggregate_monthly             month-grouped averages of stored snapshots
"""

from collections import defaultdict
from typing import Optional

from schemas import (
    DisclosureFlags,
    ESGMetricRecord,
    ESGMetricSnapshot,
    ESGScore,
    HistoricalYear,
    MonthlyAggregatedMetrics,
    RiskLevel,
)
from tools.numbers import round_half_up

CATEGORY_WEIGHTS = {"environmental": 0.4, "social": 0.3, "governance": 0.3}

DECLINE_THRESHOLD = 0.20
CHERRY_PICKING_THRESHOLD = 0.90
VAGUE_TARGET_THRESHOLD = 0.30


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def calculate_esg_score(records: list[ESGMetricRecord]) -> ESGScore:
    """Absent categories score 0 rather than raising."""
    means = {
        category: _mean([r.value for r in records if r.category == category])
        for category in CATEGORY_WEIGHTS
    }
    overall = sum(means[c] * w for c, w in CATEGORY_WEIGHTS.items())
    return ESGScore(
        overall=round_half_up(overall),
        environmental=round_half_up(means["environmental"]),
        social=round_half_up(means["social"]),
        governance=round_half_up(means["governance"]),
    )


def historical_data_from_records(records: list[ESGMetricRecord]) -> list[HistoricalYear]:
    """Average each metric per year, oldest year first."""
    by_year: dict[int, dict[str, list[float]]] = defaultdict(lambda: defaultdict(list))
    for r in records:
        by_year[r.year][r.metric].append(r.value)
    return [
        HistoricalYear(year=year, metrics={m: _mean(v) for m, v in metrics.items()})
        for year, metrics in sorted(by_year.items())
    ]


# ---------------------------------------------------------------------------
# Disclosure flags
# ---------------------------------------------------------------------------

def _period(record: ESGMetricRecord) -> tuple[int, str]:
    return record.year, record.quarter


def _latest_pairs(records: list[ESGMetricRecord]) -> list[tuple[float, float]]:
    """(previous, latest) value per metric series with at least two points."""
    series: dict[str, list[ESGMetricRecord]] = defaultdict(list)
    for r in records:
        series[r.metric].append(r)
    pairs = []
    for values in series.values():
        if len(values) < 2:
            continue
        ordered = sorted(values, key=_period)
        pairs.append((ordered[-2].value, ordered[-1].value))
    return pairs


def transparency_score(records: list[ESGMetricRecord]) -> int:
    """Category coverage (40) + share with targets (30) + distinct quarters (30)."""
    if not records:
        return 0
    categories = {r.category for r in records}
    category_score = len(categories) / 3 * 40
    target_score = sum(1 for r in records if r.target is not None) / len(records) * 30
    quarters = {_period(r) for r in records}
    recency_score = min(len(quarters) * 5, 30)
    return round_half_up(category_score + target_score + recency_score)


def has_performance_decline(records: list[ESGMetricRecord]) -> bool:
    return any(
        previous > 0 and (previous - latest) / previous > DECLINE_THRESHOLD
        for previous, latest in _latest_pairs(records)
    )


def has_cherry_picking(records: list[ESGMetricRecord]) -> bool:
    if len(records) < 3:
        return False
    pairs = _latest_pairs(records)
    if not pairs:
        return False
    positive = sum(1 for previous, latest in pairs if latest > previous)
    return positive / len(pairs) > CHERRY_PICKING_THRESHOLD


def has_vague_targets(records: list[ESGMetricRecord]) -> bool:
    with_targets = sum(1 for r in records if r.target is not None)
    if with_targets == 0:
        return True
    return with_targets / len(records) < VAGUE_TARGET_THRESHOLD


def detect_disclosure_flags(records: list[ESGMetricRecord]) -> DisclosureFlags:
    transparency = transparency_score(records)
    decline = has_performance_decline(records)
    cherry = has_cherry_picking(records)
    vague = has_vague_targets(records)

    factors: list[str] = []
    level: RiskLevel = "low"
    if transparency < 60:
        factors.append("Low transparency score - missing data points")
        level = "medium"
    if decline:
        factors.append("Performance decline detected - >20% drop in key metrics")
        level = "medium" if level == "low" else "high"
    if cherry:
        factors.append("Cherry-picking detected - only positive metrics reported")
        level = "medium"
    if vague:
        factors.append("Vague targets - no specific numbers or timelines")
        if level == "low":
            level = "medium"
    if transparency < 40 or (decline and cherry):
        level = "high"

    return DisclosureFlags(
        transparency_score=transparency,
        performance_decline=decline,
        cherry_picking=cherry,
        vague_targets=vague,
        risk_level=level,
        risk_factors=factors,
    )


# ---------------------------------------------------------------------------
# Monthly snapshots
# ---------------------------------------------------------------------------

def aggregate_monthly(
    snapshots: list[ESGMetricSnapshot],
    months: Optional[int] = None,
    loan_id: Optional[str] = None,
) -> list[MonthlyAggregatedMetrics]:
    """Average snapshots per month, oldest first; keep the latest `months` months."""
    grouped: dict[str, list[ESGMetricSnapshot]] = defaultdict(list)
    for s in snapshots:
        if loan_id is None or s.loan_id == loan_id:
            grouped[s.month].append(s)

    keys = sorted(grouped)
    if months is not None:
        keys = keys[-months:] if months > 0 else []

    aggregated = []
    for month in keys:
        group = grouped[month]
        paired = [
            s for s in group
            if s.reported_reduction is not None and s.verified_reduction is not None
        ]
        aggregated.append(MonthlyAggregatedMetrics(
            month=month,
            reported_reduction=_mean([s.reported_reduction for s in paired]) if paired else None,
            verified_reduction=_mean([s.verified_reduction for s in paired]) if paired else None,
            transparency_score=round_half_up(_mean([s.transparency_score for s in group])),
            compliance_score=round_half_up(_mean([s.compliance_score for s in group])),
            risk_score=round_half_up(_mean([s.risk_score for s in group])),
            data_points=len(group),
        ))
    return aggregated
