"""
Metric Extractor — deterministic regex cascade over the full document text.

Each metric slot is resolved by its MetricRule (tools/metric_rules.py):
  1. Try the numeric patterns in order; the first match that parses wins
  2. No number but the topic is mentioned → PartialMetric ("Present")
  3. Otherwise the slot stays None (missing)

No randomness at this layer: the same text always yields the same metrics.
"""

import re
from typing import Optional

from schemas import (
    CarbonEmissions,
    Community,
    Diversity,
    ExtractedMetric,
    ExtractedMetrics,
    FoundMetric,
    PartialMetric,
    RenewableEnergy,
    Safety,
    WasteRecycling,
    WaterUsage,
)
from tools.metric_rules import (
    BASELINE_YEAR_PATTERNS,
    BOARD_DIVERSITY,
    COMMUNITY_INVESTMENT,
    EMISSIONS_UNIT_RE,
    LOST_TIME_RATE,
    RENEWABLE_MWH,
    RENEWABLE_PERCENTAGE,
    SAFETY_INCIDENTS,
    SCOPE1,
    SCOPE2,
    SCOPE3,
    UNIT_TOKEN,
    VOLUNTEER_HOURS,
    WASTE_RATE,
    WATER_RECYCLED,
    WATER_TOTAL,
    WOMEN_IN_LEADERSHIP,
    MetricRule,
)
from tools.numbers import parse_number

SOURCE_SNIPPET_CHARS = 100

_UNIT_RE = re.compile(UNIT_TOKEN, re.IGNORECASE)


def normalise_unit(token: str) -> Optional[str]:
    """Map a raw unit token ("tonnes CO2e", "m³", "$") to its canonical spelling."""
    t = re.sub(r"\s+", " ", token.strip().lower())
    if not t:
        return None
    if t in ("%", "percent"):
        return "%"
    if "co2" in t:
        return "tCO2e"
    if t.startswith("ton"):
        return "tonnes"
    if t in ("mwh", "gwh", "kwh"):
        return {"mwh": "MWh", "gwh": "GWh", "kwh": "kWh"}[t]
    if t.startswith("megalit") or t == "ml":
        return "ML"
    if t.startswith("lit"):
        return "liters"
    if t in ("m³", "m3") or t.startswith("cubic"):
        return "m3"
    if t in ("usd", "us$", "$"):
        return "USD"
    if t in ("eur", "€"):
        return "EUR"
    if t in ("gbp", "£"):
        return "GBP"
    if t.startswith("hour"):
        return "hours"
    return None


def infer_unit(value_text: str) -> Optional[str]:
    """First recognised unit token in the matched value text, normalised."""
    match = _UNIT_RE.search(value_text)
    if not match:
        return None
    return normalise_unit(match.group(0))


def extract_metric(text: str, rule: MetricRule) -> Optional[ExtractedMetric]:
    """Resolve one metric slot: found, partial, or None."""
    if not text:
        return None

    for pattern in rule.patterns:
        match = pattern.search(text)
        if not match:
            continue
        value = parse_number(match.group("num"), match.groupdict().get("mult"))
        if value is None:
            continue

        unit = rule.default_unit
        if not rule.fixed_unit:
            inferred = infer_unit(match.group("val"))
            if inferred in rule.conversions:
                value *= rule.conversions[inferred]
            elif inferred is not None:
                unit = inferred

        return FoundMetric(
            value=value,
            unit=unit,
            source=match.group(0).strip()[:SOURCE_SNIPPET_CHARS],
        )

    if rule.mention is not None and rule.mention.search(text):
        return PartialMetric(unit=rule.default_unit)
    return None


def extract_baseline_year(text: str) -> Optional[int]:
    for pattern in BASELINE_YEAR_PATTERNS:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return None


def _emissions_unit(text: str) -> str:
    match = EMISSIONS_UNIT_RE.search(text)
    if match:
        return normalise_unit(match.group(0)) or "tCO2e"
    return "tCO2e"


def _with_baseline(metric: Optional[ExtractedMetric], year: Optional[int]) -> Optional[ExtractedMetric]:
    if metric is None or year is None:
        return metric
    return metric.model_copy(update={"baseline_year": year})


def extract_metrics(text: str) -> ExtractedMetrics:
    """Run every metric rule over the full text. Empty text → all slots None."""
    if not text or not text.strip():
        return ExtractedMetrics()

    baseline_year = extract_baseline_year(text)

    return ExtractedMetrics(
        carbon_emissions=CarbonEmissions(
            scope1=_with_baseline(extract_metric(text, SCOPE1), baseline_year),
            scope2=_with_baseline(extract_metric(text, SCOPE2), baseline_year),
            scope3=_with_baseline(extract_metric(text, SCOPE3), baseline_year),
            unit=_emissions_unit(text),
            baseline_year=baseline_year,
        ),
        renewable_energy=RenewableEnergy(
            percentage=extract_metric(text, RENEWABLE_PERCENTAGE),
            total_mwh=extract_metric(text, RENEWABLE_MWH),
        ),
        water_usage=WaterUsage(
            total_liters=extract_metric(text, WATER_TOTAL),
            recycled_percentage=extract_metric(text, WATER_RECYCLED),
        ),
        waste_recycling=WasteRecycling(
            rate=extract_metric(text, WASTE_RATE),
        ),
        diversity=Diversity(
            women_in_leadership=extract_metric(text, WOMEN_IN_LEADERSHIP),
            board_diversity=extract_metric(text, BOARD_DIVERSITY),
        ),
        safety=Safety(
            incidents=extract_metric(text, SAFETY_INCIDENTS),
            lost_time_rate=extract_metric(text, LOST_TIME_RATE),
        ),
        community=Community(
            investment=extract_metric(text, COMMUNITY_INVESTMENT),
            volunteer_hours=extract_metric(text, VOLUNTEER_HOURS),
        ),
    )
