"""
Metric extraction rules — one ordered regex cascade per metric slot.

Each MetricRule lists its numeric patterns in priority order; the extractor
stops at the first pattern whose match parses to a number. Every numeric
pattern exposes a `val` group (the value with its unit/multiplier tokens) and
a `num` group (the bare number), and optionally a `mult` group.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Pattern

# ── Value building blocks ───────────────────────────────────────────────────

_NUM = r"(?P<num>[\d,]+(?:\.\d+)?)"
_MULT = r"(?:\s*(?P<mult>million|billion|m|b)\b)?"
_CURRENCY = r"(?:usd|us\$|eur|gbp|\$|€|£)"

UNIT_TOKEN = (
    r"%|percent\b"
    r"|m?t\s*co2e?q?\b|tonnes?\s+(?:of\s+)?co2e?q?\b|tonnes?\b|tons?\b"
    r"|[mgk]wh\b"
    r"|megalit(?:er|re)s?\b|\bml\b|lit(?:er|re)s?\b|m³|m3\b|cubic\s+met(?:er|re)s?\b"
    r"|usd\b|us\$|eur\b|gbp\b|\$|€|£"
    r"|hours?\b"
)

# Generic value: optional currency prefix, number, multiplier, unit
_V = rf"(?P<val>(?:{_CURRENCY}\s*)?{_NUM}{_MULT}(?:\s*(?:{UNIT_TOKEN}))?)"
# Percentage value: the % sign is mandatory
_P = rf"(?P<val>{_NUM}\s*(?:%|percent\b))"
# Plain count / rate
_C = rf"(?P<val>{_NUM})"
# Energy volume: MWh / GWh mandatory
_E = rf"(?P<val>{_NUM}{_MULT}\s*(?:mwh|gwh)\b)"
# Rejects a value written as a percentage
_NOT_PCT = r"(?![\d,]+(?:\.\d+)?\s*(?:%|percent\b))"
# A bare year with no unit is a reporting label, not a value
_NOT_YEAR = rf"(?!(?:19|20)\d{{2}}(?![\d,]|\.\d)(?!\s*(?:million|billion|{UNIT_TOKEN})))"
# Water volume: volume unit mandatory
_W = (
    rf"(?P<val>{_NUM}{_MULT}\s*(?:lit(?:er|re)s?\b|m³|m3\b|cubic\s+met(?:er|re)s?\b"
    rf"|megalit(?:er|re)s?\b|ML\b))"
)

_EMISSIONS_SECTION = (
    r"carbon\s+emissions?\s+(?:reduction|reporting|data|metrics?)"
    r"|emissions?\s+(?:reduction|reporting|data|metrics?)"
)


def _scope(n: int) -> str:
    # "Scope 2", "Scope 2 emissions", "Scope 2 (market-based)", "Scope 2 emissions 2023"
    return (
        rf"scope\s*{n}(?:\s+emissions?)?(?:\s*\([^)\n]{{0,40}}\))?"
        rf"(?:\s+(?:in\s+|for\s+)?(?:FY\s*)?(?:19|20)\d{{2}}\b)?[:\s]+{_NOT_YEAR}{_V}"
    )


def _re(pattern: str) -> Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


@dataclass(frozen=True)
class MetricRule:
    """Extraction strategy for one metric slot."""
    name: str
    patterns: list[Pattern[str]]
    default_unit: str
    mention: Optional[Pattern[str]] = None
    fixed_unit: bool = False
    # inferred unit → factor converting the value into default_unit
    conversions: dict[str, float] = field(default_factory=dict)


# ── Emissions ───────────────────────────────────────────────────────────────

SCOPE1 = MetricRule(
    name="scope1",
    patterns=[_re(_scope(1)), _re(rf"(?<!in)direct\s+emissions[:\s]+{_V}")],
    default_unit="tCO2e",
    mention=_re(rf"scope\s*1\b|(?<!in)direct\s+emissions?|{_EMISSIONS_SECTION}"),
)

SCOPE2 = MetricRule(
    name="scope2",
    patterns=[_re(_scope(2)), _re(rf"indirect\s+emissions[:\s]+{_V}")],
    default_unit="tCO2e",
    mention=_re(rf"scope\s*2\b|indirect\s+emissions?|{_EMISSIONS_SECTION}"),
)

SCOPE3 = MetricRule(
    name="scope3",
    patterns=[_re(_scope(3)), _re(rf"value\s+chain\s+emissions[:\s]+{_V}")],
    default_unit="tCO2e",
    mention=_re(rf"scope\s*3\b|value\s+chain\s+emissions?|{_EMISSIONS_SECTION}"),
)

# ── Renewable energy ────────────────────────────────────────────────────────

_RENEWABLE_MENTION = _re(r"renewable\s+energy")

RENEWABLE_PERCENTAGE = MetricRule(
    name="renewable_percentage",
    patterns=[
        _re(rf"renewable\s+energy(?:\s+(?:share|usage|mix))?[:\s]+{_P}"),
        _re(rf"{_P}\s+(?:from\s+)?renewable"),
        _re(rf"renewable[:\s]+{_P}"),
    ],
    default_unit="%",
    mention=_RENEWABLE_MENTION,
    fixed_unit=True,
)

RENEWABLE_MWH = MetricRule(
    name="renewable_mwh",
    patterns=[
        _re(rf"renewable\s+energy(?:\s+(?:generated|consumed|consumption))?[:\s]+{_E}"),
        _re(rf"{_E}\s+(?:of\s+)?renewable"),
    ],
    default_unit="MWh",
    mention=_RENEWABLE_MENTION,
    conversions={"GWh": 1000.0},
)

# ── Water ───────────────────────────────────────────────────────────────────

_WATER_MENTION = _re(r"water\s+(?:usage|consumption|reduction|management|reporting|data|metrics?)")

WATER_TOTAL = MetricRule(
    name="water_total",
    patterns=[
        _re(rf"water\s+usage[:\s]+{_W}"),
        _re(rf"water\s+(?:consumption|usage|withdrawal)[:\s]+{_NOT_PCT}{_V}"),
    ],
    default_unit="liters",
    mention=_WATER_MENTION,
    conversions={"m3": 1000.0, "ML": 1_000_000.0},
)

WATER_RECYCLED = MetricRule(
    name="water_recycled",
    patterns=[
        _re(rf"water\s+recycled[:\s]+{_P}"),
        _re(rf"{_P}\s+(?:of\s+)?water\s+(?:is\s+|was\s+)?recycled"),
        _re(rf"water\s+recycling(?:\s+rate)?[:\s]+{_P}"),
    ],
    default_unit="%",
    mention=_WATER_MENTION,
    fixed_unit=True,
)

# ── Waste ───────────────────────────────────────────────────────────────────

WASTE_RATE = MetricRule(
    name="waste_rate",
    patterns=[
        _re(rf"waste\s+recycling(?:\s+rate)?[:\s]+{_P}"),
        _re(rf"recycling\s+rate[:\s]+{_P}"),
        _re(rf"{_P}\s+(?:of\s+)?waste\s+(?:is\s+|was\s+)?recycled"),
    ],
    default_unit="%",
    mention=_re(r"waste\s+(?:recycling|reduction|management|reporting|data|metrics?)"),
    fixed_unit=True,
)

# ── Diversity ───────────────────────────────────────────────────────────────

_DIVERSITY_MENTION = _re(r"diversity|women\s+in\s+leadership")

WOMEN_IN_LEADERSHIP = MetricRule(
    name="women_in_leadership",
    patterns=[
        _re(rf"women\s+in\s+(?:leadership|management)[:\s]+{_P}"),
        _re(rf"{_P}\s+women\s+in\s+(?:leadership|management)"),
        _re(rf"gender\s+diversity[:\s]+{_P}"),
    ],
    default_unit="%",
    mention=_DIVERSITY_MENTION,
    fixed_unit=True,
)

BOARD_DIVERSITY = MetricRule(
    name="board_diversity",
    patterns=[
        _re(rf"board\s+diversity[:\s]+{_P}"),
        _re(rf"{_P}\s+board\s+diversity"),
        _re(rf"women\s+on\s+(?:the\s+)?board[:\s]+{_P}"),
    ],
    default_unit="%",
    mention=_DIVERSITY_MENTION,
    fixed_unit=True,
)

# ── Safety ──────────────────────────────────────────────────────────────────

_SAFETY_MENTION = _re(r"safety\s+(?:incidents?|reporting|data|metrics?)")

SAFETY_INCIDENTS = MetricRule(
    name="safety_incidents",
    patterns=[
        _re(rf"safety\s+incidents?[:\s]+{_C}"),
        _re(rf"{_C}\s+(?:recordable\s+|safety\s+)?incidents"),
    ],
    default_unit="count",
    mention=_SAFETY_MENTION,
    fixed_unit=True,
)

LOST_TIME_RATE = MetricRule(
    name="lost_time_rate",
    patterns=[
        _re(rf"lost[\s-]+time\s+(?:injury\s+)?(?:frequency\s+)?rate[:\s]+{_C}"),
        _re(rf"\bLTI?FR[:\s]+{_C}"),
        _re(rf"\bLTR[:\s]+{_C}"),
    ],
    default_unit="per 200k hours",
    mention=_SAFETY_MENTION,
    fixed_unit=True,
)

# ── Community ───────────────────────────────────────────────────────────────

_COMMUNITY_MENTION = _re(r"community\s+(?:investment|reporting|data|metrics?)")

COMMUNITY_INVESTMENT = MetricRule(
    name="community_investment",
    patterns=[
        _re(rf"community\s+investment[:\s]+{_V}"),
        _re(rf"social\s+investment[:\s]+{_V}"),
    ],
    default_unit="USD",
    mention=_COMMUNITY_MENTION,
)

VOLUNTEER_HOURS = MetricRule(
    name="volunteer_hours",
    patterns=[
        _re(rf"volunteer(?:ing)?\s+hours[:\s]+{_C}"),
        _re(rf"{_C}\s+volunteer(?:ing)?\s+hours"),
    ],
    default_unit="hours",
    mention=_COMMUNITY_MENTION,
    fixed_unit=True,
)

# ── Document-wide patterns ──────────────────────────────────────────────────

BASELINE_YEAR_PATTERNS: list[Pattern[str]] = [
    _re(r"baseline\s+year[:\s]+(\d{4})"),
    _re(r"(\d{4})\s+baseline"),
]

EMISSIONS_UNIT_RE = _re(r"m?t\s*co2e?q?\b|tonnes?\s+(?:of\s+)?co2e?q?\b|tons?\b")
