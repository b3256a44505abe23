"""
Metadata, claimed-improvement and disclosure-evidence extraction.

All three readers are keyword/regex based and pure: they never raise on
empty or odd input, they just return empty results.
"""

import re
from typing import Optional

from schemas import (
    AuditType,
    ClaimedImprovement,
    DisclosureEvidence,
    DocumentMetadata,
)
from tools.numbers import round_half_up

SOURCE_SNIPPET_CHARS = 100
BASELINE_WINDOW_CHARS = 200

# ---------------------------------------------------------------------------
# Document metadata
# ---------------------------------------------------------------------------

_COMPANY_SUFFIX = r"(?:Inc|Corp|Ltd|LLC|PLC|AG|SA|Co|Company|Limited|GmbH|NV|BV)"

# The label is matched case-insensitively; the name itself must be
# capitalised and end in a legal suffix, on the same line.
COMPANY_PATTERNS = [
    re.compile(
        rf"(?i:company|borrower|organi[sz]ation)(?:\s+name)?[ \t]*[:\-][ \t]*"
        rf"([A-Z][A-Za-z0-9&,\. \t]*?\b{_COMPANY_SUFFIX})\b\.?"
    ),
    re.compile(
        rf"(?i:company|borrower|organi[sz]ation)[ \t]+"
        rf"([A-Z][A-Za-z0-9&,\. \t]*?\b{_COMPANY_SUFFIX})\b\.?"
    ),
]

REPORTING_YEAR_PATTERNS = [
    re.compile(r"(?<!baseline\s)(?:reporting|fiscal)\s+(?:year|period)[:\s]+(?:fy\s*)?(\d{4})", re.IGNORECASE),
    re.compile(r"(?:reporting|fiscal|period)[:\s]+(?:fy\s*)?(\d{4})", re.IGNORECASE),
    re.compile(r"(?<!baseline\s)\byear[:\s]+(?:fy\s*)?(\d{4})", re.IGNORECASE),
]

GEOGRAPHY_PATTERNS = [
    re.compile(r"(?i:country|location|geography|jurisdiction)[ \t]*[:\-][ \t]*([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*)"),
    re.compile(r"(?i:headquartered|based)[ \t]+in[ \t]+([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)*)"),
]

# Ordered: output keeps this order
FRAMEWORK_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("LMA", re.compile(r"\blma\b|loan\s+market\s+association|green\s+loan\s+principles", re.IGNORECASE)),
    ("GRI", re.compile(r"\bgri\b|global\s+reporting\s+initiative", re.IGNORECASE)),
    ("EU Taxonomy", re.compile(r"eu\s+taxonomy", re.IGNORECASE)),
    ("TCFD", re.compile(r"\btcfd\b", re.IGNORECASE)),
    ("SASB", re.compile(r"\bsasb\b", re.IGNORECASE)),
]

# First match wins
DOCUMENT_TYPE_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("ESG Report", re.compile(r"esg\s+report", re.IGNORECASE)),
    ("Green Loan Agreement", re.compile(r"green\s+loan", re.IGNORECASE)),
    ("Sustainability Report", re.compile(r"sustainability", re.IGNORECASE)),
    ("Impact Report", re.compile(r"impact\s+report", re.IGNORECASE)),
]

# Topic signals counted by the 8-point completeness score
_COMPLETENESS_TOPICS = [
    re.compile(r"scope\s*[123]", re.IGNORECASE),
    re.compile(r"renewable", re.IGNORECASE),
    re.compile(r"water", re.IGNORECASE),
    re.compile(r"waste", re.IGNORECASE),
    re.compile(r"diversity", re.IGNORECASE),
]


def _first_group(patterns: list[re.Pattern], text: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return None


def _reporting_year(text: str) -> Optional[int]:
    found = _first_group(REPORTING_YEAR_PATTERNS, text)
    return int(found) if found else None


def extract_metadata(text: str) -> DocumentMetadata:
    """Company, year, geography, frameworks, document type and completeness."""
    if not text or not text.strip():
        return DocumentMetadata()

    company_name = _first_group(COMPANY_PATTERNS, text)
    reporting_year = _reporting_year(text)
    geography = _first_group(GEOGRAPHY_PATTERNS, text)

    frameworks = [name for name, pattern in FRAMEWORK_PATTERNS if pattern.search(text)]

    document_type = next(
        (name for name, pattern in DOCUMENT_TYPE_PATTERNS if pattern.search(text)),
        None,
    )

    points = [
        company_name is not None,
        reporting_year is not None,
        geography is not None,
        *(bool(p.search(text)) for p in _COMPLETENESS_TOPICS),
    ]
    completeness = round_half_up(sum(points) / len(points) * 100)

    return DocumentMetadata(
        company_name=company_name,
        reporting_year=reporting_year,
        geography=geography,
        framework_references=frameworks,
        document_type=document_type,
        completeness=completeness,
    )


# ---------------------------------------------------------------------------
# Claimed improvements
# ---------------------------------------------------------------------------

CLAIM_PATTERNS = [
    re.compile(
        r"(?:achieved|reduced|decreased)\s+(?:by\s+)?(?P<pct>[\d,]+(?:\.\d+)?)\s*%\s+"
        r"(?:reduction|decrease|in\s+(?P<topic>carbon|emissions|energy|water|waste))"
        r"(?:\s+in\s+(?P<topic2>carbon|emissions|energy|water|waste))?",
        re.IGNORECASE,
    ),
    re.compile(
        r"(?P<topic>carbon|emissions?|energy|water|waste)\s+reduction[:\s]+(?P<pct>[\d,]+(?:\.\d+)?)\s*%",
        re.IGNORECASE,
    ),
]

_CLAIM_METRICS = {
    "carbon": "Carbon Reduction",
    "emission": "Carbon Reduction",
    "emissions": "Carbon Reduction",
    "energy": "Energy Reduction",
    "water": "Water Reduction",
    "waste": "Waste Reduction",
}

_YEAR_TOKEN_RE = re.compile(r"\b(?:19|20)\d{2}\b")


def _claim_metric(match: re.Match) -> str:
    groups = match.groupdict()
    topic = groups.get("topic") or groups.get("topic2")
    if not topic:
        return "Carbon Reduction"
    return _CLAIM_METRICS.get(topic.lower(), "Carbon Reduction")


def _nearby_year(text: str, position: int) -> str:
    window = text[max(0, position - BASELINE_WINDOW_CHARS):position + BASELINE_WINDOW_CHARS]
    match = _YEAR_TOKEN_RE.search(window)
    return match.group(0) if match else "Unknown"


def extract_claimed_improvements(text: str) -> list[ClaimedImprovement]:
    """Self-reported reduction claims ("achieved 30% reduction") with a nearby year as baseline."""
    if not text:
        return []

    improvements: list[ClaimedImprovement] = []
    seen: set[tuple[str, str, str]] = set()
    for pattern in CLAIM_PATTERNS:
        for match in pattern.finditer(text):
            claimed = f"{match.group('pct').replace(',', '')}%"
            metric = _claim_metric(match)
            baseline = _nearby_year(text, match.start())
            key = (metric, claimed, baseline)
            if key in seen:
                continue
            seen.add(key)
            improvements.append(ClaimedImprovement(
                metric=metric,
                claimed=claimed,
                baseline=baseline,
                source=match.group(0)[:SOURCE_SNIPPET_CHARS],
            ))
    return improvements


# ---------------------------------------------------------------------------
# Disclosure evidence: methodology, assurance tier, certifications
# ---------------------------------------------------------------------------

METHODOLOGY_RE = re.compile(
    r"methodolog(?:y|ies)|ghg\s+protocol|iso\s*14064|calculation\s+approach",
    re.IGNORECASE,
)

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+|\n+")
_ASSURANCE_CONTEXT_RE = re.compile(r"assur|audit|verif", re.IGNORECASE)

# Ordered strongest-first; the first tier with a hit wins
ASSURANCE_TIERS: list[tuple[AuditType, re.Pattern]] = [
    ("big4", re.compile(
        r"\bdeloitte\b|\bpwc\b|pricewaterhouse(?:coopers)?|\bkpmg\b|\bey\b|ernst\s*&\s*young|ernst\s+and\s+young",
        re.IGNORECASE,
    )),
    ("specialist", re.compile(
        r"bureau\s+veritas|\bdnv\b|\bsgs\b|\blrqa\b|\berm\s+cvs\b"
        r"|(?:independent|third[\s-]party)\s+(?:assurance|verification|auditor|audit)",
        re.IGNORECASE,
    )),
    ("industry", re.compile(r"industry\s+(?:body|association|audit|verification|assurance)", re.IGNORECASE)),
    ("internal", re.compile(r"internal(?:ly)?\s+(?:audit|assur|review|verif)", re.IGNORECASE)),
]

CERTIFICATION_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("ISO 14001", re.compile(r"iso\s*14001", re.IGNORECASE)),
    ("ISO 9001", re.compile(r"iso\s*9001", re.IGNORECASE)),
    ("ISO 50001", re.compile(r"iso\s*50001", re.IGNORECASE)),
    ("ISO 14064", re.compile(r"iso\s*14064", re.IGNORECASE)),
]


def _sentence_at(text: str, start: int, end: int) -> str:
    left = max(text.rfind(".", 0, start), text.rfind("\n", 0, start)) + 1
    stops = [i for i in (text.find(".", end), text.find("\n", end)) if i != -1]
    right = min(stops) + 1 if stops else len(text)
    return text[left:right].strip()


def _assurance(text: str) -> tuple[AuditType, Optional[str]]:
    sentences = [s for s in _SENTENCE_SPLIT_RE.split(text) if _ASSURANCE_CONTEXT_RE.search(s)]
    for tier, pattern in ASSURANCE_TIERS:
        for sentence in sentences:
            if pattern.search(sentence):
                return tier, sentence.strip()[:SOURCE_SNIPPET_CHARS]
    return "none", None


def extract_disclosure_evidence(text: str) -> DisclosureEvidence:
    """Methodology statement, strongest assurance provider tier, named ISO certifications."""
    if not text or not text.strip():
        return DisclosureEvidence()

    methodology = None
    match = METHODOLOGY_RE.search(text)
    if match:
        methodology = _sentence_at(text, match.start(), match.end())[:SOURCE_SNIPPET_CHARS * 2]

    assurance_type, assurance_source = _assurance(text)

    return DisclosureEvidence(
        methodology_statement=methodology,
        assurance_type=assurance_type,
        assurance_source=assurance_source,
        certifications=[name for name, pattern in CERTIFICATION_PATTERNS if pattern.search(text)],
    )
