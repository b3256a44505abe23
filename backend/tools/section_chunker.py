"""
Section Chunker — groups document paragraphs by ESG topic.

Paragraphs are blank-line separated blocks of at least 50 characters. Each
topic keeps every paragraph that matches one of its keyword patterns; the
chunk confidence grows with the number of matching paragraphs (capped at 90).
"""

import re
from typing import Pattern

from schemas import ESGChunk

MIN_PARAGRAPH_CHARS = 50

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")


def _compile(*patterns: str) -> list[Pattern[str]]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


# Ordered topic table: output chunks follow this order
SECTION_PATTERNS: list[tuple[str, list[Pattern[str]]]] = [
    ("Emissions", _compile(r"emissions?", r"carbon", r"co2", r"greenhouse\s+gas", r"\bghg\b", r"scope\s*[123]")),
    ("Energy", _compile(r"renewable\s+energy", r"energy\s+consumption", r"\bsolar\b", r"\bwind\b", r"\bpower\b")),
    ("Water", _compile(r"water\s+usage", r"water\s+consumption", r"water\s+management")),
    ("Waste", _compile(r"waste", r"recycling", r"circular\s+economy")),
    ("Governance", _compile(r"governance", r"\bboard\b", r"ethics", r"compliance", r"audit")),
    ("Diversity", _compile(r"diversity", r"inclusion", r"gender", r"\bwomen\b")),
    ("Safety", _compile(r"safety", r"health\s+and\s+safety", r"incident", r"lost\s+time")),
    ("Community", _compile(r"community", r"social\s+investment", r"volunteer")),
    ("Certifications", _compile(r"certification", r"\biso\b", r"audit", r"verified")),
]


def split_paragraphs(text: str) -> list[str]:
    """Split on blank lines, keeping stripped paragraphs of >= 50 chars."""
    if not text:
        return []
    paragraphs = (p.strip() for p in _PARAGRAPH_SPLIT_RE.split(text))
    return [p for p in paragraphs if len(p) >= MIN_PARAGRAPH_CHARS]


def chunk_sections(text: str) -> list[ESGChunk]:
    """Tag paragraph groups by ESG topic. Empty text yields no chunks."""
    paragraphs = split_paragraphs(text)

    chunks: list[ESGChunk] = []
    for name, patterns in SECTION_PATTERNS:
        relevant = [p for p in paragraphs if any(pattern.search(p) for pattern in patterns)]
        if not relevant:
            continue
        chunks.append(ESGChunk(
            section=name,
            content="\n\n".join(relevant),
            confidence=min(90, 50 + 10 * len(relevant)),
        ))
    return chunks
