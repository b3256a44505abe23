"""
Shared test fixtures for unit and pipeline tests.
"""

import os
import random
import sys
from datetime import datetime, timezone

# Ensure the backend directory is on the path so imports resolve correctly
# when pytest is run from the repo root or the backend directory.
_backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

import pytest

from schemas import FeedResult
from tools.verification_feed import SimulatedVerificationFeed, StaticVerificationFeed


# A complete green-loan disclosure: every metric slot has a number, metadata
# is complete, all four LMA principles have detailed evidence.
SAMPLE_DISCLOSURE = """Acme Renewables Ltd - ESG Report

Company: Acme Renewables Ltd
Reporting Year: 2023
Country: United Kingdom

This report follows the GRI Standards and the TCFD recommendations, and is aligned with the LMA Green Loan Principles for sustainability-linked lending.

Greenhouse gas inventory. Scope 1: 1,200 tCO2e. Scope 2: 8,500 tCO2e. Scope 3: 45,000 tCO2e. Baseline year: 2019. We achieved 30% reduction in carbon emissions against the 2019 baseline.

Energy: Renewable energy: 45% of total consumption, with 12,000 MWh of renewable electricity generated on-site from solar and wind power.

Water usage: 2.5 million liters, with water recycled: 40% across our operations and facilities.

Waste recycling rate: 72% across all manufacturing sites, supporting our circular economy goals.

Diversity: women in leadership: 38% and board diversity: 42%, reflecting our inclusion strategy.

Safety incidents: 3 recorded this year. Lost time injury frequency rate: 0.4 across all operations.

Community investment: $2.5 million, complemented by 4,000 volunteer hours from our employees.

Methodology: emissions are calculated using the GHG Protocol Corporate Standard with an operational control approach.

Our greenhouse gas figures have received limited assurance from Deloitte. The main site holds ISO 14001 certification.

Use of proceeds: 60% for solar installation and 40% towards energy efficiency upgrades.

Projects are selected through a project evaluation against published evaluation criteria.

Loan proceeds are held in a segregated account and tracked monthly by the treasury team.

ESG reporting requirements include an annual report to lenders with external verification of all KPIs.
"""

# Same document with the Scope 3 figure and the baseline year removed
SAMPLE_WITHOUT_SCOPE3_OR_BASELINE = (
    SAMPLE_DISCLOSURE
    .replace(" Scope 3: 45,000 tCO2e.", "")
    .replace(" Baseline year: 2019.", "")
    .replace(" against the 2019 baseline", "")
)

# Verified values with a known deviation band per tracked metric
SAMPLE_VERIFIED_METRICS = {
    "carbon_reduction": 27.0,     # 3 pts    → match
    "renewable_energy": 38.0,     # 7 pts    → minor
    "water_savings": 25.0,        # 15 pts   → major
    "scope3_emissions": 30000.0,  # 33.3 %   → major (scope-3 bands)
    "waste_recycling": 40.0,      # 32 pts   → critical
}

FIXED_NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_DISCLOSURE


@pytest.fixture
def sample_feed_result() -> FeedResult:
    return FeedResult(source="test-registry", verified_metrics=SAMPLE_VERIFIED_METRICS)


@pytest.fixture
def static_feed(sample_feed_result) -> StaticVerificationFeed:
    """Deterministic feed returning SAMPLE_VERIFIED_METRICS."""
    return StaticVerificationFeed(sample_feed_result)


@pytest.fixture
def seeded_feed() -> SimulatedVerificationFeed:
    """Simulated feed with a fixed seed and clock."""
    return SimulatedVerificationFeed(rng=random.Random(1234), now=FIXED_NOW)


@pytest.fixture
def base_state(sample_text) -> dict:
    """Minimal VerificationState with only INIT keys set."""
    return {
        "document_id": "test-doc-001",
        "text": sample_text,
        "file_name": "acme-esg-2023.pdf",
        "total_metrics": 47,
        "historical_data": [],
        "peer_average": {},
        "peer_std_dev": {},
        "started_at": 0.0,
        "logs": [],
        "pipeline_trace": [],
    }


@pytest.fixture
def sample_profile(sample_text):
    from engine import extract_profile
    return extract_profile(sample_text)
