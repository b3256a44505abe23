"""
Tests for tools/alerts.py.

Covers:
  - Discrepancy alerts from critical / major comparison rows
  - Missing Scope 3, missing baseline and low completeness alerts
  - Priority ordering
"""

from engine import extract_profile
from tools.alerts import generate_alerts
from tools.verification import compare_claimed_vs_verified

from conftest import SAMPLE_WITHOUT_SCOPE3_OR_BASELINE


class TestGenerateAlerts:

    def test_sample_with_known_feed(self, sample_profile, sample_feed_result):
        rows = compare_claimed_vs_verified(sample_profile, sample_feed_result)
        alerts = generate_alerts(sample_profile, rows)

        assert [a.id for a in alerts] == [
            "alert-waste-recycling-rate",
            "alert-water-savings-major",
            "alert-scope-3-emissions-major",
        ]
        critical = alerts[0]
        assert critical.severity == "critical"
        assert critical.priority == 1
        assert critical.timeline == "Immediate"
        assert critical.description == "Borrower claimed 72, verified shows 40. Deviation: 32.0%"
        assert critical.notify == ["Compliance Manager", "Loan Officer"]

        major = alerts[1]
        assert major.severity == "high"
        assert major.timeline == "14 days"
        assert major.description == "Claimed 40 vs verified 25 (15.0% deviation)"

    def test_missing_scope3_and_baseline(self):
        profile = extract_profile(SAMPLE_WITHOUT_SCOPE3_OR_BASELINE)
        alerts = generate_alerts(profile, compare_claimed_vs_verified(profile, None))

        ids = [a.id for a in alerts]
        assert "alert-scope3" in ids
        assert "alert-baseline" in ids
        assert ids[-2:] == ["alert-scope3", "alert-baseline"]
        assert all(a.severity == "critical" for a in alerts[:5])

        scope3_row = next(a for a in alerts if a.id == "alert-scope-3-emissions")
        assert "not disclosed" in scope3_row.description

    def test_unverified_claim_description(self, sample_profile):
        alerts = generate_alerts(sample_profile, compare_claimed_vs_verified(sample_profile, None))
        carbon = next(a for a in alerts if a.id == "alert-carbon-reduction")
        assert carbon.description == "Borrower claimed 30, no independent verification available"

    def test_empty_document(self):
        profile = extract_profile("")
        alerts = generate_alerts(profile, [])
        assert [a.id for a in alerts] == ["alert-scope3", "alert-completeness", "alert-baseline"]
        assert alerts[1].description == "Only 0% of expected ESG metrics found in document"

    def test_sorted_by_priority(self):
        profile = extract_profile("Scope 1: 10 tCO2e")
        alerts = generate_alerts(profile, compare_claimed_vs_verified(profile, None))
        priorities = [a.priority for a in alerts]
        assert priorities == sorted(priorities)

    def test_no_alerts_for_clean_match(self, sample_profile):
        rows = compare_claimed_vs_verified(sample_profile, None)
        matched = [r.model_copy(update={"status": "match"}) for r in rows]
        assert generate_alerts(sample_profile, matched) == []
