"""
Tests for tools/verification.py.

Covers:
  - Claimed-metric flattening from a profile
  - Deviation maths and band classification (standard + scope-3 bands)
  - The five comparator rows with a known feed, without a feed, and with
    metrics missing from either side
  - Verification source rows (CDP / GRI / ISO registry)
  - Verification datum used by the greenwashing scorer
"""

import pytest

from engine import extract_profile
from schemas import (
    CDPCheck,
    CertificationCheck,
    FeedResult,
    GRICheck,
    HistoricalYear,
    ThirdPartyVerification,
)
from tools.verification import (
    classify_deviation,
    claimed_metrics_from_profile,
    compare_claimed_vs_verified,
    compute_deviation,
    convert_to_verification_data,
    generate_verification_sources,
)

from conftest import SAMPLE_WITHOUT_SCOPE3_OR_BASELINE


# ---------------------------------------------------------------------------
# Claimed metrics
# ---------------------------------------------------------------------------


class TestClaimedMetrics:

    def test_sample_profile(self, sample_profile):
        assert claimed_metrics_from_profile(sample_profile) == {
            "carbon_reduction": 30.0,
            "renewable_energy": 45.0,
            "water_savings": 40.0,
            "scope3_emissions": 45000.0,
            "waste_recycling": 72.0,
        }

    def test_water_volume_when_no_recycled_share(self):
        profile = extract_profile("Water usage: 1,200 liters across the site.")
        assert claimed_metrics_from_profile(profile) == {"water_usage": 1200.0}

    def test_partial_metrics_are_not_claims(self):
        profile = extract_profile("Our renewable energy strategy and waste management plan are in progress.")
        assert claimed_metrics_from_profile(profile) == {}


# ---------------------------------------------------------------------------
# Deviation + bands
# ---------------------------------------------------------------------------


class TestClassification:

    @pytest.mark.parametrize("deviation,expected", [
        (0, "match"), (4.99, "match"), (5, "minor"), (9.99, "minor"),
        (10, "major"), (19.99, "major"), (20, "critical"), (80, "critical"),
    ])
    def test_standard_bands(self, deviation, expected):
        assert classify_deviation(deviation) == expected

    @pytest.mark.parametrize("deviation,expected", [
        (9.99, "match"), (10, "minor"), (20, "major"), (34.99, "major"), (35, "critical"),
    ])
    def test_scope3_bands(self, deviation, expected):
        assert classify_deviation(deviation, scope3=True) == expected

    def test_percentage_points(self):
        assert compute_deviation(45, 38, percentage_points=True) == 7

    def test_relative(self):
        assert compute_deviation(200, 150, percentage_points=False) == pytest.approx(25.0)

    def test_zero_claimed(self):
        assert compute_deviation(0, 0, percentage_points=False) == 0.0
        assert compute_deviation(0, 5, percentage_points=False) == 100.0


# ---------------------------------------------------------------------------
# Comparator rows
# ---------------------------------------------------------------------------


class TestCompareClaimedVsVerified:

    def test_known_feed_bands(self, sample_profile, sample_feed_result):
        rows = compare_claimed_vs_verified(sample_profile, sample_feed_result)

        assert [r.metric for r in rows] == [
            "Carbon Reduction",
            "Renewable Energy Usage",
            "Water Savings",
            "Scope 3 Emissions",
            "Waste Recycling Rate",
        ]
        assert [r.status for r in rows] == ["match", "minor", "major", "major", "critical"]
        assert rows[0].deviation == 3.0
        assert rows[3].deviation == 33.33
        assert rows[3].verified == 30000.0

    def test_always_five_rows(self):
        rows = compare_claimed_vs_verified(extract_profile(""), None)
        assert len(rows) == 5
        for row in rows:
            assert row.claimed == "N/A"
            assert row.verified == "N/A"
            assert row.status == "critical"

    def test_no_feed_is_critical(self, sample_profile):
        rows = compare_claimed_vs_verified(sample_profile, None)
        assert all(r.status == "critical" for r in rows)
        assert all(r.verified == "N/A" for r in rows)
        assert rows[0].claimed == 30.0

    def test_missing_verified_value(self, sample_profile):
        feed = FeedResult(source="partial", verified_metrics={"carbon_reduction": 30.0})
        rows = compare_claimed_vs_verified(sample_profile, feed)
        assert rows[0].status == "match"
        assert rows[1].verified == "N/A"
        assert rows[1].status == "critical"

    def test_missing_scope3_claim(self, sample_feed_result):
        profile = extract_profile(SAMPLE_WITHOUT_SCOPE3_OR_BASELINE)
        rows = compare_claimed_vs_verified(profile, sample_feed_result)
        scope3 = rows[3]
        assert scope3.metric == "Scope 3 Emissions"
        assert scope3.claimed == "N/A"
        assert scope3.status == "critical"

    def test_water_usage_row_uses_relative_deviation(self):
        profile = extract_profile("Water usage: 1,000 liters across the site.")
        feed = FeedResult(source="registry", verified_metrics={"water_usage": 1100.0})
        row = compare_claimed_vs_verified(profile, feed)[2]
        assert row.metric == "Water Usage"
        assert row.deviation == 10.0
        assert row.status == "major"

    def test_verified_rounded(self, sample_profile):
        feed = FeedResult(source="registry", verified_metrics={"renewable_energy": 44.12345})
        row = compare_claimed_vs_verified(sample_profile, feed)[1]
        assert row.verified == 44.12
        assert row.deviation == 0.88
        assert row.status == "match"


# ---------------------------------------------------------------------------
# Verification sources
# ---------------------------------------------------------------------------


class TestVerificationSources:

    def test_nothing_verified(self):
        sources = generate_verification_sources(ThirdPartyVerification())
        assert [s.source for s in sources] == ["CDP", "GRI", "ISO Registry"]
        assert all(s.confidence == "Low" for s in sources)
        assert sources[0].notes == "No CDP data available for verification"
        assert sources[1].notes == "GRI reporting not found or incomplete"
        assert sources[2].notes == "ISO 14001 expired or not found"

    def test_cdp_notes_follow_deviation(self):
        for deviation, notes in [
            (2.0, "Scope 1 & 2 fully verified"),
            (8.0, "Scope 1 & 2 verified with minor discrepancies"),
            (20.0, "Scope 1 & 2 verified with significant discrepancies"),
        ]:
            tp = ThirdPartyVerification(cdp=CDPCheck(verified=True, confidence="medium", deviation=deviation))
            cdp = generate_verification_sources(tp)[0]
            assert cdp.notes == notes
            assert cdp.confidence == "Medium"

    def test_gri_missing_points(self):
        tp = ThirdPartyVerification(gri=GRICheck(
            verified=True, confidence="medium", missing_data_points=["Scope 3 Emissions"],
        ))
        gri = generate_verification_sources(tp)[1]
        assert gri.notes == "1 missing data points"

    def test_valid_certificate_wins(self):
        tp = ThirdPartyVerification(certifications=[
            CertificationCheck(type="ISO 9001", valid=False, expired=True),
            CertificationCheck(type="ISO 14001", valid=True, expired=False,
                               scope="Environmental Management System"),
        ])
        iso = generate_verification_sources(tp)[2]
        assert iso.confidence == "High"
        assert iso.notes == "ISO 14001 valid (Environmental Management System)"

    def test_expired_certificate(self):
        tp = ThirdPartyVerification(certifications=[
            CertificationCheck(type="ISO 50001", valid=False, expired=True),
        ])
        iso = generate_verification_sources(tp)[2]
        assert iso.confidence == "Low"
        assert iso.notes == "ISO 50001 expired"


# ---------------------------------------------------------------------------
# Verification datum
# ---------------------------------------------------------------------------


class TestVerificationDatum:

    def test_sample_with_feed(self, sample_profile, sample_feed_result):
        datum = convert_to_verification_data(sample_profile, sample_feed_result)
        assert datum.provided_metrics == 14
        assert datum.total_metrics == 47
        assert datum.has_scope3 is True
        assert datum.has_baseline is True
        assert datum.has_methodology is True
        assert datum.third_party_audit_type == "big4"
        assert datum.has_third_party_audit is True
        assert datum.verified_metrics == sample_feed_result.verified_metrics

    def test_without_feed(self, sample_profile):
        datum = convert_to_verification_data(sample_profile, None)
        assert datum.verified_metrics == {}
        assert datum.certifications == []
        assert len(datum.claimed_metrics) == 5

    def test_verified_limited_to_claimed(self):
        profile = extract_profile("Renewable energy: 50% of supply.")
        feed = FeedResult(source="registry", verified_metrics={"renewable_energy": 48.0, "scope3_emissions": 10.0})
        datum = convert_to_verification_data(profile, feed)
        assert datum.verified_metrics == {"renewable_energy": 48.0}

    def test_internal_audit_is_not_third_party(self):
        profile = extract_profile("Figures were subject to internal audit before publication.")
        datum = convert_to_verification_data(profile, None)
        assert datum.third_party_audit_type == "internal"
        assert datum.has_third_party_audit is False

    def test_context_passed_through(self, sample_profile):
        history = [HistoricalYear(year=2022, metrics={"renewable_energy": 40.0})]
        datum = convert_to_verification_data(
            sample_profile, None, total_metrics=20, historical_data=history,
            peer_average={"renewable_energy": 42.0}, peer_std_dev={"renewable_energy": 5.0},
        )
        assert datum.total_metrics == 20
        assert datum.historical_data == history
        assert datum.peer_average == {"renewable_energy": 42.0}
