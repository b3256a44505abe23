"""
Tests for tools/esg_rollup.py.

Covers:
  - E/S/G category scores and the weighted overall
  - Per-year history built from quarterly records
  - Disclosure flags: transparency, decline, cherry-picking, vague targets
  - Monthly snapshot aggregation
"""

import pytest
from pydantic import ValidationError

from schemas import ESGMetricRecord, ESGMetricSnapshot
from tools.esg_rollup import (
    aggregate_monthly,
    calculate_esg_score,
    detect_disclosure_flags,
    has_cherry_picking,
    has_performance_decline,
    historical_data_from_records,
    transparency_score,
)


def _record(metric, category, value, quarter="Q1", year=2023, target=None, i=0):
    return ESGMetricRecord(
        id=f"r-{metric}-{year}-{quarter}-{i}",
        loan_id="loan-1",
        category=category,
        metric=metric,
        value=value,
        quarter=quarter,
        year=year,
        target=target,
    )


def _portfolio(board_latest: float, with_targets: bool = True) -> list[ESGMetricRecord]:
    target = 100.0 if with_targets else None
    return [
        # newest first so ordering is up to the roll-up
        _record("renewable_share", "environmental", 45, "Q2", target=target),
        _record("renewable_share", "environmental", 40, "Q1", target=target),
        _record("women_in_leadership", "social", 32, "Q2", target=target),
        _record("women_in_leadership", "social", 30, "Q1", target=target),
        _record("board_independence", "governance", board_latest, "Q2", target=target),
        _record("board_independence", "governance", 60, "Q1", target=target),
    ]


def _snapshot(month, loan_id="loan-1", reported=None, verified=None, transparency=80.0, i=0):
    return ESGMetricSnapshot(
        id=f"s-{month}-{loan_id}-{i}",
        loan_id=loan_id,
        loan_name="Green Loan",
        month=month,
        reported_reduction=reported,
        verified_reduction=verified,
        transparency_score=transparency,
        compliance_score=70.0,
        risk_score=20.0,
    )


class TestEsgScore:

    def test_weighted_overall(self):
        records = [
            _record("a", "environmental", 80),
            _record("b", "environmental", 60),
            _record("c", "social", 50),
            _record("d", "governance", 90),
        ]
        score = calculate_esg_score(records)
        assert (score.environmental, score.social, score.governance) == (70, 50, 90)
        assert score.overall == 70

    def test_missing_category_scores_zero(self):
        score = calculate_esg_score([_record("a", "environmental", 50)])
        assert score.social == 0
        assert score.overall == 20

    def test_empty(self):
        score = calculate_esg_score([])
        assert score.overall == 0


class TestHistoricalData:

    def test_yearly_means_oldest_first(self):
        records = [
            _record("renewable_share", "environmental", 30, year=2023),
            _record("renewable_share", "environmental", 10, "Q1", year=2022),
            _record("renewable_share", "environmental", 20, "Q2", year=2022),
        ]
        history = historical_data_from_records(records)
        assert [h.year for h in history] == [2022, 2023]
        assert history[0].metrics == {"renewable_share": 15.0}
        assert history[1].metrics == {"renewable_share": 30.0}


class TestDisclosureFlags:

    def test_healthy_portfolio(self):
        flags = detect_disclosure_flags(_portfolio(board_latest=58))
        assert flags.transparency_score == 80
        assert flags.performance_decline is False
        assert flags.cherry_picking is False
        assert flags.vague_targets is False
        assert flags.risk_level == "low"
        assert flags.risk_factors == []

    def test_performance_decline(self):
        records = _portfolio(board_latest=40)
        assert has_performance_decline(records) is True
        flags = detect_disclosure_flags(records)
        assert flags.risk_level == "medium"
        assert flags.risk_factors == ["Performance decline detected - >20% drop in key metrics"]

    def test_cherry_picking_when_every_series_improves(self):
        records = _portfolio(board_latest=62)
        assert has_cherry_picking(records) is True
        assert detect_disclosure_flags(records).risk_level == "medium"

    def test_cherry_picking_needs_three_records(self):
        records = [
            _record("a", "environmental", 1, "Q1"),
            _record("a", "environmental", 2, "Q2"),
        ]
        assert has_cherry_picking(records) is False

    def test_vague_targets_and_low_transparency(self):
        flags = detect_disclosure_flags(_portfolio(board_latest=58, with_targets=False))
        assert flags.transparency_score == 50
        assert flags.vague_targets is True
        assert flags.risk_level == "medium"
        assert flags.risk_factors == [
            "Low transparency score - missing data points",
            "Vague targets - no specific numbers or timelines",
        ]

    def test_very_low_transparency_is_high_risk(self):
        flags = detect_disclosure_flags([_record("a", "environmental", 10)])
        assert flags.transparency_score == 18
        assert flags.risk_level == "high"

    def test_empty_records(self):
        assert transparency_score([]) == 0
        assert detect_disclosure_flags([]).risk_level == "high"


class TestAggregateMonthly:

    def test_groups_and_averages(self):
        snapshots = [
            _snapshot("2024-02", reported=30, verified=25, transparency=70),
            _snapshot("2024-01", reported=20, verified=18, transparency=80),
            _snapshot("2024-01", loan_id="loan-2", transparency=91, i=1),
        ]
        result = aggregate_monthly(snapshots)
        assert [m.month for m in result] == ["2024-01", "2024-02"]
        january = result[0]
        assert january.data_points == 2
        assert january.reported_reduction == 20
        assert january.verified_reduction == 18
        assert january.transparency_score == 86  # 85.5 rounds half up

    def test_latest_months_only(self):
        snapshots = [_snapshot(m) for m in ("2024-01", "2024-02", "2024-03")]
        assert [m.month for m in aggregate_monthly(snapshots, months=2)] == ["2024-02", "2024-03"]
        assert aggregate_monthly(snapshots, months=0) == []

    def test_loan_filter(self):
        snapshots = [_snapshot("2024-01"), _snapshot("2024-01", loan_id="loan-2", i=1)]
        result = aggregate_monthly(snapshots, loan_id="loan-2")
        assert result[0].data_points == 1

    def test_unpaired_reductions_are_none(self):
        result = aggregate_monthly([_snapshot("2024-01", reported=10)])
        assert result[0].reported_reduction is None
        assert result[0].verified_reduction is None

    @pytest.mark.parametrize("month", ["2024-13", "24-01", "2024/01"])
    def test_invalid_month_rejected(self, month):
        with pytest.raises(ValidationError):
            _snapshot(month)
