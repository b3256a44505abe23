"""
Risk alerts — analyst-facing action items derived from one document run.

Rules:
  - Scope 3 emissions missing              → medium, 30 days
  - Baseline year missing                  → medium, 30 days
  - Comparison row classified "critical"   → critical, immediate
  - Comparison row classified "major"      → high, 14 days
  - Metadata completeness below 50%        → high, 14 days

Alerts are returned sorted by priority (1 = most urgent), stable within
a priority.
"""

import re

from schemas import ClaimedVsVerified, ExtractedDocumentProfile, RiskAlert

LOW_COMPLETENESS = 50


def _slug(metric: str) -> str:
    return re.sub(r"\s+", "-", metric.strip().lower())


def _fmt(value) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _comparison_alert(row: ClaimedVsVerified) -> RiskAlert | None:
    if row.status == "critical":
        if row.claimed == "N/A":
            description = f"{row.metric} not disclosed in document; verification could not be attempted"
        elif row.verified == "N/A":
            description = f"Borrower claimed {_fmt(row.claimed)}, no independent verification available"
        else:
            description = (
                f"Borrower claimed {_fmt(row.claimed)}, verified shows {_fmt(row.verified)}. "
                f"Deviation: {row.deviation:.1f}%"
            )
        return RiskAlert(
            id=f"alert-{_slug(row.metric)}",
            severity="critical",
            title=f"Major {row.metric} data discrepancy",
            description=description,
            recommended_action="Request corrected data immediately",
            notify=["Compliance Manager", "Loan Officer"],
            priority=1,
            timeline="Immediate",
        )
    if row.status == "major":
        return RiskAlert(
            id=f"alert-{_slug(row.metric)}-major",
            severity="high",
            title=f"{row.metric} data discrepancy",
            description=(
                f"Claimed {_fmt(row.claimed)} vs verified {_fmt(row.verified)} "
                f"({row.deviation:.1f}% deviation)"
            ),
            recommended_action="Request clarification and supporting documentation",
            notify=["Loan Officer"],
            priority=2,
            timeline="14 days",
        )
    return None


def generate_alerts(
    profile: ExtractedDocumentProfile,
    comparisons: list[ClaimedVsVerified],
) -> list[RiskAlert]:
    alerts: list[RiskAlert] = []
    emissions = profile.metrics.carbon_emissions

    if emissions.scope3 is None:
        alerts.append(RiskAlert(
            id="alert-scope3",
            severity="medium",
            title="Missing Scope 3 emissions",
            description="Scope 3 emissions not reported in document (LMA Green Loan requirement)",
            recommended_action="Request full emissions disclosure including Scope 3",
            notify=["Loan Officer", "Compliance Manager"],
            priority=2,
            timeline="30 days",
        ))

    if emissions.baseline_year is None:
        alerts.append(RiskAlert(
            id="alert-baseline",
            severity="medium",
            title="Missing baseline year",
            description="Carbon emissions baseline year not found in document",
            recommended_action="Request baseline year specification for accurate reduction calculations",
            notify=["Loan Officer"],
            priority=3,
            timeline="30 days",
        ))

    for row in comparisons:
        alert = _comparison_alert(row)
        if alert is not None:
            alerts.append(alert)

    completeness = profile.metadata.completeness
    if completeness < LOW_COMPLETENESS:
        alerts.append(RiskAlert(
            id="alert-completeness",
            severity="high",
            title="Low data completeness",
            description=f"Only {completeness}% of expected ESG metrics found in document",
            recommended_action="Request complete ESG report with all standard metrics",
            notify=["Loan Officer"],
            priority=2,
            timeline="14 days",
        ))

    return sorted(alerts, key=lambda a: a.priority)
