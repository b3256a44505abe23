"""
Node 3 — Scorer — greenwashing risk, alerts and the final report.

Reads:  state["verification_data"], state["claimed_vs_verified"], every
        branch output, state["pipeline_trace"], state["logs"]
Writes: state["greenwashing_risk"], state["alerts"], state["final_report"]
        (the report carries every log entry, its own included)

Scoring algorithm (tools/greenwashing.py):
  overall = 0.20·completeness + 0.25·external verification
          + 0.20·methodology + 0.15·audit + 0.10·history + 0.10·peers
  risk level from the rounded overall: ≤30 low, ≤60 medium, >60 high
"""

import time
from datetime import datetime, timezone
from typing import Any

from agents.verifier import profile_from_state
from events import emit_log
from schemas import (
    AgentTiming,
    LMAComplianceSummary,
    LogEntry,
    PipelineTrace,
    VerificationDatum,
    VerificationReport,
)
from state import VerificationState
from tools.alerts import generate_alerts
from tools.greenwashing import calculate_greenwashing_risk
from tools.lma_mapper import summarize_compliance


def _build_pipeline(trace: list[dict], started_at: float) -> PipelineTrace:
    agents = [AgentTiming(agent=t["agent"], duration_ms=t["ms"]) for t in trace]
    return PipelineTrace(
        total_duration_ms=int((time.time() - started_at) * 1000),
        agents=agents,
    )


def scorer_node(state: VerificationState) -> dict[str, Any]:
    started_at = time.time()
    document_id = state.get("document_id", "")

    logs: list[dict] = []
    ts = lambda: int(time.time() * 1000)  # noqa: E731

    def log(msg: str) -> None:
        logs.append({"agent": "scorer", "msg": msg, "ts": ts()})
        emit_log(document_id, "scorer", msg)

    log("Calculating greenwashing risk...")

    datum = state.get("verification_data") or VerificationDatum()
    risk = calculate_greenwashing_risk(datum)
    for item in risk.breakdown:
        log(f"{item.component}: {item.score:.1f} × {item.weight:.2f} = {item.weighted_score:.1f}")
    log(f"Greenwashing risk: {risk.overall_score}/100 ({risk.risk_level})")

    profile = profile_from_state(state)
    comparisons = state.get("claimed_vs_verified") or []
    alerts = generate_alerts(profile, comparisons)
    log(f"{len(alerts)} alerts raised")

    duration_ms = int((time.time() - started_at) * 1000)
    own_trace = {"agent": "scorer", "started_at": started_at, "ms": duration_ms}
    log(f"Scoring complete in {duration_ms}ms")

    mappings = state.get("lma_compliance") or []
    summary: LMAComplianceSummary = state.get("compliance_summary") or summarize_compliance(mappings)
    feed_result = state.get("feed_result")

    report = VerificationReport(
        document_id=document_id,
        file_name=state.get("file_name"),
        generated_at=datetime.now(timezone.utc).isoformat(),
        sections=state.get("sections") or [],
        profile=profile,
        claimed_vs_verified=comparisons,
        verification_sources=state.get("verification_sources") or [],
        verification_simulated=bool(feed_result is not None and feed_result.simulated),
        verification_data=datum,
        lma_compliance=mappings,
        compliance_summary=summary,
        greenwashing_risk=risk,
        alerts=alerts,
        pipeline=_build_pipeline(
            list(state.get("pipeline_trace") or []) + [own_trace],
            state.get("started_at") or started_at,
        ),
        logs=[LogEntry(**entry) for entry in list(state.get("logs") or []) + logs],
    )

    return {
        "greenwashing_risk": risk,
        "alerts": alerts,
        "final_report": report,
        "logs": logs,
        "pipeline_trace": [own_trace],
    }
