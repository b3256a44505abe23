"""
Node 1d — Auditor — LMA Green Loan Principles compliance.

Reads:  state["text"]
Writes: state["lma_compliance"], state["compliance_summary"]

Each principle is pass / partial / fail from keyword evidence; the summary
scores pass as 1 and partial as ½.
"""

import time
from typing import Any

from events import emit_log
from state import VerificationState
from tools.lma_mapper import map_lma_compliance, summarize_compliance


def auditor_node(state: VerificationState) -> dict[str, Any]:
    started_at = time.time()
    document_id = state.get("document_id", "")

    logs: list[dict] = []
    ts = lambda: int(time.time() * 1000)  # noqa: E731

    def log(msg: str) -> None:
        logs.append({"agent": "auditor", "msg": msg, "ts": ts()})
        emit_log(document_id, "auditor", msg)

    log("Mapping document to LMA Green Loan Principles...")

    mappings = map_lma_compliance(state.get("text") or "")
    for m in mappings:
        suffix = f" ({m.notes})" if m.notes else ""
        log(f"{m.principle}: {m.status.upper()}{suffix}")

    summary = summarize_compliance(mappings)
    log(f"LMA compliance: {summary.score}/100 ({summary.status})")

    duration_ms = int((time.time() - started_at) * 1000)
    log(f"Audit complete in {duration_ms}ms")

    return {
        "lma_compliance": mappings,
        "compliance_summary": summary,
        "logs": logs,
        "pipeline_trace": [{"agent": "auditor", "started_at": started_at, "ms": duration_ms}],
    }
