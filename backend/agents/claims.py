"""
Node 1c — Claims — self-reported improvement claims.

Reads:  state["text"]
Writes: state["claimed_improvements"]
"""

import time
from typing import Any

from events import emit_log
from state import VerificationState
from tools.metadata_extractor import extract_claimed_improvements


def claims_node(state: VerificationState) -> dict[str, Any]:
    started_at = time.time()
    document_id = state.get("document_id", "")

    logs: list[dict] = []
    ts = lambda: int(time.time() * 1000)  # noqa: E731

    def log(msg: str) -> None:
        logs.append({"agent": "claims", "msg": msg, "ts": ts()})
        emit_log(document_id, "claims", msg)

    claims = extract_claimed_improvements(state.get("text") or "")
    for claim in claims:
        log(f"{claim.metric}: {claim.claimed} (baseline {claim.baseline})")
    if not claims:
        log("No improvement claims found")

    duration_ms = int((time.time() - started_at) * 1000)
    log(f"Claims complete in {duration_ms}ms")

    return {
        "claimed_improvements": claims,
        "logs": logs,
        "pipeline_trace": [{"agent": "claims", "started_at": started_at, "ms": duration_ms}],
    }
