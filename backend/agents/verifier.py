"""
Node 2 — Verifier — claimed vs verified comparison (fan-in point).

Reads:  state["metrics"], state["claimed_improvements"], state["metadata"],
        state["evidence"], state["total_metrics"], state["historical_data"],
        state["peer_average"], state["peer_std_dev"]
        config["configurable"]["verification_feed"]
Writes: state["feed_result"], state["claimed_vs_verified"],
        state["verification_sources"], state["verification_data"]

Waits for all four analyser branches. The feed is the only I/O in the
pipeline; any feed failure is treated as "no verification" (fail closed).
"""

import time
from typing import Any, Optional

from langchain_core.runnables import RunnableConfig

from events import emit_log
from schemas import (
    DisclosureEvidence,
    DocumentMetadata,
    ExtractedDocumentProfile,
    ExtractedMetrics,
    ThirdPartyVerification,
)
from state import VerificationState
from tools.verification import (
    compare_claimed_vs_verified,
    convert_to_verification_data,
    generate_verification_sources,
)
from tools.verification_feed import VerificationFeed, fetch_verification


def profile_from_state(state: VerificationState) -> ExtractedDocumentProfile:
    """Assemble the document profile from the branch outputs."""
    return ExtractedDocumentProfile(
        metrics=state.get("metrics") or ExtractedMetrics(),
        claimed_improvements=state.get("claimed_improvements") or [],
        metadata=state.get("metadata") or DocumentMetadata(),
        evidence=state.get("evidence") or DisclosureEvidence(),
    )


def _feed_from_config(config: Optional[RunnableConfig]) -> Optional[VerificationFeed]:
    if not config:
        return None
    return (config.get("configurable") or {}).get("verification_feed")


def verifier_node(state: VerificationState, config: RunnableConfig) -> dict[str, Any]:
    started_at = time.time()
    document_id = state.get("document_id", "")

    logs: list[dict] = []
    ts = lambda: int(time.time() * 1000)  # noqa: E731

    def log(msg: str) -> None:
        logs.append({"agent": "verifier", "msg": msg, "ts": ts()})
        emit_log(document_id, "verifier", msg)

    profile = profile_from_state(state)
    feed = _feed_from_config(config)

    if feed is None:
        log("No verification feed configured: all claims unverified")
    else:
        log(f"Requesting verification from {type(feed).__name__}...")

    feed_result = fetch_verification(feed, profile)
    if feed_result is None:
        if feed is not None:
            log("Verification feed returned nothing, treating claims as unverified")
    elif feed_result.simulated:
        log("SIMULATED verification values, not genuine third-party data")
    else:
        log(f"Verification received from {feed_result.source}")

    comparisons = compare_claimed_vs_verified(profile, feed_result)
    for row in comparisons:
        log(f"{row.metric}: claimed {row.claimed}, verified {row.verified} → {row.status}")

    third_party = feed_result.third_party if feed_result is not None else ThirdPartyVerification()
    sources = generate_verification_sources(third_party)

    datum = convert_to_verification_data(
        profile,
        feed_result,
        total_metrics=state.get("total_metrics") or 47,
        historical_data=state.get("historical_data"),
        peer_average=state.get("peer_average"),
        peer_std_dev=state.get("peer_std_dev"),
    )
    log(
        f"{datum.provided_metrics}/{datum.total_metrics} metrics provided, "
        f"{len(datum.verified_metrics)}/{len(datum.claimed_metrics)} claims verified"
    )

    duration_ms = int((time.time() - started_at) * 1000)
    log(f"Verification complete in {duration_ms}ms")

    return {
        "feed_result": feed_result,
        "claimed_vs_verified": comparisons,
        "verification_sources": sources,
        "verification_data": datum,
        "logs": logs,
        "pipeline_trace": [{"agent": "verifier", "started_at": started_at, "ms": duration_ms}],
    }
