"""
Node 1a — Extractor — section chunking + metric extraction (no API call).

Reads:  state["text"]
Writes: state["sections"], state["metrics"]

Runs in parallel with the metadata, claims and auditor nodes. The metric
cascade scans the full text, not the chunks; chunks are kept for display.
"""

import time
from typing import Any

from events import emit_log
from schemas import ExtractedMetrics, metric_status
from state import VerificationState
from tools.metric_extractor import extract_metrics
from tools.section_chunker import chunk_sections


def _status_counts(metrics: ExtractedMetrics) -> dict[str, int]:
    counts = {"found": 0, "partial": 0, "missing": 0}
    for slot in metrics.slots():
        counts[metric_status(slot)] += 1
    return counts


def extractor_node(state: VerificationState) -> dict[str, Any]:
    """Deterministic extractor node. Empty text yields empty sections and metrics."""
    started_at = time.time()
    document_id = state.get("document_id", "")
    text = state.get("text") or ""

    logs: list[dict] = []
    ts = lambda: int(time.time() * 1000)  # noqa: E731

    def log(msg: str) -> None:
        logs.append({"agent": "extractor", "msg": msg, "ts": ts()})
        emit_log(document_id, "extractor", msg)

    log(f"Reading document text ({len(text)} characters)...")

    sections = chunk_sections(text)
    if sections:
        log("Sections: " + ", ".join(f"{c.section} ({c.confidence}%)" for c in sections))
    else:
        log("No ESG topic sections detected")

    metrics = extract_metrics(text)
    counts = _status_counts(metrics)
    log(
        f"Metrics: {counts['found']} found, {counts['partial']} partial, "
        f"{counts['missing']} missing"
    )
    if metrics.carbon_emissions.baseline_year is not None:
        log(f"Baseline year: {metrics.carbon_emissions.baseline_year}")

    duration_ms = int((time.time() - started_at) * 1000)
    log(f"Extraction complete in {duration_ms}ms")

    return {
        "sections": sections,
        "metrics": metrics,
        "logs": logs,
        "pipeline_trace": [{"agent": "extractor", "started_at": started_at, "ms": duration_ms}],
    }
