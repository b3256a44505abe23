"""
Node 1b — Metadata — document metadata and disclosure evidence.

Reads:  state["text"]
Writes: state["metadata"], state["evidence"]
"""

import time
from typing import Any

from events import emit_log
from state import VerificationState
from tools.metadata_extractor import extract_disclosure_evidence, extract_metadata


def metadata_node(state: VerificationState) -> dict[str, Any]:
    started_at = time.time()
    document_id = state.get("document_id", "")
    text = state.get("text") or ""

    logs: list[dict] = []
    ts = lambda: int(time.time() * 1000)  # noqa: E731

    def log(msg: str) -> None:
        logs.append({"agent": "metadata", "msg": msg, "ts": ts()})
        emit_log(document_id, "metadata", msg)

    metadata = extract_metadata(text)
    log(
        f"Company: {metadata.company_name or 'Not found'} | "
        f"Year: {metadata.reporting_year or 'Not found'} | "
        f"Type: {metadata.document_type or 'Not found'}"
    )
    if metadata.framework_references:
        log("Frameworks referenced: " + ", ".join(metadata.framework_references))
    log(f"Metadata completeness: {metadata.completeness}%")

    evidence = extract_disclosure_evidence(text)
    log(
        f"Methodology statement: {'yes' if evidence.methodology_statement else 'no'} | "
        f"Assurance: {evidence.assurance_type}"
    )
    if evidence.certifications:
        log("Certifications named: " + ", ".join(evidence.certifications))

    duration_ms = int((time.time() - started_at) * 1000)
    log(f"Metadata complete in {duration_ms}ms")

    return {
        "metadata": metadata,
        "evidence": evidence,
        "logs": logs,
        "pipeline_trace": [{"agent": "metadata", "started_at": started_at, "ms": duration_ms}],
    }
