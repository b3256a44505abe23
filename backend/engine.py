"""
Library entry points — the surface the surrounding application calls.

  extract_profile(text)            → ExtractedDocumentProfile (no feed, no graph)
  run_verification(document, ...)  → VerificationReport for one document
  run_batch(documents, ...)        → list[VerificationReport], processed concurrently

run_verification / run_batch drive the LangGraph pipeline in graph.py. The
verification feed defaults to the one configured by the environment
(config.build_feed); pass feed=None explicitly to run without verification.
"""

import logging
import time
import uuid
from typing import Any, Callable, Optional, Union

from config import build_feed, get_settings
from events import emit_node_complete, register, unregister
from graph import graph
from schemas import (
    DocumentInput,
    ExtractedDocumentProfile,
    HistoricalYear,
    VerificationReport,
)
from state import VerificationState
from tools.metadata_extractor import (
    extract_claimed_improvements,
    extract_disclosure_evidence,
    extract_metadata,
)
from tools.metric_extractor import extract_metrics
from tools.verification_feed import VerificationFeed

logger = logging.getLogger("esg_engine")

# Sentinel: "use the feed configured by the environment"
_CONFIGURED = object()

EventCallback = Callable[[dict[str, Any]], None]


def extract_profile(text: str) -> ExtractedDocumentProfile:
    """Run the four text analysers directly. Empty text → empty profile."""
    text = text or ""
    return ExtractedDocumentProfile(
        metrics=extract_metrics(text),
        claimed_improvements=extract_claimed_improvements(text),
        metadata=extract_metadata(text),
        evidence=extract_disclosure_evidence(text),
    )


def _as_document(document: Union[DocumentInput, str]) -> DocumentInput:
    if isinstance(document, DocumentInput):
        return document
    return DocumentInput(text=document or "")


def _initial_state(
    document: DocumentInput,
    total_metrics: Optional[int],
    historical_data: Optional[list[HistoricalYear]],
    peer_average: Optional[dict[str, float]],
    peer_std_dev: Optional[dict[str, float]],
) -> VerificationState:
    return VerificationState(
        document_id=str(uuid.uuid4()),
        text=document.text,
        file_name=document.file_name,
        total_metrics=total_metrics or get_settings().total_metrics,
        historical_data=historical_data or [],
        peer_average=peer_average or {},
        peer_std_dev=peer_std_dev or {},
        started_at=time.time(),
        logs=[],
        pipeline_trace=[],
    )


def _resolve_feed(feed: Any) -> Optional[VerificationFeed]:
    return build_feed() if feed is _CONFIGURED else feed


def run_verification(
    document: Union[DocumentInput, str],
    feed: Any = _CONFIGURED,
    *,
    total_metrics: Optional[int] = None,
    historical_data: Optional[list[HistoricalYear]] = None,
    peer_average: Optional[dict[str, float]] = None,
    peer_std_dev: Optional[dict[str, float]] = None,
    on_event: Optional[EventCallback] = None,
) -> VerificationReport:
    """Verify one document end to end.

    `on_event` receives log events in real time while the graph runs, then
    one node_complete event per agent.
    """
    doc = _as_document(document)
    state = _initial_state(doc, total_metrics, historical_data, peer_average, peer_std_dev)
    document_id = state["document_id"]
    config = {"configurable": {"verification_feed": _resolve_feed(feed)}}

    if on_event is not None:
        register(document_id, on_event)
    try:
        logger.info("[%s] Graph execution starting (%s)...", document_id[:8], doc.file_name or "inline text")
        result = graph.invoke(state, config=config)
        logger.info("[%s] Graph execution completed", document_id[:8])

        for entry in result.get("pipeline_trace", []):
            emit_node_complete(document_id, entry["agent"], entry["ms"])
    finally:
        unregister(document_id)

    return result["final_report"]


def run_batch(
    documents: list[Union[DocumentInput, str]],
    feed: Any = _CONFIGURED,
    *,
    max_concurrency: Optional[int] = None,
    total_metrics: Optional[int] = None,
) -> list[VerificationReport]:
    """Verify independent documents concurrently; results keep input order."""
    if not documents:
        return []

    states = [
        _initial_state(_as_document(d), total_metrics, None, None, None)
        for d in documents
    ]
    concurrency = max_concurrency or get_settings().max_concurrency
    config = {
        "configurable": {"verification_feed": _resolve_feed(feed)},
        "max_concurrency": concurrency,
    }

    logger.info("Batch of %d documents starting (max_concurrency=%d)", len(states), concurrency)
    results = graph.batch(states, config=config)
    logger.info("Batch of %d documents completed", len(states))

    return [r["final_report"] for r in results]
