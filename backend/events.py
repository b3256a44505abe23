"""
Real-time event emitter registry for progress reporting.

Allows agent nodes (running inside LangGraph, possibly on worker threads
for parallel branches and batches) to push log events to a caller-supplied
callback as they happen — not after the entire pipeline completes. Every
event is also written to the "esg_engine.events" logger.
"""

import logging
import threading
import time
from typing import Any, Callable

logger = logging.getLogger("esg_engine.events")

# document_id → callback that receives each event dict
_emitters: dict[str, Callable[[dict[str, Any]], None]] = {}
_lock = threading.Lock()


def register(document_id: str, callback: Callable[[dict[str, Any]], None]) -> None:
    """Register an event callback for a verification run."""
    with _lock:
        _emitters[document_id] = callback


def unregister(document_id: str) -> None:
    """Remove the callback after the pipeline finishes."""
    with _lock:
        _emitters.pop(document_id, None)


def _dispatch(document_id: str, event: dict[str, Any]) -> None:
    with _lock:
        cb = _emitters.get(document_id)
    if cb:
        cb(event)


def emit_log(document_id: str, agent: str, message: str) -> None:
    """Push a log event for one run."""
    logger.debug("[%s] %s: %s", document_id[:8], agent, message)
    _dispatch(document_id, {
        "type": "log",
        "agent": agent,
        "message": message,
        "timestamp": str(int(time.time() * 1000)),
    })


def emit_node_complete(document_id: str, agent: str, duration_ms: int) -> None:
    """Push a node_complete event for one run."""
    logger.debug("[%s] %s complete in %dms", document_id[:8], agent, duration_ms)
    _dispatch(document_id, {
        "type": "node_complete",
        "agent": agent,
        "duration_ms": duration_ms,
    })
