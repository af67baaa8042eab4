"""
Timing metrics for observability.

Responsibilities:
- Measure durations using monotonic time (immune to clock changes)
- Emit metrics as JSONL events via observability.logger
- Never aggregate: one metric = one log event

Durations use monotonic time; event timestamps (ts_ms) use wall-clock time
for human readability.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from observability import logger


@contextmanager
def timed(
    name: str,
    *,
    session_id: str | None = None,
    state: str | None = None,
    details: dict[str, Any] | None = None,
) -> Iterator[None]:
    """
    Time the enclosed block and emit one METRIC_TIMER event.

    The metric is emitted exactly once, including when the block raises;
    exceptions propagate unchanged.

    Usage:
        with timed("speech_session_connect", session_id=session.session_id):
            await adapter.open(sink)
    """
    start_ns = time.monotonic_ns()
    try:
        yield
    finally:
        logger.log_event({
            "ts_ms": logger.now_ms(),
            "event_type": "METRIC_TIMER",
            "metric": name,
            "value_ms": (time.monotonic_ns() - start_ns) // 1_000_000,
            "session_id": session_id,
            "state": state,
            "details": details or {},
        })
