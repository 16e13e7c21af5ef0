"""
Timing utilities for stage logging.

- Context manager: ``with log_step("fetch"):``
- Row counts: ``log_row_counts(log, "reconcile", rows_in=..., rows_out=...)``

Start events are logged at DEBUG and end events at INFO with
``duration_ms``; the span id is pushed into the log context so nested
steps link to their parent.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from wpexport.framework.logging.context import get_context, get_logger, push_context


def _generate_span_id() -> str:
    """Generate a short span ID (8 hex chars)."""
    return uuid.uuid4().hex[:8]


@dataclass
class TimingResult:
    """Result of a timed operation with tracing support."""

    step: str
    span_id: str = field(default_factory=_generate_span_id)
    parent_span_id: str | None = None
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    metrics: dict[str, Any] = field(default_factory=dict)
    status: str = "ok"
    error_info: dict[str, Any] | None = None

    def stop(self) -> TimingResult:
        """Record end time (first call wins)."""
        if self.ended_at is None:
            self.ended_at = time.perf_counter()
        return self

    @property
    def duration_seconds(self) -> float:
        if self.ended_at is None:
            return time.perf_counter() - self.started_at
        return self.ended_at - self.started_at

    @property
    def duration_ms(self) -> float:
        return self.duration_seconds * 1000

    def add_metric(self, key: str, value: Any) -> TimingResult:
        """Add a metric to include in the end event."""
        self.metrics[key] = value
        return self

    def set_error(self, e: BaseException) -> TimingResult:
        self.status = "error"
        self.error_info = {"error_type": type(e).__name__, "error_message": str(e)}
        return self

    def to_log_dict(self) -> dict[str, Any]:
        result = {"duration_ms": round(self.duration_ms, 2), "span_id": self.span_id}
        if self.parent_span_id:
            result["parent_span_id"] = self.parent_span_id
        result.update(self.metrics)
        return result

    def to_error_dict(self) -> dict[str, Any]:
        result = self.to_log_dict()
        result["status"] = "error"
        if self.error_info:
            result.update(self.error_info)
        return result


@contextmanager
def log_step(event: str, log_start: bool = True, level: str = "info", **extra_metrics) -> Iterator[TimingResult]:
    """
    Context manager that logs step start/end with timing.

    Usage:
        with log_step("reconcile", categories=3) as timer:
            result = engine.run()
            timer.add_metric("rows_merged", result.rows_merged)

        # DEBUG reconcile.start span_id=a1b2c3d4 categories=3
        # INFO  reconcile.end   span_id=a1b2c3d4 duration_ms=42.5 categories=3 rows_merged=120

    An exception inside the block is logged as ``<event>.error`` and
    re-raised.
    """
    log = get_logger("wpexport.timing")

    parent_span = get_context().span_id
    timer = TimingResult(step=event, parent_span_id=parent_span, metrics=dict(extra_metrics))
    context_token = push_context(span_id=timer.span_id, parent_span_id=parent_span, stage=event)

    try:
        if log_start:
            start_fields = {"span_id": timer.span_id}
            if parent_span:
                start_fields["parent_span_id"] = parent_span
            start_fields.update(extra_metrics)
            log.debug(f"{event}.start", **start_fields)

        yield timer

    except Exception as e:
        timer.stop()
        timer.set_error(e)
        log.error(f"{event}.error", **timer.to_error_dict())
        raise

    finally:
        timer.stop()
        context_token.restore()

    getattr(log, level)(f"{event}.end", **timer.to_log_dict())


def log_row_counts(
    log,
    step: str,
    *,
    rows_in: int | None = None,
    rows_out: int | None = None,
    rows_rejected: int | None = None,
    **extra,
) -> None:
    """
    Log row count transformation for a processing step.

    Usage:
        log_row_counts(log, "reconcile", rows_in=120, rows_out=118, rows_rejected=2)
    """
    metrics = {
        k: v
        for k, v in [("rows_in", rows_in), ("rows_out", rows_out), ("rows_rejected", rows_rejected)]
        if v is not None
    }
    metrics.update(extra)
    log.info(f"{step}.rows", **metrics)
