"""
Logging context management using contextvars.

Run-level identifiers (``run_id``, ``channel``) and the current unit of
work (``stage``, ``category``, ``strategy``) are held in a context variable
and attached to every log entry by :func:`add_context_processor`, so the
discovery, fetch and reconcile code never has to thread them through each
call.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import asdict, dataclass
from typing import Any

import structlog


@dataclass
class LogContext:
    """
    Run context attached to all log entries.

    Core identifiers:
        run_id: Unique export run ID
        channel: Execution channel kind ("local", "remote", "stub")

    Tracing (for nested timing blocks):
        span_id: Current span identifier
        parent_span_id: Parent span for nested operations

    Unit of work:
        stage: Current pipeline stage ("discovery", "fetch.primary", ...)
        category: Post type being processed
        strategy: Discovery strategy being attempted
    """

    run_id: str | None = None
    channel: str | None = None

    span_id: str | None = None
    parent_span_id: str | None = None

    stage: str | None = None
    category: str | None = None
    strategy: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merge(self, **kwargs) -> LogContext:
        """Create new context with merged values."""
        current = asdict(self)
        current.update({k: v for k, v in kwargs.items() if v is not None and k in current})
        return LogContext(**current)


_log_context: ContextVar[LogContext] = ContextVar("log_context")  # noqa: B039


def get_context() -> LogContext:
    """Get the current log context."""
    return _log_context.get(LogContext())


def set_context(
    run_id: str | None = None,
    channel: str | None = None,
    stage: str | None = None,
    category: str | None = None,
    strategy: str | None = None,
) -> LogContext:
    """
    Set the current log context.

    This replaces the current context. Use push_context() for a scoped addition.
    """
    ctx = LogContext(run_id=run_id, channel=channel, stage=stage, category=category, strategy=strategy)
    _log_context.set(ctx)
    return ctx


def clear_context() -> None:
    """Clear the current context (reset to empty)."""
    _log_context.set(LogContext())


class _ContextToken:
    """Token for restoring context after a scoped operation."""

    def __init__(self, token):
        self._token = token

    def restore(self):
        """Restore the previous context."""
        _log_context.reset(self._token)


def push_context(**kwargs) -> _ContextToken:
    """
    Push new context values, returning a token to restore later.

    Usage:
        token = push_context(category="page", stage="fetch.primary")
        try:
            fetch_category("page")
        finally:
            token.restore()
    """
    updated = get_context().merge(**kwargs)
    return _ContextToken(_log_context.set(updated))


def add_context_processor(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that adds run context to every log entry.

    Keys already present on the event win over context values.
    """
    for key, value in get_context().to_dict().items():
        event_dict.setdefault(key, value)
    return event_dict


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (typically ``get_logger(__name__)``)."""
    return structlog.get_logger(name)
