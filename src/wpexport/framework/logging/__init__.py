"""
wp-export logging - structured, run-aware logging.

This module provides:
- Structured logging with structlog
- Run context propagation via contextvars
- Timing utilities for stage tracking
- Environment-based configuration

Usage:
    from wpexport.framework.logging import configure_logging, get_logger, log_step, set_context

    configure_logging()
    log = get_logger(__name__)

    set_context(run_id="3f2a9c01b7de", channel="remote")

    with log_step("fetch"):
        fetch_all()
"""

from wpexport.framework.logging.config import configure_logging
from wpexport.framework.logging.context import (
    LogContext,
    clear_context,
    get_context,
    get_logger,
    push_context,
    set_context,
)
from wpexport.framework.logging.timing import log_row_counts, log_step

__all__ = [
    # Configuration
    "configure_logging",
    # Context
    "get_logger",
    "set_context",
    "clear_context",
    "get_context",
    "push_context",
    "LogContext",
    # Timing
    "log_step",
    "log_row_counts",
]
