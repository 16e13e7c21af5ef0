"""
Structured error types for wp-export.

Every failure the exporter can meet falls into one of three classes, and
the class decides who handles it:

- **Transport** (channel timeout, closed SSH session, non-zero wp-cli exit):
  always soft. The caller moves on to the next strategy or category.
- **Structural** (wrong field count, malformed quoting, empty stream):
  always soft. The offending row or stream is dropped and counted.
- **Fatal** (zero categories, zero primary records, zero merged rows after
  every fallback): aborts the run with a non-zero exit code.

Configuration errors sit beside these: they are raised before a run starts
and never reach the pipeline.

Manifesto:
    - **Typed hierarchy:** Callers branch on the class, not the message
    - **Explicit retry semantics:** Transport errors are retryable by
      continuation, never by repeating the same call
    - **Rich context:** Errors carry category/stage/command metadata
    - **Error chaining:** The original exception is kept as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                        ExportError                           │
        │     (category, retryable, context, cause)                    │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ChannelError       ParseError        ConfigError            │
        │  (TRANSPORT)        (STRUCTURE)       (CONFIG)               │
        │       │                                    │                 │
        │  ChannelTimeout                      MissingConfigError      │
        │  SessionClosedError                  InvalidConfigError      │
        │                                                              │
        │  DiscoveryError     FatalRunError                            │
        │  (DISCOVERY)        (FATAL, exit_code)                       │
        │                          │                                   │
        │           NoCategoriesError / NoRecordsError /               │
        │           NoMergedRowsError                                  │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> err = ChannelTimeout("wp post list timed out").with_context(
    ...     category="page", stage="fetch.primary")
    >>> err.retryable
    True
    >>> err.context.category
    'page'

    >>> NoRecordsError().exit_code
    3

Tags:
    error-handling, exception-hierarchy, soft-failure, wp-export

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Error categories used for log routing and summary reporting.

    Attributes:
        TRANSPORT: Channel timeout, disconnection, non-zero remote status
        STRUCTURE: Malformed rows, wrong field counts, empty streams
        DISCOVERY: A discovery strategy produced nothing usable
        CONFIG: Missing or invalid settings
        FATAL: Run-wide emptiness after all fallbacks
        INTERNAL: Bugs, unexpected state
    """

    TRANSPORT = "TRANSPORT"
    STRUCTURE = "STRUCTURE"
    DISCOVERY = "DISCOVERY"
    CONFIG = "CONFIG"
    FATAL = "FATAL"
    INTERNAL = "INTERNAL"


class ExitCode(IntEnum):
    """Process exit codes reported by the CLI."""

    OK = 0
    ERROR = 1
    NO_CATEGORIES = 2
    NO_RECORDS = 3
    NO_MERGED_ROWS = 4
    INTERRUPTED = 130


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only the fields that are set show up in ``to_dict()``; anything that
    has no dedicated field goes into ``metadata``.
    """

    run_id: str | None = None
    stage: str | None = None
    category: str | None = None
    strategy: str | None = None
    command: str | None = None
    channel: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["run_id", "stage", "category", "strategy", "command", "channel"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ExportError(Exception):
    """
    Base exception for all wp-export errors.

    Subclasses set ``default_category`` and ``default_retryable``; both can
    be overridden per instance.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ExportError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ChannelError("ssh exited 255").with_context(
                category="post", stage="fetch.primary"
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSPORT ERRORS (soft, retried by continuation)
# =============================================================================


class ChannelError(ExportError):
    """A command could not be completed over the execution channel."""

    default_category = ErrorCategory.TRANSPORT
    default_retryable = True


class ChannelTimeout(ChannelError):
    """The command exceeded its bounded timeout."""


class SessionClosedError(ChannelError):
    """The remote session was closed before the command finished."""


# =============================================================================
# STRUCTURAL ERRORS (soft, dropped and counted)
# =============================================================================


class ParseError(ExportError):
    """A row or stream could not be parsed."""

    default_category = ErrorCategory.STRUCTURE

    def __init__(
        self,
        message: str,
        *,
        line_number: int | None = None,
        raw: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.line_number = line_number
        self.raw = raw

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.line_number is not None:
            result["line_number"] = self.line_number
        return result


class DiscoveryError(ExportError):
    """A discovery strategy produced no usable categories."""

    default_category = ErrorCategory.DISCOVERY


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(ExportError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}")


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# FATAL ERRORS (abort the run)
# =============================================================================


class FatalRunError(ExportError):
    """Run-wide emptiness that aborts the export."""

    default_category = ErrorCategory.FATAL
    exit_code: ExitCode = ExitCode.NO_RECORDS
    default_message = "Export failed"

    def __init__(self, message: str | None = None, **kwargs: Any):
        super().__init__(message or self.default_message, **kwargs)


class NoCategoriesError(FatalRunError):
    """Discovery produced zero categories even after the manual fallback."""

    exit_code = ExitCode.NO_CATEGORIES
    default_message = "No categories available to export"


class NoRecordsError(FatalRunError):
    """Every category fetch came back empty."""

    exit_code = ExitCode.NO_RECORDS
    default_message = "No primary records fetched for any category"


class NoMergedRowsError(FatalRunError):
    """Reconciliation and validation left nothing to emit."""

    exit_code = ExitCode.NO_MERGED_ROWS
    default_message = "No rows survived reconciliation and validation"


__all__ = [
    "ErrorCategory",
    "ExitCode",
    "ErrorContext",
    "ExportError",
    "ChannelError",
    "ChannelTimeout",
    "SessionClosedError",
    "ParseError",
    "DiscoveryError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "FatalRunError",
    "NoCategoriesError",
    "NoRecordsError",
    "NoMergedRowsError",
]
