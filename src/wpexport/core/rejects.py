"""
Standardized reject handling for structural failures.

A reject is a row or stream that fails parsing or validation but must not
stop the run.  ``RejectTally`` is the single place such failures are
recorded; the run summary reads its counts.

Manifesto:
    Export streams from a live WordPress site contain rows we cannot use:
    - Header lines leaking into the body
    - Titles with unbalanced quotes
    - Identifiers that are not positive integers
    - Lines cut short by a dropped SSH session

    These rows are:
    - **Dropped:** Never emitted into the merged dataset
    - **Classified:** Stage + reason_code for pattern analysis
    - **Counted:** The summary reports how many, per reason

    Rejected identifiers are not surfaced in the summary.  Only counts are
    reported; ``keep_samples`` retains a bounded number of rejects for
    debug logging.

Architecture:
    ::

        ┌──────────────┐     ┌─────────────┐     ┌──────────────────┐
        │ reconcile    │────▶│ RejectTally │────▶│ RunSummary       │
        │ aggregator   │     │ .write()    │     │ rejects_by_reason│
        │ (bad row)    │     │             │     │ rows_dropped     │
        └──────────────┘     └─────────────┘     └──────────────────┘

Examples:
    >>> tally = RejectTally()
    >>> tally.write(Reject(stage="reconcile.primary", reason_code="FIELD_COUNT",
    ...                    reason_detail="expected >= 6 fields, got 3"))
    >>> tally.count
    1
    >>> tally.by_reason()
    {'reconcile.primary:FIELD_COUNT': 1}

Guardrails:
    - SYNC-ONLY: Single-threaded, no locking
    - Count tracks total rejects written

Tags:
    reject, validation, data-quality, wp-export

Doc-Types:
    - API Reference
    - Data Quality Guide
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any


@dataclass
class Reject:
    """
    A rejected row with classification and debugging info.

    Attributes:
        stage: Where rejected (reconcile.override, reconcile.primary,
            reconcile.validate, aggregate.authors).
        reason_code: Machine-readable code (FIELD_COUNT, BAD_ID, MALFORMED_QUOTE).
        reason_detail: Human-readable explanation.
        raw_data: Original line for debugging.
        source_locator: Stream name the row came from.
        line_number: Line number in the stream.
    """

    stage: str
    reason_code: str
    reason_detail: str
    raw_data: Any = None
    source_locator: str | None = None
    line_number: int | None = None


class RejectTally:
    """
    Count rejects by stage and reason code.

    Keeps up to ``keep_samples`` rejects for debugging; everything else is
    reduced to a counter.
    """

    def __init__(self, keep_samples: int = 20):
        self._counter: Counter[tuple[str, str]] = Counter()
        self._samples: list[Reject] = []
        self._keep_samples = keep_samples
        self._count = 0

    @property
    def count(self) -> int:
        """Number of rejects written."""
        return self._count

    @property
    def samples(self) -> list[Reject]:
        return list(self._samples)

    def write(self, reject: Reject) -> None:
        """Record a single reject."""
        self._counter[(reject.stage, reject.reason_code)] += 1
        self._count += 1
        if len(self._samples) < self._keep_samples:
            self._samples.append(reject)

    def count_for(self, stage: str, reason_code: str | None = None) -> int:
        """Count rejects for a stage, optionally narrowed to one reason."""
        return sum(
            n for (s, r), n in self._counter.items()
            if s == stage and (reason_code is None or r == reason_code)
        )

    def by_reason(self) -> dict[str, int]:
        """Counts keyed ``"<stage>:<reason_code>"``, sorted for stable output."""
        return {f"{stage}:{reason}": n for (stage, reason), n in sorted(self._counter.items())}
