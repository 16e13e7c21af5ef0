"""
Reconciliation engine - join the primary stream with its overrides.

The override accumulator is small (only posts that carry a
``custom_permalink``) and is loaded into a dict first.  The primary
accumulator can be large and is streamed once through the quote-aware
splitter; each good row is sanitized, joined with its override and
checked against the seven-column shape before it is yielded.

Manifesto:
    - **Seven columns or nothing:** a row that does not serialize to
      exactly seven unquoted fields is dropped, never emitted
    - **Last write wins:** a later override for the same id replaces an
      earlier one
    - **Keys preserved:** every emitted id came from the primary stream
    - **Row-level failure:** malformed rows are counted and skipped; the
      stream always continues

Architecture:
    ::

        override accumulator ──▶ load_overrides() ──▶ {id: OverrideRecord}
                                                          │
        primary accumulator ──▶ split_rows() ──▶ header? ─┤ skip
                                         │                │
                                     malformed ──▶ RejectTally
                                         │                │
                                   >= 6 fields, id > 0    │
                                         │                │
                                   duplicate id? ─────────┤ exact: skip / conflict: reject
                                         │                │
                                   sanitize title + join ◀┘
                                         │
                                   seven-field check ──▶ drop (counted)
                                         │
                                         ▼
                                     MergedRow

Examples:
    >>> engine = ReconciliationEngine(primary_path, override_path)
    >>> rows = list(engine.iter_rows())
    >>> engine.stats.rows_emitted == len(rows)
    True

Tags:
    reconcile, merge, streaming, validation, wp-export
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from dataclasses import asdict, dataclass
from pathlib import Path

from wpexport.core.csvio import is_well_formed, parse_positive_int, sanitize_title, serialize_row, split_rows
from wpexport.core.models import MERGED_COLUMNS, OVERRIDE_FIELDS, PRIMARY_FIELDS, ContentRecord, MergedRow, OverrideRecord
from wpexport.core.rejects import Reject, RejectTally
from wpexport.framework.logging import get_logger, log_row_counts

logger = get_logger(__name__)

STAGE_OVERRIDE = "reconcile.override"
STAGE_PRIMARY = "reconcile.primary"
STAGE_VALIDATE = "reconcile.validate"


@dataclass
class ReconcileStats:
    """Counters for one reconciliation pass."""

    override_entries: int = 0
    override_skipped: int = 0
    primary_rows: int = 0
    malformed_rows: int = 0
    invalid_rows: int = 0
    duplicates: int = 0
    conflicts: int = 0
    rows_merged: int = 0
    rows_dropped: int = 0
    rows_emitted: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def row_digest(values: tuple[str, ...]) -> bytes:
    """Fixed-size fingerprint of a merged row, used to tell repeats from conflicts."""
    return hashlib.blake2b("\x1f".join(values).encode("utf-8"), digest_size=16).digest()


def _is_header(fields: list[str], first_column: str = "ID") -> bool:
    return bool(fields) and fields[0].strip() == first_column


class ReconciliationEngine:
    """Stream the primary accumulator, joining overrides and validating shape."""

    def __init__(self, primary_path: Path, override_path: Path | None = None, tally: RejectTally | None = None):
        self.primary_path = Path(primary_path)
        self.override_path = Path(override_path) if override_path is not None else None
        self.tally = tally if tally is not None else RejectTally()
        self.stats = ReconcileStats()
        self.overrides: dict[int, OverrideRecord] = {}

    # ── Overrides ────────────────────────────────────────────────

    def load_overrides(self) -> dict[int, OverrideRecord]:
        """Load overrides keyed by id; later rows replace earlier ones."""
        overrides: dict[int, OverrideRecord] = {}
        if self.override_path is None or not self.override_path.exists():
            self.overrides = overrides
            return overrides

        with self.override_path.open(encoding="utf-8", errors="replace", newline="") as fh:
            for row in split_rows(
                fh, source=STAGE_OVERRIDE, min_fields=len(OVERRIDE_FIELDS), max_fields=len(OVERRIDE_FIELDS)
            ):
                if row.error is not None:
                    self._reject(STAGE_OVERRIDE, "MALFORMED", str(row.error), row.line_number, override=True)
                    continue
                fields = row.fields or []
                if _is_header(fields):
                    continue
                if len(fields) != len(OVERRIDE_FIELDS):
                    self._reject(
                        STAGE_OVERRIDE,
                        "FIELD_COUNT",
                        f"expected {len(OVERRIDE_FIELDS)} fields, got {len(fields)}",
                        row.line_number,
                        override=True,
                    )
                    continue
                record_id = parse_positive_int(fields[0])
                if record_id is None:
                    self._reject(STAGE_OVERRIDE, "BAD_ID", f"non-numeric id {fields[0]!r}", row.line_number, override=True)
                    continue
                path = fields[1].strip()
                if not path:
                    self._reject(STAGE_OVERRIDE, "EMPTY_PATH", "empty override path", row.line_number, override=True)
                    continue
                overrides[record_id] = OverrideRecord(record_id, path)

        self.overrides = overrides
        self.stats.override_entries = len(overrides)
        return overrides

    # ── Primary stream ───────────────────────────────────────────

    def iter_rows(self) -> Iterator[MergedRow]:
        """Yield validated merged rows in primary-stream order."""
        overrides = self.load_overrides()
        seen: dict[int, bytes] = {}

        with self.primary_path.open(encoding="utf-8", errors="replace", newline="") as fh:
            for row in split_rows(fh, source=STAGE_PRIMARY, min_fields=len(PRIMARY_FIELDS)):
                if row.error is not None:
                    self.stats.malformed_rows += 1
                    self._reject(STAGE_PRIMARY, "MALFORMED_QUOTE", str(row.error), row.line_number)
                    continue

                fields = row.fields or []
                if _is_header(fields):
                    continue
                self.stats.primary_rows += 1

                if len(fields) < len(PRIMARY_FIELDS):
                    self.stats.invalid_rows += 1
                    self._reject(
                        STAGE_PRIMARY,
                        "FIELD_COUNT",
                        f"expected >= {len(PRIMARY_FIELDS)} fields, got {len(fields)}",
                        row.line_number,
                    )
                    continue

                record_id = parse_positive_int(fields[0])
                if record_id is None:
                    self.stats.invalid_rows += 1
                    self._reject(STAGE_PRIMARY, "BAD_ID", "id is not a positive integer", row.line_number)
                    continue

                _, title, slug, date, status, category = fields[: len(PRIMARY_FIELDS)]
                record = ContentRecord(record_id, sanitize_title(title), slug, date, status, category)
                merged = MergedRow.join(record, overrides.get(record_id))

                values = merged.values()
                digest = row_digest(values)
                previous = seen.get(record_id)
                if previous is not None:
                    if previous == digest:
                        self.stats.duplicates += 1
                    else:
                        self.stats.conflicts += 1
                        self._reject(STAGE_PRIMARY, "DUPLICATE_CONFLICT", "id repeated with different values", row.line_number)
                    continue
                seen[record_id] = digest
                self.stats.rows_merged += 1

                if not is_well_formed(serialize_row(values), len(MERGED_COLUMNS)):
                    self.stats.rows_dropped += 1
                    self._reject(STAGE_VALIDATE, "FIELD_COUNT", "row does not serialize to seven fields", row.line_number)
                    continue

                self.stats.rows_emitted += 1
                yield merged

        stats = self.stats
        log_row_counts(
            logger,
            "reconcile",
            rows_in=stats.primary_rows + stats.malformed_rows,
            rows_out=stats.rows_emitted,
            rows_rejected=self.tally.count,
            duplicates=stats.duplicates,
            overrides=stats.override_entries,
        )

    def run(self) -> list[MergedRow]:
        """Materialize all rows (small sites and tests)."""
        return list(self.iter_rows())

    def _reject(self, stage: str, reason: str, detail: str, line_number: int, *, override: bool = False) -> None:
        if override:
            self.stats.override_skipped += 1
        self.tally.write(
            Reject(
                stage=stage,
                reason_code=reason,
                reason_detail=detail,
                source_locator=stage.split(".", 1)[-1],
                line_number=line_number,
            )
        )
        logger.debug("reconcile.reject", stage=stage, reason=reason, line_number=line_number)
