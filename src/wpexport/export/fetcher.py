"""
Record fetcher - pull primary and override streams for each category.

For every category two independent wp-cli queries run: the primary post
listing and the ``custom_permalink`` override listing.  Each stream's
header is stripped and its body appended to a scratch accumulator file,
so reconciliation later makes a single streaming pass over everything.

Failures are per category and per stream: a failed or empty stream is
logged as a warning naming the category and stage, and the loop moves on.
A failed stream contributes nothing, even when the channel returned some
partial output before the session dropped.

Tags:
    fetch, streams, accumulators, wp-export
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from wpexport.core.csvio import split_rows, strip_header
from wpexport.execution import commands
from wpexport.execution.channels import BaseChannel
from wpexport.execution.commands import WpCommand
from wpexport.framework.logging import get_logger, push_context

logger = get_logger(__name__)


class StreamStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class StreamFetch:
    """Outcome of one stream for one category."""

    status: StreamStatus
    rows: int = 0
    bytes: int = 0
    detail: str | None = None


@dataclass
class CategoryFetch:
    category: str
    primary: StreamFetch
    override: StreamFetch


@dataclass
class FetchReport:
    """Per-category fetch results plus the accumulator locations."""

    primary_path: Path
    override_path: Path
    categories: list[CategoryFetch] = field(default_factory=list)

    @property
    def primary_rows(self) -> int:
        return sum(c.primary.rows for c in self.categories)

    @property
    def override_rows(self) -> int:
        return sum(c.override.rows for c in self.categories)

    @property
    def failed_categories(self) -> list[str]:
        """Categories whose primary stream failed."""
        return [c.category for c in self.categories if c.primary.status is StreamStatus.FAILED]

    @property
    def empty_categories(self) -> list[str]:
        return [c.category for c in self.categories if c.primary.status is StreamStatus.EMPTY]

    def rows_by_category(self) -> dict[str, int]:
        return {c.category: c.primary.rows for c in self.categories}


class RecordFetcher:
    """Append each category's primary and override streams to accumulator files."""

    def __init__(self, channel: BaseChannel, primary_path: Path, override_path: Path) -> None:
        self.channel = channel
        self.primary_path = Path(primary_path)
        self.override_path = Path(override_path)

    def fetch_all(self, categories: Sequence[str]) -> FetchReport:
        """Fetch every category in order; never raises on a per-category failure."""
        self.primary_path.parent.mkdir(parents=True, exist_ok=True)
        self.primary_path.touch()
        self.override_path.touch()

        report = FetchReport(primary_path=self.primary_path, override_path=self.override_path)
        for category in categories:
            token = push_context(category=category)
            try:
                primary = self._fetch_stream(
                    commands.post_list_primary(category), self.primary_path, category, "fetch.primary"
                )
                override = self._fetch_stream(
                    commands.post_list_overrides(category), self.override_path, category, "fetch.override"
                )
            finally:
                token.restore()
            report.categories.append(CategoryFetch(category=category, primary=primary, override=override))
            logger.info(
                "fetch.category",
                category=category,
                primary_rows=primary.rows,
                override_rows=override.rows,
                primary_status=primary.status.value,
            )
        return report

    def _fetch_stream(self, command: WpCommand, path: Path, category: str, stage: str) -> StreamFetch:
        result = self.channel.run(command)
        error = result.error(command.label)
        if error is not None:
            logger.warning("fetch.stream.failed", category=category, stage=stage, error=error.to_dict())
            return StreamFetch(status=StreamStatus.FAILED, detail=error.message)

        body = strip_header(result.text)
        rows = sum(1 for row in split_rows(body.splitlines(keepends=True), source=stage) if row.ok)
        if not body.strip():
            # An override listing with no rows is normal: most posts have no custom permalink.
            log = logger.info if stage == "fetch.override" else logger.warning
            log("fetch.stream.empty", category=category, stage=stage)
            return StreamFetch(status=StreamStatus.EMPTY)

        if not body.endswith("\n"):
            body += "\n"
        with path.open("a", encoding="utf-8", newline="") as fh:
            fh.write(body)
        return StreamFetch(status=StreamStatus.OK, rows=rows, bytes=len(result.output))
