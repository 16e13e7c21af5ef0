"""
Aggregator - export authors with per-author record counts.

Authors come from one ``wp user list`` call.  Counts need one
``wp post list --format=count`` per author, which is fine locally but
hammers a line-limited SSH gateway, so counting only happens when the
channel advertises ``supports_per_author_queries`` and has not degraded.

Counts are all-or-nothing: if any count fails, cannot be parsed, or the
channel degrades part way through the loop, every author's count becomes
``UNAVAILABLE``.  A partially counted author list would look complete in
the spreadsheet and mislead whoever reads it.

Tags:
    aggregate, authors, counts, wp-export
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from wpexport.core.csvio import parse_positive_int, split_rows
from wpexport.core.models import AUTHOR_FIELDS, UNAVAILABLE, AuthorRecord
from wpexport.core.rejects import Reject, RejectTally
from wpexport.execution import commands
from wpexport.execution.channels import BaseChannel
from wpexport.framework.logging import get_logger

logger = get_logger(__name__)

STAGE_AUTHORS = "aggregate.authors"


@dataclass
class AggregateResult:
    """Authors plus whether their counts could be computed."""

    authors: list[AuthorRecord] = field(default_factory=list)
    fetched: bool = False
    counts_available: bool = False
    unavailable_reason: str | None = None

    @property
    def author_count(self) -> int:
        return len(self.authors)


def parse_authors(text: str, tally: RejectTally | None = None) -> list[AuthorRecord]:
    """Parse a ``wp user list --format=csv`` body (header optional)."""
    authors: list[AuthorRecord] = []
    for row in split_rows(
        text.splitlines(keepends=True),
        source=STAGE_AUTHORS,
        min_fields=len(AUTHOR_FIELDS),
        max_fields=len(AUTHOR_FIELDS),
    ):
        if row.error is not None:
            _reject(tally, "MALFORMED_QUOTE", str(row.error), row.line_number)
            continue
        fields = row.fields or []
        if fields and fields[0].strip() == AUTHOR_FIELDS[0]:
            continue
        if len(fields) != len(AUTHOR_FIELDS):
            _reject(tally, "FIELD_COUNT", f"expected {len(AUTHOR_FIELDS)} fields, got {len(fields)}", row.line_number)
            continue
        author_id = parse_positive_int(fields[0])
        if author_id is None:
            _reject(tally, "BAD_ID", "id is not a positive integer", row.line_number)
            continue
        authors.append(AuthorRecord(author_id, *fields[1:]))
    return authors


def parse_count(text: str) -> int | None:
    """Parse ``--format=count`` output: a single non-negative integer."""
    value = text.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


class Aggregator:
    """Fetch authors and, when the channel allows it, their record counts."""

    def __init__(self, channel: BaseChannel, tally: RejectTally | None = None) -> None:
        self.channel = channel
        self.tally = tally

    def aggregate(self, categories: Sequence[str]) -> AggregateResult:
        command = commands.user_list()
        result = self.channel.run(command)
        error = result.error(command.label)
        if error is not None:
            logger.warning("aggregate.users.failed", stage=STAGE_AUTHORS, error=error.to_dict())
            return AggregateResult(unavailable_reason="user listing failed")

        authors = parse_authors(result.text, self.tally)
        outcome = AggregateResult(authors=authors, fetched=True)
        if not authors:
            logger.warning("aggregate.users.empty", stage=STAGE_AUTHORS)
            return outcome

        reason = self._count_blocker()
        if reason is None:
            reason = self._count(authors, categories)
        if reason is not None:
            for author in authors:
                author.record_count = UNAVAILABLE
            outcome.unavailable_reason = reason
            logger.warning("aggregate.counts.unavailable", stage=STAGE_AUTHORS, reason=reason, authors=len(authors))
        else:
            outcome.counts_available = True
            logger.info("aggregate.counts.ok", authors=len(authors))
        return outcome

    def _count_blocker(self) -> str | None:
        if not self.channel.capabilities.supports_per_author_queries:
            return f"{self.channel.kind} channel does not support per-author queries"
        if self.channel.degraded:
            return "channel degraded"
        return None

    def _count(self, authors: list[AuthorRecord], categories: Sequence[str]) -> str | None:
        """Fill in counts; returns a reason string on the first failure."""
        for author in authors:
            result = self.channel.run(commands.post_count_for_author(categories, author.id))
            if self.channel.degraded:
                return "channel degraded during count loop"
            if not result.succeeded:
                return f"count failed for author {author.id}"
            count = parse_count(result.text)
            if count is None:
                return f"unparseable count for author {author.id}"
            author.record_count = count
        return None


def _reject(tally: RejectTally | None, reason: str, detail: str, line_number: int) -> None:
    logger.debug("aggregate.reject", reason=reason, line_number=line_number)
    if tally is not None:
        tally.write(Reject(stage=STAGE_AUTHORS, reason_code=reason, reason_detail=detail, line_number=line_number))
