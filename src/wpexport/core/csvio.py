"""
Quote-aware splitting and row sanitizing for wp-cli CSV streams.

wp-cli writes ``--format=csv`` with RFC-4180 quoting: fields that contain
the delimiter, a quote or a line break are wrapped in double quotes, and
embedded quotes are doubled.  Splitting naively on commas is the bug this
module exists to avoid.

Manifesto:
    - **Quote-aware:** ``csv.reader`` in strict mode does the splitting
    - **Per-row failure:** a malformed row becomes a ``ParseError`` in the
      result stream; the rows after it are still read
    - **Unquoted output:** the merged dataset is written without quoting,
      so anything that would need quoting is removed from titles first and
      any other row that would not split back cleanly is rejected

Examples:
    >>> rows = list(split_rows(['5,"Sleep, Work, and COVID-19",sleep,2024-01-01,publish,post\\n']))
    >>> rows[0].fields[1]
    'Sleep, Work, and COVID-19'
    >>> sanitize_title(rows[0].fields[1])
    'Sleep Work and COVID-19'

Tags:
    csv, parsing, sanitizing, wp-export

Doc-Types:
    api-reference
"""

from __future__ import annotations

import csv
import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from wpexport.core.errors import ParseError

DELIMITER = ","

_LINE_BREAKS = re.compile(r"[\r\n]+")


@dataclass(frozen=True)
class SplitRow:
    """One logical row read from a stream, or the error that replaced it."""

    line_number: int
    fields: list[str] | None = None
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def split_rows(
    lines: Iterable[str],
    source: str = "stream",
    *,
    min_fields: int | None = None,
    max_fields: int | None = None,
) -> Iterator[SplitRow]:
    """Split a CSV stream into rows, yielding errors in place of bad rows.

    ``line_number`` is the physical line on which the row ended.  Blank
    lines produce no row.

    An unclosed quote makes the reader fold the following lines into one
    field.  When a row spanning several physical lines fails to parse, or
    its field count falls outside ``min_fields``/``max_fields``, each of
    those lines is split again on its own so only the malformed one is
    lost.
    """
    consumed: list[str] = []

    def track(source_lines: Iterable[str]) -> Iterator[str]:
        for line in source_lines:
            consumed.append(line)
            yield line

    reader = csv.reader(track(lines), delimiter=DELIMITER, strict=True)
    while True:
        start = reader.line_num
        consumed.clear()
        try:
            fields = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            if len(consumed) > 1:
                yield from _split_each(list(consumed), start, source)
                continue
            yield SplitRow(
                line_number=reader.line_num,
                error=ParseError(f"{source}: {exc}", line_number=reader.line_num),
            )
            continue
        if not fields:
            continue
        if len(consumed) > 1 and not _count_fits(len(fields), min_fields, max_fields):
            yield from _split_each(list(consumed), start, source)
            continue
        yield SplitRow(line_number=reader.line_num, fields=fields)


def _count_fits(count: int, min_fields: int | None, max_fields: int | None) -> bool:
    if min_fields is not None and count < min_fields:
        return False
    return max_fields is None or count <= max_fields


def _split_each(physical: list[str], start: int, source: str) -> Iterator[SplitRow]:
    """Split each physical line independently; lines are numbered from ``start + 1``."""
    for offset, line in enumerate(physical, start=1):
        line_number = start + offset
        try:
            fields = next(csv.reader([line], delimiter=DELIMITER, strict=True), [])
        except csv.Error as exc:
            yield SplitRow(
                line_number=line_number,
                error=ParseError(f"{source}: {exc}", line_number=line_number),
            )
            continue
        if fields:
            yield SplitRow(line_number=line_number, fields=fields)


def split_line(line: str) -> list[str]:
    """Split a single line; raises ``ParseError`` when it is malformed."""
    for row in split_rows([line]):
        if row.error is not None:
            raise row.error
        return row.fields or []
    return []


def sanitize_title(title: str) -> str:
    """Remove delimiters and collapse line breaks so the title can be written unquoted.

    Idempotent: ``sanitize_title(sanitize_title(t)) == sanitize_title(t)``.
    """
    return _LINE_BREAKS.sub(" ", title.replace(DELIMITER, ""))


def serialize_row(values: Sequence[str]) -> str:
    """Join values with the delimiter, unquoted."""
    return DELIMITER.join(values)


def is_well_formed(line: str, expected_fields: int) -> bool:
    """True when an unquoted line splits to exactly ``expected_fields`` and has no line breaks."""
    if "\n" in line or "\r" in line:
        return False
    return len(line.split(DELIMITER)) == expected_fields


def strip_header(text: str, first_field: str = "ID") -> str:
    """Drop the leading header line of a wp-cli CSV body, if there is one."""
    head, sep, rest = text.partition("\n")
    if head.rstrip("\r").split(DELIMITER, 1)[0].strip('"') == first_field:
        return rest
    return text


def parse_positive_int(value: str) -> int | None:
    """Return the integer value of a positive id, or None."""
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    number = int(value)
    return number if number > 0 else None
