"""CSV renderers for the merged dataset and the author list."""

from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path

from wpexport.core.csvio import serialize_row
from wpexport.core.models import AUTHOR_COLUMNS, MERGED_COLUMNS, AuthorRecord, MergedRow


def write_merged(rows: Iterable[MergedRow], path: Path) -> int:
    """Write the header and one unquoted line per row; returns the row count.

    Rows are consumed lazily, so a reconciliation generator streams straight
    to disk.
    """
    count = 0
    with Path(path).open("w", encoding="utf-8", newline="") as fh:
        fh.write(serialize_row(MERGED_COLUMNS) + "\n")
        for row in rows:
            fh.write(serialize_row(row.values()) + "\n")
            count += 1
    return count


def read_merged(path: Path) -> Iterable[list[str]]:
    """Yield the data rows of a merged CSV written by :func:`write_merged`."""
    with Path(path).open(encoding="utf-8", newline="") as fh:
        next(fh, None)
        for line in fh:
            line = line.rstrip("\r\n")
            if line:
                yield line.split(",")


def write_authors(authors: Iterable[AuthorRecord], path: Path) -> int:
    """Write authors with a trailing ``post_count`` column (``N/A`` when unavailable)."""
    count = 0
    with Path(path).open("w", encoding="utf-8", newline="") as fh:
        writer = csv.writer(fh)
        writer.writerow(AUTHOR_COLUMNS)
        for author in authors:
            writer.writerow(author.values())
            count += 1
    return count
