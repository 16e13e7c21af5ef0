"""Tests for the merged and author CSV renderers."""

from __future__ import annotations

import csv

from wpexport.core.models import UNAVAILABLE, AuthorRecord, MergedRow
from wpexport.renderers import read_merged, write_authors, write_merged


def _row(record_id: int, override: str = "") -> MergedRow:
    return MergedRow(record_id, "Title", f"slug-{record_id}", override, "2024-01-01 00:00:00", "publish", "post")


def test_write_merged_unquoted(tmp_path):
    path = tmp_path / "merged.csv"
    assert write_merged([_row(1, "blog/one"), _row(2)], path) == 2
    assert path.read_text(encoding="utf-8") == (
        "ID,post_title,post_name,custom_permalink,post_date,post_status,post_type\n"
        "1,Title,slug-1,blog/one,2024-01-01 00:00:00,publish,post\n"
        "2,Title,slug-2,,2024-01-01 00:00:00,publish,post\n"
    )


def test_write_merged_consumes_generator(tmp_path):
    path = tmp_path / "merged.csv"
    assert write_merged((_row(i) for i in range(1, 4)), path) == 3


def test_write_merged_header_only(tmp_path):
    path = tmp_path / "merged.csv"
    assert write_merged([], path) == 0
    assert list(read_merged(path)) == []


def test_read_merged(tmp_path):
    path = tmp_path / "merged.csv"
    write_merged([_row(7, "/x")], path)
    assert list(read_merged(path)) == [["7", "Title", "slug-7", "/x", "2024-01-01 00:00:00", "publish", "post"]]


def test_write_authors(tmp_path):
    path = tmp_path / "users.csv"
    counted = AuthorRecord(1, "admin", "a@example.com", "Ada", "Lovelace", "Ada, L", "administrator", record_count=5)
    missing = AuthorRecord(2, "ed", "e@example.com", "", "", "Ed", "editor")
    assert write_authors([counted, missing], path) == 2

    with path.open(encoding="utf-8", newline="") as fh:
        rows = list(csv.reader(fh))
    assert rows[0] == ["ID", "user_login", "user_email", "first_name", "last_name", "display_name", "roles", "post_count"]
    assert rows[1][5] == "Ada, L"
    assert rows[1][-1] == "5"
    assert rows[2][-1] == str(UNAVAILABLE)
