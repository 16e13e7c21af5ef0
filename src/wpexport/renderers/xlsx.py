"""
Spreadsheet renderer for the merged dataset.

The workbook keeps the base domain in ``A1`` so the URL and edit-link
formulas follow it: change the domain in one cell and every link in the
sheet points at the new site (useful when the export came from staging).

Layout of sheet ``Posts``::

    A1   base domain (bold)
    row 2  url | ID | post_title | post_name | custom_permalink | post_date | post_status | post_type | edit
    row 3+ =IF(E3<>"", https://A1/E3, https://A1/D3) | values ... | =HYPERLINK(edit url, "edit")
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from wpexport.core.models import MERGED_COLUMNS

SHEET_TITLE = "Posts"
HEADERS: tuple[str, ...] = ("url", *MERGED_COLUMNS, "edit")
MAX_COLUMN_WIDTH = 50
FIRST_DATA_ROW = 3


def url_formula(row: int) -> str:
    return f'=IF(E{row}<>"","https://"&$A$1&"/"&E{row},"https://"&$A$1&"/"&D{row})'


def edit_formula(row: int) -> str:
    return f'=HYPERLINK("https://"&$A$1&"/wp-admin/post.php?post="&B{row}&"&action=edit","edit")'


def render_workbook(rows: Iterable[Sequence[str]], path: Path, base_domain: str) -> int:
    """Write the workbook from seven-field rows; returns the number of data rows."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws["A1"] = base_domain
    ws["A1"].font = Font(bold=True)
    ws.append(list(HEADERS))

    widths = [len(h) for h in HEADERS]
    widths[0] = max(widths[0], len(base_domain))

    row_num = FIRST_DATA_ROW
    for values in rows:
        record_id, *rest = values
        ws.cell(row=row_num, column=1, value=url_formula(row_num))
        ws.cell(row=row_num, column=2, value=int(record_id) if record_id.isdigit() else record_id)
        for offset, value in enumerate(rest, start=3):
            ws.cell(row=row_num, column=offset, value=value)
            widths[offset - 1] = max(widths[offset - 1], len(value))
        ws.cell(row=row_num, column=len(HEADERS), value=edit_formula(row_num))
        widths[1] = max(widths[1], len(record_id))
        row_num += 1

    for idx, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = min(width + 2, MAX_COLUMN_WIDTH)

    wb.save(path)
    return row_num - FIRST_DATA_ROW
