"""Tests for the XLSX workbook renderer."""

from __future__ import annotations

from openpyxl import load_workbook

from wpexport.renderers.xlsx import HEADERS, MAX_COLUMN_WIDTH, SHEET_TITLE, edit_formula, render_workbook, url_formula

ROWS = [
    ["1", "Hello World", "hello-world", "blog/hello-world", "2024-01-01 10:00:00", "publish", "post"],
    ["2", "x" * 120, "long", "", "2024-01-02 10:00:00", "draft", "page"],
]


def test_layout(tmp_path):
    path = tmp_path / "export.xlsx"
    assert render_workbook(ROWS, path, "example.org") == 2

    wb = load_workbook(path)
    ws = wb[SHEET_TITLE]
    assert ws["A1"].value == "example.org"
    assert ws["A1"].font.bold
    assert [c.value for c in ws[2]] == list(HEADERS)
    assert ws.max_row == 4


def test_formulas_and_values(tmp_path):
    path = tmp_path / "export.xlsx"
    render_workbook(ROWS, path, "example.org")
    ws = load_workbook(path).active

    assert ws["A3"].value == url_formula(3)
    assert ws["I4"].value == edit_formula(4)
    assert ws["B3"].value == 1
    assert ws["E3"].value == "blog/hello-world"
    assert ws["H4"].value == "page"


def test_column_widths_capped(tmp_path):
    path = tmp_path / "export.xlsx"
    render_workbook(ROWS, path, "example.org")
    ws = load_workbook(path).active
    assert ws.column_dimensions["C"].width == MAX_COLUMN_WIDTH
    assert ws.column_dimensions["B"].width < MAX_COLUMN_WIDTH


def test_formula_text():
    assert url_formula(5) == '=IF(E5<>"","https://"&$A$1&"/"&E5,"https://"&$A$1&"/"&D5)'
    assert "post.php?post=\"&B5" in edit_formula(5)
    assert edit_formula(5).endswith(',"edit")')
