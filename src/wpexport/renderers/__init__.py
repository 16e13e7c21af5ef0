"""Output renderers: merged CSV, author CSV and the XLSX workbook."""

from wpexport.renderers.csv_writer import read_merged, write_authors, write_merged
from wpexport.renderers.xlsx import render_workbook

__all__ = ["read_merged", "render_workbook", "write_authors", "write_merged"]
