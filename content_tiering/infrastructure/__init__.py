"""Infrastructure layer package."""

from .excel_repository import detail_sheet_df, load_inputs, save_output_workbook, summary_sheet_df
from .report_exporter import save_summary_html, save_summary_json, save_text

__all__ = [
    "load_inputs",
    "detail_sheet_df",
    "summary_sheet_df",
    "save_output_workbook",
    "save_summary_json",
    "save_summary_html",
    "save_text",
]
