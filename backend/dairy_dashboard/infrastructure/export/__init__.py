"""Spreadsheet export infrastructure package."""

from .xlsx_writer import OpenpyxlSpreadsheetWriter

__all__ = ["OpenpyxlSpreadsheetWriter"]
