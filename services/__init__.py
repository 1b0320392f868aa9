"""
Service layer for the spreadsheet record import system.

This package contains framework-agnostic business logic (column resolution,
cell coercion, row parsing, the import pipeline, the in-memory record store
and workbook export) that can be used by the CLI, the API, or any other
interface.
"""

__version__ = "1.0.0"
