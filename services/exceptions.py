"""
Exceptions raised by the import service layer.
"""


class RecordImportError(Exception):
    """Base exception for import failures that abort the whole import."""


class WorkbookReadError(RecordImportError):
    """Raised when the uploaded container cannot be opened or read as a workbook."""

    def __init__(self, message: str, source: str = '<stream>'):
        super().__init__(f"Could not read workbook {source}: {message}")
        self.source = source
