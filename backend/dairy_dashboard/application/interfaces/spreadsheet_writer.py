"""Abstract spreadsheet writer interface (port)."""

from abc import ABC, abstractmethod
from typing import Any


class SpreadsheetWriter(ABC):
    """Serialises a flat table to spreadsheet bytes."""

    @abstractmethod
    def write(self, sheet_title: str, headers: list[str], rows: list[list[Any]]) -> bytes:
        """Return the workbook bytes for one sheet with a header row."""
        ...
