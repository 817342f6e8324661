from __future__ import annotations

from dataclasses import dataclass

"""Tabular input models for the bulk distance calculator.

InputTable is what the parser produces from a delimited document (or a
workbook sheet). RowValidator turns each data row into either a ResolvedRow
ready for lookup or a RowError that never reaches the lookup service.

Row numbers follow the spreadsheet convention: the header is row 1, so the
first data row is row 2.
"""

__all__ = [
    "HEADER_ROW_NUMBER",
    "MISSING_FIELDS",
    "LOOKUP_FAILED",
    "EMPTY_RESPONSE",
    "CREDENTIAL_FAILURE",
    "InputTable",
    "ResolvedRow",
    "RowError",
]

HEADER_ROW_NUMBER = 1

# Error classifications (UPPER_SNAKE, as written to the error report)
MISSING_FIELDS = "MISSING_FIELDS"
LOOKUP_FAILED = "LOOKUP_FAILED"
EMPTY_RESPONSE = "EMPTY_RESPONSE"
CREDENTIAL_FAILURE = "CREDENTIAL_FAILURE"


@dataclass(frozen=True)
class InputTable:
    """Header plus data rows of one input document.

    Attributes:
        header: Column names in document order (trimmed, original case)
        rows: One mapping per data row, column name -> raw string
        origin_column: Header name that matched the origin column
        destination_column: Header name that matched the destination column
    """
    header: tuple[str, ...]
    rows: tuple[dict[str, str], ...]
    origin_column: str
    destination_column: str

    @property
    def total(self) -> int:
        return len(self.rows)

    def row_number(self, index: int) -> int:
        """1-based document row number of the data row at ``index``."""
        return index + HEADER_ROW_NUMBER + 1


@dataclass(frozen=True)
class ResolvedRow:
    """A data row whose origin and destination are both present.

    Values are stored trimmed.
    """
    row_number: int
    origin: str
    destination: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", self.origin.strip())
        object.__setattr__(self, "destination", self.destination.strip())


@dataclass(frozen=True)
class RowError:
    """A row that could not be turned into a route.

    Used both for rows rejected before lookup (missing fields) and for
    row-scoped lookup failures.
    """
    row: int
    origin: str
    destination: str
    message: str
    error_type: str = LOOKUP_FAILED
