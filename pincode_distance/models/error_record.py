from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .table import CREDENTIAL_FAILURE, EMPTY_RESPONSE, LOOKUP_FAILED, MISSING_FIELDS, RowError

"""ErrorRecord model for the per-row error report.

Each failed row of a bulk run becomes one ErrorRecord, written as one JSON
line to the run's error log. The key set is fixed and pinned by
error_log_schema.json.
"""

__all__ = [
    "ErrorRecord",
    "MISSING_FIELDS",
    "LOOKUP_FAILED",
    "EMPTY_RESPONSE",
    "CREDENTIAL_FAILURE",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Input file name being processed
        row: Document row number (header is row 1)
        origin: Origin value of the row (may be empty)
        destination: Destination value of the row (may be empty)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human-readable failure reason
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int
    origin: str
    destination: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(
        file: str,
        row: int,
        origin: str,
        destination: str,
        error_type: str,
        message: str,
    ) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            origin=origin,
            destination=destination,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_row_error(file: str, error: RowError) -> ErrorRecord:
        return ErrorRecord.create(
            file=file,
            row=error.row,
            origin=error.origin,
            destination=error.destination,
            error_type=error.error_type,
            message=error.message,
        )

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format.

        Returns:
            JSON string representation without extra keys
        """
        return json.dumps(asdict(self), ensure_ascii=False)
