from __future__ import annotations

from collections.abc import Iterable

from ..models.run_result import RunResult, RunState
from ..models.table import RowError

"""Summary rendering for bulk runs.

SUMMARY line format:
SUMMARY rows={processed}/{total} success={success} failed={failed}
status={completed|aborted|cancelled} elapsed_sec={elapsed} avg_lookup_sec={avg}
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
    "render_outcome_message",
    "render_failed_rows",
    "render_abort_message",
]


def format_seconds(value: float) -> str:
    """Format a duration without scientific notation.

    >>> format_seconds(2.0)
    '2'
    >>> format_seconds(0.0000123)
    '0.000012'
    """
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a finished (or cancelled) run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     file_name="pairs.csv", state=RunState.COMPLETED, processed=2, total=2,
        ...     success_rows=1, failed_rows=1, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0, total_lookups=1, avg_lookup_seconds=1.5,
        ... )
        >>> render_summary_line(result)
        'SUMMARY rows=2/2 success=1 failed=1 status=completed elapsed_sec=2 avg_lookup_sec=1.5'
    """
    return (
        f"SUMMARY rows={result.processed}/{result.total} "
        f"success={result.success_rows} "
        f"failed={result.failed_rows} "
        f"status={result.state.value} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)} "
        f"avg_lookup_sec={format_seconds(result.avg_lookup_seconds)}"
    )


def render_outcome_message(result: RunResult) -> str:
    """One-line, user-facing description of how a run ended."""
    if result.state is RunState.CANCELLED:
        return f"Run cancelled after {result.processed} of {result.total} rows."
    if result.failed_rows == 0:
        return f"Calculated {result.success_rows} distance(s) successfully."
    return (
        f"Calculated {result.success_rows} distance(s); "
        f"{result.failed_rows} row(s) failed."
    )


def render_abort_message(reason: str, processed: int, total: int) -> str:
    return f"{reason} ({processed} of {total} rows processed before the abort)"


def render_failed_rows(errors: Iterable[RowError]) -> list[str]:
    """One line per failed row: row number, values and reason."""
    return [
        f"row {e.row} (origin='{e.origin}', destination='{e.destination}'): {e.message}"
        for e in errors
    ]
