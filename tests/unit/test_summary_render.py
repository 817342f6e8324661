from __future__ import annotations

from datetime import UTC, datetime

import pytest

from pincode_distance.models.run_result import RunResult, RunState
from pincode_distance.models.table import MISSING_FIELDS, RowError
from pincode_distance.services.summary import (
    format_seconds,
    render_abort_message,
    render_failed_rows,
    render_outcome_message,
    render_summary_line,
)


def _result(**overrides) -> RunResult:
    t = datetime(2024, 1, 1, tzinfo=UTC)
    base = dict(
        file_name="pairs.csv",
        state=RunState.COMPLETED,
        processed=3,
        total=3,
        success_rows=3,
        failed_rows=0,
        start_time=t,
        end_time=t,
        elapsed_seconds=1.25,
        total_lookups=3,
        avg_lookup_seconds=0.4,
    )
    base.update(overrides)
    return RunResult(**base)


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0.0, "0"), (3.0, "3"), (1.23456, "1.235"), (0.005, "0.005")],
)
def test_format_seconds(value, expected):
    assert format_seconds(value) == expected


def test_render_summary_line():
    line = render_summary_line(_result(failed_rows=1, success_rows=2))
    assert line == "SUMMARY rows=3/3 success=2 failed=1 status=completed elapsed_sec=1.25 avg_lookup_sec=0.4"


def test_render_outcome_messages():
    assert render_outcome_message(_result()) == "Calculated 3 distance(s) successfully."
    assert render_outcome_message(_result(success_rows=1, failed_rows=2)) == (
        "Calculated 1 distance(s); 2 row(s) failed."
    )
    cancelled = _result(state=RunState.CANCELLED, processed=1, total=3)
    assert render_outcome_message(cancelled) == "Run cancelled after 1 of 3 rows."


def test_render_abort_message():
    assert render_abort_message("Bad key.", 2, 5) == "Bad key. (2 of 5 rows processed before the abort)"


def test_render_failed_rows():
    errors = [RowError(row=3, origin="", destination="Jaipur", message="Missing origin or destination.", error_type=MISSING_FIELDS)]
    assert render_failed_rows(errors) == [
        "row 3 (origin='', destination='Jaipur'): Missing origin or destination."
    ]
