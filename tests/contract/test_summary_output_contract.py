from __future__ import annotations

import re
from datetime import UTC, datetime

import pytest

from pincode_distance.models.run_result import RunResult, RunState
from pincode_distance.services.summary import render_summary_line

SUMMARY_RE = re.compile(
    r"^SUMMARY rows=(\d+)/(\d+) success=(\d+) failed=(\d+) "
    r"status=(completed|aborted|cancelled) elapsed_sec=[0-9.]+ avg_lookup_sec=[0-9.]+$"
)


@pytest.mark.parametrize(
    ("state", "processed", "success", "failed"),
    [
        (RunState.COMPLETED, 4, 3, 1),
        (RunState.CANCELLED, 2, 2, 0),
        (RunState.COMPLETED, 0, 0, 0),
    ],
)
def test_summary_line_format(state, processed, success, failed):
    t = datetime(2024, 5, 1, tzinfo=UTC)
    result = RunResult(
        file_name="pairs.csv",
        state=state,
        processed=processed,
        total=4,
        success_rows=success,
        failed_rows=failed,
        start_time=t,
        end_time=t,
        elapsed_seconds=0.0000042,
        avg_lookup_seconds=12.5,
    )
    m = SUMMARY_RE.match(render_summary_line(result))
    assert m is not None
    assert int(m.group(3)) + int(m.group(4)) <= int(m.group(1)) <= int(m.group(2))
    assert m.group(5) == state.value
