from __future__ import annotations

import statistics
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

"""Run lifecycle and result models for bulk distance runs.

RunState tracks the runner lifecycle, ProgressState is the read-only view
handed to progress observers, and RunResult aggregates the metrics reported
in the SUMMARY line once a run ends.
"""


class RunState(Enum):
    """Lifecycle of one BatchRunner run.

    State transitions: idle → running → (completed | aborted | cancelled)

    - IDLE: Runner created, no run started
    - RUNNING: Rows are being processed
    - COMPLETED: Every row was attempted
    - ABORTED: A credential failure stopped the run
    - CANCELLED: A cancel request was honoured between rows
    """
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ProgressState:
    """Snapshot of bulk progress: rows attempted out of total data rows."""
    processed: int
    total: int

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.processed / self.total


@dataclass(frozen=True)
class RunResult:
    """Aggregated results of one bulk run, used for the SUMMARY output."""
    file_name: str
    state: RunState
    processed: int  # rows attempted
    total: int  # data rows in the input
    success_rows: int
    failed_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    total_lookups: int = 0
    avg_lookup_seconds: float = 0.0
    p95_lookup_seconds: float = 0.0
    results_path: str | None = None
    error_log_path: str | None = None


class LookupStatsAccumulator:
    """Collects per-lookup timings and summarises them."""

    def __init__(self) -> None:
        self.lookup_times: list[float] = []

    def add_lookup_time(self, elapsed_seconds: float) -> None:
        self.lookup_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate lookup statistics.

        Returns:
            tuple: (total_lookups, avg_lookup_seconds, p95_lookup_seconds)
        """
        if not self.lookup_times:
            return (0, 0.0, 0.0)

        total = len(self.lookup_times)
        avg = statistics.mean(self.lookup_times)

        if total == 1:
            p95 = self.lookup_times[0]
        else:
            # 19th of 20 quantiles
            p95 = statistics.quantiles(self.lookup_times, n=20, method="inclusive")[18]

        return (total, avg, p95)
