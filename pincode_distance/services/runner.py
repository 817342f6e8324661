from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

from ..lookup.base import CredentialFailure, EmptyResponse, LookupService
from ..models.route import RouteRecord
from ..models.run_result import LookupStatsAccumulator, ProgressState, RunResult, RunState
from ..models.table import EMPTY_RESPONSE, LOOKUP_FAILED, ResolvedRow, RowError
from .credentials import CredentialGate
from .progress import ProgressReporter

"""Sequential batch runner.

Rows are processed strictly in input order, one lookup at a time. Row-scoped
failures are recorded in the outcome and the batch continues; a credential
failure closes the credential gate and stops the batch by raising
BatchAborted, which carries everything accumulated up to that point.

State transitions: idle → running → (completed | aborted | cancelled)
"""

__all__ = [
    "BULK_CREDENTIAL_MESSAGE",
    "UNKNOWN_ERROR_MESSAGE",
    "BatchAborted",
    "BatchOutcome",
    "BatchRunner",
]

logger = logging.getLogger(__name__)

BULK_CREDENTIAL_MESSAGE = (
    "API Key error during bulk processing. Please select a valid API key and try again."
)
UNKNOWN_ERROR_MESSAGE = "Unknown error"


class BatchOutcome:
    """Append-only successes and errors of one run, both in input order.

    Observers get tuples; only the runner appends.
    """

    def __init__(self) -> None:
        self._successes: list[RouteRecord] = []
        self._errors: list[RowError] = []

    @property
    def successes(self) -> tuple[RouteRecord, ...]:
        return tuple(self._successes)

    @property
    def errors(self) -> tuple[RowError, ...]:
        return tuple(self._errors)

    @property
    def attempted(self) -> int:
        return len(self._successes) + len(self._errors)

    def _add_success(self, record: RouteRecord) -> None:
        self._successes.append(record)

    def _add_error(self, error: RowError) -> None:
        self._errors.append(error)


class BatchAborted(Exception):
    """Raised when a run stops on a pipeline-fatal (credential) failure.

    Attributes:
        reason: User-facing reason for the abort
        row: The row whose lookup triggered the abort
        outcome: Successes and errors accumulated before the abort
        progress: Progress at the abort point (the aborting row not counted)
        result: RunResult of the aborted run, filled in by process_file
    """

    def __init__(
        self,
        reason: str,
        *,
        row: ResolvedRow,
        outcome: BatchOutcome,
        progress: ProgressState,
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.row = row
        self.outcome = outcome
        self.progress = progress
        self.result: RunResult | None = None

    @property
    def processed(self) -> int:
        return self.progress.processed


class BatchRunner:
    """Drives one bulk run over validated rows."""

    def __init__(
        self,
        service: LookupService,
        gate: CredentialGate | None = None,
        progress: ProgressReporter | None = None,
        *,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.service = service
        self.gate = gate if gate is not None else CredentialGate(ready=True)
        self.progress = progress if progress is not None else ProgressReporter()
        self._clock = clock
        self._state = RunState.IDLE
        self._outcome = BatchOutcome()
        self._cancel_requested = False
        self.lookup_stats = LookupStatsAccumulator()

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def outcome(self) -> BatchOutcome:
        return self._outcome

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    def cancel(self) -> None:
        """Request a stop; honoured before the next row, never mid-lookup."""
        self._cancel_requested = True

    def run(self, rows: Sequence[ResolvedRow | RowError]) -> BatchOutcome:
        """Process ``rows`` in order and return the accumulated outcome.

        A cancel requested before the call (e.g. while the input was still
        being read) stops the run before its first row. The request is
        cleared once the run ends, whatever the end state.

        Raises:
            BatchAborted: a lookup failed with CredentialFailure
            RuntimeError: called while a run is in progress
        """
        if self._state is RunState.RUNNING:
            raise RuntimeError("a run is already in progress")

        # 毎回新しい状態から開始 (前回の結果とマージしない)
        self._outcome = BatchOutcome()
        self.lookup_stats = LookupStatsAccumulator()
        self.progress.reset(len(rows))
        self._state = RunState.RUNNING

        try:
            for item in rows:
                if self._cancel_requested:
                    self._state = RunState.CANCELLED
                    logger.info(
                        "run cancelled after %d/%d rows", self.progress.processed, self.progress.total
                    )
                    return self._outcome

                if isinstance(item, RowError):
                    logger.warning("row=%d skipped: %s", item.row, item.message)
                    self._outcome._add_error(item)
                    self.progress.advance()
                    continue

                self._process_row(item)
                self.progress.advance()

            self._state = RunState.COMPLETED
            return self._outcome
        finally:
            self._cancel_requested = False

    def _process_row(self, row: ResolvedRow) -> None:
        started = self._clock()
        try:
            result = self.service.lookup(row.origin, row.destination)
        except CredentialFailure as e:
            self.lookup_stats.add_lookup_time(self._clock() - started)
            self._abort(row, e)
        except EmptyResponse as e:
            self.lookup_stats.add_lookup_time(self._clock() - started)
            self._record_failure(row, str(e) or UNKNOWN_ERROR_MESSAGE, EMPTY_RESPONSE)
        except Exception as e:
            # タイムアウト・ネットワークエラー等も行単位の失敗として扱う
            self.lookup_stats.add_lookup_time(self._clock() - started)
            self._record_failure(row, str(e) or UNKNOWN_ERROR_MESSAGE, LOOKUP_FAILED)
        else:
            self.lookup_stats.add_lookup_time(self._clock() - started)
            self._outcome._add_success(RouteRecord(row=row, result=result))

    def _record_failure(self, row: ResolvedRow, message: str, error_type: str) -> None:
        logger.warning("row=%d lookup failed: %s", row.row_number, message)
        self._outcome._add_error(
            RowError(
                row=row.row_number,
                origin=row.origin,
                destination=row.destination,
                message=message,
                error_type=error_type,
            )
        )

    def _abort(self, row: ResolvedRow, failure: CredentialFailure) -> None:
        self.gate.revoke()
        self._state = RunState.ABORTED
        logger.error(
            "row=%d credential failure, stopping batch after %d/%d rows: %s",
            row.row_number,
            self.progress.processed,
            self.progress.total,
            failure,
        )
        raise BatchAborted(
            BULK_CREDENTIAL_MESSAGE,
            row=row,
            outcome=self._outcome,
            progress=self.progress.snapshot(),
        ) from failure
