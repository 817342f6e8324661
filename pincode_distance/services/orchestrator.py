from __future__ import annotations

import logging
import zipfile
from datetime import UTC, datetime
from pathlib import Path

from ..csvio.exporter import write_results
from ..csvio.parser import ParseError, parse_table
from ..excel.reader import read_excel_table
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import AppConfig, ColumnConfig
from ..models.error_record import ErrorRecord
from ..models.run_result import ProgressState, RunResult
from ..models.table import CREDENTIAL_FAILURE, InputTable
from .progress import ProgressTracker
from .runner import BatchAborted, BatchRunner
from .validator import validate_rows

"""Bulk run orchestration.

Reads one input document, validates its rows, drives the BatchRunner with a
progress display attached, then writes the results document and the per-row
error report. Fatal conditions before the first row (unreadable file,
unsupported type, parse errors) surface as ProcessingError; a credential
abort surfaces as BatchAborted after the error report has been flushed.
"""

__all__ = [
    "INVALID_FILE_TYPE_MESSAGE",
    "ProcessingError",
    "read_input_table",
    "process_file",
]

logger = logging.getLogger(__name__)

INVALID_FILE_TYPE_MESSAGE = "Invalid file type. Please upload a .csv file."
CSV_SUFFIX = ".csv"
EXCEL_SUFFIX = ".xlsx"


class ProcessingError(Exception):
    """Fatal error that prevents a bulk run from starting."""


def read_input_table(
    path: Path,
    columns: ColumnConfig | None = None,
    *,
    sheet: str | None = None,
) -> InputTable:
    """Load ``path`` (.csv or .xlsx) into an InputTable.

    Raises:
        ProcessingError: file missing, unsupported type or unparsable content
    """
    columns = columns or ColumnConfig()
    if not path.exists():
        raise ProcessingError(f"Input file not found: {path}")
    if not path.is_file():
        raise ProcessingError(f"Input path is not a file: {path}")

    suffix = path.suffix.lower()
    try:
        if suffix == CSV_SUFFIX:
            text = path.read_text(encoding="utf-8-sig")
            return parse_table(
                text,
                origin_column=columns.origin,
                destination_column=columns.destination,
            )
        if suffix == EXCEL_SUFFIX:
            return read_excel_table(
                path,
                sheet if sheet is not None else 0,
                origin_column=columns.origin,
                destination_column=columns.destination,
            )
    except ParseError as e:
        raise ProcessingError(str(e)) from e
    except (OSError, UnicodeDecodeError, ValueError, zipfile.BadZipFile) as e:
        raise ProcessingError(f"Error reading {path.name}: {e}") from e
    raise ProcessingError(INVALID_FILE_TYPE_MESSAGE)


def process_file(
    input_path: Path,
    runner: BatchRunner,
    config: AppConfig | None = None,
    *,
    results_path: Path | None = None,
    sheet: str | None = None,
) -> RunResult:
    """Run the bulk pipeline over one input file.

    Args:
        input_path: .csv or .xlsx document with origin/destination columns
        runner: BatchRunner wired to a lookup service and credential gate
        config: Application config (column names, output locations)
        results_path: Results document path (default: config.output.results_file)
        sheet: Sheet name for .xlsx input (default: first sheet)

    Returns:
        RunResult for a completed or cancelled run

    Raises:
        ProcessingError: the run could not start
        BatchAborted: the run stopped on a credential failure; its ``result``
            holds the aborted RunResult
    """
    config = config or AppConfig()
    start_time = datetime.now(UTC)
    results_path = results_path or Path(config.output.results_file)

    table = read_input_table(input_path, config.columns, sheet=sheet)
    rows = validate_rows(table)
    logger.info("Processing %d rows from: %s", table.total, input_path)

    error_log = ErrorLogBuffer(Path(config.output.logs_dir))

    with ProgressTracker(table.total) as tracker:

        def _on_progress(state: ProgressState) -> None:
            tracker(state)
            tracker.set_postfix(
                success=len(runner.outcome.successes),
                failed=len(runner.outcome.errors),
            )

        unsubscribe = runner.progress.subscribe(_on_progress)
        try:
            outcome = runner.run(rows)
        except BatchAborted as e:
            error_log.extend([ErrorRecord.from_row_error(input_path.name, err) for err in e.outcome.errors])
            error_log.append(
                ErrorRecord.create(
                    file=input_path.name,
                    row=e.row.row_number,
                    origin=e.row.origin,
                    destination=e.row.destination,
                    error_type=CREDENTIAL_FAILURE,
                    message=str(e.__cause__ or e.reason),
                )
            )
            error_log_path = _flush_error_log(error_log)
            e.result = _build_result(
                input_path,
                runner,
                start_time,
                processed=e.processed,
                total=table.total,
                success_rows=len(e.outcome.successes),
                failed_rows=len(e.outcome.errors),
                error_log_path=error_log_path,
            )
            raise
        finally:
            unsubscribe()

    written_results: Path | None = None
    if outcome.successes:
        written_results = write_results(results_path, outcome.successes)
        logger.info("Results written to: %s", written_results)
    else:
        logger.info("No successful rows; results file not written")

    error_log.extend([ErrorRecord.from_row_error(input_path.name, err) for err in outcome.errors])
    error_log_path = _flush_error_log(error_log)

    return _build_result(
        input_path,
        runner,
        start_time,
        processed=runner.progress.processed,
        total=table.total,
        success_rows=len(outcome.successes),
        failed_rows=len(outcome.errors),
        results_path=written_results,
        error_log_path=error_log_path,
    )


def _build_result(
    input_path: Path,
    runner: BatchRunner,
    start_time: datetime,
    *,
    processed: int,
    total: int,
    success_rows: int,
    failed_rows: int,
    results_path: Path | None = None,
    error_log_path: Path | None = None,
) -> RunResult:
    end_time = datetime.now(UTC)
    total_lookups, avg_lookup, p95_lookup = runner.lookup_stats.get_stats()
    return RunResult(
        file_name=input_path.name,
        state=runner.state,
        processed=processed,
        total=total,
        success_rows=success_rows,
        failed_rows=failed_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        total_lookups=total_lookups,
        avg_lookup_seconds=avg_lookup,
        p95_lookup_seconds=p95_lookup,
        results_path=str(results_path) if results_path else None,
        error_log_path=str(error_log_path) if error_log_path else None,
    )


def _flush_error_log(error_log: ErrorLogBuffer) -> Path | None:
    # 失敗しても実行結果自体は返す
    try:
        path = error_log.flush()
    except OSError as e:
        logger.warning("could not write error report: %s", e)
        return None
    if path is not None:
        logger.info("Error report written to: %s", path)
    return path
