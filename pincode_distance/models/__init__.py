"""Domain models for the pin code distance calculator.

This package contains the dataclasses shared by the parser, the validator,
the batch runner and the exporters.
"""

from .config_models import AppConfig, ColumnConfig, LookupConfig, OutputConfig
from .error_record import ErrorRecord
from .route import LookupResult, RouteRecord
from .run_result import ProgressState, RunResult, RunState
from .table import InputTable, ResolvedRow, RowError

__all__ = [
    # Configuration models
    "AppConfig",
    "ColumnConfig",
    "LookupConfig",
    "OutputConfig",
    # Input models
    "InputTable",
    "ResolvedRow",
    "RowError",
    # Results
    "LookupResult",
    "RouteRecord",
    "ErrorRecord",
    "ProgressState",
    "RunResult",
    "RunState",
]
