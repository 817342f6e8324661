from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the distance calculator.

These are produced by pincode_distance.config.loader and consumed by the CLI,
the orchestrator and the Gemini lookup service. Defaults mirror the values a
missing config file falls back to.
"""

DEFAULT_ORIGIN_COLUMN = "Origin Pin Code"
DEFAULT_DESTINATION_COLUMN = "Destination City"


@dataclass(frozen=True)
class ColumnConfig:
    """Header names of the two required input columns (matched case-insensitively)."""
    origin: str = DEFAULT_ORIGIN_COLUMN
    destination: str = DEFAULT_DESTINATION_COLUMN


@dataclass(frozen=True)
class LookupConfig:
    """Settings for the remote route lookup."""
    model: str = "gemini-2.5-flash"
    country: str = "India"  # appended to every origin/destination in prompts
    timeout_seconds: float = 60.0


@dataclass(frozen=True)
class OutputConfig:
    """Where bulk runs write their files."""
    results_file: str = "distance_results.csv"
    logs_dir: str = "logs"


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    lookup: LookupConfig = field(default_factory=LookupConfig)
    columns: ColumnConfig = field(default_factory=ColumnConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
