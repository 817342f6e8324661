from __future__ import annotations

import math
from dataclasses import dataclass

from .table import ResolvedRow

"""Route models returned by the lookup service and collected by the runner."""

__all__ = [
    "LookupResult",
    "RouteRecord",
]


@dataclass(frozen=True)
class LookupResult:
    """Driving information for one origin/destination pair.

    Attributes:
        distance: Driving distance in kilometres (finite, non-negative)
        travel_time: Human-readable duration, e.g. "2 hours 59 mins" (trimmed)
        route_summary: Human-readable route, e.g. "via NH48" (trimmed)
    """
    distance: float
    travel_time: str
    route_summary: str

    def __post_init__(self) -> None:
        if not math.isfinite(self.distance) or self.distance < 0:
            raise ValueError(f"distance must be finite and non-negative, got {self.distance}")
        object.__setattr__(self, "travel_time", self.travel_time.strip())
        object.__setattr__(self, "route_summary", self.route_summary.strip())


@dataclass(frozen=True)
class RouteRecord:
    """A successfully looked-up row: the input row plus its result."""
    row: ResolvedRow
    result: LookupResult

    @property
    def row_number(self) -> int:
        return self.row.row_number

    @property
    def origin(self) -> str:
        return self.row.origin

    @property
    def destination(self) -> str:
        return self.row.destination
