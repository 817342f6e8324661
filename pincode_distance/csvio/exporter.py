from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from pathlib import Path

from ..models.route import RouteRecord

"""Results document rendering for bulk runs.

Fixed column order: origin, destination, distance, travel time, route
summary. Written with csv.writer (QUOTE_MINIMAL, CRLF line endings): fields
containing the separator, a quote or a line break are quoted with embedded
quotes doubled, so the document reads back unchanged with
parse_table(..., escaped_quotes=True).
"""

__all__ = [
    "RESULT_HEADER",
    "format_distance",
    "export_results",
    "write_results",
]

RESULT_HEADER = (
    "Origin Pin Code",
    "Destination City",
    "Distance (km)",
    "Travel Time",
    "Route Summary",
)


def format_distance(distance: float) -> str:
    """Render a distance without grouping separators.

    >>> format_distance(150.0)
    '150'
    >>> format_distance(1234.5)
    '1234.5'
    """
    if distance == int(distance):
        return str(int(distance))
    return repr(float(distance))


def export_results(successes: Iterable[RouteRecord], separator: str = ",") -> str:
    """Render successes as a delimited document (header + one line per row)."""
    buf = io.StringIO()
    # "\r\n" as terminator: QUOTE_MINIMAL then quotes both \r and \n
    writer = csv.writer(
        buf,
        delimiter=separator,
        quotechar='"',
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\r\n",
    )
    writer.writerow(RESULT_HEADER)
    for record in successes:
        writer.writerow(
            [
                record.origin,
                record.destination,
                format_distance(record.result.distance),
                record.result.travel_time,
                record.result.route_summary,
            ]
        )
    return buf.getvalue()


def write_results(path: Path, successes: Iterable[RouteRecord]) -> Path:
    """Write the results document to ``path`` (UTF-8), creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_results(successes), encoding="utf-8", newline="")
    return path
