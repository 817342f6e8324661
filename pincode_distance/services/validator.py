from __future__ import annotations

from ..models.table import MISSING_FIELDS, InputTable, ResolvedRow, RowError

"""Row pre-filter: rows without an origin or destination never reach the lookup service."""

__all__ = [
    "MISSING_FIELDS_MESSAGE",
    "validate_rows",
]

MISSING_FIELDS_MESSAGE = "Missing origin or destination."


def validate_rows(table: InputTable) -> list[ResolvedRow | RowError]:
    """Turn every data row into a ResolvedRow or a RowError, in input order.

    Pure function of ``table``; calling it again yields the same partition.
    """
    outcomes: list[ResolvedRow | RowError] = []
    for index, row in enumerate(table.rows):
        row_number = table.row_number(index)
        origin = row.get(table.origin_column, "").strip()
        destination = row.get(table.destination_column, "").strip()
        if not origin or not destination:
            outcomes.append(
                RowError(
                    row=row_number,
                    origin=origin,
                    destination=destination,
                    message=MISSING_FIELDS_MESSAGE,
                    error_type=MISSING_FIELDS,
                )
            )
            continue
        outcomes.append(ResolvedRow(row_number=row_number, origin=origin, destination=destination))
    return outcomes
