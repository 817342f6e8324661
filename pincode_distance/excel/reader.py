from __future__ import annotations

from pathlib import Path

import pandas as pd

from ..csvio.parser import EmptyOrHeaderOnlyError, build_table
from ..models.config_models import DEFAULT_DESTINATION_COLUMN, DEFAULT_ORIGIN_COLUMN
from ..models.table import InputTable

"""Workbook input for bulk runs.

First non-blank row of the sheet is the header, following non-blank rows are
data rows, exactly like a delimited document. Every cell is read as text so
pin codes keep their digits (no float conversion, no NA sentinels).
"""


def read_excel_table(
    path: Path,
    sheet_name: str | int = 0,
    *,
    origin_column: str = DEFAULT_ORIGIN_COLUMN,
    destination_column: str = DEFAULT_DESTINATION_COLUMN,
) -> InputTable:
    """Read one sheet of an .xlsx workbook into an InputTable.

    Parameters
    ----------
    path: workbook path
    sheet_name: sheet name or 0-based index (default: first sheet)

    Raises
    ------
    EmptyOrHeaderOnlyError: fewer than two non-blank rows
    MissingRequiredColumnsError: a required column is missing
    """
    df = pd.read_excel(path, sheet_name=sheet_name, header=None, dtype=str, keep_default_na=False)
    records: list[list[str]] = []
    for raw in df.itertuples(index=False):
        values = ["" if pd.isna(v) else str(v).strip() for v in raw]
        # 空行は CSV と同様に除外
        if not any(values):
            continue
        records.append(values)

    if len(records) < 2:
        raise EmptyOrHeaderOnlyError()

    return build_table(
        records[0],
        records[1:],
        origin_column=origin_column,
        destination_column=destination_column,
    )
