from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from pincode_distance.csvio.parser import EmptyOrHeaderOnlyError, MissingRequiredColumnsError
from pincode_distance.excel.reader import read_excel_table


def _write_sheet(path: Path, rows: list[list[object]], sheet_name: str = "Sheet1") -> Path:
    df = pd.DataFrame(rows)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


def test_read_excel_table_keeps_pin_codes_as_text(tmp_path: Path):
    path = _write_sheet(
        tmp_path / "pairs.xlsx",
        [
            ["Origin Pin Code", "Destination City", "Note"],
            ["400001", " Pune ", "x"],
            ["110001", "Jaipur", ""],
        ],
    )

    table = read_excel_table(path)

    assert table.total == 2
    assert table.rows[0]["Origin Pin Code"] == "400001"
    assert table.rows[0]["Destination City"] == "Pune"
    assert table.rows[1]["Note"] == ""


def test_read_excel_table_named_sheet_and_custom_columns(tmp_path: Path):
    path = _write_sheet(tmp_path / "pairs.xlsx", [["From", "To"], ["560001", "Mysuru"]], sheet_name="routes")

    table = read_excel_table(path, "routes", origin_column="from", destination_column="to")

    assert table.origin_column == "From"
    assert table.rows[0]["To"] == "Mysuru"


def test_read_excel_table_header_only(tmp_path: Path):
    path = _write_sheet(tmp_path / "pairs.xlsx", [["Origin Pin Code", "Destination City"]])
    with pytest.raises(EmptyOrHeaderOnlyError):
        read_excel_table(path)


def test_read_excel_table_missing_columns(tmp_path: Path):
    path = _write_sheet(tmp_path / "pairs.xlsx", [["Pin", "City"], ["400001", "Pune"]])
    with pytest.raises(MissingRequiredColumnsError):
        read_excel_table(path)
