from __future__ import annotations

from pathlib import Path

import pytest

from pincode_distance.models.config_models import ColumnConfig
from pincode_distance.services.orchestrator import (
    INVALID_FILE_TYPE_MESSAGE,
    ProcessingError,
    read_input_table,
)


def test_reads_csv_with_bom(tmp_path: Path):
    f = tmp_path / "pairs.csv"
    f.write_bytes("\ufeffOrigin Pin Code,Destination City\n400001,Pune\n".encode("utf-8"))
    table = read_input_table(f)
    assert table.origin_column == "Origin Pin Code"
    assert table.rows[0]["Destination City"] == "Pune"


def test_suffix_is_case_insensitive(tmp_path: Path):
    f = tmp_path / "PAIRS.CSV"
    f.write_text("From,To\n400001,Pune\n", encoding="utf-8")
    table = read_input_table(f, ColumnConfig(origin="From", destination="To"))
    assert table.total == 1


def test_unsupported_type(tmp_path: Path):
    f = tmp_path / "pairs.txt"
    f.write_text("Origin Pin Code,Destination City\n400001,Pune\n", encoding="utf-8")
    with pytest.raises(ProcessingError) as e:
        read_input_table(f)
    assert str(e.value) == INVALID_FILE_TYPE_MESSAGE


def test_missing_file(tmp_path: Path):
    with pytest.raises(ProcessingError, match="not found"):
        read_input_table(tmp_path / "absent.csv")


def test_directory_is_rejected(tmp_path: Path):
    d = tmp_path / "dir.csv"
    d.mkdir()
    with pytest.raises(ProcessingError, match="not a file"):
        read_input_table(d)


def test_parse_errors_become_processing_errors(tmp_path: Path):
    f = tmp_path / "pairs.csv"
    f.write_text("Pin,City\n400001,Pune\n", encoding="utf-8")
    with pytest.raises(ProcessingError, match="Invalid CSV headers"):
        read_input_table(f)


def test_undecodable_csv(tmp_path: Path):
    f = tmp_path / "pairs.csv"
    f.write_bytes(b"Origin Pin Code,Destination City\n\xff\xfe400001,Pune\n")
    with pytest.raises(ProcessingError, match="Error reading pairs.csv"):
        read_input_table(f)


def test_corrupt_workbook(tmp_path: Path):
    f = tmp_path / "pairs.xlsx"
    f.write_bytes(b"not a zip archive")
    with pytest.raises(ProcessingError, match="Error reading pairs.xlsx"):
        read_input_table(f)
