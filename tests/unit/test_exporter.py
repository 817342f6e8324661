from __future__ import annotations

from pathlib import Path

import pytest

from pincode_distance.csvio.exporter import (
    RESULT_HEADER,
    export_results,
    format_distance,
    write_results,
)
from pincode_distance.csvio.parser import parse_table
from pincode_distance.models.route import LookupResult, RouteRecord
from pincode_distance.models.table import ResolvedRow


def _record(row: int, origin: str, destination: str, distance: float, travel: str, route: str) -> RouteRecord:
    return RouteRecord(
        row=ResolvedRow(row_number=row, origin=origin, destination=destination),
        result=LookupResult(distance=distance, travel_time=travel, route_summary=route),
    )


def test_export_header_and_column_order():
    doc = export_results([_record(2, "400001", "Pune", 150, "3 hours", "via NH48")])
    lines = doc.splitlines()
    assert lines[0] == "Origin Pin Code,Destination City,Distance (km),Travel Time,Route Summary"
    assert lines[1] == "400001,Pune,150,3 hours,via NH48"


def test_export_empty_successes_is_header_only():
    assert export_results([]) == ",".join(RESULT_HEADER) + "\r\n"


def test_export_quotes_route_summary_with_embedded_quotes():
    doc = export_results(
        [_record(2, "400001", "Pune", 150, "3 hours", 'via NH48, "Expressway"')]
    )
    assert doc.splitlines()[1] == '400001,Pune,150,3 hours,"via NH48, ""Expressway"""'


@pytest.mark.parametrize(
    ("route", "expected"),
    [
        ("plain", "plain"),
        ("two\nlines", '"two\nlines"'),
        ("cr\rhere", '"cr\rhere"'),
    ],
)
def test_export_quotes_line_breaks(route, expected):
    doc = export_results([_record(2, "400001", "Pune", 1, "1 min", route)])
    assert doc == ",".join(RESULT_HEADER) + "\r\n" + f"400001,Pune,1,1 min,{expected}\r\n"


def test_export_custom_separator():
    doc = export_results([_record(2, "400001", "Pune", 1, "1 min", "a;b")], separator=";")
    assert doc.splitlines()[1] == '400001;Pune;1;1 min;"a;b"'


def test_format_distance_has_no_grouping_separators():
    assert format_distance(150.0) == "150"
    assert format_distance(1234567.0) == "1234567"
    assert format_distance(1234.5) == "1234.5"
    assert format_distance(0.0) == "0"


def test_round_trip_through_parser():
    records = [
        _record(2, "400001", "Pune", 150, "3 hours", 'via NH48, "Expressway"'),
        _record(4, "110001", "Jaipur, Rajasthan", 281.7, "5 hours 10 mins", "via NH48"),
        _record(5, "560001", 'Mysuru "City"', 1450, "1 day, 2 hours", 'via "SH17", NH275'),
        _record(6, " 600001", "Madurai ", 462, " 8 hours", "via NH44 "),
        _record(7, "700001", "Howrah", 4.5, "15 mins", "via\r\nGT Road"),
    ]
    table = parse_table(export_results(records), escaped_quotes=True)

    assert len(table.rows) == len(records)
    for row, record in zip(table.rows, records, strict=True):
        assert row["Origin Pin Code"] == record.origin
        assert row["Destination City"] == record.destination
        assert float(row["Distance (km)"]) == record.result.distance
        assert row["Travel Time"] == record.result.travel_time
        assert row["Route Summary"] == record.result.route_summary


def test_surrounding_whitespace_is_trimmed_before_export():
    rec = _record(2, " 400001 ", "Pune ", 150, " 3 hours", "via NH48 ")
    assert (rec.origin, rec.destination) == ("400001", "Pune")
    assert (rec.result.travel_time, rec.result.route_summary) == ("3 hours", "via NH48")
    assert export_results([rec]).splitlines()[1] == "400001,Pune,150,3 hours,via NH48"


def test_write_results_creates_parent_dirs(tmp_path: Path):
    target = tmp_path / "out" / "distance_results.csv"
    written = write_results(target, [_record(2, "400001", "Pune", 150, "3 hours", "via NH48")])
    assert written == target
    assert target.read_bytes().startswith(b"Origin Pin Code,")
    assert target.read_bytes().endswith(b"via NH48\r\n")
