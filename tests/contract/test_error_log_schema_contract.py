from __future__ import annotations

import json

import jsonschema
import pytest

from pincode_distance.logging.error_log import SCHEMA_PATH
from pincode_distance.models.error_record import (
    CREDENTIAL_FAILURE,
    EMPTY_RESPONSE,
    LOOKUP_FAILED,
    MISSING_FIELDS,
    ErrorRecord,
)


@pytest.fixture(scope="module")
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


@pytest.mark.parametrize("error_type", [MISSING_FIELDS, LOOKUP_FAILED, EMPTY_RESPONSE, CREDENTIAL_FAILURE])
def test_records_match_schema(schema, error_type):
    rec = ErrorRecord.create("pairs.csv", 2, "400001", "Pune", error_type, "failed")
    jsonschema.validate(json.loads(rec.to_json_line()), schema)


def test_empty_origin_and_destination_are_allowed(schema):
    rec = ErrorRecord.create("pairs.csv", 5, "", "", MISSING_FIELDS, "Missing origin or destination.")
    jsonschema.validate(json.loads(rec.to_json_line()), schema)


def test_schema_rejects_extra_keys(schema):
    data = json.loads(ErrorRecord.create("pairs.csv", 2, "1", "2", LOOKUP_FAILED, "x").to_json_line())
    data["stack"] = "..."
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(data, schema)


def test_schema_rejects_header_row_and_unknown_type(schema):
    data = json.loads(ErrorRecord.create("pairs.csv", 2, "1", "2", LOOKUP_FAILED, "x").to_json_line())
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate({**data, "row": 1}, schema)
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate({**data, "error_type": "TIMEOUT"}, schema)
