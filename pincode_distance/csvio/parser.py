from __future__ import annotations

import csv
import io
import re
from collections.abc import Iterable, Sequence

from ..models.config_models import DEFAULT_DESTINATION_COLUMN, DEFAULT_ORIGIN_COLUMN
from ..models.table import InputTable

"""Delimited-text parser for bulk input documents.

The first non-blank line is the header, every following non-blank line is a
data row. Two dialects are supported:

- simple (default): a field is either a double-quoted run, quotes stripped,
  or an unquoted run up to the next separator. Doubled quotes inside a quoted
  field ("a ""b"" c") are NOT understood; the closing quote is the next quote
  character. This is the accepted input format and is kept as is.
- escaped_quotes=True: standard quoted-field rules (doubled quotes, quoted
  line breaks). Used to re-read documents written by csvio.exporter.

Surrounding whitespace is trimmed from every field in both dialects.
"""

__all__ = [
    "ParseError",
    "EmptyOrHeaderOnlyError",
    "MissingRequiredColumnsError",
    "split_lines",
    "parse_line",
    "build_table",
    "parse_table",
]

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class ParseError(Exception):
    """Raised when an input document cannot be turned into an InputTable."""


class EmptyOrHeaderOnlyError(ParseError):
    """Raised when fewer than two non-blank lines are present."""

    def __init__(self, message: str = "CSV file is empty or contains only a header.") -> None:
        super().__init__(message)


class MissingRequiredColumnsError(ParseError):
    """Raised when the origin or destination column is absent from the header."""

    def __init__(self, origin_column: str, destination_column: str) -> None:
        super().__init__(
            f"Invalid CSV headers. Please use '{origin_column}' and '{destination_column}'."
        )
        self.origin_column = origin_column
        self.destination_column = destination_column


def split_lines(text: str) -> list[str]:
    """Split on any line-ending convention and drop blank lines."""
    return [line for line in _LINE_BREAK.split(text) if line.strip() != ""]


def parse_line(line: str, separator: str = ",") -> list[str]:
    """Parse one line with the simple dialect.

    Empty fields keep their position, so ",Jaipur" yields ["", "Jaipur"].
    Text between a closing quote and the next separator is discarded; an
    unterminated quote runs to the end of the line.
    """
    fields: list[str] = []
    n = len(line)
    i = 0
    while True:
        j = i
        while j < n and line[j] in " \t":
            j += 1
        if j < n and line[j] == '"':
            end = line.find('"', j + 1)
            if end == -1:
                fields.append(line[j + 1:].strip())
                break
            fields.append(line[j + 1:end].strip())
            sep = line.find(separator, end + 1)
        else:
            sep = line.find(separator, i)
            fields.append((line[i:] if sep == -1 else line[i:sep]).strip())
        if sep == -1:
            break
        i = sep + len(separator)
    return fields


def _standard_records(text: str, separator: str) -> list[list[str]]:
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=separator, quotechar='"')
    records: list[list[str]] = []
    for record in reader:
        fields = [f.strip() for f in record]
        if not any(fields):
            continue
        records.append(fields)
    return records


def _find_column(header: Sequence[str], name: str) -> str | None:
    wanted = name.strip().lower()
    for column in header:
        if column.lower() == wanted:
            return column
    return None


def build_table(
    header: Sequence[str],
    records: Iterable[Sequence[str]],
    *,
    origin_column: str = DEFAULT_ORIGIN_COLUMN,
    destination_column: str = DEFAULT_DESTINATION_COLUMN,
) -> InputTable:
    """Resolve the required columns and map every record onto the header.

    Missing trailing fields become empty strings; fields beyond the header
    are ignored. If a header name repeats, the first occurrence wins.

    Raises:
        MissingRequiredColumnsError: origin or destination column not found
    """
    names = [str(h).strip() for h in header]
    origin = _find_column(names, origin_column)
    destination = _find_column(names, destination_column)
    if origin is None or destination is None:
        raise MissingRequiredColumnsError(origin_column, destination_column)

    rows: list[dict[str, str]] = []
    for record in records:
        row: dict[str, str] = {}
        for idx, name in enumerate(names):
            if name in row:
                continue
            row[name] = record[idx] if idx < len(record) else ""
        rows.append(row)

    return InputTable(
        header=tuple(names),
        rows=tuple(rows),
        origin_column=origin,
        destination_column=destination,
    )


def parse_table(
    text: str,
    *,
    origin_column: str = DEFAULT_ORIGIN_COLUMN,
    destination_column: str = DEFAULT_DESTINATION_COLUMN,
    separator: str = ",",
    escaped_quotes: bool = False,
) -> InputTable:
    """Parse raw delimited text into an InputTable.

    Args:
        text: Whole document
        origin_column: Header name of the origin column (case-insensitive)
        destination_column: Header name of the destination column (case-insensitive)
        separator: Field separator
        escaped_quotes: Use standard quoting rules instead of the simple dialect

    Returns:
        InputTable with one row per non-blank data line

    Raises:
        EmptyOrHeaderOnlyError: fewer than two non-blank lines
        MissingRequiredColumnsError: a required column is missing
    """
    if escaped_quotes:
        records = _standard_records(text, separator)
    else:
        records = [parse_line(line, separator) for line in split_lines(text)]

    if len(records) < 2:
        raise EmptyOrHeaderOnlyError()

    return build_table(
        records[0],
        records[1:],
        origin_column=origin_column,
        destination_column=destination_column,
    )
