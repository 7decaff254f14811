"""JaCoCo CSV reader.

JaCoCo's CSV export has one header line followed by one line per class::

    GROUP,PACKAGE,CLASS,INSTRUCTION_MISSED,INSTRUCTION_COVERED,...,LINE_MISSED,LINE_COVERED,...

Fields may be quoted, so lines are split with a small quote-aware state
machine rather than ``str.split``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from covreport.models.coverage import CoverageRow

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

# JaCoCo CSV column names
GROUP_COLUMN = "GROUP"
PACKAGE_COLUMN = "PACKAGE"
CLASS_COLUMN = "CLASS"
LINE_MISSED_COLUMN = "LINE_MISSED"
LINE_COVERED_COLUMN = "LINE_COVERED"

_KNOWN_COLUMNS = frozenset(
    {GROUP_COLUMN, PACKAGE_COLUMN, CLASS_COLUMN, LINE_MISSED_COLUMN, LINE_COVERED_COLUMN}
)

_QUOTE = '"'
_DELIMITER = ","


class CoverageFileNotFoundError(FileNotFoundError):
    """Raised when the coverage CSV file does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"File not found: {path}")
        self.path = path


def parse_csv_line(line: str) -> list[str]:
    """Split a single CSV line into stripped field values.

    A doubled quote inside a quoted section produces one literal quote;
    outside quotes it opens and closes an empty quoted section. Delimiters
    inside quotes are kept as part of the field.

    Args:
        line: One line of CSV text without the trailing newline.

    Returns:
        List of field values with surrounding whitespace removed.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == _QUOTE:
            if in_quotes and i + 1 < length and line[i + 1] == _QUOTE:
                current.append(_QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
        elif char == _DELIMITER and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current))
    return [value.strip() for value in fields]


class CsvRecordReader:
    """Iterable over the data records of a CSV file.

    Each record maps header names to field values. Iterating again re-opens
    the file and starts from the first record. Rows shorter than the header
    are padded with empty strings; surplus trailing fields are dropped.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        if not self.path.is_file():
            raise CoverageFileNotFoundError(self.path)

    def __iter__(self) -> Iterator[dict[str, str]]:
        headers: list[str] | None = None
        with self.path.open(encoding="utf-8-sig", newline="") as handle:
            for line_number, raw_line in enumerate(handle, start=1):
                line = raw_line.rstrip("\r\n")
                if headers is None:
                    headers = parse_csv_line(line)
                    duplicates = sorted({h for h in headers if headers.count(h) > 1})
                    if duplicates:
                        logger.debug(
                            "%s header repeats %s, the last column of each wins",
                            self.path,
                            ", ".join(duplicates),
                        )
                    continue
                if not line.strip():
                    continue

                values = parse_csv_line(line)
                if len(values) != len(headers):
                    logger.debug(
                        "%s:%d has %d fields, header has %d",
                        self.path,
                        line_number,
                        len(values),
                        len(headers),
                    )
                yield {
                    header: values[index] if index < len(values) else ""
                    for index, header in enumerate(headers)
                }


def _int_field(record: dict[str, str], key: str, default: int = 0) -> int:
    value = record.get(key, "")
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def _to_coverage_row(record: dict[str, str]) -> CoverageRow:
    return CoverageRow(
        group=record.get(GROUP_COLUMN, ""),
        package=record.get(PACKAGE_COLUMN, ""),
        class_name=record.get(CLASS_COLUMN, ""),
        missed=_int_field(record, LINE_MISSED_COLUMN),
        covered=_int_field(record, LINE_COVERED_COLUMN),
        extra={key: value for key, value in record.items() if key not in _KNOWN_COLUMNS},
    )


def read_coverage_rows(path: str | Path) -> Iterator[CoverageRow]:
    """Read a JaCoCo CSV file as a lazy sequence of coverage rows.

    Args:
        path: Path to the JaCoCo CSV export.

    Returns:
        Iterator of CoverageRow, one per non-empty data line.

    Raises:
        CoverageFileNotFoundError: If ``path`` does not exist. Raised on call,
            before any row is read.
    """
    records = CsvRecordReader(path)
    return (_to_coverage_row(record) for record in records)
