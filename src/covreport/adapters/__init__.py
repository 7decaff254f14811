"""Input adapters that turn coverage tool exports into coverage rows."""

from covreport.adapters.csv_reader import (
    CoverageFileNotFoundError,
    CsvRecordReader,
    parse_csv_line,
    read_coverage_rows,
)

__all__ = [
    "CoverageFileNotFoundError",
    "CsvRecordReader",
    "parse_csv_line",
    "read_coverage_rows",
]
