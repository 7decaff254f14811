"""Tests for the JaCoCo CSV reader (adapters/csv_reader.py)."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest import mock

import pytest

from covreport.adapters.csv_reader import (
    CoverageFileNotFoundError,
    CsvRecordReader,
    parse_csv_line,
    read_coverage_rows,
)

if TYPE_CHECKING:
    from pathlib import Path


def _write_csv(root: Path, content: str, name: str = "jacoco.csv") -> Path:
    f = root / name
    f.write_text(content, encoding="utf-8")
    return f


_JACOCO_CSV = """\
GROUP,PACKAGE,CLASS,INSTRUCTION_MISSED,INSTRUCTION_COVERED,LINE_MISSED,LINE_COVERED
client,com.acme,Foo,4,16,2,8
client,com.acme,Bar,0,30,0,10
client,com.acme.util,Strings,10,0,5,0
"""


# ── parse_csv_line ───────────────────────────────────────────────


class TestParseCsvLine:
    def test_plain_fields(self) -> None:
        assert parse_csv_line("a,b,c") == ["a", "b", "c"]

    def test_comma_inside_quotes_is_not_a_delimiter(self) -> None:
        assert parse_csv_line('"a,b",5,10') == ["a,b", "5", "10"]

    def test_escaped_quotes(self) -> None:
        assert parse_csv_line('"say ""hi"""') == ['say "hi"']

    def test_fields_are_trimmed(self) -> None:
        assert parse_csv_line("  a , b ,c  ") == ["a", "b", "c"]

    def test_empty_fields_preserved(self) -> None:
        assert parse_csv_line("a,,c,") == ["a", "", "c", ""]

    def test_empty_line_is_single_empty_field(self) -> None:
        assert parse_csv_line("") == [""]

    def test_quoted_empty_field(self) -> None:
        assert parse_csv_line('"",x') == ["", "x"]

    def test_doubled_quote_outside_quotes_is_empty_section(self) -> None:
        assert parse_csv_line('a""b,c') == ["ab", "c"]

    def test_quoted_empty_field_between_values(self) -> None:
        assert parse_csv_line('x,"",y') == ["x", "", "y"]

    def test_quotes_in_middle_of_field(self) -> None:
        assert parse_csv_line('ab"c,d"e,f') == ["abc,de", "f"]


# ── CsvRecordReader ──────────────────────────────────────────────


class TestCsvRecordReader:
    def test_missing_file_raises_on_construction(self, tmp_path: Path) -> None:
        with pytest.raises(CoverageFileNotFoundError) as exc_info:
            CsvRecordReader(tmp_path / "missing.csv")
        assert "missing.csv" in str(exc_info.value)

    def test_directory_is_not_a_file(self, tmp_path: Path) -> None:
        with pytest.raises(CoverageFileNotFoundError):
            CsvRecordReader(tmp_path)

    def test_not_found_is_a_file_not_found_error(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            CsvRecordReader(tmp_path / "nope.csv")

    def test_records_keyed_by_header(self, tmp_path: Path) -> None:
        path = _write_csv(tmp_path, "A,B\n1,2\n3,4\n")
        assert list(CsvRecordReader(path)) == [{"A": "1", "B": "2"}, {"A": "3", "B": "4"}]

    def test_short_rows_padded_with_empty_strings(self, tmp_path: Path) -> None:
        path = _write_csv(tmp_path, "A,B,C\n1\n")
        assert list(CsvRecordReader(path)) == [{"A": "1", "B": "", "C": ""}]

    def test_long_rows_truncated_to_header(self, tmp_path: Path) -> None:
        path = _write_csv(tmp_path, "A,B\n1,2,3,4\n")
        assert list(CsvRecordReader(path)) == [{"A": "1", "B": "2"}]

    def test_blank_lines_skipped(self, tmp_path: Path) -> None:
        path = _write_csv(tmp_path, "A,B\n\n1,2\n   \n3,4\n\n")
        assert len(list(CsvRecordReader(path))) == 2

    def test_crlf_line_endings(self, tmp_path: Path) -> None:
        path = tmp_path / "crlf.csv"
        path.write_bytes(b"A,B\r\n1,2\r\n")
        assert list(CsvRecordReader(path)) == [{"A": "1", "B": "2"}]

    def test_byte_order_mark_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "bom.csv"
        path.write_bytes("\ufeffA,B\n1,2\n".encode())
        assert list(CsvRecordReader(path)) == [{"A": "1", "B": "2"}]

    def test_header_only_yields_nothing(self, tmp_path: Path) -> None:
        path = _write_csv(tmp_path, "A,B\n")
        assert list(CsvRecordReader(path)) == []

    def test_empty_file_yields_nothing(self, tmp_path: Path) -> None:
        path = _write_csv(tmp_path, "")
        assert list(CsvRecordReader(path)) == []

    def test_duplicate_header_last_column_wins(self, tmp_path: Path) -> None:
        path = _write_csv(tmp_path, "A,B,A\n1,2,3\n")

        with mock.patch("covreport.adapters.csv_reader.logger") as mock_logger:
            records = list(CsvRecordReader(path))

        assert records == [{"A": "3", "B": "2"}]
        assert "A" in mock_logger.debug.call_args_list[0][0]

    def test_iterating_twice_restarts(self, tmp_path: Path) -> None:
        path = _write_csv(tmp_path, "A\n1\n2\n")
        reader = CsvRecordReader(path)
        assert list(reader) == list(reader) == [{"A": "1"}, {"A": "2"}]


# ── read_coverage_rows ───────────────────────────────────────────


class TestReadCoverageRows:
    def test_jacoco_columns_mapped(self, tmp_path: Path) -> None:
        rows = list(read_coverage_rows(_write_csv(tmp_path, _JACOCO_CSV)))

        assert len(rows) == 3
        first = rows[0]
        assert first.group == "client"
        assert first.package == "com.acme"
        assert first.class_name == "Foo"
        assert first.missed == 2
        assert first.covered == 8
        assert first.total == 10
        assert first.extra == {"INSTRUCTION_MISSED": "4", "INSTRUCTION_COVERED": "16"}

    def test_total_is_missed_plus_covered(self, tmp_path: Path) -> None:
        for row in read_coverage_rows(_write_csv(tmp_path, _JACOCO_CSV)):
            assert row.total == row.missed + row.covered

    def test_non_numeric_and_absent_counts_are_zero(self, tmp_path: Path) -> None:
        content = "CLASS,PACKAGE,LINE_MISSED,LINE_COVERED\nFoo,p,abc\nBar,p,-3,2.5\n"
        rows = list(read_coverage_rows(_write_csv(tmp_path, content)))

        assert (rows[0].missed, rows[0].covered) == (0, 0)
        assert (rows[1].missed, rows[1].covered) == (0, 0)

    def test_missing_columns_default_to_empty(self, tmp_path: Path) -> None:
        rows = list(read_coverage_rows(_write_csv(tmp_path, "CLASS\nFoo\n")))

        assert rows[0].class_name == "Foo"
        assert rows[0].package == ""
        assert rows[0].group == ""
        assert rows[0].total == 0

    def test_quoted_class_name(self, tmp_path: Path) -> None:
        content = 'CLASS,PACKAGE,LINE_MISSED,LINE_COVERED\n"Outer.new Comparator() {...}",p,1,1\n'
        rows = list(read_coverage_rows(_write_csv(tmp_path, content)))
        assert rows[0].class_name == "Outer.new Comparator() {...}"

    def test_missing_file_raises_before_iteration(self, tmp_path: Path) -> None:
        with pytest.raises(CoverageFileNotFoundError):
            read_coverage_rows(tmp_path / "missing.csv")
