"""Tests for coverage aggregation (analyzers/coverage.py) and the coverage models."""

from __future__ import annotations

from typing import TYPE_CHECKING

from covreport.adapters.csv_reader import read_coverage_rows
from covreport.analyzers.coverage import aggregate_coverage, qualified_class_name
from covreport.models.coverage import (
    CoverageRow,
    CoverageSummary,
    LineTotals,
    coverage_percentage,
    format_coverage,
)

if TYPE_CHECKING:
    from pathlib import Path


def _row(class_name: str, package: str, missed: int, covered: int) -> CoverageRow:
    return CoverageRow(
        group="g", package=package, class_name=class_name, missed=missed, covered=covered
    )


class TestFormatCoverage:
    def test_two_decimals(self) -> None:
        assert format_coverage(18, 20) == "90.00%"
        assert format_coverage(1, 3) == "33.33%"
        assert format_coverage(2, 3) == "66.67%"

    def test_zero_total_is_full_coverage(self) -> None:
        assert coverage_percentage(0, 0) == 100.0
        assert format_coverage(0, 0) == "100.00%"

    def test_nothing_covered(self) -> None:
        assert format_coverage(0, 5) == "0.00%"


class TestLineTotals:
    def test_add_accumulates(self) -> None:
        totals = LineTotals()
        totals.add(8, 10)
        totals.add(10, 10)
        assert (totals.covered, totals.total, totals.missed) == (18, 20, 2)
        assert totals.coverage == "90.00%"


class TestAggregateCoverage:
    def test_package_and_class_totals(self) -> None:
        summary = aggregate_coverage(
            [_row("Foo", "com.acme", 2, 8), _row("Bar", "com.acme", 0, 10)]
        )

        pkg = summary.packages["com.acme"]
        assert (pkg.covered, pkg.total) == (18, 20)
        assert pkg.coverage == "90.00%"
        assert summary.classes["com.acme.Foo"].coverage == "80.00%"
        assert summary.classes["com.acme.Bar"].coverage == "100.00%"

    def test_from_csv_file(self, tmp_path: Path) -> None:
        csv_path = tmp_path / "jacoco.csv"
        csv_path.write_text(
            "CLASS,PACKAGE,LINE_MISSED,LINE_COVERED\nFoo,com.acme,2,8\nBar,com.acme,0,10\n",
            encoding="utf-8",
        )

        summary = aggregate_coverage(read_coverage_rows(csv_path))

        assert summary.packages["com.acme"] == LineTotals(covered=18, total=20)
        assert summary.classes["com.acme.Foo"].total == 10
        assert summary.classes["com.acme.Bar"].covered == 10

    def test_empty_total_class_reports_full_coverage(self) -> None:
        summary = aggregate_coverage([_row("Empty", "p", 0, 0)])
        assert summary.classes["p.Empty"].coverage == "100.00%"
        assert summary.packages["p"].coverage == "100.00%"

    def test_duplicate_class_last_write_wins(self) -> None:
        summary = aggregate_coverage([_row("Foo", "p", 5, 5), _row("Foo", "p", 1, 9)])

        assert len(summary.classes) == 1
        entry = summary.classes["p.Foo"]
        assert (entry.covered, entry.total, entry.coverage) == (9, 10, "90.00%")
        # Package totals still see both rows
        assert summary.packages["p"] == LineTotals(covered=14, total=20)

    def test_empty_class_counts_only_toward_package(self) -> None:
        summary = aggregate_coverage([_row("", "p", 1, 3)])
        assert summary.classes == {}
        assert summary.packages["p"] == LineTotals(covered=3, total=4)

    def test_empty_package_skips_package_totals(self) -> None:
        summary = aggregate_coverage([_row("Main", "", 1, 1)])
        assert summary.packages == {}
        assert "Main" in summary.classes

    def test_invariant_total_equals_covered_plus_missed(self) -> None:
        rows = [_row("A", "x", 3, 4), _row("B", "x", 0, 1), _row("C", "y", 7, 0)]
        summary = aggregate_coverage(rows)

        missed_by_pkg: dict[str, int] = {}
        for row in rows:
            missed_by_pkg[row.package] = missed_by_pkg.get(row.package, 0) + row.missed
        for name, totals in summary.packages.items():
            assert totals.total == totals.covered + missed_by_pkg[name]

    def test_consumes_generator(self) -> None:
        rows = (_row(name, "p", 0, 1) for name in ("A", "B", "C"))
        summary = aggregate_coverage(rows)
        assert summary.packages["p"].total == 3

    def test_no_rows(self) -> None:
        summary = aggregate_coverage([])
        assert summary.packages == {}
        assert summary.classes == {}
        assert summary.overall_coverage == "100.00%"


class TestCoverageSummary:
    def test_sorted_projections_are_case_sensitive(self) -> None:
        summary = aggregate_coverage(
            [_row("b", "org.z", 0, 1), _row("A", "Org.a", 0, 1), _row("a", "org.b", 0, 1)]
        )

        assert [name for name, _ in summary.sorted_packages()] == ["Org.a", "org.b", "org.z"]
        assert [name for name, _ in summary.sorted_classes()] == [
            "Org.a.A",
            "org.b.a",
            "org.z.b",
        ]

    def test_overall_totals(self) -> None:
        summary = CoverageSummary(
            packages={"a": LineTotals(covered=3, total=4), "b": LineTotals(covered=1, total=4)}
        )
        assert summary.overall_covered == 4
        assert summary.overall_total == 8
        assert summary.overall_coverage == "50.00%"


def test_qualified_class_name() -> None:
    assert qualified_class_name("com.acme", "Foo") == "com.acme.Foo"
    assert qualified_class_name("", "Foo") == "Foo"
