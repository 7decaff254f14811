"""Data models for covreport."""

from covreport.models.coverage import (
    ClassCoverage,
    CoverageRow,
    CoverageSummary,
    LineTotals,
    format_coverage,
)

__all__ = [
    "ClassCoverage",
    "CoverageRow",
    "CoverageSummary",
    "LineTotals",
    "format_coverage",
]
