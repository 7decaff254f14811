"""Coverage report models."""

from __future__ import annotations

from dataclasses import dataclass, field


def coverage_percentage(covered: int, total: int) -> float:
    """Return ``covered / total`` as a percentage, 100.0 when ``total`` is 0."""
    if total <= 0:
        return 100.0
    return (covered / total) * 100.0


def format_coverage(covered: int, total: int) -> str:
    """Format coverage as a fixed two-decimal percentage string (e.g. ``"90.00%"``)."""
    return f"{coverage_percentage(covered, total):.2f}%"


@dataclass
class CoverageRow:
    """A single class record from a JaCoCo CSV export."""

    group: str
    """Report group (usually the module or project name)."""

    package: str
    """Package name, dotted (e.g. ``com.acme``)."""

    class_name: str
    """Simple class name as it appears in the CSV."""

    missed: int = 0
    """Number of missed lines."""

    covered: int = 0
    """Number of covered lines."""

    extra: dict[str, str] = field(default_factory=dict)
    """Remaining tool-specific columns, passed through unused."""

    @property
    def total(self) -> int:
        """Return the total number of lines (missed + covered)."""
        return self.missed + self.covered


@dataclass
class LineTotals:
    """Accumulated line counts for a package."""

    covered: int = 0
    total: int = 0

    @property
    def missed(self) -> int:
        return self.total - self.covered

    @property
    def coverage(self) -> str:
        """Return the formatted coverage percentage."""
        return format_coverage(self.covered, self.total)

    def add(self, covered: int, total: int) -> None:
        """Fold another row's counts into these totals."""
        self.covered += covered
        self.total += total


@dataclass
class ClassCoverage:
    """Line counts for a single fully-qualified class."""

    covered: int
    total: int
    coverage: str
    """Formatted coverage percentage, computed when the row was folded in."""


@dataclass
class CoverageSummary:
    """Aggregated package and class totals for one coverage export."""

    packages: dict[str, LineTotals] = field(default_factory=dict)
    """Package name -> accumulated totals."""

    classes: dict[str, ClassCoverage] = field(default_factory=dict)
    """Fully-qualified class name -> totals (last write wins)."""

    def sorted_packages(self) -> list[tuple[str, LineTotals]]:
        """Return package entries ordered by name (case-sensitive)."""
        return sorted(self.packages.items(), key=lambda item: item[0])

    def sorted_classes(self) -> list[tuple[str, ClassCoverage]]:
        """Return class entries ordered by fully-qualified name (case-sensitive)."""
        return sorted(self.classes.items(), key=lambda item: item[0])

    @property
    def overall_covered(self) -> int:
        return sum(totals.covered for totals in self.packages.values())

    @property
    def overall_total(self) -> int:
        return sum(totals.total for totals in self.packages.values())

    @property
    def overall_coverage(self) -> str:
        """Return the formatted coverage across all packages."""
        return format_coverage(self.overall_covered, self.overall_total)
