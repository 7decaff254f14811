"""Fold per-class coverage rows into package and class totals."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covreport.models.coverage import (
    ClassCoverage,
    CoverageSummary,
    LineTotals,
    format_coverage,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from covreport.models.coverage import CoverageRow

logger = logging.getLogger(__name__)


def qualified_class_name(package: str, class_name: str) -> str:
    """Return ``package.class_name``, or just ``class_name`` without a package."""
    if package:
        return f"{package}.{class_name}"
    return class_name


def aggregate_coverage(rows: Iterable[CoverageRow]) -> CoverageSummary:
    """Aggregate coverage rows into package and class totals.

    Package totals are summed across rows. Class totals are keyed by the
    fully-qualified class name and a later row with the same key replaces
    the earlier one. Rows without a package only contribute to class totals;
    rows without a class only contribute to package totals.

    Args:
        rows: Coverage rows, typically from ``read_coverage_rows``.

    Returns:
        CoverageSummary built once the rows are exhausted.
    """
    packages: dict[str, LineTotals] = {}
    classes: dict[str, ClassCoverage] = {}
    row_count = 0

    for row in rows:
        row_count += 1
        covered = row.covered
        total = row.total

        if row.package:
            packages.setdefault(row.package, LineTotals()).add(covered, total)

        if row.class_name:
            key = qualified_class_name(row.package, row.class_name)
            if key in classes:
                logger.debug("Duplicate class %s, keeping the later row", key)
            classes[key] = ClassCoverage(
                covered=covered,
                total=total,
                coverage=format_coverage(covered, total),
            )

    logger.info(
        "Aggregated %d rows into %d packages and %d classes",
        row_count,
        len(packages),
        len(classes),
    )
    return CoverageSummary(packages=packages, classes=classes)
