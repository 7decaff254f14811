"""Markdown rendering for coverage summaries."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from covreport.models.coverage import CoverageSummary

DEFAULT_TITLE = "Coverage Report"

_INDENT = "  "

PACKAGE_HEADERS: dict[str, str] = {
    "package": "Package",
    "coverage": "Coverage",
    "covered": "Lines Covered",
    "total": "Total Lines",
}

CLASS_HEADERS: dict[str, str] = {
    "class": "Class",
    "coverage": "Coverage",
    "covered": "Lines Covered",
    "total": "Total Lines",
}


def _cell(value: object) -> str:
    return str(value).replace("|", "\\|")


def generate_markdown_table(
    rows: Sequence[Mapping[str, object]],
    headers: Mapping[str, str],
    indent: int = 0,
) -> str:
    """Render rows as a Markdown table.

    Args:
        rows: One mapping per row, keyed by the keys of ``headers``.
        headers: Row key -> column title, in column order.
        indent: Number of two-space indents to prefix every line with.

    Returns:
        The table, or an empty string when there are no rows.
    """
    if not rows:
        return ""

    prefix = _INDENT * indent
    columns = list(headers)
    lines = [
        f"{prefix}| {' | '.join(headers.values())} |",
        f"{prefix}| {' | '.join('---' for _ in columns)} |",
    ]
    lines.extend(
        f"{prefix}| {' | '.join(_cell(row.get(column, '')) for column in columns)} |"
        for row in rows
    )
    return "\n".join(lines)


def render_report(summary: CoverageSummary, title: str = DEFAULT_TITLE) -> str:
    """Render a coverage summary as a Markdown document.

    The document has a package table followed by a collapsible class table.
    Output depends only on the summary and title.
    """
    package_rows = [
        {
            "package": name,
            "coverage": totals.coverage,
            "covered": totals.covered,
            "total": totals.total,
        }
        for name, totals in summary.sorted_packages()
    ]
    class_rows = [
        {
            "class": name,
            "coverage": entry.coverage,
            "covered": entry.covered,
            "total": entry.total,
        }
        for name, entry in summary.sorted_classes()
    ]

    sections = [
        f"## {title}",
        "",
        generate_markdown_table(package_rows, PACKAGE_HEADERS),
        "",
        "",
        "<details>",
        "  <summary>Class Coverage</summary>",
        "",
        generate_markdown_table(class_rows, CLASS_HEADERS, indent=1),
        "",
        "</details>",
    ]
    return "\n".join(sections) + "\n"
