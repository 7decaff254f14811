"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from covreport.models.coverage import CoverageSummary

console = Console()
err_console = Console(stderr=True)

_HIGH_COVERAGE = 80.0
_MEDIUM_COVERAGE = 50.0


def _coverage_color(percentage: float) -> str:
    """Return a Rich color name for a coverage percentage."""
    if percentage >= _HIGH_COVERAGE:
        return "green"
    if percentage >= _MEDIUM_COVERAGE:
        return "yellow"
    return "red"


def _percentage_value(formatted: str) -> float:
    return float(formatted.rstrip("%"))


class CLIReporter:
    """Rich terminal output for the covreport command."""

    def __init__(self) -> None:
        self.console = console
        self.err_console = err_console

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {escape(message)}", soft_wrap=True)

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{escape(message)}[/dim]", soft_wrap=True)

    def print_warning(self, message: str) -> None:
        """Print a warning message to standard error."""
        self.err_console.print(f"[yellow]⚠[/yellow] {escape(message)}", soft_wrap=True)

    def print_error(self, message: str) -> None:
        """Print a one-line error message to standard error."""
        self.err_console.print(f"[red]✗[/red] {escape(message)}", soft_wrap=True)

    def print_coverage_summary(self, summary: CoverageSummary, title: str) -> None:
        """Print the package coverage table with an overall row."""
        table = Table(title=title, title_style="bold cyan")
        table.add_column("Package", style="bold")
        table.add_column("Coverage", justify="right")
        table.add_column("Lines Covered", justify="right")
        table.add_column("Total Lines", justify="right")

        for name, totals in summary.sorted_packages():
            color = _coverage_color(_percentage_value(totals.coverage))
            table.add_row(
                escape(name),
                f"[{color}]{totals.coverage}[/{color}]",
                str(totals.covered),
                str(totals.total),
            )

        overall = summary.overall_coverage
        color = _coverage_color(_percentage_value(overall))
        table.add_section()
        table.add_row(
            "[bold]Overall[/bold]",
            f"[bold {color}]{overall}[/bold {color}]",
            str(summary.overall_covered),
            str(summary.overall_total),
        )

        self.console.print(table)


# Singleton instance for easy import
reporter = CLIReporter()
