"""covreport CLI: render a JaCoCo CSV as Markdown and optionally post it to a PR."""

from __future__ import annotations

import logging

import click
from rich.logging import RichHandler

from covreport import __version__
from covreport.adapters.csv_reader import CoverageFileNotFoundError
from covreport.config import (
    ConfigError,
    apply_overrides,
    load_config,
    resolve_pr_info,
    validate_config,
)
from covreport.pipeline import build_summary, publish_report, write_report
from covreport.reporters.markdown import render_report
from covreport.reporters.terminal import err_console, reporter
from covreport.utils.git import GitHubAPIError, GitHubAuthError, GitHubNotFoundError

logger = logging.getLogger(__name__)


def _configure_logging(*, verbose: bool) -> None:
    """Route covreport logs through a rich handler on standard error."""
    handler = RichHandler(
        console=err_console,
        show_time=False,
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    package_logger = logging.getLogger("covreport")
    for existing in package_logger.handlers[:]:
        package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


def _publish_error_message(exc: GitHubAPIError) -> str:
    if isinstance(exc, GitHubAuthError):
        return "GitHub rejected the token (check GITHUB_TOKEN permissions)"
    if isinstance(exc, GitHubNotFoundError):
        return "Repository or pull request not found"
    return str(exc)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("input_csv", type=click.Path(dir_okay=False))
@click.argument("output_md", type=click.Path(dir_okay=False, writable=True))
@click.option(
    "--title",
    default=None,
    help='Title to use for the report (default: "Coverage Report").',
)
@click.option(
    "--pr",
    "pr_number",
    type=click.IntRange(min=1),
    default=None,
    help="PR number to post the comment to. Requires GITHUB_TOKEN.",
)
@click.option(
    "--repo",
    default=None,
    help="Repository in owner/repo format (defaults to the origin remote).",
)
@click.option(
    "--api-url",
    default=None,
    help="GitHub API base URL (defaults to GITHUB_API_URL or https://api.github.com).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a covreport YAML config file (default: ./.covreport.yml).",
)
@click.option(
    "--summary/--no-summary",
    default=True,
    show_default=True,
    help="Print a package coverage table to the terminal.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging on stderr.")
@click.version_option(version=__version__, prog_name="covreport")
def cli(
    input_csv: str,
    output_md: str,
    title: str | None,
    pr_number: int | None,
    repo: str | None,
    api_url: str | None,
    config_path: str | None,
    *,
    summary: bool,
    verbose: bool,
) -> None:
    """Generate a Markdown coverage report from a JaCoCo CSV file.

    INPUT_CSV is the JaCoCo CSV export (e.g. target/site/jacoco/jacoco.csv).
    OUTPUT_MD is where the Markdown report is written.

    With --pr the report is also posted to the pull request, updating the
    previous comment for the same INPUT_CSV if there is one.

    Examples:
      covreport target/site/jacoco/jacoco.csv build/coverage.md
      GITHUB_TOKEN=... covreport jacoco.csv coverage.md --title "Client" --pr 42
    """
    _configure_logging(verbose=verbose)
    publish = pr_number is not None

    try:
        config = apply_overrides(
            load_config(config_path), title=title, repo=repo, api_url=api_url
        )
        errors = validate_config(config, publish=publish)
        if errors:
            raise ConfigError("; ".join(errors))
        pr_info = resolve_pr_info(config, pr_number) if pr_number is not None else None
    except ConfigError as exc:
        reporter.print_error(f"Error: {exc}")
        raise SystemExit(1) from exc

    try:
        coverage = build_summary(input_csv)
    except CoverageFileNotFoundError as exc:
        reporter.print_error(f"Error: {exc}")
        raise SystemExit(1) from exc
    except (OSError, UnicodeDecodeError) as exc:
        reporter.print_error(f"Error reading file: {exc}")
        raise SystemExit(1) from exc

    report = render_report(coverage, config.report.title)

    try:
        output_path = write_report(report, output_md)
    except OSError as exc:
        reporter.print_error(f"Error writing report: {exc}")
        raise SystemExit(1) from exc

    reporter.print_success(f"Report generated successfully at: {output_path}")
    if summary:
        reporter.print_coverage_summary(coverage, config.report.title)

    if pr_info is None:
        return

    try:
        result = publish_report(config, pr_info, report, input_csv)
    except GitHubAPIError as exc:
        reporter.print_error(
            f"Error posting to GitHub: {_publish_error_message(exc)} "
            f"(report was written to {output_path})"
        )
        logger.debug("Publish failure details: %s", exc)
        raise SystemExit(1) from exc

    action = "updated" if result["action"] == "updated" else "posted"
    reporter.print_success(f"Coverage report {action} to PR #{pr_info.pr_number}")
    if result.get("comment_url"):
        reporter.print_info(result["comment_url"])


def main() -> None:
    """Console script entry point."""
    cli()
