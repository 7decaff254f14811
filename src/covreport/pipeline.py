"""Coverage report pipeline: read, aggregate, render, write, publish."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from covreport.adapters.csv_reader import read_coverage_rows
from covreport.analyzers.coverage import aggregate_coverage
from covreport.reporters.github_comment import GitHubCommentReporter
from covreport.reporters.markdown import DEFAULT_TITLE, render_report

if TYPE_CHECKING:
    from covreport.config import CovreportConfig
    from covreport.models.coverage import CoverageSummary
    from covreport.utils.git import GitHubPRInfo

logger = logging.getLogger(__name__)


def build_summary(csv_path: str | Path) -> CoverageSummary:
    """Read a JaCoCo CSV file and aggregate it.

    Raises:
        CoverageFileNotFoundError: If ``csv_path`` does not exist.
    """
    return aggregate_coverage(read_coverage_rows(csv_path))


def write_report(report: str, output_path: str | Path) -> Path:
    """Write the Markdown report, creating parent directories as needed."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(report, encoding="utf-8")
    logger.info("Wrote %d characters to %s", len(report), path)
    return path


def generate_report(
    csv_path: str | Path,
    output_path: str | Path,
    title: str = DEFAULT_TITLE,
) -> str:
    """Generate the Markdown report for ``csv_path`` and write it to ``output_path``.

    Args:
        csv_path: JaCoCo CSV export.
        output_path: Destination Markdown file.
        title: Report title.

    Returns:
        The rendered Markdown.

    Raises:
        CoverageFileNotFoundError: If ``csv_path`` does not exist.
    """
    summary = build_summary(csv_path)
    report = render_report(summary, title)
    write_report(report, output_path)
    return report


def publish_report(
    config: CovreportConfig,
    pr_info: GitHubPRInfo,
    report: str,
    key: str,
) -> dict[str, str]:
    """Create or update the PR comment holding ``report``.

    The local report file is never touched here, so a publish failure leaves
    it in place.

    Args:
        config: Resolved configuration (token and API URL).
        pr_info: Target pull request.
        report: Rendered Markdown.
        key: Marker key, normally the input CSV path as given by the user.

    Raises:
        GitHubAPIError: If any API call fails.
    """
    commenter = GitHubCommentReporter.from_token(config.github.token, config.github.api_url)
    return commenter.post_report(pr_info, report, key)
