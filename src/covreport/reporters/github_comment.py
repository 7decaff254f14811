"""GitHub comment reporter for posting coverage reports to PRs.

The comment carries a hidden marker derived from the coverage input, so
re-running the report on the same PR updates the existing comment instead of
adding another one. Separate inputs get separate comments.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covreport.utils.git import GitHubAPI, compute_comment_marker

if TYPE_CHECKING:
    from covreport.utils.git import GitHubPRInfo

logger = logging.getLogger(__name__)


def format_comment_body(report: str, marker: str) -> str:
    """Prefix the rendered report with its marker."""
    return f"{marker}\n{report}"


class GitHubCommentReporter:
    """Reporter that posts coverage reports as GitHub PR comments."""

    def __init__(self, api: GitHubAPI) -> None:
        """Initialize the GitHub comment reporter.

        Args:
            api: Authenticated GitHub API client.
        """
        self._api = api

    @classmethod
    def from_token(cls, token: str, api_url: str) -> GitHubCommentReporter:
        """Build a reporter with a fresh API client.

        Raises:
            GitHubAuthError: If the token is empty.
        """
        return cls(GitHubAPI(token=token, api_url=api_url))

    def post_report(self, pr_info: GitHubPRInfo, report: str, key: str) -> dict[str, str]:
        """Create or update the coverage comment for ``key`` on a PR.

        Args:
            pr_info: Pull request information.
            report: Rendered Markdown report.
            key: Identifies the coverage run (the input CSV path).

        Returns:
            Dict with status, action (created/updated), comment id and URL.

        Raises:
            GitHubAPIError: If posting the comment fails.
        """
        logger.info(
            "Posting coverage report to PR #%d in %s/%s",
            pr_info.pr_number,
            pr_info.owner,
            pr_info.repo,
        )

        marker = compute_comment_marker(key)
        body = format_comment_body(report, marker)
        result = self._api.upsert_comment(pr_info, body, marker)

        logger.info("Comment %s: %s", result.action, result.comment.get("html_url"))

        return {
            "status": "success",
            "action": result.action,
            "comment_id": str(result.comment.get("id", "")),
            "comment_url": result.comment.get("html_url", ""),
        }
