"""Reporters for rendering and publishing coverage reports."""

from __future__ import annotations

from covreport.reporters.github_comment import GitHubCommentReporter
from covreport.reporters.markdown import generate_markdown_table, render_report
from covreport.reporters.terminal import reporter

__all__ = [
    "GitHubCommentReporter",
    "generate_markdown_table",
    "render_report",
    "reporter",
]
