"""Git and GitHub API utilities for covreport.

Provides a small GitHub REST client for managing pull request comments and
helpers for resolving the ``owner/repo`` of the current git checkout.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests
from requests import RequestException

from covreport import __version__

logger = logging.getLogger(__name__)

# GitHub API constants
GITHUB_API_BASE = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
COMMENT_MARKER_PREFIX = "coverage-report"

_REQUEST_TIMEOUT = 30
_COMMENTS_PER_PAGE = 100
_MAX_ERROR_BODY_LENGTH = 500

# Expected number of parts when splitting "owner/repo"
_OWNER_REPO_PARTS = 2

_HTTP_SUCCESS_MIN = 200
_HTTP_SUCCESS_MAX = 300
_HTTP_UNAUTHORIZED = 401
_HTTP_FORBIDDEN = 403
_HTTP_NOT_FOUND = 404


def _git_executable() -> str:
    """Resolve the full path to the ``git`` executable."""
    return shutil.which("git") or "git"


@dataclass
class GitHubPRInfo:
    """Information about a GitHub pull request."""

    owner: str
    """Repository owner (username or organization)."""

    repo: str
    """Repository name."""

    pr_number: int
    """Pull request number."""


@dataclass
class UpsertResult:
    """Outcome of creating or updating a marked comment."""

    action: str
    """Either ``"created"`` or ``"updated"``."""

    comment: dict[str, Any]
    """GitHub API response for the created or updated comment."""


class GitHubAPIError(Exception):
    """Exception raised when GitHub API operations fail."""

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class GitHubAuthError(GitHubAPIError):
    """Raised when GitHub rejects the token (401 or 403)."""


class GitHubNotFoundError(GitHubAPIError):
    """Raised when the repository, pull request or comment does not exist (404)."""


def _raise_for_status(method: str, url: str, response: requests.Response) -> None:
    """Translate a non-2xx response into the matching GitHubAPIError subclass."""
    status = response.status_code
    if _HTTP_SUCCESS_MIN <= status < _HTTP_SUCCESS_MAX:
        return

    body = response.text or ""
    message = f"GitHub API error: {method} {url} returned {status} - {body[:_MAX_ERROR_BODY_LENGTH]}"
    if status in {_HTTP_UNAUTHORIZED, _HTTP_FORBIDDEN}:
        raise GitHubAuthError(message, status_code=status, body=body)
    if status == _HTTP_NOT_FOUND:
        raise GitHubNotFoundError(message, status_code=status, body=body)
    raise GitHubAPIError(message, status_code=status, body=body)


def _decode_json(url: str, response: requests.Response) -> Any:
    """Return the JSON payload of a successful response.

    Raises:
        GitHubAPIError: If the body is not JSON (e.g. an HTML page from a proxy).
    """
    try:
        return response.json()
    except ValueError as exc:
        body = response.text or ""
        raise GitHubAPIError(
            f"Invalid JSON from {url}: {body[:_MAX_ERROR_BODY_LENGTH]}",
            status_code=response.status_code,
            body=body,
        ) from exc


class GitHubAPI:
    """Client for the GitHub issue comment endpoints.

    Handles authentication, error mapping, pagination and marker-based
    comment upserts.
    """

    def __init__(self, token: str, api_url: str = GITHUB_API_BASE) -> None:
        """Initialize the GitHub API client.

        Args:
            token: GitHub token with permission to write issue comments.
            api_url: Base URL of the REST API (GitHub Enterprise servers use
                ``https://<host>/api/v3``).

        Raises:
            GitHubAuthError: If the token is empty.
        """
        if not token:
            raise GitHubAuthError("GitHub token required to publish comments.")

        self._token = token
        self._api_url = api_url.rstrip("/")
        self._session_headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": f"covreport/{__version__}",
        }

    @property
    def api_url(self) -> str:
        return self._api_url

    def _comments_url(self, pr_info: GitHubPRInfo) -> str:
        return (
            f"{self._api_url}/repos/{pr_info.owner}/{pr_info.repo}/"
            f"issues/{pr_info.pr_number}/comments"
        )

    def list_comments(self, pr_info: GitHubPRInfo) -> list[dict[str, Any]]:
        """List all comments on a pull request, following pagination.

        Args:
            pr_info: Pull request information.

        Returns:
            Comments in the order GitHub returns them (oldest first).

        Raises:
            GitHubAPIError: If any page request fails.
        """
        comments: list[dict[str, Any]] = []
        url: str | None = self._comments_url(pr_info)
        params: dict[str, Any] | None = {"per_page": _COMMENTS_PER_PAGE}

        while url:
            response = self._get(url, params=params)
            page = _decode_json(url, response)
            if isinstance(page, list):
                comments.extend(page)
            url = response.links.get("next", {}).get("url")
            # The "next" link already carries the query string
            params = None

        logger.debug("Fetched %d comments from PR #%d", len(comments), pr_info.pr_number)
        return comments

    def find_comment_by_marker(self, pr_info: GitHubPRInfo, marker: str) -> dict[str, Any] | None:
        """Find the first comment on a PR whose body contains ``marker``.

        Args:
            pr_info: Pull request information.
            marker: Unique marker to search for in comment bodies.

        Returns:
            Comment dict if found, None otherwise.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        for comment in self.list_comments(pr_info):
            if marker in (comment.get("body") or ""):
                return comment
        return None

    def create_comment(self, pr_info: GitHubPRInfo, body: str) -> dict[str, Any]:
        """Create a new comment on a pull request.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        url = self._comments_url(pr_info)
        result: dict[str, Any] = _decode_json(url, self._post(url, {"body": body}))
        return result

    def update_comment(self, pr_info: GitHubPRInfo, comment_id: int, body: str) -> dict[str, Any]:
        """Replace the body of an existing comment.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        url = (
            f"{self._api_url}/repos/{pr_info.owner}/{pr_info.repo}/"
            f"issues/comments/{comment_id}"
        )
        result: dict[str, Any] = _decode_json(url, self._patch(url, {"body": body}))
        return result

    def upsert_comment(self, pr_info: GitHubPRInfo, body: str, marker: str) -> UpsertResult:
        """Create or update a comment on a PR.

        If a comment containing ``marker`` exists, its body is replaced.
        Otherwise a new comment is created.

        Args:
            pr_info: Pull request information.
            body: Comment body (markdown formatted). Should include the marker.
            marker: Unique marker identifying this comment.

        Returns:
            UpsertResult describing what was done.

        Raises:
            GitHubAPIError: If any API request fails.
        """
        if marker not in body:
            logger.warning("Marker '%s' not found in comment body. Adding it.", marker)
            body = f"{marker}\n{body}"

        existing = self.find_comment_by_marker(pr_info, marker)

        if existing:
            logger.info("Updating existing comment %s", existing["id"])
            return UpsertResult("updated", self.update_comment(pr_info, existing["id"], body))

        logger.info("Creating new comment on PR #%d", pr_info.pr_number)
        return UpsertResult("created", self.create_comment(pr_info, body))

    def _get(self, url: str, params: dict[str, Any] | None = None) -> requests.Response:
        try:
            response = requests.get(
                url, headers=self._session_headers, params=params, timeout=_REQUEST_TIMEOUT
            )
        except RequestException as exc:
            raise GitHubAPIError(f"GET request failed: {exc}") from exc
        _raise_for_status("GET", url, response)
        return response

    def _post(self, url: str, data: dict[str, Any]) -> requests.Response:
        try:
            response = requests.post(
                url, json=data, headers=self._session_headers, timeout=_REQUEST_TIMEOUT
            )
        except RequestException as exc:
            raise GitHubAPIError(f"POST request failed: {exc}") from exc
        _raise_for_status("POST", url, response)
        return response

    def _patch(self, url: str, data: dict[str, Any]) -> requests.Response:
        try:
            response = requests.patch(
                url, json=data, headers=self._session_headers, timeout=_REQUEST_TIMEOUT
            )
        except RequestException as exc:
            raise GitHubAPIError(f"PATCH request failed: {exc}") from exc
        _raise_for_status("PATCH", url, response)
        return response


def compute_comment_marker(key: str) -> str:
    """Return the hidden HTML marker identifying a coverage comment.

    Args:
        key: Identifies the coverage run, normally the input CSV path.

    Returns:
        Marker of the form ``<!-- coverage-report:<key> -->``.
    """
    return f"<!-- {COMMENT_MARKER_PREFIX}:{key} -->"


def parse_github_url(url: str) -> tuple[str | None, str | None]:
    """Parse owner and repo from a GitHub remote URL.

    Args:
        url: GitHub URL (HTTPS or SSH format).

    Returns:
        Tuple of (owner, repo) or (None, None) if parsing fails.
    """
    # HTTPS: https://github.com/owner/repo.git (optionally with credentials)
    https_pattern = r"https?://(?:[^@/]+@)?github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$"
    # SSH: git@github.com:owner/repo.git
    ssh_pattern = r"git@github\.com:([^/]+)/([^/]+?)(?:\.git)?$"
    # SSH URL form: ssh://git@github.com/owner/repo.git
    ssh_url_pattern = r"ssh://git@github\.com/([^/]+)/([^/]+?)(?:\.git)?$"

    for pattern in (https_pattern, ssh_pattern, ssh_url_pattern):
        match = re.match(pattern, url.strip())
        if match:
            owner, repo = match.groups()
            return owner, repo

    return None, None


def split_repo_slug(slug: str) -> tuple[str, str] | None:
    """Split ``owner/repo`` into its parts, or return None if malformed."""
    parts = slug.strip().split("/")
    if len(parts) != _OWNER_REPO_PARTS or not all(parts):
        return None
    return parts[0], parts[1]


def get_remote_url(repo_path: Path | None = None) -> str | None:
    """Return the ``origin`` remote URL, or None when it cannot be read."""
    try:
        result = subprocess.run(
            [_git_executable(), "config", "--get", "remote.origin.url"],
            cwd=repo_path or Path.cwd(),
            capture_output=True,
            text=True,
            check=True,
        )
    except (subprocess.CalledProcessError, OSError) as exc:
        logger.debug("Could not read git remote: %s", exc)
        return None
    return result.stdout.strip() or None


def get_repo_slug_from_git(repo_path: Path | None = None) -> str | None:
    """Resolve ``owner/repo`` from the ``origin`` remote of a git checkout.

    Args:
        repo_path: Directory inside the checkout. Defaults to the working directory.

    Returns:
        ``owner/repo`` if the remote is a GitHub URL, None otherwise.
    """
    remote_url = get_remote_url(repo_path)
    if not remote_url:
        return None

    owner, repo = parse_github_url(remote_url)
    if not owner or not repo:
        logger.debug("Remote %s is not a GitHub URL", remote_url)
        return None
    return f"{owner}/{repo}"
