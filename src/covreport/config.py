"""Configuration resolution from ``.covreport.yml``, the environment and CLI flags.

Everything that comes from process-wide state (the GitHub token, the
repository slug, the API URL) is read here once and carried in a
``CovreportConfig`` value. The pipeline and the GitHub client only ever see
that value.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from covreport.reporters.markdown import DEFAULT_TITLE
from covreport.utils.git import (
    GITHUB_API_BASE,
    GitHubPRInfo,
    get_repo_slug_from_git,
    split_repo_slug,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".covreport.yml"
TOKEN_ENV_VAR = "GITHUB_TOKEN"
REPOSITORY_ENV_VAR = "GITHUB_REPOSITORY"
API_URL_ENV_VAR = "GITHUB_API_URL"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")
_URL_SCHEMES = ("http://", "https://")


class ConfigError(Exception):
    """Raised when the configuration is missing required values or is invalid."""


def _resolve_env_vars(value: str, environ: Mapping[str, str]) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value, environ)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value, environ)
        else:
            result[key] = value
    return result


@dataclass
class ReportConfig:
    """Report rendering configuration."""

    title: str = DEFAULT_TITLE
    """Title line of the Markdown report."""


@dataclass
class GitHubConfig:
    """GitHub publishing configuration."""

    token: str = ""
    """Token used to create and update PR comments."""

    repo: str = ""
    """Explicit ``owner/repo``; empty means detect from the git remote."""

    api_url: str = GITHUB_API_BASE
    """Base URL of the GitHub REST API."""

    fallback_repo: str = ""
    """``owner/repo`` from the CI environment, used when the git remote is unusable."""


@dataclass
class CovreportConfig:
    """Complete covreport configuration."""

    report: ReportConfig = field(default_factory=ReportConfig)
    """Report configuration."""

    github: GitHubConfig = field(default_factory=GitHubConfig)
    """GitHub configuration."""

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML for debugging."""


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw.get(name, {})
    return section if isinstance(section, dict) else {}


def _read_config_file(path: Path, environ: Mapping[str, str]) -> dict[str, Any]:
    try:
        parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")
    return _resolve_dict(parsed, environ)


def load_config(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> CovreportConfig:
    """Load configuration from an optional YAML file and the environment.

    Args:
        config_path: Explicit config file. When None, ``.covreport.yml`` in
            the working directory is used if it exists.
        environ: Environment mapping, defaults to ``os.environ``.

    Returns:
        The resolved configuration. CLI overrides are applied separately
        with ``apply_overrides``.

    Raises:
        ConfigError: If an explicit config file is missing or the file is invalid.
    """
    env = os.environ if environ is None else environ

    raw: dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        raw = _read_config_file(path, env)
    else:
        default_path = Path.cwd() / CONFIG_FILENAME
        if default_path.is_file():
            raw = _read_config_file(default_path, env)

    if raw:
        logger.debug("Loaded configuration sections: %s", ", ".join(sorted(raw)))

    report_raw = _section(raw, "report")
    github_raw = _section(raw, "github")

    report = ReportConfig(title=str(report_raw.get("title") or DEFAULT_TITLE))
    github = GitHubConfig(
        token=str(github_raw.get("token") or env.get(TOKEN_ENV_VAR, "")),
        repo=str(github_raw.get("repo") or ""),
        api_url=str(github_raw.get("api_url") or env.get(API_URL_ENV_VAR) or GITHUB_API_BASE),
        fallback_repo=env.get(REPOSITORY_ENV_VAR, ""),
    )

    return CovreportConfig(report=report, github=github, raw=raw)


def apply_overrides(
    config: CovreportConfig,
    *,
    title: str | None = None,
    repo: str | None = None,
    api_url: str | None = None,
) -> CovreportConfig:
    """Return a copy of ``config`` with command-line values taking precedence."""
    report = config.report
    github = config.github
    if title is not None:
        report = replace(report, title=title)
    if repo is not None:
        github = replace(github, repo=repo)
    if api_url is not None:
        github = replace(github, api_url=api_url)
    return replace(config, report=report, github=github)


def validate_config(config: CovreportConfig, *, publish: bool = False) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Args:
        config: Configuration to check.
        publish: Whether a PR comment will be published. Publishing requires
            a token.

    Returns:
        An empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not config.report.title.strip():
        errors.append("report.title must not be empty")

    if not config.github.api_url.startswith(_URL_SCHEMES):
        errors.append(
            f"github.api_url must be an http(s) URL (got: {config.github.api_url!r})"
        )

    if config.github.repo and split_repo_slug(config.github.repo) is None:
        errors.append(f"github.repo must be in owner/repo format (got: {config.github.repo!r})")

    if publish and not config.github.token:
        errors.append(f"{TOKEN_ENV_VAR} environment variable is required when using --pr")

    return errors


def resolve_pr_info(
    config: CovreportConfig,
    pr_number: int,
    repo_path: Path | None = None,
) -> GitHubPRInfo:
    """Resolve the pull request to publish to.

    The repository comes from ``github.repo`` when set, otherwise from the
    ``origin`` remote of the git checkout, otherwise from ``GITHUB_REPOSITORY``.

    Raises:
        ConfigError: If no repository can be determined or it is malformed.
    """
    slug = (
        config.github.repo
        or get_repo_slug_from_git(repo_path)
        or config.github.fallback_repo
    )
    if not slug:
        raise ConfigError(
            "Could not determine the repository. Pass --repo owner/repo or run inside "
            "a git checkout with a GitHub origin remote."
        )

    parts = split_repo_slug(slug)
    if parts is None:
        raise ConfigError(f"Repository must be in owner/repo format (got: {slug!r})")

    owner, repo = parts
    return GitHubPRInfo(owner=owner, repo=repo, pr_number=pr_number)
