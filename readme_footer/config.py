"""
Configuration loading.

Settings come from environment variables, optionally populated from a
``.env`` file, and are validated once at start-up so that a missing token or
branch name aborts the run before any repository is touched.
"""

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError, RepositoryListError
from .footer import DEFAULT_FOOTER, FOOTER_MARKER_ID
from .models import Repository
from .sources import parse_repository_list

logger = logging.getLogger("readme-footer.config")

DEFAULT_BASE_BRANCH = "develop"
DEFAULT_README_PATH = "README.md"
DEFAULT_FAILED_REPOSITORIES_FILE = "failed-repositories.json"


@dataclass(frozen=True)
class Config:
    """Validated settings for one run of the updater."""
    github_token: str
    update_branch_name: str
    organization: Optional[str] = None
    override_repositories: List[Repository] = field(default_factory=list)
    base_branch: str = DEFAULT_BASE_BRANCH
    readme_path: str = DEFAULT_README_PATH
    footer_html: str = DEFAULT_FOOTER
    footer_marker_id: str = FOOTER_MARKER_ID
    failed_repositories_file: str = DEFAULT_FAILED_REPOSITORIES_FILE


def load_env_file(path: Optional[str] = None) -> bool:
    """
    Populate ``os.environ`` from a ``.env`` file.

    Without a path the file is searched from the current directory upwards.
    Variables already present in the environment win over the file.

    Returns:
        True if a file was found and loaded
    """
    if path is not None and not Path(path).is_file():
        raise ConfigError(f"Environment file {path} does not exist")
    loaded = load_dotenv(dotenv_path=path or find_dotenv(usecwd=True), override=False)
    logger.debug("Environment file loaded: %s", loaded)
    return loaded


def _required(environ: Mapping[str, str], name: str, hint: str) -> str:
    value = (environ.get(name) or "").strip()
    if not value:
        raise ConfigError(f"{name} is not defined. {hint}")
    return value


def _parse_override_repositories(raw: Optional[str]) -> List[Repository]:
    # OVERRIDE_REPOS='[{"owner":"acme","repository":"widgets"},...]'
    if not raw or not raw.strip():
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"OVERRIDE_REPOS is not valid JSON: {e}") from e

    try:
        return parse_repository_list(data)
    except RepositoryListError as e:
        raise ConfigError(f"OVERRIDE_REPOS is invalid: {e}") from e


def _read_footer(environ: Mapping[str, str], footer_file: Optional[str]) -> str:
    footer_file = footer_file or environ.get("FOOTER_FILE")
    if footer_file:
        try:
            return Path(footer_file).read_text(encoding="utf-8").strip()
        except OSError as e:
            raise ConfigError(f"Could not read footer file {footer_file}: {e}") from e

    inline = environ.get("FOOTER_HTML")
    if inline and inline.strip():
        return inline.strip()
    return DEFAULT_FOOTER


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    footer_file: Optional[str] = None,
    base_branch: Optional[str] = None,
) -> Config:
    """
    Build a Config from environment variables.

    Args:
        environ: Mapping to read from (defaults to ``os.environ``)
        footer_file: Footer HTML file given on the command line, takes
                     precedence over ``FOOTER_FILE`` and ``FOOTER_HTML``
        base_branch: Base branch given on the command line, takes precedence
                     over ``BASE_BRANCH``

    Returns:
        Validated Config

    Raises:
        ConfigError: If a required value is missing or malformed
    """
    if environ is None:
        environ = os.environ

    token = _required(environ, "GITHUB_TOKEN", "Please set the GITHUB_TOKEN environment variable.")
    update_branch = _required(
        environ,
        "UPDATE_BRANCH_NAME",
        "Please set the UPDATE_BRANCH_NAME environment variable. "
        "It should not be a manually used branch, it will get deleted and re-created.",
    )
    override_repositories = _parse_override_repositories(environ.get("OVERRIDE_REPOS"))

    organization = (environ.get("ORG") or "").strip() or None
    if organization is None and not override_repositories:
        raise ConfigError("ORG is not defined. Please set the ORG environment variable or OVERRIDE_REPOS.")

    config = Config(
        github_token=token,
        update_branch_name=update_branch,
        organization=organization,
        override_repositories=override_repositories,
        base_branch=(environ.get("BASE_BRANCH") or DEFAULT_BASE_BRANCH).strip(),
        readme_path=(environ.get("README_PATH") or DEFAULT_README_PATH).strip(),
        footer_html=_read_footer(environ, footer_file),
        footer_marker_id=(environ.get("FOOTER_MARKER_ID") or FOOTER_MARKER_ID).strip(),
        failed_repositories_file=(environ.get("FAILED_REPOSITORIES_FILE") or DEFAULT_FAILED_REPOSITORIES_FILE).strip(),
    )
    if base_branch:
        config = replace(config, base_branch=base_branch)
    if config.update_branch_name == config.base_branch:
        raise ConfigError("UPDATE_BRANCH_NAME must differ from the base branch, the update branch is deleted on every run.")
    return config
