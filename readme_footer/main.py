#!/usr/bin/env python3
"""
Main driver script for the README footer updater.

This script provides the command-line interface and coordinates all modules
to add or replace a standard footer in the README of every selected
repository, through a branch, a pull request and an automatic merge.

Configuration is read from the environment (or a ``.env`` file):
GITHUB_TOKEN, ORG, UPDATE_BRANCH_NAME and optionally OVERRIDE_REPOS,
BASE_BRANCH, README_PATH, FOOTER_FILE, FOOTER_HTML, FOOTER_MARKER_ID and
FAILED_REPOSITORIES_FILE.

Usage (example):
    python -m readme_footer.main --footer-file footer.html
"""

import argparse
import logging
import sys
from typing import List, Optional

from github import GithubException
from rich.console import Console

from .client import GitHubClient
from .config import load_config, load_env_file
from .errors import ReadmeFooterError
from .footer import FooterMerger
from .models import RepositoryStatus
from .orchestrator import BatchOrchestrator
from .prompts import AutoPrompter, ConsolePrompter
from .sources import FailedRepositoriesFile, is_valid_repositories, resolve_repositories
from .workflow import ReadmeUpdater

logger = logging.getLogger("readme-footer")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Add a standard footer to the README of an organization's repositories.")
    parser.add_argument("--env-file", help="Environment file to load (default: .env searched from the current directory)")
    parser.add_argument("--footer-file", help="HTML fragment used as footer (overrides FOOTER_FILE / FOOTER_HTML)")
    parser.add_argument("--base-branch", help="Branch to branch from and merge into (overrides BASE_BRANCH, default: develop)")
    parser.add_argument("--yes", "-y", action="store_true", help="Answer yes to every question (non-interactive)")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")
    return parser


def run(args: argparse.Namespace, console: Console) -> Optional[List[RepositoryStatus]]:
    """
    Resolve configuration and repositories, then process them.

    Returns:
        Statuses of the processed repositories, or None if the run was aborted
        because the repository list is empty or invalid
    """
    load_env_file(args.env_file)
    config = load_config(footer_file=args.footer_file, base_branch=args.base_branch)

    if config.override_repositories:
        console.print("[red]Override repositories are set in the environment and they will be used.[/red]\n")

    prompter = AutoPrompter(assume_yes=True) if args.yes else ConsolePrompter(console)
    client = GitHubClient(token=config.github_token)
    failed_file = FailedRepositoriesFile(config.failed_repositories_file)

    repositories = resolve_repositories(config, client, prompter, failed_file)
    if not is_valid_repositories(repositories):
        console.print("[red]Empty or invalid array of repositories. Aborting...[/red]")
        return None

    client.verify_credentials()

    updater = ReadmeUpdater(
        client,
        prompter,
        footer_html=config.footer_html,
        update_branch=config.update_branch_name,
        base_branch=config.base_branch,
        readme_path=config.readme_path,
        merger=FooterMerger(config.footer_marker_id),
    )
    orchestrator = BatchOrchestrator(client, updater, prompter, failed_file, console=console)
    return orchestrator.run(repositories)


def main() -> None:
    """
    Main entry point for the README footer updater.

    Parses command line arguments, loads configuration and runs the batch
    update. Configuration and repository list errors stop the run with exit
    status 1; errors of individual repositories only show up in the summary.
    """
    args = build_parser().parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level))
    console = Console()

    try:
        statuses = run(args, console)
        if statuses is None:
            sys.exit(1)
        logger.info("Processed %d repositories", len(statuses))

    except ReadmeFooterError as e:
        logger.error("Aborting: %s", e)
        console.print(str(e), style="red", markup=False)
        sys.exit(1)
    except GithubException as e:
        logger.error("GitHub request failed before processing started: %s", e)
        console.print(f"GitHub request failed: {e}", style="red", markup=False)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Run interrupted by user")
        print("\nOperation cancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
