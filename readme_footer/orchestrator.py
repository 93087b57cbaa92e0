"""
Batch orchestration over the selected repositories.

Asks the global questions once, lets the operator process, skip or archive
each repository, runs the update workflow and reports a summary.
"""

import logging
from typing import List, Optional, Sequence

from rich.console import Console

from .models import Repository, RepositoryStatus, Status
from .prompts import Prompter
from .sources import FailedRepositoriesFile
from .workflow import ReadmeUpdater

logger = logging.getLogger("readme-footer.orchestrator")

PROCESS = "process"
SKIP = "skip"
ARCHIVE = "archive"
REPOSITORY_CHOICES = (PROCESS, SKIP, ARCHIVE)

STATUS_STYLES = {
    Status.SUCCESSFUL: "green",
    Status.SKIPPED: "color(214)",
    Status.FAILED: "red",
}


def display_selected_repositories(repositories: Sequence[Repository], console: Console) -> None:
    console.print("---------Selected Repositories---------")
    for index, repo in enumerate(repositories):
        console.print(f"{index}: Owner: {repo.owner} Repository: [magenta]{repo.repository}[/magenta]")
    console.print("---------------------------------------")


def display_summary(statuses: Sequence[RepositoryStatus], console: Console) -> None:
    """Print one colored line per repository status."""
    console.print("\nSummary:")
    for status in statuses:
        style = STATUS_STYLES.get(status.status)
        label = f"[{style}]{status.status.value}[/{style}]" if style else status.status.value
        console.print(f"- [magenta]{status.full_name}[/magenta] - {label} - {status.message}")


def offer_to_save_failures(
    statuses: Sequence[RepositoryStatus],
    failed_file: FailedRepositoriesFile,
    prompter: Prompter,
    console: Console,
) -> bool:
    """
    Offer to write failed repositories to ``failed_file``.

    Nothing is asked when no repository failed.

    Returns:
        True if the file was written
    """
    failed_count = sum(1 for s in statuses if s.status == Status.FAILED)
    if failed_count == 0:
        return False

    console.print("")
    if not prompter.confirm(
        f"There were {failed_count} failed repositories. Do you want to save them to a file as JSON?"
    ):
        return False

    try:
        failed_file.save(statuses)
    except OSError as e:
        logger.error("Could not write %s: %s", failed_file.path, e)
        console.print(f"[red]Failed to save to {failed_file.path}[/red]")
        return False
    console.print(f"[green]Failed repositories have been saved to {failed_file.path}[/green]")
    return True


class BatchOrchestrator:
    """
    Run the README update for a list of repositories, one at a time.

    Args:
        client: GitHub client, used here only for archiving
        updater: Per-repository workflow
        prompter: Answers the global and per-repository questions
        failed_file: Where failed repositories can be saved for a retry run
        console: Console for operator-facing output
    """

    def __init__(
        self,
        client,
        updater: ReadmeUpdater,
        prompter: Prompter,
        failed_file: FailedRepositoriesFile,
        console: Optional[Console] = None,
    ) -> None:
        self.client = client
        self.updater = updater
        self.prompter = prompter
        self.failed_file = failed_file
        self.console = console or Console()

    def run(self, repositories: Sequence[Repository]) -> List[RepositoryStatus]:
        """
        Process every repository in order.

        Returns:
            One status per repository, in input order
        """
        console = self.console
        display_selected_repositories(repositories, console)

        console.print("This script will add custom footers to ALL the specified repositories. "
                      "It can also overwrite existing footers if desired.")
        console.print("[red]If you do not want to automatically update ALL of the repositories selected, "
                      "answer 'n' in the following prompt.[/red]")
        process_all = self.prompter.confirm(
            "Do you want to add the custom footer to ALL found repositories? (otherwise you will be asked individually)"
        )
        if process_all:
            console.print("All repositories will be processed.")

        overwrite_all = self.prompter.confirm(
            f"Do you want to automatically overwrite ALL existing {self.updater.merger.marker_id} footers? "
            "(otherwise you will be asked individually)"
        )
        if overwrite_all:
            console.print("All existing footers will be overwritten.")

        statuses: List[RepositoryStatus] = []
        for index, repository in enumerate(repositories):
            console.print(f"\n{index}")
            statuses.append(self._process(repository, process_all, overwrite_all))

        display_summary(statuses, console)
        offer_to_save_failures(statuses, self.failed_file, self.prompter, console)
        return statuses

    def _process(self, repository: Repository, process_all: bool, overwrite_all: bool) -> RepositoryStatus:
        if not process_all:
            choice = self.prompter.choose(
                f"Do you want to process, skip or archive repository: {repository.full_name}?",
                REPOSITORY_CHOICES,
                default=SKIP,
            )
            if choice == ARCHIVE:
                return self._archive(repository)
            if choice != PROCESS:
                self.console.print(f"Skipping repository [magenta]{repository.full_name}[/magenta].")
                return RepositoryStatus.of(repository, Status.SKIPPED, "Changes were skipped by user")

        status = self.updater.update(repository, overwrite_all)
        if status.status == Status.SKIPPED:
            self.console.print(f"No changes made to [magenta]{repository.full_name}[/magenta]: {status.message}.")
        elif status.status == Status.FAILED:
            self.console.print(f"[red]Updating [magenta]{repository.full_name}[/magenta] failed: {status.message}[/red]")
        else:
            self.console.print(f"[green]Updated [magenta]{repository.full_name}[/magenta][/green]")
        return status

    def _archive(self, repository: Repository) -> RepositoryStatus:
        try:
            self.client.archive_repository(repository)
        except Exception as e:
            logger.error("Error archiving %s: %s", repository.full_name, e)
            return RepositoryStatus.of(repository, Status.FAILED, "Failed to archive repository")
        self.console.print(f"Repository [magenta]{repository.full_name}[/magenta] was archived. Proceeding...")
        return RepositoryStatus.of(repository, Status.ARCHIVED, "Repository was archived by user")
