"""
Repository sources.

Exactly one source supplies the repositories of a run, in this order:
an override list from the configuration, a failure file written by an
earlier run (when the operator accepts it), or the organization listing.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from .client import PAGE_SIZE
from .errors import RepositoryListError
from .models import Repository, RepositoryStatus, Status

logger = logging.getLogger("readme-footer.sources")


def parse_repository_list(data: Any) -> List[Repository]:
    """
    Turn decoded JSON into Repository objects.

    Missing fields become empty strings so that ``is_valid_repositories``
    can reject them as a whole.

    Raises:
        RepositoryListError: If ``data`` is not a list of objects
    """
    if not isinstance(data, list):
        raise RepositoryListError("Expected a JSON array of {owner, repository} objects")
    repositories = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise RepositoryListError(f"Entry {index} is not an object: {item!r}")
        repositories.append(Repository(
            owner=str(item.get("owner") or "").strip(),
            repository=str(item.get("repository") or "").strip(),
        ))
    return repositories


def is_valid_repositories(repositories: Optional[Sequence[Repository]]) -> bool:
    """Return True for a non-empty list whose entries all have an owner and a name."""
    if not repositories:
        return False
    return all(repo.owner and repo.repository for repo in repositories)


class OrganizationRepositorySource:
    """
    List an organization's public repositories.

    Pages are requested until one comes back shorter than the page size.
    Forks and archived repositories are left out.
    """

    def __init__(self, client, organization: str, page_size: int = PAGE_SIZE) -> None:
        self.client = client
        self.organization = organization
        self.page_size = page_size

    def list(self) -> List[Repository]:
        repositories: List[Repository] = []
        page = 0
        while True:
            entries = self.client.list_organization_repositories_page(self.organization, page)
            for entry in entries:
                if entry.fork or entry.archived:
                    logger.debug("Ignoring %s/%s (fork=%s, archived=%s)", entry.owner, entry.name, entry.fork, entry.archived)
                    continue
                repositories.append(Repository(owner=entry.owner, repository=entry.name))
            if len(entries) < self.page_size:
                break
            page += 1

        logger.info("Found %d repositories in organization %s", len(repositories), self.organization)
        return repositories


class FailedRepositoriesFile:
    """JSON file of repositories whose update failed, used to retry them later."""

    def __init__(self, path: str) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> List[Repository]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise RepositoryListError(f"{self.path} is not valid JSON: {e}") from e
        repositories = parse_repository_list(data)
        logger.info("Loaded %d repositories from %s", len(repositories), self.path)
        return repositories

    def save(self, statuses: Iterable[RepositoryStatus]) -> List[Repository]:
        """
        Write the failed subset of ``statuses`` as ``[{owner, repository}, ...]``.

        Returns:
            The repositories that were written
        """
        failed = [s.to_repository() for s in statuses if s.status == Status.FAILED]
        content = json.dumps([repo.to_dict() for repo in failed], indent=2)
        self.path.write_text(content, encoding="utf-8")
        logger.info("Saved %d failed repositories to %s", len(failed), self.path)
        return failed


def resolve_repositories(config, client, prompter, failed_file: FailedRepositoriesFile) -> List[Repository]:
    """
    Pick the repositories for this run.

    Args:
        config: Run configuration (override list and organization)
        client: GitHub client used for the organization listing
        prompter: Asks whether a failure file should be reused
        failed_file: Failure file of an earlier run

    Returns:
        Repositories in processing order
    """
    if config.override_repositories:
        logger.info("Using %d override repositories", len(config.override_repositories))
        return list(config.override_repositories)

    if failed_file.exists() and prompter.confirm(
        f"Found {failed_file.path}. Do you want to load the repositories to be used from this file?"
    ):
        return failed_file.load()

    if not config.organization:
        raise RepositoryListError("No organization configured and no repository list given")
    return OrganizationRepositorySource(client, config.organization).list()
