"""
Per-repository README update workflow.

For one repository the updater:

1. deletes a stale update branch,
2. cuts the update branch from the base branch,
3. fetches the README from the base branch and merges the footer into it,
4. commits the new README through the blob -> tree -> commit -> ref chain,
5. opens a pull request into the base branch and
6. merges it.

Every run ends in exactly one ``RepositoryStatus``. GitHub errors never
escape ``ReadmeUpdater.update``.
"""

import enum
import logging
from typing import Optional

from github import GithubException

from .footer import FooterMerger
from .models import Repository, RepositoryStatus, Status
from .prompts import Prompter
from .utils import decode_base64, encode_base64

logger = logging.getLogger("readme-footer.workflow")

COMMIT_MESSAGE = "Update README"
PULL_REQUEST_TITLE = "Update README via script"
PULL_REQUEST_BODY = "This PR updates the README."


class UpdateState(enum.Enum):
    START = "start"
    BRANCH_CLEARED = "branch-cleared"
    BRANCH_CREATED = "branch-created"
    README_EVALUATED = "readme-evaluated"
    COMMITTED = "committed"
    PULL_REQUEST_OPEN = "pull-request-open"
    MERGED = "merged"
    DONE = "done"


class _Finished(Exception):
    """Ends the workflow early with a terminal status."""

    def __init__(self, status: Status, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


def _is_not_found(error: GithubException) -> bool:
    return error.status == 404


class ReadmeUpdater:
    """
    Add or replace the footer of one repository's README through a pull request.

    Args:
        client: GitHub client (see ``client.GitHubClient``)
        prompter: Asks whether an existing footer may be overwritten
        footer_html: Footer placed inside the marker wrapper
        update_branch: Short lived branch the change is staged on
        base_branch: Branch the update branch is cut from and merged into
        readme_path: Path of the README inside the repository
        merger: Footer merge engine
    """

    def __init__(
        self,
        client,
        prompter: Prompter,
        footer_html: str,
        update_branch: str,
        base_branch: str = "develop",
        readme_path: str = "README.md",
        merger: Optional[FooterMerger] = None,
    ) -> None:
        self.client = client
        self.prompter = prompter
        self.footer_html = footer_html
        self.update_branch = update_branch
        self.base_branch = base_branch
        self.readme_path = readme_path
        self.merger = merger or FooterMerger()
        self.state = UpdateState.START

    def _enter(self, state: UpdateState, repository: Repository) -> None:
        logger.debug("%s: %s -> %s", repository.full_name, self.state.value, state.value)
        self.state = state

    def update(self, repository: Repository, overwrite_existing: bool) -> RepositoryStatus:
        """
        Run the whole workflow for ``repository``.

        Args:
            repository: Repository to update
            overwrite_existing: Replace an existing footer without asking

        Returns:
            Terminal status of the repository
        """
        self.state = UpdateState.START
        logger.info("Beginning work on %s with branch %s", repository.full_name, self.update_branch)
        try:
            self._clear_branch(repository)
            self._enter(UpdateState.BRANCH_CLEARED, repository)

            self._create_branch(repository)
            self._enter(UpdateState.BRANCH_CREATED, repository)

            try:
                content = self._evaluate_readme(repository, overwrite_existing)
            except _Finished:
                self._remove_update_branch(repository)
                raise
            self._enter(UpdateState.README_EVALUATED, repository)

            self._commit(repository, content)
            self._enter(UpdateState.COMMITTED, repository)

            number = self._open_pull_request(repository)
            self._enter(UpdateState.PULL_REQUEST_OPEN, repository)

            if not self.client.merge_pull_request(repository, number):
                logger.error("Pull request #%d in %s was not merged", number, repository.full_name)
                raise _Finished(Status.FAILED, f"Pull request #{number} could not be merged")
            logger.info("Pull request #%d in %s was merged", number, repository.full_name)
            self._enter(UpdateState.MERGED, repository)
            result = RepositoryStatus.of(repository, Status.SUCCESSFUL, "Changes were successful")
        except _Finished as finished:
            result = RepositoryStatus.of(repository, finished.status, finished.message)
        except Exception as e:
            logger.error("Error in updating %s: %s", repository.full_name, e)
            result = RepositoryStatus.of(repository, Status.FAILED, "Error in updating repository")

        self._enter(UpdateState.DONE, repository)
        return result

    def _clear_branch(self, repository: Repository) -> None:
        try:
            self.client.get_branch(repository, self.update_branch)
        except GithubException as e:
            if _is_not_found(e):
                logger.info("Branch %s does not exist in %s, proceeding", self.update_branch, repository.full_name)
                return
            logger.error("Could not look up branch %s in %s: %s", self.update_branch, repository.full_name, e)
            raise _Finished(Status.FAILED, f"Could not check for existing branch '{self.update_branch}'") from e

        try:
            self.client.delete_branch(repository, self.update_branch)
        except GithubException as e:
            logger.error("Error deleting branch %s in %s: %s", self.update_branch, repository.full_name, e)
            raise _Finished(Status.FAILED, f"Could not delete existing branch '{self.update_branch}'") from e
        logger.info("Deleted existing branch %s in %s", self.update_branch, repository.full_name)

    def _create_branch(self, repository: Repository) -> None:
        try:
            latest = self.client.get_latest_commit(repository, self.base_branch)
        except GithubException as e:
            if _is_not_found(e):
                logger.warning("Base branch %s not found in %s", self.base_branch, repository.full_name)
                raise _Finished(Status.FAILED, f"Base branch '{self.base_branch}' not found") from e
            logger.error("Could not read branch %s in %s: %s", self.base_branch, repository.full_name, e)
            raise _Finished(Status.FAILED, f"Could not read base branch '{self.base_branch}'") from e

        try:
            self.client.create_branch(repository, self.update_branch, latest.sha)
        except GithubException as e:
            logger.error("Could not create branch %s in %s: %s", self.update_branch, repository.full_name, e)
            raise _Finished(Status.FAILED, f"Could not create branch '{self.update_branch}'") from e
        logger.info("Created branch %s from the latest %s commit of %s", self.update_branch, self.base_branch, repository.full_name)

    def _evaluate_readme(self, repository: Repository, overwrite_existing: bool) -> str:
        """Return the new README content, or finish the workflow when nothing should change."""
        try:
            fetched = self.client.fetch_file(repository, self.readme_path, self.base_branch)
        except GithubException as e:
            if _is_not_found(e):
                logger.warning("%s not found on %s in %s", self.readme_path, self.base_branch, repository.full_name)
                raise _Finished(Status.FAILED, f"README not found on '{self.base_branch}'") from e
            logger.error("Could not fetch %s in %s: %s", self.readme_path, repository.full_name, e)
            raise _Finished(Status.FAILED, "Could not fetch README") from e

        try:
            original = decode_base64(fetched.content)
        except ValueError as e:
            # binascii.Error and UnicodeDecodeError
            logger.error("Could not decode %s in %s: %s", self.readme_path, repository.full_name, e)
            raise _Finished(Status.FAILED, "README is not valid UTF-8 text") from e
        if not original and fetched.size:
            logger.error("%s in %s has %d bytes but no content was returned", self.readme_path, repository.full_name, fetched.size)
            raise _Finished(Status.FAILED, "README content could not be read")

        if not overwrite_existing and self.merger.detect(original):
            question = (
                f"{self.merger.marker_id} exists already! "
                f"Do you want to overwrite the existing footer for {repository.full_name}?"
            )
            if not self.prompter.confirm(question, default=False):
                logger.info("Existing footer kept in %s", repository.full_name)
                raise _Finished(Status.SKIPPED, "Existing footer kept by user")

        updated = self.merger.merge(original, self.footer_html, force_overwrite=True)
        if updated == original:
            logger.info("%s already has the current footer, nothing to change", repository.full_name)
            raise _Finished(Status.SKIPPED, "No changes needed")
        return updated

    def _commit(self, repository: Repository, content: str) -> None:
        try:
            blob = self.client.create_blob(repository, encode_base64(content))
            parent = self.client.get_commit_ref(repository, self.update_branch)
            base_tree = self.client.get_tree(repository, parent.sha)
            tree = self.client.create_tree(repository, base_tree, self.readme_path, blob.sha)
            commit = self.client.create_commit(repository, COMMIT_MESSAGE, tree, [parent])
            self.client.update_ref(repository, self.update_branch, commit.sha)
        except GithubException as e:
            logger.error("Error committing %s in %s: %s", self.readme_path, repository.full_name, e)
            raise _Finished(Status.FAILED, "Failed to commit README changes") from e
        logger.info("Committed %s to %s in %s", self.readme_path, self.update_branch, repository.full_name)

    def _open_pull_request(self, repository: Repository) -> int:
        pull = self.client.create_pull_request(
            repository,
            title=PULL_REQUEST_TITLE,
            head=self.update_branch,
            base=self.base_branch,
            body=PULL_REQUEST_BODY,
        )
        logger.info("Pull request #%d created in %s", pull.number, repository.full_name)
        return pull.number

    def _remove_update_branch(self, repository: Repository) -> None:
        try:
            self.client.delete_branch(repository, self.update_branch)
        except GithubException as e:
            logger.warning("Could not remove branch %s from %s: %s", self.update_branch, repository.full_name, e)
