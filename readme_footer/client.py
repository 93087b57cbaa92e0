"""
GitHub API client module.

This module wraps every GitHub call the updater makes. Each method maps to a
single REST endpoint and returns a small record from ``models`` instead of
the full PyGithub object, so the update workflow only depends on the fields
it actually uses.

Errors are not translated: PyGithub raises ``GithubException`` (and
``UnknownObjectException`` for 404 responses), which the workflow maps to a
repository status.
"""

import logging
from typing import List, Optional

from github import Auth, Github, InputGitTreeElement
from github.Repository import Repository as GithubRepository

from .models import FileContent, GitObject, PullRequestInfo, RemoteRepository, Repository

logger = logging.getLogger("readme-footer.client")

PAGE_SIZE = 100


class GitHubClient:
    """
    Thin GitHub client for the README update workflow.

    Authentication is attached once when the client is built; the client
    keeps no other state between calls.

    Args:
        token: Personal access token with permission to push, merge and archive.
        github: Pre-built ``Github`` instance, used instead of ``token``. It
                must be built with ``per_page=PAGE_SIZE``, the organization
                listing stops at the first page shorter than that.

    Raises:
        ValueError: If ``github`` uses a different page size
    """

    def __init__(self, token: Optional[str] = None, github: Optional[Github] = None) -> None:
        if github is not None:
            if github.per_page != PAGE_SIZE:
                raise ValueError(f"Github instance must use per_page={PAGE_SIZE}, got {github.per_page}")
            self._g = github
        else:
            try:
                self._g = Github(auth=Auth.Token(token), per_page=PAGE_SIZE)
            except Exception as e:
                logger.error("Failed to initialize GitHub client: %s", e)
                raise RuntimeError(f"GitHub client initialization failed: {e}") from e
        logger.debug("GitHub client initialized")

    def _repo(self, repository: Repository) -> GithubRepository:
        # lazy: no request until an endpoint of the repository is called
        return self._g.get_repo(repository.full_name, lazy=True)

    def verify_credentials(self) -> str:
        """Return the login of the authenticated user, failing fast on a bad token."""
        login = self._g.get_user().login
        logger.info("Authenticated as %s", login)
        return login

    # Branches and refs

    def get_branch(self, repository: Repository, branch_name: str) -> GitObject:
        """GET /repos/{owner}/{repo}/git/ref/heads/{branch}"""
        ref = self._repo(repository).get_git_ref(f"heads/{branch_name}")
        return GitObject(sha=ref.object.sha, raw=ref)

    def delete_branch(self, repository: Repository, branch_name: str) -> None:
        """DELETE /repos/{owner}/{repo}/git/refs/heads/{branch}"""
        ref = self._repo(repository).get_git_ref(f"heads/{branch_name}")
        ref.delete()
        logger.debug("Deleted ref heads/%s in %s", branch_name, repository.full_name)

    def get_latest_commit(self, repository: Repository, branch_name: str) -> GitObject:
        """Return the commit the branch currently points at."""
        ref = self._repo(repository).get_git_ref(f"heads/{branch_name}")
        return GitObject(sha=ref.object.sha, raw=ref)

    def create_branch(self, repository: Repository, branch_name: str, sha: str) -> GitObject:
        """POST /repos/{owner}/{repo}/git/refs"""
        ref = self._repo(repository).create_git_ref(ref=f"refs/heads/{branch_name}", sha=sha)
        return GitObject(sha=ref.object.sha, raw=ref)

    def get_commit_ref(self, repository: Repository, branch_name: str) -> GitObject:
        """Return the current commit of ``branch_name`` as a full commit object."""
        repo = self._repo(repository)
        ref = repo.get_git_ref(f"heads/{branch_name}")
        commit = repo.get_git_commit(ref.object.sha)
        return GitObject(sha=commit.sha, raw=commit)

    def update_ref(self, repository: Repository, branch_name: str, sha: str) -> GitObject:
        """PATCH /repos/{owner}/{repo}/git/refs/heads/{branch}"""
        ref = self._repo(repository).get_git_ref(f"heads/{branch_name}")
        ref.edit(sha=sha)
        return GitObject(sha=sha, raw=ref)

    # Contents

    def fetch_file(self, repository: Repository, path: str, ref: str) -> FileContent:
        """GET /repos/{owner}/{repo}/contents/{path}?ref={ref}"""
        repo = self._repo(repository)
        contents = repo.get_contents(path, ref=ref)
        if isinstance(contents, list):
            raise IsADirectoryError(f"{path} is a directory in {repository.full_name}")

        content = contents.content or ""
        size = contents.size or 0
        if contents.encoding != "base64" or (not content and size):
            # files over 1 MB come back with encoding "none" and no content
            logger.debug("Fetching %s of %s through the blob API", path, repository.full_name)
            content = repo.get_git_blob(contents.sha).content or ""
        return FileContent(path=contents.path, sha=contents.sha, content=content, size=size)

    # Git database

    def create_blob(self, repository: Repository, base64_content: str) -> GitObject:
        """POST /repos/{owner}/{repo}/git/blobs"""
        blob = self._repo(repository).create_git_blob(base64_content, "base64")
        return GitObject(sha=blob.sha, raw=blob)

    def get_tree(self, repository: Repository, sha: str) -> GitObject:
        """GET /repos/{owner}/{repo}/git/trees/{sha}, ``sha`` may be a commit SHA."""
        tree = self._repo(repository).get_git_tree(sha)
        return GitObject(sha=tree.sha, raw=tree)

    def create_tree(self, repository: Repository, base_tree: GitObject, path: str, blob_sha: str) -> GitObject:
        """POST /repos/{owner}/{repo}/git/trees with a single file on top of ``base_tree``."""
        repo = self._repo(repository)
        element = InputGitTreeElement(path=path, mode="100644", type="blob", sha=blob_sha)
        base = base_tree.raw if base_tree.raw is not None else repo.get_git_tree(base_tree.sha)
        tree = repo.create_git_tree([element], base_tree=base)
        return GitObject(sha=tree.sha, raw=tree)

    def create_commit(self, repository: Repository, message: str, tree: GitObject, parents: List[GitObject]) -> GitObject:
        """POST /repos/{owner}/{repo}/git/commits"""
        repo = self._repo(repository)
        tree_obj = tree.raw if tree.raw is not None else repo.get_git_tree(tree.sha)
        parent_objs = [p.raw if p.raw is not None else repo.get_git_commit(p.sha) for p in parents]
        commit = repo.create_git_commit(message, tree_obj, parent_objs)
        return GitObject(sha=commit.sha, raw=commit)

    # Pull requests

    def create_pull_request(self, repository: Repository, title: str, head: str, base: str, body: str) -> PullRequestInfo:
        """POST /repos/{owner}/{repo}/pulls"""
        pull = self._repo(repository).create_pull(base=base, head=head, title=title, body=body)
        return PullRequestInfo(number=pull.number, url=pull.html_url)

    def merge_pull_request(self, repository: Repository, number: int) -> bool:
        """PUT /repos/{owner}/{repo}/pulls/{number}/merge using a plain merge commit."""
        status = self._repo(repository).get_pull(number).merge(merge_method="merge")
        return bool(status.merged)

    # Repositories

    def archive_repository(self, repository: Repository) -> None:
        """PATCH /repos/{owner}/{repo} with ``archived: true``."""
        self._repo(repository).edit(archived=True)
        logger.info("Archived %s", repository.full_name)

    def list_organization_repositories_page(self, organization: str, page: int) -> List[RemoteRepository]:
        """
        Fetch one page of an organization's public repositories.

        Args:
            organization: Organization login
            page: Zero based page index, each page holds up to PAGE_SIZE entries

        Returns:
            Repositories of the page, including forks and archived ones
        """
        repos = self._g.get_organization(organization).get_repos(type="public")
        result = []
        for repo in repos.get_page(page):
            result.append(RemoteRepository(
                owner=repo.owner.login,
                name=repo.name,
                fork=bool(repo.fork),
                archived=bool(repo.archived),
            ))
        logger.debug("Fetched page %d of %s: %d repositories", page, organization, len(result))
        return result
